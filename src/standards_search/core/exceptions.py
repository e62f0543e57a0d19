"""Custom exceptions for the standards search system."""


class StandardsSearchError(Exception):
    """Base exception for standards search operations."""
    pass


class ValidationError(StandardsSearchError):
    """Exception raised during input validation."""
    pass


class NotFoundError(StandardsSearchError):
    """Exception raised when a standard, section or topic does not exist."""
    pass


class SearchError(StandardsSearchError):
    """Exception raised during search operations."""
    pass


class CorpusLoadError(StandardsSearchError):
    """Exception raised while loading a standards corpus."""
    pass


class AIProviderError(StandardsSearchError):
    """Exception raised when the generative-AI provider cannot answer."""
    pass


class ConfigurationError(StandardsSearchError):
    """Exception raised for configuration issues."""
    pass
