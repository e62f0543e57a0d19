"""Core engine components for standards search."""

from .engine import RelevanceSearchEngine
from .embeddings import SectionSimilarityIndex
from .exceptions import (
    StandardsSearchError,
    ValidationError,
    NotFoundError,
    SearchError,
    CorpusLoadError,
    AIProviderError,
    ConfigurationError
)

__all__ = [
    "RelevanceSearchEngine",
    "SectionSimilarityIndex",
    "StandardsSearchError",
    "ValidationError",
    "NotFoundError",
    "SearchError",
    "CorpusLoadError",
    "AIProviderError",
    "ConfigurationError"
]
