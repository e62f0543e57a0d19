"""Utility modules for standards search."""

from .text_processing import TextProcessor
from .validators import validate_record, validate_query, validate_query_text
from .logging_config import setup_logging

__all__ = ["TextProcessor", "validate_record", "validate_query", "validate_query_text", "setup_logging"]
