"""Data models for the standards search system."""

from .record import Record, Standard, Chapter, SectionModel, StandardManifestEntry
from .query import (
    Query,
    ScoringMode,
    FreeTextWeights,
    TallyWeights,
    SearchRequestModel,
    ProcessRequestModel,
)
from .result import ScoredResult, StandardGroup

__all__ = [
    "Record",
    "Standard",
    "Chapter",
    "SectionModel",
    "StandardManifestEntry",
    "Query",
    "ScoringMode",
    "FreeTextWeights",
    "TallyWeights",
    "SearchRequestModel",
    "ProcessRequestModel",
    "ScoredResult",
    "StandardGroup",
]
