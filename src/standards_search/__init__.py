"""
Project Management Standards Search

Relevance search, cross-standard comparison and tailored process
generation over PMBOK, PRINCE2 and ISO project-management standards.
"""

from .api.service import StandardsService
from .models.record import Record, Standard, Chapter
from .models.query import Query, ScoringMode
from .models.result import ScoredResult, StandardGroup
from .core.engine import RelevanceSearchEngine
from .data.repository import StandardsRepository

__version__ = "1.0.0"

__all__ = [
    "StandardsService",
    "RelevanceSearchEngine",
    "StandardsRepository",
    "Record",
    "Standard",
    "Chapter",
    "Query",
    "ScoringMode",
    "ScoredResult",
    "StandardGroup",
]
