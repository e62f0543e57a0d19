"""Search result data models."""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .record import Record


@dataclass
class ScoredResult:
    """
    Search result with relevance scoring and context.

    Attributes:
        record: The matched section
        score: Relevance score (0.1-1.0 in free-text mode, integer tally in keyword mode)
        snippet: Content window with <mark> highlights
        rank: Result ranking position (1-based)
        matched_terms: Query terms found in the record
    """
    record: Record
    score: float
    snippet: str
    rank: int
    matched_terms: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate search result."""
        if self.score < 0:
            raise ValueError("Score cannot be negative")
        if self.rank <= 0:
            raise ValueError("Rank must be positive")

    def to_dict(
        self,
        standard: Optional[Dict[str, Any]] = None,
        chapter: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Convert to the per-record JSON shape served to the frontend."""
        record = self.record
        return {
            "id": record.id,
            "sectionNumber": record.section_number,
            "title": record.title,
            "fullTitle": record.full_title,
            "snippet": self.snippet,
            "similarity": round(self.score, 4),
            "standard": standard,
            "chapter": chapter,
            "anchorId": record.anchor_id,
            "wordCount": record.word_count,
            "sentenceCount": record.sentence_count,
            "matchedTerms": self.matched_terms,
            "rank": self.rank,
            "url": f"/section/{record.id}",
        }


@dataclass
class StandardGroup:
    """Results sharing one parent standard."""
    standard_id: int
    results: List[ScoredResult] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def mean_score(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.score for r in self.results) / len(self.results)
