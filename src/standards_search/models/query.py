"""Query data model and scoring weight tables."""

from enum import Enum
from typing import List, Optional, Set
from dataclasses import dataclass
from pydantic import BaseModel, Field, field_validator


class ScoringMode(str, Enum):
    """Supported relevance scoring modes."""
    FREETEXT = "freetext"
    KEYWORD_TALLY = "keywordTally"


@dataclass(frozen=True)
class FreeTextWeights:
    """
    Score tiers for free-text mode.

    Tiers are checked in order: exact title, title substring, content
    substring, then token overlap capped at ``overlap_cap``. Every reported
    score is floored at ``floor``.
    """
    exact_title: float = 1.0
    title_substring: float = 0.8
    content_substring: float = 0.6
    title_word: float = 0.3
    content_word: float = 0.2
    overlap_cap: float = 0.5
    floor: float = 0.1


@dataclass(frozen=True)
class TallyWeights:
    """Per-keyword weights for keyword-tally mode."""
    title: int = 2
    content: int = 1


@dataclass
class Query:
    """
    Search query with mode and filtering options.

    Attributes:
        text: Free-text query (free-text mode)
        keywords: Keyword set (keyword-tally mode)
        mode: Scoring mode
        limit: Maximum number of results (None = no limit)
        standard_ids: Restrict candidates to these standards (None = all)
    """
    text: str = ""
    keywords: Optional[List[str]] = None
    mode: ScoringMode = ScoringMode.FREETEXT
    limit: Optional[int] = 10
    standard_ids: Optional[Set[int]] = None

    def __post_init__(self) -> None:
        """Validate query parameters."""
        if self.text is None:
            self.text = ""
        if self.mode == ScoringMode.KEYWORD_TALLY:
            if not self.keywords or not any(k and k.strip() for k in self.keywords):
                raise ValueError("Keyword query needs at least one keyword")
        if self.limit is not None and self.limit <= 0:
            raise ValueError("Limit must be positive")

    @classmethod
    def from_keywords(cls, keywords: List[str], limit: Optional[int] = None) -> "Query":
        return cls(keywords=list(keywords), mode=ScoringMode.KEYWORD_TALLY, limit=limit)

    @property
    def normalized_keywords(self) -> List[str]:
        """Lowercased, de-duplicated keywords in their original order."""
        seen = []
        for keyword in self.keywords or []:
            kw = (keyword or "").strip().lower()
            if kw and kw not in seen:
                seen.append(kw)
        return seen


class SearchRequestModel(BaseModel):
    """Pydantic model for the in-standard search request body."""

    query: str = Field("", description="Search query text")
    limit: Optional[int] = Field(None, ge=1, description="Maximum results to return; service default when omitted")

    @field_validator("query", mode="before")
    @classmethod
    def coerce_query(cls, v):
        return "" if v is None else str(v)


class ProcessRequestModel(BaseModel):
    """Pydantic model for the process generator request body."""

    projectName: str = ""
    scenarioId: str = "it"
    lifecycle: str = "hybrid"
    constraints: List[str] = Field(default_factory=list)
    drivers: List[str] = Field(default_factory=list)

    @field_validator("constraints", "drivers", mode="before")
    @classmethod
    def split_terms(cls, v):
        """Accept either a list or a comma/semicolon separated string."""
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.replace(";", ",").split(",") if part.strip()]
        return [str(item) for item in v if item is not None and str(item).strip()]
