"""Standard, chapter and section record models."""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pydantic import BaseModel, Field, field_validator


@dataclass
class Standard:
    """
    A project-management standard (PMBOK, PRINCE2, ISO 21500, ...).

    Attributes:
        id: Unique standard identifier
        title: Full title of the standard
        type: Publishing body or family (PMI, PRINCE2, ISO)
        version: Edition or year
        description: Short description
    """
    id: int
    title: str
    type: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate standard after initialization."""
        if not self.title or not self.title.strip():
            raise ValueError("Standard title cannot be empty")

    def summary(self) -> Dict[str, Any]:
        """Identifying fields used inside section payloads."""
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "version": self.version,
        }


@dataclass
class Chapter:
    """A chapter grouping sections of one standard."""
    id: int
    standard_id: int
    number: str
    title: str
    description: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {"id": self.id, "number": self.number, "title": self.title}


@dataclass
class Record:
    """
    One searchable section of standard text.

    Missing title or content are coerced to empty strings, since corpus
    entries are not guaranteed to have every field populated.

    Attributes:
        id: Unique section identifier
        title: Section title
        content: Section body text
        standard_id: Owning standard
        section_number: Dotted section number (e.g. "2.8")
        full_title: Title including the section number
        anchor_id: Stable anchor used by the frontend for deep links
        chapter_id: Owning chapter, if any
        word_count: Number of words in content
        sentence_count: Number of sentences in content
        metadata: Additional record metadata
    """
    id: int
    title: str
    content: str
    standard_id: int
    section_number: str = ""
    full_title: Optional[str] = None
    anchor_id: Optional[str] = None
    chapter_id: Optional[int] = None
    word_count: int = 0
    sentence_count: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.title is None:
            self.title = ""
        if self.content is None:
            self.content = ""
        if self.section_number is None:
            self.section_number = ""


class SectionModel(BaseModel):
    """Pydantic model for one entry of a corpus JSON file."""

    section_number: str = Field(..., min_length=1, description="Dotted section number")
    title: str = Field(..., min_length=1, description="Section title")
    full_title: Optional[str] = Field(None, description="Title including the number")
    chapter: Optional[str] = Field(None, description="Chapter title")
    main_chapter: Optional[str] = Field(None, description="Top-level chapter title")
    content: str = Field("", description="Section text")
    word_count: Optional[int] = Field(None, ge=0)
    sentence_count: Optional[int] = Field(None, ge=0)

    @field_validator("section_number", "title")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure identifying fields are not just whitespace."""
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace only")
        return v.strip()

    @field_validator("section_number", mode="before")
    @classmethod
    def coerce_section_number(cls, v: Any) -> Any:
        # Some corpora store top-level sections as bare integers
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, v: Any) -> str:
        return "" if v is None else v


class StandardManifestEntry(BaseModel):
    """Pydantic model for one standard listed in a corpus manifest."""

    title: str = Field(..., min_length=1)
    type: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    file: str = Field(..., min_length=1, description="Corpus file relative to the manifest")
    anchor_prefix: str = Field(..., min_length=1, description="Prefix for section anchors")
