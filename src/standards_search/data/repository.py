"""In-memory data-access layer for standards, chapters and sections."""

import logging
import math
import re
from typing import List, Dict, Any, Optional, Iterable, Tuple

from ..models.record import Record, Standard, Chapter
from ..utils.validators import validate_record
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_NUMBER_PART = re.compile(r'\d+|\D+')


def section_sort_key(section_number: str) -> Tuple:
    """Natural ordering for dotted section numbers ("1.9" before "1.10")."""
    key = []
    for part in (section_number or "").split("."):
        for piece in _NUMBER_PART.findall(part):
            key.append((0, int(piece), "") if piece.isdigit() else (1, 0, piece.lower()))
        key.append((-1, 0, ""))
    return tuple(key)


class StandardsRepository:
    """
    Holds the loaded corpus and answers the lookups the service needs.

    The repository is populated once at start-up and read concurrently by
    requests afterwards; it is never mutated while serving.
    """

    def __init__(self):
        self._standards: Dict[int, Standard] = {}
        self._chapters: Dict[int, Chapter] = {}
        self._sections: Dict[int, Record] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def next_standard_id(self) -> int:
        return max(self._standards, default=0) + 1

    def next_chapter_id(self) -> int:
        return max(self._chapters, default=0) + 1

    def next_section_id(self) -> int:
        return max(self._sections, default=0) + 1

    def add_standard(self, standard: Standard) -> Standard:
        if standard.id in self._standards:
            raise ValidationError(f"Duplicate standard ID: {standard.id}")
        self._standards[standard.id] = standard
        return standard

    def add_chapter(self, chapter: Chapter) -> Chapter:
        if chapter.standard_id not in self._standards:
            raise ValidationError(f"Chapter {chapter.id} references unknown standard {chapter.standard_id}")
        if chapter.id in self._chapters:
            raise ValidationError(f"Duplicate chapter ID: {chapter.id}")
        self._chapters[chapter.id] = chapter
        return chapter

    def add_section(self, record: Record) -> Record:
        validate_record(record)
        if record.standard_id not in self._standards:
            raise ValidationError(f"Section {record.id} references unknown standard {record.standard_id}")
        if record.chapter_id is not None and record.chapter_id not in self._chapters:
            raise ValidationError(f"Section {record.id} references unknown chapter {record.chapter_id}")
        if record.id in self._sections:
            raise ValidationError(f"Duplicate section ID: {record.id}")
        self._sections[record.id] = record
        return record

    # ------------------------------------------------------------------
    # Standards and chapters
    # ------------------------------------------------------------------

    def list_standards(self) -> List[Dict[str, Any]]:
        """List standards with section and chapter counts."""
        return [
            {
                "id": standard.id,
                "title": standard.title,
                "type": standard.type,
                "version": standard.version,
                "description": standard.description,
                "_count": self.counts(standard.id),
            }
            for standard in sorted(self._standards.values(), key=lambda s: s.id)
        ]

    def standards(self) -> List[Standard]:
        return sorted(self._standards.values(), key=lambda s: s.id)

    def get_standard(self, standard_id: int) -> Standard:
        try:
            return self._standards[standard_id]
        except KeyError:
            raise NotFoundError("Standard not found")

    def counts(self, standard_id: int) -> Dict[str, int]:
        return {
            "sections": sum(1 for s in self._sections.values() if s.standard_id == standard_id),
            "chapters": sum(1 for c in self._chapters.values() if c.standard_id == standard_id),
        }

    def get_chapters(self, standard_id: int) -> List[Chapter]:
        chapters = [c for c in self._chapters.values() if c.standard_id == standard_id]
        return sorted(chapters, key=lambda c: (section_sort_key(c.number), c.id))

    def get_chapter(self, chapter_id: Optional[int]) -> Optional[Chapter]:
        if chapter_id is None:
            return None
        return self._chapters.get(chapter_id)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def get_sections(
        self,
        standard_id: Optional[int] = None,
        standard_ids: Optional[Iterable[int]] = None,
        standard_type: Optional[str] = None,
    ) -> List[Record]:
        """
        Fetch sections, optionally filtered.

        Args:
            standard_id: Only sections of this standard
            standard_ids: Only sections of these standards
            standard_type: Only sections whose standard has this type
                (case-insensitive)

        Returns:
            Sections in (standard id, natural section number) order
        """
        sections = list(self._sections.values())

        if standard_id is not None:
            sections = [s for s in sections if s.standard_id == standard_id]

        if standard_ids is not None:
            wanted = set(standard_ids)
            sections = [s for s in sections if s.standard_id in wanted]

        if standard_type:
            type_lower = standard_type.lower()
            sections = [
                s for s in sections
                if (self._standards[s.standard_id].type or "").lower() == type_lower
            ]

        return sorted(sections, key=lambda s: (s.standard_id, section_sort_key(s.section_number), s.id))

    def get_section(self, section_id: int) -> Record:
        try:
            return self._sections[section_id]
        except KeyError:
            raise NotFoundError("Section not found")

    def page_sections(self, standard_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Record], Dict[str, Any]]:
        """
        Return one page of a standard's sections plus the pagination block.

        Raises:
            NotFoundError: If the standard does not exist
            ValidationError: If page or limit is not positive
        """
        self.get_standard(standard_id)
        if page <= 0 or limit <= 0:
            raise ValidationError("Page and limit must be positive")

        sections = self.get_sections(standard_id=standard_id)
        total = len(sections)
        total_pages = math.ceil(total / limit) if total else 0
        skip = (page - 1) * limit

        pagination = {
            "currentPage": page,
            "totalPages": total_pages,
            "totalSections": total,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        }
        return sections[skip:skip + limit], pagination

    def adjacent(self, section_id: int) -> Dict[str, Any]:
        """Previous and next sections of the same standard for navigation."""
        current = self.get_section(section_id)
        siblings = self.get_sections(standard_id=current.standard_id)
        index = next(i for i, s in enumerate(siblings) if s.id == current.id)

        def brief(record: Optional[Record]) -> Optional[Dict[str, Any]]:
            if record is None:
                return None
            return {"id": record.id, "sectionNumber": record.section_number, "title": record.title}

        return {
            "current": {
                "id": current.id,
                "sectionNumber": current.section_number,
                "standardId": current.standard_id,
            },
            "prev": brief(siblings[index - 1] if index > 0 else None),
            "next": brief(siblings[index + 1] if index < len(siblings) - 1 else None),
            "totalSections": len(siblings),
            "currentPosition": index + 1,
        }

    def total_words(self) -> int:
        return sum(s.word_count for s in self._sections.values())

    def section_count(self) -> int:
        return len(self._sections)

    def chapter_count(self) -> int:
        return len(self._chapters)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def standard_summary(self, standard_id: int) -> Optional[Dict[str, Any]]:
        standard = self._standards.get(standard_id)
        return standard.summary() if standard else None

    def chapter_summary(self, chapter_id: Optional[int]) -> Optional[Dict[str, Any]]:
        chapter = self.get_chapter(chapter_id)
        return chapter.summary() if chapter else None

    def section_to_dict(self, record: Record, include_content: bool = True) -> Dict[str, Any]:
        data = {
            "id": record.id,
            "sectionNumber": record.section_number,
            "title": record.title,
            "fullTitle": record.full_title,
            "anchorId": record.anchor_id,
            "wordCount": record.word_count,
            "sentenceCount": record.sentence_count,
            "chapter": self.chapter_summary(record.chapter_id),
        }
        if include_content:
            data["content"] = record.content
        return data
