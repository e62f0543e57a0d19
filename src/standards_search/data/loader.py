"""Load standards corpora from JSON files into the repository."""

import json
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..models.record import Record, Standard, Chapter, SectionModel, StandardManifestEntry
from ..utils.text_processing import TextProcessor
from ..core.exceptions import CorpusLoadError, ValidationError
from .repository import StandardsRepository, section_sort_key

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
SEED_CORPUS_DIR = Path(__file__).parent / "seed"


def make_anchor_id(prefix: str, section_number: str) -> str:
    """Anchor ids look like ``pmbok-2-8`` for section 2.8."""
    return f"{prefix}-{section_number.replace('.', '-')}"


def chapter_number_of(section_number: str) -> str:
    return section_number.split(".")[0]


class CorpusLoader:
    """
    Reads a corpus manifest and the section files it lists.

    Manifest format::

        {"standards": [{"title": ..., "type": ..., "version": ...,
                        "description": ..., "file": "pmbok.json",
                        "anchor_prefix": "pmbok"}]}

    Each section file is a JSON list of objects with ``section_number``,
    ``title``, ``full_title``, ``chapter``, ``main_chapter``, ``content``,
    ``word_count`` and ``sentence_count``.
    """

    def __init__(self, corpus_dir: Optional[Path] = None):
        """
        Initialize corpus loader.

        Args:
            corpus_dir: Directory holding manifest.json (defaults to the
                bundled seed corpus)
        """
        self.corpus_dir = Path(corpus_dir) if corpus_dir else SEED_CORPUS_DIR
        self.text_processor = TextProcessor()
        self._report: Dict[str, Any] = {}

    def read_manifest(self) -> List[StandardManifestEntry]:
        """
        Read and validate the manifest.

        Raises:
            CorpusLoadError: If the manifest is missing or malformed
        """
        manifest_path = self.corpus_dir / MANIFEST_NAME
        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CorpusLoadError(f"Corpus manifest not found: {manifest_path}")
        except json.JSONDecodeError as e:
            raise CorpusLoadError(f"Corpus manifest is not valid JSON: {e}")

        entries = data.get("standards") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise CorpusLoadError("Corpus manifest must list standards")

        try:
            return [StandardManifestEntry(**entry) for entry in entries]
        except (PydanticValidationError, TypeError) as e:
            raise CorpusLoadError(f"Invalid standard in manifest: {e}")

    def read_sections(self, entry: StandardManifestEntry) -> Tuple[List[SectionModel], int]:
        """
        Read one standard's section file.

        Returns:
            Valid sections and the number of skipped entries

        Raises:
            CorpusLoadError: If the file cannot be read as a JSON list
        """
        path = self.corpus_dir / entry.file
        try:
            with open(path, encoding="utf-8") as f:
                raw_sections = json.load(f)
        except FileNotFoundError:
            raise CorpusLoadError(f"Corpus file not found for '{entry.title}': {path}")
        except json.JSONDecodeError as e:
            raise CorpusLoadError(f"Corpus file {path} is not valid JSON: {e}")

        if not isinstance(raw_sections, list):
            raise CorpusLoadError(f"Corpus file {path} must contain a list of sections")

        sections = []
        skipped = 0
        for position, raw in enumerate(raw_sections):
            try:
                sections.append(SectionModel(**raw))
            except (PydanticValidationError, TypeError) as e:
                skipped += 1
                logger.warning(f"Skipping invalid section #{position} in {entry.file}: {e}")
        return sections, skipped

    def load(self, repository: Optional[StandardsRepository] = None) -> StandardsRepository:
        """
        Load every standard of the manifest into a repository.

        Args:
            repository: Repository to populate (a new one by default)

        Returns:
            The populated repository
        """
        repository = repository or StandardsRepository()
        self._report = {"standards": [], "sections_loaded": 0, "sections_skipped": 0}

        for entry in self.read_manifest():
            sections, skipped = self.read_sections(entry)
            loaded = self._load_standard(repository, entry, sections)

            self._report["sections_loaded"] += loaded
            self._report["sections_skipped"] += skipped
            self._report["standards"].append({"title": entry.title, "sections": loaded, "skipped": skipped})
            logger.info(f"Loaded {loaded} sections for '{entry.title}' ({skipped} skipped)")

        logger.info(
            f"Corpus loaded from {self.corpus_dir}: "
            f"{len(self._report['standards'])} standards, {self._report['sections_loaded']} sections"
        )
        return repository

    def _load_standard(
        self,
        repository: StandardsRepository,
        entry: StandardManifestEntry,
        sections: List[SectionModel]
    ) -> int:
        standard = repository.add_standard(
            Standard(
                id=repository.next_standard_id(),
                title=entry.title,
                type=entry.type,
                version=entry.version,
                description=entry.description,
            )
        )

        # Chapters are the distinct chapter titles, numbered by the first
        # component of their first section number
        chapters: Dict[str, str] = {}
        for section in sections:
            chapter_title = section.chapter or section.main_chapter
            if chapter_title and chapter_title not in chapters:
                chapters[chapter_title] = chapter_number_of(section.section_number)

        chapter_ids: Dict[str, int] = {}
        for title, number in sorted(chapters.items(), key=lambda item: section_sort_key(item[1])):
            chapter = repository.add_chapter(
                Chapter(id=repository.next_chapter_id(), standard_id=standard.id, number=number, title=title)
            )
            chapter_ids[title] = chapter.id

        loaded = 0
        seen_numbers = set()
        for section in sections:
            if section.section_number in seen_numbers:
                logger.warning(f"Duplicate section {section.section_number} in '{entry.title}', keeping first")
                continue
            seen_numbers.add(section.section_number)

            record = Record(
                id=repository.next_section_id(),
                title=section.title,
                content=section.content,
                standard_id=standard.id,
                section_number=section.section_number,
                full_title=section.full_title or f"{section.section_number} {section.title}",
                anchor_id=make_anchor_id(entry.anchor_prefix, section.section_number),
                chapter_id=chapter_ids.get(section.chapter or section.main_chapter or ""),
                word_count=(
                    section.word_count if section.word_count is not None
                    else self.text_processor.count_words(section.content)
                ),
                sentence_count=(
                    section.sentence_count if section.sentence_count is not None
                    else self.text_processor.count_sentences(section.content)
                ),
            )
            try:
                repository.add_section(record)
            except ValidationError as e:
                logger.warning(f"Skipping section {section.section_number} in '{entry.title}': {e}")
                continue
            loaded += 1

        return loaded

    def get_report(self) -> Dict[str, Any]:
        """Summary of the last load."""
        return dict(self._report)


def load_corpus(corpus_dir: Optional[Path] = None) -> StandardsRepository:
    """Convenience wrapper: load a corpus directory into a new repository."""
    return CorpusLoader(corpus_dir).load()
