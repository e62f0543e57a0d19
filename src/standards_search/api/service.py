"""High-level API service for standards search."""

import logging
from typing import List, Dict, Any, Optional, AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from ..ai.client import GenerativeAIClient, GeminiClient, DisabledAIClient
from ..analysis.comparison import ComparisonAnalyzer
from ..analysis.process import ProcessGenerator
from ..analysis.topics import COMPARISON_TOPICS, get_topic
from ..config import Settings
from ..core.engine import RelevanceSearchEngine
from ..core.embeddings import SectionSimilarityIndex
from ..core.exceptions import StandardsSearchError, NotFoundError, ConfigurationError
from ..data.loader import CorpusLoader
from ..data.repository import StandardsRepository
from ..models.query import ProcessRequestModel
from ..utils.validators import validate_query_text, validate_limit, parse_id_list, unique

logger = logging.getLogger(__name__)


class StandardsService:
    """
    High-level service interface for the standards API.

    Owns the repository, engine, similarity index and AI client. Every
    collaborator is constructed on ``initialize()`` (or injected) and
    released on ``close()``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[StandardsRepository] = None,
        engine: Optional[RelevanceSearchEngine] = None,
        ai_client: Optional[GenerativeAIClient] = None
    ):
        """
        Initialize standards service.

        Args:
            settings: Service configuration (environment by default)
            repository: Pre-loaded repository; the configured corpus is loaded when omitted
            engine: Relevance engine
            ai_client: Generative-AI client; built from settings when omitted
        """
        self.settings = settings or Settings()
        self._check_limits(self.settings)

        self.repository = repository
        self.engine = engine or RelevanceSearchEngine(snippet_window=self.settings.snippet_window)
        self.ai_client = ai_client
        self.similarity_index = SectionSimilarityIndex(max_features=self.settings.similarity_max_features)

        self.comparison: Optional[ComparisonAnalyzer] = None
        self.process_generator: Optional[ProcessGenerator] = None

        self._initialized = False

    async def initialize(self) -> None:
        """Load the corpus, build the similarity index and wire collaborators."""
        try:
            if self.repository is None:
                self.repository = CorpusLoader(self.settings.corpus_dir).load()

            if self.ai_client is None:
                self.ai_client = self._build_ai_client()

            await self.similarity_index.build(self.repository.get_sections())

            self.comparison = ComparisonAnalyzer(self.repository, self.engine, self.ai_client)
            self.process_generator = ProcessGenerator(self.repository, self.engine, self.ai_client)

            self._initialized = True
            logger.info(
                f"Service initialized with {len(self.repository.standards())} standards, "
                f"{self.repository.section_count()} sections, AI {'enabled' if self.ai_client.enabled else 'disabled'}"
            )

        except StandardsSearchError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize service: {str(e)}")
            raise StandardsSearchError(f"Service initialization failed: {str(e)}")

    @property
    def initialized(self) -> bool:
        return self._initialized

    @staticmethod
    def _check_limits(settings: Settings) -> None:
        """Default result limits must fit under the hard maximum."""
        for name in ("default_search_limit", "default_global_limit", "related_limit"):
            if getattr(settings, name) > settings.max_limit:
                raise ConfigurationError(
                    f"{name} ({getattr(settings, name)}) exceeds max_limit ({settings.max_limit})"
                )

    def _build_ai_client(self) -> GenerativeAIClient:
        if not self.settings.ai_enabled:
            logger.info("No Gemini API key configured; AI features will use fallbacks")
            return DisabledAIClient()
        return GeminiClient(
            api_key=self.settings.gemini_api_key,
            model=self.settings.gemini_model,
            base_url=self.settings.ai_base_url,
            timeout=self.settings.ai_timeout,
        )

    # ------------------------------------------------------------------
    # Standards and sections
    # ------------------------------------------------------------------

    def list_standards(self) -> List[Dict[str, Any]]:
        self._check_initialized()
        return self.repository.list_standards()

    def get_standard(self, standard_id: int, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        """Standard details with chapters and one page of sections."""
        self._check_initialized()
        standard = self.repository.get_standard(standard_id)
        limit = validate_limit(limit, self.settings.default_search_limit, self.settings.max_limit)
        sections, pagination = self.repository.page_sections(standard_id, page, limit)

        return {
            "id": standard.id,
            "title": standard.title,
            "type": standard.type,
            "version": standard.version,
            "description": standard.description,
            "chapters": [
                {"id": c.id, "number": c.number, "title": c.title, "description": c.description}
                for c in self.repository.get_chapters(standard_id)
            ],
            "_count": self.repository.counts(standard_id),
            "sections": [self.repository.section_to_dict(s) for s in sections],
            "pagination": pagination,
        }

    def get_section(self, section_id: int) -> Dict[str, Any]:
        self._check_initialized()
        record = self.repository.get_section(section_id)
        standard = self.repository.get_standard(record.standard_id)
        chapter = self.repository.get_chapter(record.chapter_id)

        data = self.repository.section_to_dict(record)
        data["chapter"] = (
            {"id": chapter.id, "number": chapter.number, "title": chapter.title, "description": chapter.description}
            if chapter else None
        )
        data["standard"] = {**standard.summary(), "description": standard.description}
        return data

    def get_adjacent(self, section_id: int) -> Dict[str, Any]:
        self._check_initialized()
        return self.repository.adjacent(section_id)

    def related_sections(self, section_id: int, limit: Optional[int] = None) -> Dict[str, Any]:
        """Sections from any standard that read most like the given one."""
        self._check_initialized()
        record = self.repository.get_section(section_id)
        limit = validate_limit(limit, self.settings.related_limit, self.settings.max_limit)

        related = self.similarity_index.related(record.id, limit)
        return {
            "sectionId": record.id,
            "related": [
                {
                    "id": other.id,
                    "sectionNumber": other.section_number,
                    "title": other.title,
                    "anchorId": other.anchor_id,
                    "standard": self.repository.standard_summary(other.standard_id),
                    "similarity": round(similarity, 4),
                }
                for other, similarity in related
            ],
        }

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_standard(self, standard_id: int, query: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Keyword search within one standard.

        Raises:
            ValidationError: If the query is missing
            NotFoundError: If the standard does not exist
        """
        self._check_initialized()
        query_text = validate_query_text(query)
        limit = validate_limit(limit, self.settings.default_search_limit, self.settings.max_limit)
        standard = self.repository.get_standard(standard_id)

        records = self.repository.get_sections(standard_id=standard_id)
        candidates = self.engine.rank_and_limit(records, query_text, limit=None)
        results = candidates[:limit]

        logger.info(f"Search '{query_text}' in standard {standard_id}: {len(candidates)} matches")
        return {
            "query": query_text,
            "results": [
                r.to_dict(
                    standard=standard.summary(),
                    chapter=self.repository.chapter_summary(r.record.chapter_id),
                )
                for r in results
            ],
            "totalFound": len(candidates),
            "standard": standard.summary(),
        }

    def search_all(
        self,
        query: Optional[str],
        standard_id: Optional[int] = None,
        standard_type: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Keyword search across all standards, grouped by standard."""
        self._check_initialized()
        query_text = validate_query_text(query, field_name="Search query")
        limit = validate_limit(limit, self.settings.default_global_limit, self.settings.max_limit)

        records = self.repository.get_sections(standard_id=standard_id, standard_type=standard_type)
        results = self.engine.rank_and_limit(records, query_text, limit=limit)
        groups = self.engine.group_by_standard(results)

        total = len(results)
        return {
            "query": query_text.lower(),
            "totalResults": total,
            "results": [
                {
                    "standard": self.repository.standard_summary(group.standard_id),
                    "averageScore": round(group.mean_score, 4),
                    "sections": [
                        r.to_dict(
                            standard=self.repository.standard_summary(group.standard_id),
                            chapter=self.repository.chapter_summary(r.record.chapter_id),
                        )
                        for r in group.results
                    ],
                }
                for group in groups
            ],
            "searchMetadata": {
                "searchedStandards": [group.standard_id for group in groups],
                "totalSections": total,
                "averageWordCount": round(sum(r.record.word_count for r in results) / total) if total else 0,
                "averageScore": round(sum(r.score for r in results) / total, 4) if total else 0.0,
            },
        }

    # ------------------------------------------------------------------
    # Comparison, insights and process generation
    # ------------------------------------------------------------------

    def compare(self, topic: Optional[str], standard_ids: Optional[str] = None) -> Dict[str, Any]:
        self._check_initialized()
        topic_text = validate_query_text(topic, field_name="Topic parameter")
        ids = unique(parse_id_list(standard_ids))
        return self.comparison.compare(topic_text, ids)

    def insights(self) -> Dict[str, Any]:
        self._check_initialized()
        return self.comparison.insights()

    def comparison_topics(self) -> List[Dict[str, Any]]:
        return [topic.to_dict() for topic in COMPARISON_TOPICS]

    async def compare_topic(self, topic_id: int) -> Dict[str, Any]:
        self._check_initialized()
        topic = get_topic(topic_id)
        if topic is None:
            raise NotFoundError("Topic not found")
        return await self.comparison.compare_topic(topic)

    async def generate_process(self, request: ProcessRequestModel) -> Dict[str, Any]:
        self._check_initialized()
        return await self.process_generator.generate(request)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def get_stats(self) -> Dict[str, Any]:
        """Get service, engine and index statistics."""
        self._check_initialized()
        return {
            'service': {
                'initialized': self._initialized,
                'ai_enabled': self.ai_client.enabled,
                'corpus_dir': str(self.settings.corpus_dir) if self.settings.corpus_dir else 'seed',
                'standards': len(self.repository.standards()),
                'sections': self.repository.section_count(),
            },
            'engine': self.engine.get_stats(),
            'similarity_index': self.similarity_index.get_stats(),
        }

    async def health_check(self) -> Dict[str, Any]:
        """Liveness payload; reports not_initialized before start-up completes."""
        timestamp = datetime.now(timezone.utc).isoformat()
        if not self._initialized:
            return {'status': 'not_initialized', 'timestamp': timestamp}
        return {'status': 'OK', 'timestamp': timestamp}

    def _check_initialized(self) -> None:
        """Check if service is properly initialized."""
        if not self._initialized:
            raise StandardsSearchError("Service not initialized. Call initialize() first.")

    async def close(self) -> None:
        """Clean up resources and close the service."""
        try:
            if self.ai_client is not None:
                await self.ai_client.aclose()
            self._initialized = False
            logger.info("Service closed successfully")

        except Exception as e:
            logger.error(f"Error during service shutdown: {str(e)}")

    @classmethod
    @asynccontextmanager
    async def create(cls, settings: Optional[Settings] = None, **kwargs) -> AsyncIterator['StandardsService']:
        """
        Create and manage service lifecycle with context manager.

        Args:
            settings: Service configuration
            **kwargs: Injected collaborators (repository, engine, ai_client)

        Yields:
            Initialized standards service
        """
        service = cls(settings=settings, **kwargs)

        try:
            await service.initialize()
            yield service
        finally:
            await service.close()
