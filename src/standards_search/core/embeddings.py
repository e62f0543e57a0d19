"""TF-IDF similarity index for finding related sections."""

import asyncio
import logging
from typing import List, Dict, Any, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from ..models.record import Record
from ..utils.text_processing import TextProcessor
from .exceptions import SearchError, NotFoundError

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 4000


class SectionSimilarityIndex:
    """
    TF-IDF based similarity index over section title and content.

    Answers "which sections read most like this one" across all standards.
    The index is built once from the loaded corpus.
    """

    def __init__(
        self,
        max_features: int = 10000,
        ngram_range: Tuple[int, int] = (1, 2),
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize similarity index.

        Args:
            max_features: Maximum number of features to extract
            ngram_range: N-gram range for feature extraction
            executor: Thread pool executor for async building
        """
        self.max_features = max_features
        self.ngram_range = ngram_range

        self.vectorizer = self._make_vectorizer(stop_words='english')
        self.text_processor = TextProcessor()
        self.section_vectors = None
        self.section_index: Dict[int, int] = {}
        self.records: List[Record] = []
        self.is_fitted = False

        self._executor = executor

    def _make_vectorizer(self, stop_words: Optional[str]) -> TfidfVectorizer:
        return TfidfVectorizer(
            max_features=self.max_features,
            min_df=1,
            max_df=1.0,
            ngram_range=self.ngram_range,
            stop_words=stop_words,
            lowercase=True,
            strip_accents='ascii',
            token_pattern=r'\b[a-zA-Z][a-zA-Z0-9]*\b'
        )

    def build_input(self, record: Record) -> str:
        """Combine title and content, keeping the input within a fixed size."""
        combined = f"{record.title}\n\n{record.content}"
        return self.text_processor.truncate(combined, MAX_INPUT_CHARS)

    async def build(self, records: List[Record]) -> None:
        """Build the index asynchronously in the executor."""
        await asyncio.get_running_loop().run_in_executor(self._executor, self.build_sync, records)

    def build_sync(self, records: List[Record]) -> None:
        """
        Build the index from records.

        An empty record list leaves the index unfitted.
        """
        self.records = list(records)
        self.section_index = {record.id: i for i, record in enumerate(self.records)}
        self.section_vectors = None
        self.is_fitted = False

        if not self.records:
            logger.info("No sections to index")
            return

        texts = [self.build_input(record) for record in self.records]

        try:
            self.section_vectors = self.vectorizer.fit_transform(texts)
        except ValueError as e:
            if "no terms remain" in str(e) or "empty vocabulary" in str(e):
                # Corpus made only of stop words: keep every token
                self.vectorizer = self._make_vectorizer(stop_words=None)
                try:
                    self.section_vectors = self.vectorizer.fit_transform(texts)
                except ValueError:
                    logger.warning("Similarity index could not be built: empty vocabulary")
                    return
            else:
                raise SearchError(f"Failed to build similarity index: {str(e)}")

        self.is_fitted = True
        logger.info(f"Similarity index built over {len(self.records)} sections")

    def related(self, section_id: int, limit: int = 5) -> List[Tuple[Record, float]]:
        """
        Find the sections most similar to a given section.

        Args:
            section_id: Section to compare against
            limit: Maximum number of related sections

        Returns:
            List of (record, cosine similarity) pairs, most similar first,
            excluding the section itself. Ties are ordered by section id.

        Raises:
            NotFoundError: If the section is not indexed
        """
        if section_id not in self.section_index:
            raise NotFoundError(f"Section {section_id} is not indexed")
        if not self.is_fitted or limit <= 0:
            return []

        idx = self.section_index[section_id]
        similarities = cosine_similarity(
            self.section_vectors[idx], self.section_vectors
        ).flatten()
        similarities[idx] = -1.0

        candidates = np.where(similarities > 0)[0]
        if len(candidates) == 0:
            return []

        ordered = sorted(
            candidates.tolist(),
            key=lambda i: (-round(float(similarities[i]), 12), self.records[i].id)
        )

        return [(self.records[i], float(similarities[i])) for i in ordered[:limit]]

    def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        return {
            'total_sections': len(self.records),
            'vocabulary_size': len(self.vectorizer.vocabulary_) if self.is_fitted else 0,
            'is_fitted': self.is_fitted,
            'config': {
                'max_features': self.max_features,
                'ngram_range': self.ngram_range
            }
        }
