"""Relevance search engine for standards sections."""

import logging
import time
from typing import List, Dict, Any, Optional, Sequence, Tuple

from ..models.record import Record
from ..models.query import Query, ScoringMode, FreeTextWeights, TallyWeights
from ..models.result import ScoredResult, StandardGroup
from ..utils.validators import validate_query
from ..utils.text_processing import TextProcessor
from .exceptions import SearchError, ValidationError

logger = logging.getLogger(__name__)


class RelevanceSearchEngine:
    """
    Heuristic relevance scoring and snippet extraction over section records.

    One engine backs in-standard search, cross-standard search, topic
    comparison and process-evidence citation matching. Two scoring modes
    are supported: a bounded free-text similarity and an integer keyword
    tally. The engine holds no per-request state beyond statistics and
    never performs I/O.
    """

    def __init__(
        self,
        freetext_weights: Optional[FreeTextWeights] = None,
        tally_weights: Optional[TallyWeights] = None,
        snippet_window: int = 200,
        text_processor: Optional[TextProcessor] = None
    ):
        """
        Initialize relevance search engine.

        Args:
            freetext_weights: Score tiers for free-text mode
            tally_weights: Per-keyword weights for keyword-tally mode
            snippet_window: Default snippet length in characters
            text_processor: Text utilities (snippet building, highlighting)
        """
        self.freetext_weights = freetext_weights or FreeTextWeights()
        self.tally_weights = tally_weights or TallyWeights()
        self.snippet_window = snippet_window
        self.text_processor = text_processor or TextProcessor()

        self._stats = {
            'total_searches': 0,
            'avg_search_time': 0.0
        }

        logger.debug("Relevance search engine initialized")

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_record(self, record: Record, query: str) -> float:
        """
        Score a record against a free-text query.

        Returns a value in [floor, 1.0]. Never zero, since a record that
        reaches scoring has already been selected as a candidate.
        """
        raw = self._raw_freetext_score(record, query)
        return max(raw, self.freetext_weights.floor)

    def _raw_freetext_score(self, record: Record, query: str) -> float:
        weights = self.freetext_weights
        normalize = self.text_processor.normalize

        query_lower = normalize(query)
        title_lower = normalize(record.title)
        content_lower = normalize(record.content)

        if not query_lower:
            return 0.0

        if title_lower == query_lower:
            return weights.exact_title
        if query_lower in title_lower:
            return weights.title_substring
        if query_lower in content_lower:
            return weights.content_substring

        title_words = title_lower.split()
        content_words = content_lower.split()

        overlap = 0.0
        for query_word in query_lower.split():
            if any(query_word in word or word in query_word for word in title_words):
                overlap += weights.title_word
            if any(query_word in word or word in query_word for word in content_words):
                overlap += weights.content_word

        return min(overlap, weights.overlap_cap)

    def score_keywords(self, record: Record, keywords: Sequence[str]) -> int:
        """
        Tally keyword hits for a record.

        Each keyword adds the title weight when it occurs in the title and
        the content weight when it occurs in the content.
        """
        title_lower = self.text_processor.normalize(record.title)
        content_lower = self.text_processor.normalize(record.content)

        tally = 0
        for keyword in keywords:
            kw = self.text_processor.normalize(keyword).strip()
            if not kw:
                continue
            if kw in title_lower:
                tally += self.tally_weights.title
            if kw in content_lower:
                tally += self.tally_weights.content
        return tally

    def score(self, record: Record, query: Query) -> float:
        """Score a record using the query's mode."""
        if query.mode == ScoringMode.KEYWORD_TALLY:
            return float(self.score_keywords(record, query.normalized_keywords))
        return self.score_record(record, query.text)

    # ------------------------------------------------------------------
    # Snippets
    # ------------------------------------------------------------------

    def build_snippet(self, content: Optional[str], query: Optional[str], window: Optional[int] = None) -> str:
        """Build a highlighted snippet of content around the first match of query."""
        return self.text_processor.build_snippet(
            content, query, window=window or self.snippet_window
        )

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def rank_and_limit(
        self,
        records: Sequence[Record],
        query: str,
        limit: Optional[int] = 10
    ) -> List[ScoredResult]:
        """
        Rank records by free-text relevance and keep the top ``limit``.

        Candidates are records whose title or content contains the query,
        plus records with a positive token-overlap score. Results are
        ordered by score descending, then title ascending, then id ascending.
        """
        start_time = time.perf_counter()

        query_text = (query or "").strip()
        if not query_text:
            return []
        if limit is not None and limit <= 0:
            raise ValidationError("Limit must be positive")

        scored: List[Tuple[Record, float]] = []
        for record in records:
            raw = self._raw_freetext_score(record, query_text)
            if raw <= 0:
                continue
            scored.append((record, max(raw, self.freetext_weights.floor)))

        results = self._build_results(
            scored, limit, snippet_query=lambda _record: query_text,
            terms=self.text_processor.split_words(query_text)
        )

        self._update_search_stats(time.perf_counter() - start_time)
        logger.debug(f"Ranked {len(scored)} candidates for '{query_text[:50]}', returning {len(results)}")
        return results

    def rank_by_keywords(
        self,
        records: Sequence[Record],
        keywords: Sequence[str],
        limit: Optional[int] = None
    ) -> List[ScoredResult]:
        """
        Rank records by keyword tally, keeping records with a positive tally.

        Uses the same tie-break order as free-text ranking.
        """
        start_time = time.perf_counter()

        normalized = [k for k in (self.text_processor.normalize(kw).strip() for kw in keywords) if k]
        if not normalized:
            return []
        if limit is not None and limit <= 0:
            raise ValidationError("Limit must be positive")

        scored: List[Tuple[Record, float]] = []
        for record in records:
            tally = self.score_keywords(record, normalized)
            if tally > 0:
                scored.append((record, float(tally)))

        def first_keyword(record: Record) -> str:
            content_lower = self.text_processor.normalize(record.content)
            for kw in normalized:
                if kw in content_lower:
                    return kw
            return normalized[0]

        results = self._build_results(scored, limit, snippet_query=first_keyword, terms=normalized)

        self._update_search_stats(time.perf_counter() - start_time)
        return results

    def search(self, records: Sequence[Record], query: Query) -> List[ScoredResult]:
        """
        Run a query in its configured mode.

        Raises:
            SearchError: If the query is invalid
        """
        try:
            validate_query(query)
        except ValidationError as e:
            raise SearchError(f"Search failed: {str(e)}")

        if query.standard_ids:
            records = [r for r in records if r.standard_id in query.standard_ids]

        if query.mode == ScoringMode.KEYWORD_TALLY:
            return self.rank_by_keywords(records, query.normalized_keywords, query.limit)
        return self.rank_and_limit(records, query.text, query.limit)

    def _build_results(self, scored, limit, snippet_query, terms) -> List[ScoredResult]:
        """Sort, truncate and decorate scored records."""
        scored.sort(key=lambda item: (-item[1], self.text_processor.normalize(item[0].title), item[0].id))
        if limit is not None:
            scored = scored[:limit]

        results = []
        for rank, (record, score) in enumerate(scored, 1):
            results.append(
                ScoredResult(
                    record=record,
                    score=score,
                    snippet=self.build_snippet(record.content, snippet_query(record)),
                    rank=rank,
                    matched_terms=self._find_matched_terms(record, terms)
                )
            )
        return results

    def _find_matched_terms(self, record: Record, terms: Sequence[str]) -> List[str]:
        """Find query terms that appear in the record title or content."""
        haystack = f"{self.text_processor.normalize(record.title)} {self.text_processor.normalize(record.content)}"
        matched = []
        for term in terms:
            if term and term in haystack and term not in matched:
                matched.append(term)
        return matched

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def group_by_standard(results: Sequence[ScoredResult]) -> List[StandardGroup]:
        """
        Group results by parent standard, preserving first-seen order.

        Groups are only created for standards that have at least one result,
        so mean scores are never computed over an empty group.
        """
        groups: Dict[int, StandardGroup] = {}
        for result in results:
            standard_id = result.record.standard_id
            if standard_id not in groups:
                groups[standard_id] = StandardGroup(standard_id=standard_id)
            groups[standard_id].results.append(result)
        return list(groups.values())

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def _update_search_stats(self, search_time: float) -> None:
        """Update search performance statistics."""
        self._stats['total_searches'] += 1

        # Update rolling average
        total_searches = self._stats['total_searches']
        current_avg = self._stats['avg_search_time']
        self._stats['avg_search_time'] = (
            (current_avg * (total_searches - 1) + search_time) / total_searches
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            **self._stats,
            'snippet_window': self.snippet_window,
            'tally_weights': {
                'title': self.tally_weights.title,
                'content': self.tally_weights.content
            }
        }
