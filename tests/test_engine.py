"""Test core relevance engine functionality."""

import pytest

from standards_search.core.engine import RelevanceSearchEngine
from standards_search.core.exceptions import ValidationError, SearchError
from standards_search.models.query import Query, TallyWeights
from standards_search.models.record import Record
from standards_search.models.result import ScoredResult
from standards_search.utils.text_processing import TextProcessor


class TestFreeTextScoring:
    """Test the free-text score tiers."""

    def test_exact_title_match(self, engine):
        record = Record(id=1, title="Risk Management", content="anything", standard_id=1)
        assert engine.score_record(record, "risk management") == 1.0

    def test_title_substring_is_case_insensitive(self, engine):
        """Query "Risk" inside title "RISK MANAGEMENT" is a title-substring match."""
        record = Record(id=1, title="RISK MANAGEMENT", content="", standard_id=1)
        assert engine.score_record(record, "Risk") == 0.8

    def test_content_substring(self, engine):
        record = Record(id=1, title="Quality", content="We manage RISK here", standard_id=1)
        assert engine.score_record(record, "risk") == 0.6

    def test_token_overlap(self, engine):
        record = Record(id=1, title="Quality", content="we manage risk here", standard_id=1)
        # "risk" hits a content word, "manage" is contained in "management"
        assert engine.score_record(record, "risk management") == pytest.approx(0.4)

    def test_token_overlap_is_capped(self, engine):
        record = Record(id=1, title="alpha beta gamma", content="alpha beta gamma", standard_id=1)
        assert engine.score_record(record, "alpha beta gamma delta") == 0.5

    def test_score_is_floored(self, engine):
        record = Record(id=1, title="Governance", content="Decision rights", standard_id=1)
        assert engine.score_record(record, "zzz") == 0.1

    def test_tiers_are_monotonic(self, engine):
        exact = Record(id=1, title="Risk", content="", standard_id=1)
        in_title = Record(id=2, title="Risk Theme", content="", standard_id=1)
        in_content = Record(id=3, title="Theme", content="the risk", standard_id=1)

        assert engine.score_record(exact, "risk") > engine.score_record(in_title, "risk")
        assert engine.score_record(in_title, "risk") > engine.score_record(in_content, "risk")

    def test_scores_within_bounds(self, engine, sample_records):
        for query in ["risk", "Risk Management", "quality delivery", "xyz", "theme"]:
            for record in sample_records:
                assert 0.1 <= engine.score_record(record, query) <= 1.0

    def test_missing_text_is_treated_as_empty(self, engine):
        record = Record(id=1, title=None, content=None, standard_id=1)
        assert record.title == "" and record.content == ""
        assert engine.score_record(record, "risk") == 0.1


class TestKeywordTally:
    """Test keyword-tally scoring."""

    def test_title_and_content_weights(self, engine):
        record = Record(id=1, title="Risk Register", content="risk and quality", standard_id=1)
        # risk: title 2 + content 1, quality: content 1, cost: nothing
        assert engine.score_keywords(record, ["risk", "quality", "cost"]) == 4

    def test_keywords_are_case_insensitive(self, engine):
        record = Record(id=1, title="RISK", content="", standard_id=1)
        assert engine.score_keywords(record, ["Risk"]) == 2

    def test_custom_weights(self):
        engine = RelevanceSearchEngine(tally_weights=TallyWeights(title=5, content=3))
        record = Record(id=1, title="Risk", content="risk", standard_id=1)
        assert engine.score_keywords(record, ["risk"]) == 8

    def test_blank_keywords_ignored(self, engine):
        record = Record(id=1, title="Risk", content="risk", standard_id=1)
        assert engine.score_keywords(record, ["", "   "]) == 0

    def test_rank_by_keywords(self, engine, sample_records):
        results = engine.rank_by_keywords(sample_records, ["risk"])

        assert [r.record.id for r in results] == [1, 4, 2]
        assert [r.score for r in results] == [3.0, 2.0, 1.0]

    def test_rank_by_keywords_limit(self, engine, sample_records):
        results = engine.rank_by_keywords(sample_records, ["risk"], limit=2)
        assert [r.record.id for r in results] == [1, 4]

    def test_rank_by_keywords_without_keywords(self, engine, sample_records):
        assert engine.rank_by_keywords(sample_records, []) == []
        assert engine.rank_by_keywords(sample_records, ["  "]) == []

    def test_keyword_snippet_falls_back_to_plain_prefix(self, engine, sample_records):
        results = engine.rank_by_keywords(sample_records, ["risk"])
        theme = next(r for r in results if r.record.id == 4)
        assert theme.snippet == "The theme covers uncertainty."


class TestSnippets:
    """Test snippet extraction and highlighting."""

    def test_snippet_around_match(self, engine):
        content = "a" * 100 + "RISK" + "b" * 300
        snippet = engine.build_snippet(content, "risk")

        assert snippet.startswith("...")
        assert snippet.endswith("...")
        assert "<mark>RISK</mark>" in snippet

    def test_snippet_match_near_start_has_no_leading_ellipsis(self, engine):
        content = "Risk is everywhere. " + "x" * 300
        snippet = engine.build_snippet(content, "risk")

        assert snippet.startswith("<mark>Risk</mark>")
        assert snippet.endswith("...")

    def test_snippet_without_match(self, engine):
        content = "z" * 300
        assert engine.build_snippet(content, "risk") == "z" * 200 + "..."

    def test_short_content_returned_whole(self, engine):
        assert engine.build_snippet("risk", "risk") == "<mark>risk</mark>"

    def test_every_occurrence_highlighted(self, engine):
        snippet = engine.build_snippet("Risk, risk and more RISK.", "risk")
        assert snippet.count("<mark>") == 3

    def test_regex_metacharacters_are_literal(self, engine):
        snippet = engine.build_snippet("Teams using C++ (risk) tools", "c++ (risk)")
        assert "<mark>C++ (risk)</mark>" in snippet

    def test_missing_content(self, engine):
        assert engine.build_snippet(None, "risk") == ""
        assert engine.build_snippet("Some text", None) == "Some text"

    @pytest.mark.parametrize("position", [0, 10, 49, 50, 51, 150, 400, 596])
    def test_visible_length_is_bounded(self, engine, position):
        content = "x" * position + "risk" + "y" * (600 - position)
        snippet = engine.build_snippet(content, "risk")

        visible = TextProcessor().strip_highlights(snippet)
        assert len(visible) <= 200 + 6
        assert "<mark>risk</mark>" in snippet

    def test_custom_window(self):
        engine = RelevanceSearchEngine(snippet_window=20)
        snippet = engine.build_snippet("x" * 100, "risk")
        assert snippet == "x" * 20 + "..."


class TestRanking:
    """Test ranking, ordering and limits."""

    def test_rank_and_limit_orders_by_score(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "Risk Management")

        assert [r.record.id for r in results] == [1, 4, 2]
        assert results[0].score == 1.0
        assert results[1].score == pytest.approx(0.3)
        assert results[2].score == pytest.approx(0.2)

    def test_worked_example(self, engine):
        records = [
            Record(id=1, title="Risk Management", content="...risk register...", standard_id=1),
            Record(id=2, title="Quality", content="...manage risk here...", standard_id=1),
        ]
        results = engine.rank_and_limit(records, "risk management")

        assert results[0].record.id == 1
        assert results[0].score == 1.0
        assert 0.1 <= results[1].score <= 0.6

    def test_non_candidates_excluded(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "risk")
        assert 3 not in [r.record.id for r in results]

    def test_tie_break_by_title_then_id(self, engine):
        records = [
            Record(id=10, title="Beta risk", content="", standard_id=1),
            Record(id=12, title="Alpha risk", content="", standard_id=1),
            Record(id=11, title="alpha RISK", content="", standard_id=1),
        ]
        results = engine.rank_and_limit(records, "risk")

        assert [r.record.id for r in results] == [11, 12, 10]
        assert len({r.score for r in results}) == 1

    def test_output_sorted_non_increasing(self, engine, sample_records):
        for query in ["risk", "quality", "the", "engagement"]:
            scores = [r.score for r in engine.rank_and_limit(sample_records, query, limit=None)]
            assert scores == sorted(scores, reverse=True)

    def test_ranks_are_sequential(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "risk")
        assert [r.rank for r in results] == list(range(1, len(results) + 1))

    def test_empty_query_returns_nothing(self, engine, sample_records):
        assert engine.rank_and_limit(sample_records, "") == []
        assert engine.rank_and_limit(sample_records, "   ") == []
        assert engine.rank_and_limit(sample_records, None) == []

    def test_limit(self, engine, sample_records):
        assert len(engine.rank_and_limit(sample_records, "risk", limit=1)) == 1
        assert len(engine.rank_and_limit(sample_records, "risk", limit=None)) == 3

    def test_invalid_limit(self, engine, sample_records):
        with pytest.raises(ValidationError):
            engine.rank_and_limit(sample_records, "risk", limit=0)

    def test_matched_terms(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "Risk Management")
        assert results[0].matched_terms == ["risk", "management"]

    def test_snippet_highlights_query(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "risk management")
        assert results[0].snippet.startswith("<mark>Risk management</mark>")

    def test_regex_query_does_not_raise(self, engine):
        records = [Record(id=1, title="Tools", content="Uses C++ tooling", standard_id=1)]
        results = engine.rank_and_limit(records, "c++")

        assert results[0].score == 0.6
        assert "<mark>C++</mark>" in results[0].snippet

    def test_deterministic(self, engine, sample_records):
        first = [(r.record.id, r.score) for r in engine.rank_and_limit(sample_records, "risk quality")]
        second = [(r.record.id, r.score) for r in engine.rank_and_limit(sample_records, "risk quality")]
        assert first == second


class TestQuerySearch:
    """Test searching with Query objects."""

    def test_freetext_query_with_standard_filter(self, engine, sample_records):
        results = engine.search(sample_records, Query(text="risk", standard_ids={2}))
        assert [r.record.id for r in results] == [4]

    def test_keyword_query(self, engine, sample_records):
        results = engine.search(sample_records, Query.from_keywords(["risk"]))
        assert [r.record.id for r in results] == [1, 4, 2]

    def test_invalid_query_raises_search_error(self, engine, sample_records):
        query = Query(text="risk")
        query.limit = 0

        with pytest.raises(SearchError):
            engine.search(sample_records, query)

    def test_score_dispatches_on_mode(self, engine, sample_records):
        record = sample_records[0]
        assert engine.score(record, Query(text="risk management")) == 1.0
        assert engine.score(record, Query.from_keywords(["risk"])) == 3.0


class TestGrouping:
    """Test grouping results by standard."""

    def _result(self, record_id, standard_id, score, rank):
        record = Record(id=record_id, title=f"Section {record_id}", content="", standard_id=standard_id)
        return ScoredResult(record=record, score=score, snippet="", rank=rank)

    def test_group_means(self):
        results = [
            self._result(1, 1, 0.8, 1),
            self._result(2, 2, 1.0, 2),
            self._result(3, 1, 0.6, 3),
            self._result(4, 2, 0.4, 4),
            self._result(5, 1, 0.1, 5),
        ]
        groups = RelevanceSearchEngine.group_by_standard(results)

        assert [g.standard_id for g in groups] == [1, 2]
        assert groups[0].count == 3
        assert groups[0].mean_score == pytest.approx(0.5)
        assert groups[1].mean_score == pytest.approx(0.7)

    def test_no_results_no_groups(self):
        assert RelevanceSearchEngine.group_by_standard([]) == []

    def test_groups_only_for_matching_standards(self, engine, sample_records):
        results = engine.rank_and_limit(sample_records, "quality")
        groups = engine.group_by_standard(results)

        assert [g.standard_id for g in groups] == [1]


class TestEngineStats:
    """Test engine statistics."""

    def test_stats_track_searches(self, engine, sample_records):
        engine.rank_and_limit(sample_records, "risk")
        engine.rank_by_keywords(sample_records, ["risk"])

        stats = engine.get_stats()
        assert stats['total_searches'] == 2
        assert stats['avg_search_time'] >= 0
        assert stats['tally_weights'] == {'title': 2, 'content': 1}
        assert stats['snippet_window'] == 200

    def test_empty_query_not_counted(self, engine, sample_records):
        engine.rank_and_limit(sample_records, "")
        assert engine.get_stats()['total_searches'] == 0
