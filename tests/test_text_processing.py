"""Test text processing, validation and logging utilities."""

import logging
import pytest

from standards_search.core.exceptions import ValidationError
from standards_search.models.record import Record
from standards_search.utils.logging_config import setup_logging
from standards_search.utils.text_processing import TextProcessor, ELLIPSIS
from standards_search.utils.validators import (
    validate_record,
    validate_query_text,
    validate_limit,
    parse_id_list,
    unique,
)


class TestTextProcessor:
    """Test TextProcessor functionality."""

    @pytest.fixture
    def processor(self):
        return TextProcessor()

    def test_normalize(self, processor):
        assert processor.normalize("Risk MANAGEMENT") == "risk management"
        assert processor.normalize(None) == ""

    def test_split_words(self, processor):
        assert processor.split_words("  Risk   Theme ") == ["risk", "theme"]

    def test_extract_keywords(self, processor):
        assert processor.extract_keywords("Scope & WBS") == ["scope", "wbs"]
        assert processor.extract_keywords("Risk/Change boards") == ["risk", "change", "boards"]
        assert processor.extract_keywords("&&") == []

    def test_count_words(self, processor):
        assert processor.count_words("one two  three") == 3
        assert processor.count_words(None) == 0

    def test_count_sentences(self, processor):
        assert processor.count_sentences("One. Two! Three") == 3
        assert processor.count_sentences("No punctuation") == 1
        assert processor.count_sentences("   ") == 0

    def test_truncate(self, processor):
        assert processor.truncate("abcdef", 3) == "abc"
        assert processor.truncate("abc", 10) == "abc"
        assert processor.truncate(None, 3) == ""

    def test_highlight_and_strip(self, processor):
        highlighted = processor.highlight("Risk and risk", "RISK")

        assert highlighted == "<mark>Risk</mark> and <mark>risk</mark>"
        assert processor.strip_highlights(highlighted) == "Risk and risk"

    def test_custom_markers(self):
        processor = TextProcessor(highlight_open="[", highlight_close="]")
        assert processor.highlight("a risk", "risk") == "a [risk]"

    def test_ellipsis_constant(self, processor):
        snippet = processor.build_snippet("x" * 300, "nothing", window=10)
        assert snippet.endswith(ELLIPSIS)
        assert ELLIPSIS == "..."

    def test_snippet_offsets_with_length_changing_lowercase(self, processor):
        # "İ".lower() is two code points, so offsets must come from the original text
        content = "İ" * 150 + " risk " + "y" * 300
        snippet = processor.build_snippet(content, "risk", window=200)

        assert "<mark>risk</mark>" in snippet
        assert snippet.startswith(ELLIPSIS + "İ" * 49 + " <mark>risk</mark>")

    def test_snippet_match_with_non_ascii_case(self, processor):
        snippet = processor.build_snippet("Überblick: RÉSUMÉ of risks", "résumé")
        assert snippet == "Überblick: <mark>RÉSUMÉ</mark> of risks"


class TestValidators:
    """Test input validators."""

    def test_validate_record(self):
        validate_record(Record(id=1, title="Risk", content="", standard_id=1))

    def test_invalid_record_id(self):
        with pytest.raises(ValidationError):
            validate_record(Record(id=0, title="Risk", content="", standard_id=1))

    def test_record_without_title(self):
        with pytest.raises(ValidationError, match="has no title"):
            validate_record(Record(id=1, title=" ", content="", standard_id=1))

    def test_not_a_record(self):
        with pytest.raises(ValidationError, match="Invalid record type"):
            validate_record({"id": 1})

    def test_validate_query_text(self):
        assert validate_query_text("  risk ") == "risk"

        with pytest.raises(ValidationError, match="Query is required"):
            validate_query_text(None)
        with pytest.raises(ValidationError, match="Topic parameter is required"):
            validate_query_text("   ", field_name="Topic parameter")

    def test_validate_limit(self):
        assert validate_limit(None, 10, 100) == 10
        assert validate_limit(5, 10, 100) == 5
        assert validate_limit(500, 10, 100) == 100

        with pytest.raises(ValidationError):
            validate_limit(0, 10, 100)

    def test_parse_id_list(self):
        assert parse_id_list("1, 2,,3") == [1, 2, 3]
        assert parse_id_list(None) == []
        assert parse_id_list("") == []

        with pytest.raises(ValidationError, match="Invalid id"):
            parse_id_list("1,x")

    def test_unique(self):
        assert unique([2, 1, 2, 3, 1]) == [2, 1, 3]


class TestLogging:
    """Test logging configuration."""

    def test_setup_logging_levels(self):
        setup_logging(level="DEBUG", include_timestamp=False)
        try:
            assert logging.getLogger("standards_search").level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("sklearn").level == logging.WARNING
        finally:
            setup_logging(level="WARNING")

    def test_unknown_level_defaults_to_info(self):
        setup_logging(level="chatty")
        try:
            assert logging.getLogger("standards_search").level == logging.INFO
        finally:
            setup_logging(level="WARNING")
