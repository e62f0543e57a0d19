"""Input validation utilities."""

from typing import List, Optional, Iterable

from ..models.record import Record
from ..models.query import Query, ScoringMode
from ..core.exceptions import ValidationError


def validate_record(record: Record) -> None:
    """
    Validate record object.

    Args:
        record: Record to validate

    Raises:
        ValidationError: If record is invalid
    """
    try:
        if not isinstance(record, Record):
            raise ValidationError("Invalid record type")

        if not isinstance(record.id, int) or record.id <= 0:
            raise ValidationError(f"Record ID must be a positive integer, got {record.id!r}")

        if not isinstance(record.standard_id, int) or record.standard_id <= 0:
            raise ValidationError(f"Record {record.id} has an invalid standard ID")

        if not record.title.strip():
            raise ValidationError(f"Record {record.id} has no title")

    except Exception as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Record validation failed: {str(e)}")


def validate_query(query: Query) -> None:
    """
    Validate query object.

    Raises:
        ValidationError: If query is invalid
    """
    if not isinstance(query, Query):
        raise ValidationError("Invalid query type")

    if query.mode == ScoringMode.KEYWORD_TALLY and not query.normalized_keywords:
        raise ValidationError("Keyword query needs at least one keyword")

    if query.limit is not None and query.limit <= 0:
        raise ValidationError("Limit must be positive")


def validate_query_text(text: Optional[str], field_name: str = "Query") -> str:
    """Return stripped query text, rejecting missing or blank input."""
    if text is None or not isinstance(text, str) or not text.strip():
        raise ValidationError(f"{field_name} is required")
    return text.strip()


def validate_limit(limit: Optional[int], default: int, maximum: int) -> int:
    """Return a usable limit, falling back to default and capping at maximum."""
    if limit is None:
        return default
    if limit <= 0:
        raise ValidationError("Limit must be positive")
    return min(limit, maximum)


def parse_id_list(raw: Optional[str]) -> List[int]:
    """Parse a comma separated list of integer ids."""
    if not raw:
        return []
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise ValidationError(f"Invalid id in list: {part!r}")
    return ids


def unique(values: Iterable[int]) -> List[int]:
    """De-duplicate ids preserving first-seen order."""
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
