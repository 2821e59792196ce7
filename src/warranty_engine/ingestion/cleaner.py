"""
Claim data cleaner.
Normalizes raw CSV rows into classified claims and tracks data-quality stats.
"""

import logging
import re
import warnings
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..core.columns import ColumnMapper
from ..core.cost import parse_cost_value
from ..core.models import UNKNOWN, CleanedClaim, CleanResult, CleanStats
from ..core.rule_engine import classify_claim
from ..core.rules import ClassificationRuleSet
from ..core.text import sanitize_text
from .csv_reader import RawRow

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")
FALLBACK_ID_PREFIX = "CLM"
RELATIVE_DATE_KEYWORDS = frozenset({"now", "today"})


def _cell(row: RawRow, key: str | None) -> Any:
    if key is None:
        return None
    return row.get(key)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_claim_date(value: Any) -> str:
    """
    Parse a free-form date cell into ``YYYY-MM-DD``.

    Timezone-aware values are converted to their UTC calendar date.
    Anything unparseable yields ``"Unknown"``.
    """
    if _is_blank(value) or isinstance(value, bool):
        return UNKNOWN

    text = str(value).strip()
    # pandas resolves these against the system clock
    if text.lower() in RELATIVE_DATE_KEYWORDS:
        return UNKNOWN

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            timestamp = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return UNKNOWN

    if timestamp is None or pd.isna(timestamp):
        return UNKNOWN
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert("UTC")
    return timestamp.strftime("%Y-%m-%d")


class ClaimIdAllocator:
    """Issues unique claim ids, suffixing repeats of the same base id."""

    def __init__(self) -> None:
        self._usage: dict[str, int] = {}

    def allocate(self, raw_id: Any, row_number: int) -> tuple[str, str | None]:
        """
        Derive the unique id and source id for a row.

        Args:
            raw_id: Raw id cell (may be missing)
            row_number: 1-based position of the row in the input

        Returns:
            Tuple of (unique id, trimmed source id or None)
        """
        source_id = "" if raw_id is None else str(raw_id).strip()
        base_id = WHITESPACE_PATTERN.sub("", source_id) or f"{FALLBACK_ID_PREFIX}-{row_number}"
        seen = self._usage.get(base_id, 0)
        self._usage[base_id] = seen + 1
        unique_id = f"{base_id}-{seen + 1}" if seen else base_id
        return unique_id, source_id or None


def clean_row(
    row: RawRow,
    row_number: int,
    rule_set: ClassificationRuleSet,
    mapper: ColumnMapper,
    ids: ClaimIdAllocator,
) -> CleanedClaim:
    """Normalize and classify a single raw row (the date may be "Unknown")."""
    columns = mapper.resolve(row.keys())

    claim_id, source_id = ids.allocate(_cell(row, columns.get("id")), row_number)

    description = sanitize_text(_cell(row, columns.get("description"))) or UNKNOWN
    part_name = sanitize_text(_cell(row, columns.get("part"))) or None

    raw_model = _cell(row, columns.get("model"))
    model = "" if raw_model is None else str(raw_model).strip()

    cost = parse_cost_value(_cell(row, columns.get("cost")))
    classification = classify_claim(description, part_name, cost.amount, rule_set)

    return CleanedClaim(
        id=claim_id,
        source_id=source_id,
        date=parse_claim_date(_cell(row, columns.get("date"))),
        model=model or UNKNOWN,
        description=description,
        part_name=part_name,
        cost=cost.amount,
        cost_parse_failed=cost.failed,
        **classification.model_dump(),
    )


def clean_data(
    rows: Iterable[RawRow],
    rule_set: ClassificationRuleSet,
    mapper: ColumnMapper | None = None,
) -> CleanResult:
    """
    Clean, de-duplicate and classify raw claim rows.

    Rows without a usable date are dropped; rows missing a model or a
    description are kept and counted. Malformed rows never raise.

    Args:
        rows: Raw rows keyed by header
        rule_set: Rule-set snapshot used to classify every row
        mapper: Column mapper (defaults to the built-in candidate table)

    Returns:
        CleanResult with the kept claims and row statistics
    """
    mapper = mapper or ColumnMapper()
    ids = ClaimIdAllocator()
    stats = CleanStats()
    claims: list[CleanedClaim] = []

    for index, row in enumerate(rows, start=1):
        claim = clean_row(row, index, rule_set, mapper, ids)

        if claim.model == UNKNOWN:
            stats.missing_model += 1
        if claim.description == UNKNOWN:
            stats.missing_description += 1
        if claim.date == UNKNOWN:
            stats.missing_date += 1
            stats.dropped_rows += 1
            logger.debug("Dropping row %d (id=%s): no parseable date", index, claim.id)
            continue

        claims.append(claim)

    stats.parsed_rows = len(claims)
    logger.info(
        "Cleaned claims kept=%d dropped=%d missing_model=%d missing_description=%d rules=%s",
        stats.parsed_rows,
        stats.dropped_rows,
        stats.missing_model,
        stats.missing_description,
        rule_set.version,
    )
    return CleanResult(claims=claims, stats=stats)
