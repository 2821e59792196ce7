"""
Claim filtering and persisted filter selection.
"""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from ..core.models import ALL, UNCLASSIFIED, UNKNOWN, CleanedClaim, FilterState
from ..core.rules import Severity
from ..core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

FILTER_STORAGE_KEY = "autoseat_claim_filters"
DEFAULT_FILTERS = FilterState()


def _selected(value: str, wanted: str) -> bool:
    return wanted == ALL or value == wanted


def matches_filters(claim: CleanedClaim, filters: FilterState) -> bool:
    """Check one claim against every active filter dimension."""
    if not _selected(claim.model, filters.model):
        return False
    if not _selected(claim.phenomenon or UNCLASSIFIED, filters.phenomenon):
        return False
    if not _selected(claim.cause or UNKNOWN, filters.cause):
        return False
    if not _selected(claim.contamination or UNKNOWN, filters.contamination):
        return False
    if not _selected(claim.severity or Severity.LOW.value, filters.severity):
        return False
    if filters.flag != ALL and filters.flag not in (claim.flags or []):
        return False

    date_range = filters.date_range
    if date_range.start and claim.date < date_range.start:
        return False
    if date_range.end and claim.date > date_range.end:
        return False
    return True


def apply_filters(
    claims: Iterable[CleanedClaim], filters: FilterState | None = None
) -> list[CleanedClaim]:
    """
    Keep the claims matching a filter selection.

    Missing labels compare as "Unclassified" (phenomenon), "Unknown"
    (cause, contamination) and "Low" (severity). The date range is
    inclusive on both ends.
    """
    filters = filters or DEFAULT_FILTERS
    return [claim for claim in claims if matches_filters(claim, filters)]


def filter_options(claims: Iterable[CleanedClaim]) -> dict[str, list[str]]:
    """Distinct values per filter dimension, sorted for display."""
    options: dict[str, set[str]] = {
        "model": set(),
        "phenomenon": set(),
        "cause": set(),
        "contamination": set(),
        "flag": set(),
    }
    for claim in claims:
        options["model"].add(claim.model)
        options["phenomenon"].add(claim.phenomenon or UNCLASSIFIED)
        options["cause"].add(claim.cause or UNKNOWN)
        options["contamination"].add(claim.contamination or UNKNOWN)
        options["flag"].update(claim.flags or [])
    return {key: sorted(values) for key, values in options.items()}


class FilterStore:
    """Persists the last filter selection; unreadable state falls back to defaults."""

    def __init__(self, storage: KeyValueStorage, storage_key: str = FILTER_STORAGE_KEY) -> None:
        self.storage = storage
        self.storage_key = storage_key

    def load(self) -> FilterState:
        raw = self.storage.get(self.storage_key)
        if not raw:
            return DEFAULT_FILTERS.model_copy(deep=True)
        try:
            return FilterState.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring stored filters: %s", exc.error_count())
            return DEFAULT_FILTERS.model_copy(deep=True)

    def save(self, filters: FilterState) -> None:
        self.storage.set(self.storage_key, filters.model_dump_json(by_alias=True))

    def reset(self) -> FilterState:
        self.save(DEFAULT_FILTERS)
        return self.load()
