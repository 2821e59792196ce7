"""
Shared fixtures for the warranty engine tests.
"""

from collections.abc import Callable

import pytest

from warranty_engine.core.models import CleanedClaim
from warranty_engine.core.rule_store import load_default_rule_set
from warranty_engine.core.rules import ClassificationRuleSet


@pytest.fixture
def default_rules() -> ClassificationRuleSet:
    """Fresh copy of the packaged rule set."""
    return load_default_rule_set()


@pytest.fixture
def make_claim() -> Callable[..., CleanedClaim]:
    """Factory for classified claims with sensible defaults."""

    def _make(
        claim_id: str,
        date: str,
        phenomenon: str | None = "Seat Heater / Thermal",
        severity: str | None = "Low",
        cost: float = 0.0,
        **fields,
    ) -> CleanedClaim:
        fields.setdefault("model", "ModelX")
        fields.setdefault("description", f"{phenomenon} issue")
        fields.setdefault("part_name", "Part")
        return CleanedClaim(
            id=claim_id,
            date=date,
            phenomenon=phenomenon,
            severity=severity,
            cost=cost,
            **fields,
        )

    return _make
