"""
Tests for claim list merging.
"""

from warranty_engine.core.models import CleanedClaim
from warranty_engine.sync.merge import merge_claim, merge_claim_lists


class TestMergeClaim:
    """Tests for merge_claim."""

    def test_only_present_fields_overwrite(self, make_claim) -> None:
        """Test fields missing from the incoming record are kept."""
        existing = make_claim("C1", "2024-01-01", cost=100, cause="Wear")
        incoming = CleanedClaim.model_validate({"id": "C1", "date": "2024-01-02", "cost": 250})

        merged = merge_claim(existing, incoming)

        assert merged.date == "2024-01-02"
        assert merged.cost == 250
        assert merged.cause == "Wear"
        assert merged.phenomenon == existing.phenomenon
        assert existing.cost == 100


class TestMergeClaimLists:
    """Tests for merge_claim_lists."""

    def test_upsert_keeps_order_and_appends(self, make_claim) -> None:
        """Test matching ids merge in place and new ids are appended."""
        existing = [make_claim("C1", "2024-01-01"), make_claim("C2", "2024-01-02")]
        incoming = [
            make_claim("C3", "2024-01-03"),
            CleanedClaim.model_validate({"id": "C1", "date": "2024-01-01", "severity": "High"}),
        ]

        merged = merge_claim_lists(existing, incoming)

        assert [claim.id for claim in merged] == ["C1", "C2", "C3"]
        assert merged[0].severity == "High"
        assert merged[0].model == "ModelX"
        assert existing[0].severity == "Low"

    def test_repeated_incoming_ids(self, make_claim) -> None:
        """Test a new id received twice is appended once and merged."""
        incoming = [
            make_claim("C9", "2024-01-01", cost=1),
            CleanedClaim.model_validate({"id": "C9", "date": "2024-01-01", "cost": 2}),
        ]
        merged = merge_claim_lists([make_claim("C1", "2024-01-01")], incoming)

        assert [claim.id for claim in merged] == ["C1", "C9"]
        assert merged[1].cost == 2

    def test_empty_sides(self, make_claim) -> None:
        """Test either side may be empty."""
        claims = [make_claim("C1", "2024-01-01")]
        assert merge_claim_lists([], claims) == claims
        assert merge_claim_lists(claims, []) == claims
        assert merge_claim_lists([], []) == []
