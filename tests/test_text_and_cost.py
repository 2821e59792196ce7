"""
Tests for text normalization and cost parsing.
"""

import math

import pytest

from warranty_engine.core.cost import CostParseResult, parse_cost_value
from warranty_engine.core.text import normalize_for_match, sanitize_text


class TestSanitizeText:
    """Tests for sanitize_text and normalize_for_match."""

    def test_none_becomes_empty(self) -> None:
        """Test None is sanitized to an empty string."""
        assert sanitize_text(None) == ""

    def test_collapses_whitespace_and_trims(self) -> None:
        """Test whitespace runs collapse into single spaces."""
        assert sanitize_text("  시트 히터   과열\t및\n화상  ") == "시트 히터 과열 및 화상"

    def test_strips_control_characters(self) -> None:
        """Test C0 and C1 control characters are removed."""
        assert sanitize_text("seat\u0000 heater\u0085") == "seat heater"

    def test_nfkc_normalization(self) -> None:
        """Test full-width characters are folded."""
        assert sanitize_text("ＳＥＡＴ １２") == "SEAT 12"

    def test_numbers_are_stringified(self) -> None:
        """Test numeric cells become text."""
        assert sanitize_text(42) == "42"

    def test_normalize_for_match_lowercases(self) -> None:
        """Test match text is lower-cased."""
        assert normalize_for_match("  Seat HEATER ") == "seat heater"


class TestParseCostValue:
    """Tests for parse_cost_value."""

    @pytest.mark.parametrize(
        ("raw", "amount", "failed"),
        [
            ("1,200", 1200, False),
            ("₩1,200", 1200, False),
            ("1 200", 1200, False),
            ("(1200)", -1200, False),
            ("-350.5", -350.5, False),
            ("+75", 75, False),
            ("$ 1,234.50", 1234.5, False),
            ("원 데이터 없음", 0, True),
            ("1.2.3", 0, True),
            ("", 0, True),
            ("   ", 0, True),
            (None, 0, True),
            (42, 42, False),
            (0, 0, False),
            (12.5, 12.5, False),
        ],
    )
    def test_parse_table(self, raw, amount: float, failed: bool) -> None:
        """Test the supported cost formats."""
        result = parse_cost_value(raw)
        assert result == CostParseResult(amount=amount, failed=failed)

    @pytest.mark.parametrize("raw", [math.nan, math.inf, -math.inf])
    def test_non_finite_numbers_fail(self, raw: float) -> None:
        """Test NaN and infinities are reported as failures."""
        result = parse_cost_value(raw)
        assert result.failed is True
        assert result.amount == 0

    def test_bool_is_not_a_number(self) -> None:
        """Test booleans are rejected rather than read as 0/1."""
        assert parse_cost_value(True).failed is True
