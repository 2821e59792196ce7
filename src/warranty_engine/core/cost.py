"""
Cost parsing for heterogeneous currency strings.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

PARENTHESIZED_PATTERN = re.compile(r"^\((.*)\)$", re.DOTALL)
WHITESPACE_PATTERN = re.compile(r"\s+")
NON_NUMERIC_DECIMAL_PATTERN = re.compile(r"[^0-9.]")


@dataclass(frozen=True)
class CostParseResult:
    """Parsed cost amount with a failure flag."""

    amount: float
    failed: bool


FAILED = CostParseResult(amount=0.0, failed=True)


def parse_cost_value(value: Any) -> CostParseResult:
    """
    Convert a raw cost cell into a signed amount.

    Handles thousands separators, currency symbols, embedded spaces,
    accounting-style parentheses and explicit signs. Anything without
    a numeric remainder is reported as failed with an amount of 0.

    Args:
        value: Raw cost value (number, string or None)

    Returns:
        CostParseResult with the amount and whether parsing failed
    """
    if isinstance(value, bool):
        return FAILED

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return FAILED
        return CostParseResult(amount=float(value), failed=False)

    if value is None:
        return FAILED

    text = str(value).strip()
    if not text:
        return FAILED

    is_negative = False
    paren_match = PARENTHESIZED_PATTERN.match(text)
    if paren_match:
        is_negative = True
        text = paren_match.group(1)

    text = text.strip()
    if text.startswith("-"):
        is_negative = True
        text = text[1:]
    elif text.startswith("+"):
        text = text[1:]

    text = WHITESPACE_PATTERN.sub("", text)
    text = text.replace(",", "")
    text = NON_NUMERIC_DECIMAL_PATTERN.sub("", text)

    if not text:
        return FAILED

    try:
        parsed = float(text)
    except ValueError:
        return FAILED

    if not math.isfinite(parsed):
        return FAILED

    amount = -abs(parsed) if is_negative else parsed
    return CostParseResult(amount=amount, failed=False)
