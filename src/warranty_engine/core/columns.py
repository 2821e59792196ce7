"""
Fuzzy column mapping for arbitrary CSV headers.
Maps English and Korean header variants onto canonical claim fields.
"""

import re
from collections.abc import Iterable, Mapping

CANONICAL_FIELDS: tuple[str, ...] = ("id", "date", "model", "description", "part", "cost")

DEFAULT_COLUMN_CANDIDATES: dict[str, list[str]] = {
    "id": ["claim id", "id", "클레임번호", "접수번호"],
    "date": ["date", "incident date", "reported", "발생일", "일자", "접수일"],
    "model": ["model", "vehicle", "car", "차종", "모델"],
    "description": ["issue", "description", "complaint", "현상", "불만", "내용"],
    "part": ["part", "component", "부품", "품명"],
    "cost": ["cost", "price", "repair", "비용", "금액"],
}

HEADER_NOISE_PATTERN = re.compile(r"[\s_\-]")


def normalize_header(value: str) -> str:
    """Lower-case a header and drop whitespace, underscores and hyphens."""
    return HEADER_NOISE_PATTERN.sub("", str(value).lower())


def header_matches(header: str, candidate: str) -> bool:
    """
    Check whether a header satisfies a single candidate term.

    The bare "id" candidate must match exactly; every other candidate
    matches when the normalized header contains it.
    """
    normalized = normalize_header(header)
    normalized_candidate = normalize_header(candidate)
    if normalized_candidate == "id":
        return normalized == "id"
    return normalized_candidate in normalized


class ColumnMapper:
    """
    Resolves canonical claim fields against a row's headers.

    The candidate table is plain data so it can be extended for new
    locales without touching the matching logic.
    """

    def __init__(self, candidates: Mapping[str, list[str]] | None = None) -> None:
        self.candidates: dict[str, list[str]] = {
            key: list(terms)
            for key, terms in (candidates or DEFAULT_COLUMN_CANDIDATES).items()
        }

    def find_column(self, headers: Iterable[str], field: str) -> str | None:
        """
        Find the first header (in column order) matching a field.

        Args:
            headers: Row headers in their original order
            field: Canonical field key (id, date, model, ...)

        Returns:
            The matching header, or None when the field is absent
        """
        terms = self.candidates.get(field, [])
        for header in headers:
            if any(header_matches(header, term) for term in terms):
                return header
        return None

    def resolve(self, headers: Iterable[str]) -> dict[str, str | None]:
        """Resolve every canonical field for a header set."""
        ordered = list(headers)
        return {field: self.find_column(ordered, field) for field in self.candidates}


def find_column(headers: Iterable[str], field: str) -> str | None:
    """Resolve a field against the default candidate table."""
    return ColumnMapper().find_column(headers, field)
