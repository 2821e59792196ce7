"""
CSV exports for claims, summaries and unclassified review lists.
"""

import csv
import io
from collections.abc import Iterable, Sequence
from typing import Any

from ..analytics.aggregation import round_half_up
from ..core.models import KPI, UNCLASSIFIED, UNKNOWN, AggregatedData, Breakdown, CleanedClaim
from ..core.rules import Severity

CLAIM_HEADERS = [
    "ID",
    "Source ID",
    "Date",
    "Model",
    "Part Name",
    "Description",
    "Cost",
    "Cost Parse Failed",
    "Phenomenon",
    "Cause",
    "Contamination",
    "Severity",
    "Flags",
    "Updated At",
]
UNCLASSIFIED_HEADERS = ["ID", "Date", "Model", "Description", "Phenomenon", "Cause"]

TEMPLATE_CSV = "Claim ID,발생일,차종,현상,부품,비용\nCLM001,YYYY-MM-DD,모델명,이슈 내용을 입력하세요,부품명을 입력하세요,0\n"


def format_number(value: float | int | None) -> str:
    """Render whole numbers without a trailing ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _write_rows(rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def build_claims_csv(claims: Iterable[CleanedClaim]) -> str:
    """Export claims with their classification, one row per claim."""
    rows: list[list[Any]] = [CLAIM_HEADERS]
    for claim in claims:
        rows.append(
            [
                claim.id,
                claim.source_id or "",
                claim.date,
                claim.model,
                claim.part_name or "",
                claim.description or "",
                format_number(claim.cost),
                "Y" if claim.cost_parse_failed else "",
                claim.phenomenon or UNCLASSIFIED,
                claim.cause or UNKNOWN,
                claim.contamination or UNKNOWN,
                claim.severity or Severity.LOW.value,
                "|".join(claim.flags or []),
                claim.updated_at or "",
            ]
        )
    return _write_rows(rows)


def _breakdown_section(title: str, entries: Iterable[Breakdown]) -> list[list[Any]]:
    rows: list[list[Any]] = [[title, "Count", "Cost"]]
    rows.extend([entry.label, entry.count, round_half_up(entry.cost)] for entry in entries)
    return rows


def build_summary_csv(kpi: KPI, aggregated: AggregatedData) -> str:
    """Export the KPI block followed by the Pareto sections."""
    rows: list[list[Any]] = [
        ["KPI", "Value"],
        ["Total Claims", kpi.total_claims],
        ["Total Cost", round_half_up(kpi.total_cost)],
        ["Avg Cost Per Claim", round_half_up(kpi.avg_cost_per_claim)],
        ["High Severity Count", kpi.high_severity_count],
        ["High Severity Ratio (%)", f"{kpi.high_severity_ratio:.1f}"],
        ["MoM Growth (%)", f"{kpi.mom_growth:.1f}"],
        ["Top Phenomenon", kpi.top_defect],
        [],
    ]
    rows += _breakdown_section("Phenomenon Pareto", aggregated.phenomenon_summary)
    rows.append([])
    rows += _breakdown_section("Cause Pareto", aggregated.cause_summary)
    rows.append([])
    rows += _breakdown_section("Contamination Pareto", aggregated.contamination_summary)
    rows.append([])
    rows.append(["Model Pareto", "Count"])
    rows.extend([entry.name, entry.count] for entry in aggregated.model_pareto)
    return _write_rows(rows)


def build_unclassified_csv(claims: Iterable[CleanedClaim]) -> str:
    """Export claims for manual review of the taxonomy."""
    rows: list[list[Any]] = [UNCLASSIFIED_HEADERS]
    rows.extend(
        [
            claim.id,
            claim.date,
            claim.model,
            claim.description or "",
            claim.phenomenon or UNCLASSIFIED,
            claim.cause or UNKNOWN,
        ]
        for claim in claims
    )
    return _write_rows(rows)
