"""
Analysis Report Module.
Formats KPI and aggregate snapshots as text, dictionaries or JSON.
"""

import json
from typing import Any

from ..core.models import AnalysisReport, Breakdown


class AnalysisReportFormatter:
    """
    Formats analysis reports for various output formats.
    """

    SEVERITY_ICONS = {
        "High": "🚨",
        "Medium": "⚠️",
        "Low": "ℹ️",
    }

    BREAKDOWN_LIMIT = 5

    def __init__(self, report: AnalysisReport) -> None:
        self.report = report

    def _breakdown_lines(self, title: str, entries: list[Breakdown]) -> list[str]:
        lines = ["-" * 70, title.upper(), "-" * 70]
        if not entries:
            lines.append("(no claims)")
        for entry in entries[: self.BREAKDOWN_LIMIT]:
            lines.append(f"{entry.label:<40} {entry.count:>6} claims  {entry.cost:>14,.0f}")
        if len(entries) > self.BREAKDOWN_LIMIT:
            lines.append(f"... and {len(entries) - self.BREAKDOWN_LIMIT} more")
        lines.append("")
        return lines

    def to_text(self, include_details: bool = True) -> str:
        """
        Format the report as plain text.

        Args:
            include_details: Whether to include breakdowns and alerts

        Returns:
            Formatted text report
        """
        report = self.report
        kpi = report.kpi
        aggregated = report.aggregated
        lines: list[str] = []

        # Header
        lines.append("=" * 70)
        lines.append("WARRANTY CLAIM ANALYSIS REPORT")
        lines.append("=" * 70)
        lines.append("")
        lines.append(f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        lines.append(f"Rules Version: {report.rules_version}")
        if report.stats is not None:
            stats = report.stats
            lines.append(
                f"Rows kept: {stats.parsed_rows}, dropped: {stats.dropped_rows} "
                f"(missing date {stats.missing_date}, model {stats.missing_model}, "
                f"description {stats.missing_description})"
            )
        lines.append("")

        # KPI section
        lines.append("-" * 70)
        lines.append("KPI")
        lines.append("-" * 70)
        lines.append(f"Total Claims: {kpi.total_claims}")
        lines.append(f"Total Cost: {kpi.total_cost:,.0f}")
        lines.append(f"Avg Cost Per Claim: {kpi.avg_cost_per_claim:,.0f}")
        lines.append(
            f"High Severity: {kpi.high_severity_count} ({kpi.high_severity_ratio:.1f}%)"
        )
        lines.append(f"MoM Growth: {kpi.mom_growth:+.1f}%")
        lines.append(f"Top Defect Keyword: {kpi.top_defect}")
        lines.append("")

        if include_details:
            lines += self._breakdown_lines("Phenomenon Pareto", aggregated.phenomenon_summary)
            lines += self._breakdown_lines("Cause Pareto", aggregated.cause_summary)
            lines += self._breakdown_lines("Contamination Pareto", aggregated.contamination_summary)

            insight = aggregated.trend_insight
            if insight is not None:
                lines.append(
                    f"Trend: {insight.recent_label} {insight.recent_count} claims vs "
                    f"{insight.compare_label or 'n/a'} {insight.previous_count} "
                    f"({insight.growth_percent:+.1f}%)"
                )
            spike = aggregated.cost_spike
            if spike is not None:
                lines.append(
                    f"Cost Spike: {spike.phenomenon} +{spike.delta_cost:,.0f} "
                    f"({spike.previous_cost:,.0f} -> {spike.current_cost:,.0f})"
                )
            forecast = [point for point in aggregated.forecast_trend if point.forecast is not None]
            if forecast:
                projected = ", ".join(f"{point.period}: {point.forecast}" for point in forecast)
                lines.append(f"Forecast: {projected}")
            lines.append("")

            if aggregated.important_claims:
                lines.append("-" * 70)
                lines.append("IMPORTANT CLAIMS")
                lines.append("-" * 70)
                for claim in aggregated.important_claims:
                    icon = self.SEVERITY_ICONS.get(claim.severity or "Low", "•")
                    lines.append(
                        f"{icon} [{claim.score:.1f}] {claim.id} {claim.date} {claim.model} "
                        f"{claim.phenomenon or 'Unclassified'}"
                    )
                    lines.append(f"   {claim.description}")
                lines.append("")

        # Footer
        lines.append("=" * 70)
        lines.append("END OF REPORT")
        lines.append("=" * 70)

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the report to its camelCase dictionary form.

        Returns:
            JSON-compatible dictionary
        """
        return self.report.to_wire()

    def to_json(self, indent: int = 2) -> str:
        """
        Convert the report to JSON.

        Args:
            indent: JSON indentation level

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def print_summary(self) -> None:
        """Print a brief summary to stdout."""
        print(self.to_text(include_details=False))

    def print_full(self) -> None:
        """Print the full report to stdout."""
        print(self.to_text(include_details=True))
