"""
Claim aggregation.
Builds KPIs, Pareto breakdowns, monthly trends, spike alerts and a naive forecast.
"""

import math
from collections import Counter, defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta

from ..core.models import (
    KPI,
    UNCLASSIFIED,
    UNKNOWN,
    AggregatedData,
    Breakdown,
    CleanedClaim,
    CostSpikeAlert,
    DailyPoint,
    ForecastPoint,
    KeywordCount,
    ModelCount,
    MonthlyPoint,
    SeverityCount,
    TrendInsight,
)
from ..core.rules import Severity
from .importance import DEFAULT_WEIGHTS, ImportanceWeights, parse_iso_date, select_important_claims

KEYWORDS_IGNORE = frozenset(
    {
        "the", "and", "not", "on", "in", "is", "a", "to", "of", "for",
        "it", "working", "side", "when", "from", "but", "no",
    }
)
MIN_KEYWORD_LENGTH = 4
TOP_KEYWORDS = 10
TREND_WINDOW_MONTHS = 3
FORECAST_HORIZON_MONTHS = 3
MOM_WINDOW_DAYS = 30


@dataclass
class CountCost:
    count: int = 0
    cost: float = 0.0

    def add(self, cost: float | None) -> None:
        self.count += 1
        self.cost += cost or 0


@dataclass
class MonthSummary:
    """Totals for one ``YYYY-MM`` bucket, with a per-phenomenon split."""

    count: int = 0
    cost: float = 0.0
    phenomenon: dict[str, CountCost] = field(default_factory=lambda: defaultdict(CountCost))


def month_key(iso_date: str) -> str:
    return iso_date[:7]


def add_months(key: str, delta: int) -> str:
    """Shift a ``YYYY-MM`` key by a number of calendar months."""
    year, month = (int(part) for part in key.split("-")[:2])
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def description_keywords(description: str | None) -> list[str]:
    """Lower-cased description words eligible as defect keywords."""
    return [
        word
        for word in (description or "").lower().split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in KEYWORDS_IGNORE
    ]


def count_keywords(claims: Sequence[CleanedClaim]) -> Counter[str]:
    counts: Counter[str] = Counter()
    for claim in claims:
        counts.update(description_keywords(claim.description))
    return counts


def calculate_kpis(claims: Sequence[CleanedClaim]) -> KPI:
    """
    Compute headline KPIs for a claim collection.

    Month-over-month growth compares the 30 days ending at the latest
    claim date with the 30 days before that.

    Args:
        claims: Claim collection (typically already filtered)

    Returns:
        KPI snapshot
    """
    total_claims = len(claims)
    total_cost = sum(claim.cost or 0 for claim in claims)
    high_count = sum(1 for claim in claims if claim.severity == Severity.HIGH.value)

    top_defect = "N/A"
    max_count = 0
    for word, count in count_keywords(claims).items():
        if count > max_count:
            max_count = count
            top_defect = word

    mom_growth = 0.0
    dates = [d for d in (parse_iso_date(claim.date) for claim in claims) if d]
    if dates:
        latest = max(dates)
        current_start = latest - timedelta(days=MOM_WINDOW_DAYS - 1)
        previous_start = current_start - timedelta(days=MOM_WINDOW_DAYS)
        current = sum(1 for d in dates if current_start <= d <= latest)
        previous = sum(1 for d in dates if previous_start <= d < current_start)
        if previous > 0:
            mom_growth = (current - previous) / previous * 100
        elif current > 0:
            mom_growth = 100.0

    return KPI(
        total_claims=total_claims,
        total_cost=total_cost,
        avg_cost_per_claim=total_cost / total_claims if total_claims else 0.0,
        high_severity_count=high_count,
        high_severity_ratio=high_count / total_claims * 100 if total_claims else 0.0,
        mom_growth=mom_growth,
        top_defect=top_defect,
    )


def build_breakdown(source: dict[str, CountCost]) -> list[Breakdown]:
    """Turn label totals into Pareto rows sorted by cost (descending)."""
    rows = [Breakdown(label=label, count=value.count, cost=value.cost) for label, value in source.items()]
    return sorted(rows, key=lambda row: row.cost, reverse=True)


def summarize_months(claims: Sequence[CleanedClaim]) -> dict[str, MonthSummary]:
    """Group claims with a valid ISO date into month buckets (sorted by key)."""
    months: dict[str, MonthSummary] = defaultdict(MonthSummary)
    for claim in claims:
        if parse_iso_date(claim.date) is None:
            continue
        bucket = months[month_key(claim.date)]
        bucket.count += 1
        bucket.cost += claim.cost or 0
        bucket.phenomenon[claim.phenomenon or UNCLASSIFIED].add(claim.cost)
    return {key: months[key] for key in sorted(months)}


def calculate_trend_insight(months: dict[str, MonthSummary]) -> TrendInsight | None:
    """Compare the last three observed months with the three before them."""
    keys = list(months)
    if not keys:
        return None

    recent_keys = keys[-TREND_WINDOW_MONTHS:]
    previous_keys = keys[-2 * TREND_WINDOW_MONTHS : -TREND_WINDOW_MONTHS]
    recent_count = sum(months[key].count for key in recent_keys)
    previous_count = sum(months[key].count for key in previous_keys)

    if previous_count > 0:
        growth = (recent_count - previous_count) / previous_count * 100
    else:
        growth = 100.0 if recent_count > 0 else 0.0

    return TrendInsight(
        recent_label=f"{recent_keys[0]} → {recent_keys[-1]}",
        compare_label=f"{previous_keys[0]} → {previous_keys[-1]}" if previous_keys else None,
        recent_count=recent_count,
        previous_count=previous_count,
        growth_percent=growth,
    )


def detect_cost_spike(months: dict[str, MonthSummary]) -> CostSpikeAlert | None:
    """Find the phenomenon whose cost rose the most between the last two months."""
    keys = list(months)
    if len(keys) < 2:
        return None

    current = months[keys[-1]].phenomenon
    previous = months[keys[-2]].phenomenon
    labels = list(dict.fromkeys([*current, *previous]))

    spike: CostSpikeAlert | None = None
    for label in labels:
        current_cost = current[label].cost if label in current else 0.0
        previous_cost = previous[label].cost if label in previous else 0.0
        delta = current_cost - previous_cost
        if delta <= 0:
            continue
        if spike is None or delta > spike.delta_cost:
            spike = CostSpikeAlert(
                phenomenon=label,
                delta_cost=delta,
                current_cost=current_cost,
                previous_cost=previous_cost,
            )
    return spike


def build_forecast(months: dict[str, MonthSummary]) -> list[ForecastPoint]:
    """Actual monthly counts followed by a flat three-month projection."""
    points = [ForecastPoint(period=key, actual=summary.count) for key, summary in months.items()]
    if not months:
        return points

    keys = list(months)
    recent = keys[-TREND_WINDOW_MONTHS:]
    average = sum(months[key].count for key in recent) / len(recent)
    projected = round_half_up(average)
    for step in range(1, FORECAST_HORIZON_MONTHS + 1):
        points.append(ForecastPoint(period=add_months(keys[-1], step), forecast=projected))
    return points


def aggregate_data(
    claims: Sequence[CleanedClaim],
    weights: ImportanceWeights = DEFAULT_WEIGHTS,
) -> AggregatedData:
    """
    Build every chart-ready aggregate for a claim collection.

    Args:
        claims: Claim collection (typically already filtered)
        weights: Importance weights for the important-claims ranking

    Returns:
        AggregatedData with trends, breakdowns, alerts and forecast
    """
    daily = Counter(claim.date for claim in claims)
    models = Counter(claim.model for claim in claims)

    phenomena: dict[str, CountCost] = defaultdict(CountCost)
    causes: dict[str, CountCost] = defaultdict(CountCost)
    contaminations: dict[str, CountCost] = defaultdict(CountCost)
    severities = {level.value: 0 for level in Severity}

    for claim in claims:
        phenomena[claim.phenomenon or UNCLASSIFIED].add(claim.cost)
        causes[claim.cause or UNKNOWN].add(claim.cost)
        contaminations[claim.contamination or UNKNOWN].add(claim.cost)
        if claim.severity:
            severities[claim.severity] = severities.get(claim.severity, 0) + 1

    months = summarize_months(claims)

    return AggregatedData(
        daily_trend=[DailyPoint(date=day, count=count) for day, count in sorted(daily.items())],
        model_pareto=[ModelCount(name=name, count=count) for name, count in models.most_common()],
        defect_keywords=[
            KeywordCount(keyword=word, count=count)
            for word, count in count_keywords(claims).most_common(TOP_KEYWORDS)
        ],
        phenomenon_summary=build_breakdown(phenomena),
        cause_summary=build_breakdown(causes),
        contamination_summary=build_breakdown(contaminations),
        severity_summary=[
            SeverityCount(severity=level, count=count) for level, count in severities.items()
        ],
        monthly_trend=[
            MonthlyPoint(period=key, claims=summary.count, cost=summary.cost)
            for key, summary in months.items()
        ],
        trend_insight=calculate_trend_insight(months),
        cost_spike=detect_cost_spike(months),
        important_claims=select_important_claims(claims, weights=weights),
        forecast_trend=build_forecast(months),
    )
