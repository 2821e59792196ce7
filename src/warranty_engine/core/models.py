"""
Core data models for the warranty claim analytics engine.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .rules import Severity

UNKNOWN = "Unknown"
UNCLASSIFIED = "Unclassified"
ALL = "ALL"


class WireModel(BaseModel):
    """Base model whose JSON form uses camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON interchange shape (unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CleanedClaim(WireModel):
    """A single cleaned and classified warranty claim."""

    id: str
    source_id: str | None = None
    date: str
    model: str = UNKNOWN
    description: str = UNKNOWN
    part_name: str | None = None
    cost: float = 0.0
    cost_parse_failed: bool = False
    updated_at: str | None = None
    phenomenon: str | None = None
    cause: str | None = None
    contamination: str | None = None
    severity: Severity | None = None
    flags: list[str] | None = None

    @field_validator("cost", mode="before")
    @classmethod
    def default_missing_cost(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class ClassificationResult(WireModel):
    """Output of the rule engine for one claim."""

    phenomenon: str
    cause: str
    contamination: str
    severity: Severity
    flags: list[str] = Field(default_factory=list)


class CleanStats(WireModel):
    """Row-level statistics of a clean pass."""

    parsed_rows: int = 0
    dropped_rows: int = 0
    missing_date: int = 0
    missing_model: int = 0
    missing_description: int = 0


class CleanResult(WireModel):
    """Cleaned claims plus the statistics of the pass."""

    claims: list[CleanedClaim] = Field(default_factory=list)
    stats: CleanStats = Field(default_factory=CleanStats)


class KPI(WireModel):
    """Headline indicators for a claim collection."""

    total_claims: int = 0
    total_cost: float = 0.0
    avg_cost_per_claim: float = 0.0
    high_severity_count: int = 0
    high_severity_ratio: float = 0.0
    mom_growth: float = 0.0
    top_defect: str = "N/A"


class Breakdown(WireModel):
    """Count and cost for one label (Pareto row)."""

    label: str
    count: int = 0
    cost: float = 0.0


class DailyPoint(WireModel):
    date: str
    count: int


class ModelCount(WireModel):
    name: str
    count: int


class KeywordCount(WireModel):
    keyword: str
    count: int


class SeverityCount(WireModel):
    severity: Severity
    count: int


class MonthlyPoint(WireModel):
    period: str
    claims: int
    cost: float


class TrendInsight(WireModel):
    """Recent three months against the three months before."""

    recent_label: str | None = None
    compare_label: str | None = None
    recent_count: int = 0
    previous_count: int = 0
    growth_percent: float = 0.0


class CostSpikeAlert(WireModel):
    """Phenomenon with the largest month-over-month cost increase."""

    phenomenon: str
    delta_cost: float
    current_cost: float
    previous_cost: float


class ImportantClaim(WireModel):
    """Claim selected by the importance ranking, with its score."""

    id: str
    date: str
    model: str
    description: str
    phenomenon: str | None = None
    severity: Severity | None = None
    cost: float | None = None
    score: float = 0.0


class ForecastPoint(WireModel):
    period: str
    actual: int | None = None
    forecast: int | None = None


class AggregatedData(WireModel):
    """Every chart-ready aggregate for a claim collection."""

    model_config = ConfigDict(protected_namespaces=())

    daily_trend: list[DailyPoint] = Field(default_factory=list)
    model_pareto: list[ModelCount] = Field(default_factory=list)
    defect_keywords: list[KeywordCount] = Field(default_factory=list)
    phenomenon_summary: list[Breakdown] = Field(default_factory=list)
    cause_summary: list[Breakdown] = Field(default_factory=list)
    contamination_summary: list[Breakdown] = Field(default_factory=list)
    severity_summary: list[SeverityCount] = Field(default_factory=list)
    monthly_trend: list[MonthlyPoint] = Field(default_factory=list)
    trend_insight: TrendInsight | None = None
    cost_spike: CostSpikeAlert | None = None
    important_claims: list[ImportantClaim] = Field(default_factory=list)
    forecast_trend: list[ForecastPoint] = Field(default_factory=list)


class DateRangeFilter(WireModel):
    start: str | None = None
    end: str | None = None


class FilterState(WireModel):
    """Dashboard filter selection; "ALL" disables a dimension."""

    model: str = ALL
    phenomenon: str = ALL
    cause: str = ALL
    contamination: str = ALL
    severity: str = ALL
    flag: str = ALL
    date_range: DateRangeFilter = Field(default_factory=DateRangeFilter)


class ImprovementAction(WireModel):
    """A remediation action whose effect is measured around its start date."""

    id: str
    name: str
    phenomenon: str
    start_date: str
    target_reduction: float | None = None
    notes: str | None = None
    evaluation_window_days: int | None = None


class ImprovementMetrics(WireModel):
    """Claim count and cost before/after an improvement action."""

    action_id: str
    before_count: int = 0
    after_count: int = 0
    before_cost: float = 0.0
    after_cost: float = 0.0
    delta_count: int = 0
    delta_cost: float = 0.0


class ServerSyncStatus(WireModel):
    """State of the remote claim synchronisation."""

    status: str = "idle"
    last_synced_at: str | None = None
    last_uploaded_at: str | None = None
    server_version: str | None = None
    error: str | None = None


class AnalysisReport(WireModel):
    """Snapshot of one analysis run, ready for formatting."""

    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    rules_version: str
    filters: FilterState = Field(default_factory=FilterState)
    stats: CleanStats | None = None
    kpi: KPI
    aggregated: AggregatedData
