"""
Tests for KPI calculation and chart aggregates.
"""

import pytest

from warranty_engine.analytics.aggregation import (
    add_months,
    aggregate_data,
    build_forecast,
    calculate_kpis,
    calculate_trend_insight,
    description_keywords,
    detect_cost_spike,
    round_half_up,
    summarize_months,
)


class TestHelpers:
    """Tests for month arithmetic, rounding and keyword extraction."""

    @pytest.mark.parametrize(
        "key, delta, expected",
        [("2024-11", 3, "2025-02"), ("2024-01", -1, "2023-12"), ("2024-06", 0, "2024-06")],
    )
    def test_add_months(self, key: str, delta: int, expected: str) -> None:
        """Test month keys roll over year boundaries."""
        assert add_months(key, delta) == expected

    @pytest.mark.parametrize("value, expected", [(2.5, 3), (0.5, 1), (1.49, 1), (2.0, 2)])
    def test_round_half_up(self, value: float, expected: int) -> None:
        """Test halves always round up."""
        assert round_half_up(value) == expected

    def test_description_keywords(self) -> None:
        """Test short and ignored words are dropped."""
        assert description_keywords("The seat is NOT working when cold") == ["seat", "cold"]
        assert description_keywords(None) == []


class TestCalculateKpis:
    """Tests for calculate_kpis."""

    def test_empty(self) -> None:
        """Test an empty collection yields zeroed KPIs."""
        kpi = calculate_kpis([])
        assert kpi.total_claims == 0
        assert kpi.avg_cost_per_claim == 0
        assert kpi.high_severity_ratio == 0
        assert kpi.mom_growth == 0
        assert kpi.top_defect == "N/A"

    def test_totals_and_growth(self, make_claim) -> None:
        """Test totals, severity ratio and 30-day growth."""
        dates = ["2024-03-31", "2024-03-15", "2024-03-02", "2024-03-01", "2024-02-01", "2024-01-31"]
        claims = [
            make_claim(f"C{i}", day, severity="High" if i < 2 else "Low", cost=100)
            for i, day in enumerate(dates)
        ]
        kpi = calculate_kpis(claims)

        assert kpi.total_claims == 6
        assert kpi.total_cost == 600
        assert kpi.avg_cost_per_claim == 100
        assert kpi.high_severity_count == 2
        assert kpi.high_severity_ratio == pytest.approx(33.333, rel=1e-3)
        assert kpi.mom_growth == pytest.approx(50.0)

    def test_growth_without_previous_window(self, make_claim) -> None:
        """Test growth is 100 when only the current window has claims."""
        assert calculate_kpis([make_claim("C1", "2024-03-31")]).mom_growth == 100.0

    def test_top_defect_tie_keeps_first(self, make_claim) -> None:
        """Test the first keyword to reach the top count wins."""
        claims = [
            make_claim("C1", "2024-01-01", description="motor noise"),
            make_claim("C2", "2024-01-02", description="motor stuck"),
            make_claim("C3", "2024-01-03", description="noise"),
        ]
        assert calculate_kpis(claims).top_defect == "motor"


class TestMonthlyAggregates:
    """Tests for month buckets, trend insight, cost spikes and forecast."""

    def test_trend_insight_windows(self, make_claim) -> None:
        """Test the last three months are compared with the three before."""
        counts = {"2024-01": 1, "2024-02": 1, "2024-03": 2, "2024-04": 1, "2024-05": 2, "2024-06": 3}
        claims = [
            make_claim(f"{month}-{n}", f"{month}-1{n}")
            for month, count in counts.items()
            for n in range(count)
        ]
        insight = calculate_trend_insight(summarize_months(claims))

        assert insight.recent_label == "2024-04 → 2024-06"
        assert insight.compare_label == "2024-01 → 2024-03"
        assert insight.recent_count == 6
        assert insight.previous_count == 4
        assert insight.growth_percent == pytest.approx(50.0)

    def test_trend_insight_short_history(self, make_claim) -> None:
        """Test fewer than four months have no comparison window."""
        claims = [make_claim("C1", "2024-05-01"), make_claim("C2", "2024-06-01")]
        insight = calculate_trend_insight(summarize_months(claims))

        assert insight.compare_label is None
        assert insight.previous_count == 0
        assert insight.growth_percent == 100.0

    def test_no_months(self) -> None:
        """Test empty input has no insight, spike or forecast."""
        assert calculate_trend_insight({}) is None
        assert detect_cost_spike({}) is None
        assert build_forecast({}) == []

    def test_invalid_dates_skip_monthly_buckets(self, make_claim) -> None:
        """Test claims without an ISO date stay out of month buckets."""
        months = summarize_months([make_claim("C1", "2024-05-01"), make_claim("C2", "sometime")])
        assert list(months) == ["2024-05"]
        assert months["2024-05"].count == 1

    def test_cost_spike(self, make_claim) -> None:
        """Test the largest positive cost delta between the last two months wins."""
        claims = [
            make_claim("C1", "2024-05-02", phenomenon="A", cost=100),
            make_claim("C2", "2024-05-03", phenomenon="B", cost=50),
            make_claim("C3", "2024-06-02", phenomenon="A", cost=120),
            make_claim("C4", "2024-06-03", phenomenon="B", cost=200),
            make_claim("C5", "2024-06-04", phenomenon="C", cost=10),
        ]
        spike = detect_cost_spike(summarize_months(claims))

        assert spike.phenomenon == "B"
        assert spike.delta_cost == 150
        assert spike.current_cost == 200
        assert spike.previous_cost == 50

    def test_no_spike_when_costs_fall(self, make_claim) -> None:
        """Test no alert is raised without a cost increase."""
        claims = [
            make_claim("C1", "2024-05-02", phenomenon="A", cost=100),
            make_claim("C2", "2024-06-02", phenomenon="A", cost=100),
        ]
        assert detect_cost_spike(summarize_months(claims)) is None
        assert detect_cost_spike(summarize_months(claims[:1])) is None

    def test_forecast_rounds_half_up(self, make_claim) -> None:
        """Test the projection is the rounded average of the last three months."""
        claims = [
            make_claim("C1", "2024-05-01"),
            make_claim("C2", "2024-05-02"),
            make_claim("C3", "2024-06-01"),
            make_claim("C4", "2024-06-02"),
            make_claim("C5", "2024-06-03"),
        ]
        points = build_forecast(summarize_months(claims))

        assert [(p.period, p.actual, p.forecast) for p in points] == [
            ("2024-05", 2, None),
            ("2024-06", 3, None),
            ("2024-07", None, 3),
            ("2024-08", None, 3),
            ("2024-09", None, 3),
        ]


class TestAggregateData:
    """Tests for aggregate_data."""

    def test_breakdowns_and_summaries(self, make_claim) -> None:
        """Test Pareto rows, severity summary and daily trend."""
        claims = [
            make_claim("C1", "2024-06-02", phenomenon="A", severity="High", cost=50, model="K5"),
            make_claim("C2", "2024-06-01", phenomenon="B", severity="Low", cost=300, model="K5"),
            make_claim("C3", "2024-06-01", phenomenon=None, severity=None, cost=10, model="EV6"),
        ]
        data = aggregate_data(claims)

        assert [(row.label, row.count, row.cost) for row in data.phenomenon_summary] == [
            ("B", 1, 300),
            ("A", 1, 50),
            ("Unclassified", 1, 10),
        ]
        assert [(row.label, row.count) for row in data.cause_summary] == [("Unknown", 3)]
        assert [(row.severity, row.count) for row in data.severity_summary] == [
            ("High", 1),
            ("Medium", 0),
            ("Low", 1),
        ]
        assert [(p.date, p.count) for p in data.daily_trend] == [("2024-06-01", 2), ("2024-06-02", 1)]
        assert [(m.name, m.count) for m in data.model_pareto] == [("K5", 2), ("EV6", 1)]
        assert [(m.period, m.claims, m.cost) for m in data.monthly_trend] == [("2024-06", 3, 360)]

    def test_keywords_limited_to_top_ten(self, make_claim) -> None:
        """Test the keyword chart holds at most ten entries."""
        words = " ".join(f"word{i:02d}" for i in range(15))
        data = aggregate_data([make_claim("C1", "2024-06-01", description=words)])
        assert len(data.defect_keywords) == 10

    def test_non_iso_dates_stay_in_daily_trend(self, make_claim) -> None:
        """Test daily trend keeps every claim while monthly trend skips invalid dates."""
        data = aggregate_data([make_claim("C1", "2024-06-01"), make_claim("C2", "sometime")])
        assert [p.date for p in data.daily_trend] == ["2024-06-01", "sometime"]
        assert [m.period for m in data.monthly_trend] == ["2024-06"]

    def test_empty(self) -> None:
        """Test empty input yields empty aggregates."""
        data = aggregate_data([])
        assert data.daily_trend == []
        assert data.important_claims == []
        assert data.trend_insight is None
        assert [row.count for row in data.severity_summary] == [0, 0, 0]


class TestFourMonthScenario:
    """Eight claims across four phenomena from May to August."""

    @pytest.fixture
    def claims(self, make_claim) -> list:
        return [
            make_claim("C1", "2024-05-10", phenomenon="A", severity="High", cost=500),
            make_claim("C2", "2024-05-20", phenomenon="B", severity="Low", cost=50),
            make_claim("C3", "2024-06-05", phenomenon="C", severity="Medium", cost=200),
            make_claim("C4", "2024-06-25", phenomenon="A", severity="Low", cost=100),
            make_claim("C5", "2024-07-08", phenomenon="D", severity="High", cost=1500),
            make_claim("C6", "2024-07-15", phenomenon="B", severity="Medium", cost=300),
            make_claim("C7", "2024-08-01", phenomenon="C", severity="Low", cost=40),
            make_claim("C8", "2024-08-20", phenomenon="D", severity="High", cost=900),
        ]

    def test_trend_insight(self, claims) -> None:
        """Test June-August against May."""
        insight = aggregate_data(claims).trend_insight

        assert insight.recent_label == "2024-06 → 2024-08"
        assert insight.compare_label == "2024-05 → 2024-05"
        assert (insight.recent_count, insight.previous_count) == (6, 2)
        assert insight.growth_percent == pytest.approx(200.0)

    def test_cost_spike(self, claims) -> None:
        """Test only C rose in cost from July to August."""
        spike = aggregate_data(claims).cost_spike
        assert (spike.phenomenon, spike.delta_cost, spike.previous_cost) == ("C", 40, 0)

    def test_forecast(self, claims) -> None:
        """Test four actual months and three projected ones."""
        points = aggregate_data(claims).forecast_trend

        assert len(points) == 7
        assert [p.forecast for p in points[4:]] == [2, 2, 2]
        assert [p.period for p in points[4:]] == ["2024-09", "2024-10", "2024-11"]

    def test_important_claims(self, claims) -> None:
        """Test ranking order, scores and the cost tie-break."""
        ranked = aggregate_data(claims).important_claims

        assert [claim.id for claim in ranked] == ["C8", "C5", "C3", "C1", "C6"]
        assert [claim.score for claim in ranked] == [17.0, 15.0, 9.0, 8.5, 8.5]
