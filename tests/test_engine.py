"""
Tests for the WarrantyAnalyticsEngine orchestrator.
"""

import json

import pytest

from warranty_engine.config import Settings
from warranty_engine.core.models import FilterState
from warranty_engine.core.rule_store import RULE_STORAGE_KEY, RuleSetValidationError
from warranty_engine.core.storage import InMemoryStorage
from warranty_engine.engine import WarrantyAnalyticsEngine, analyze_csv
from warranty_engine.ingestion.csv_reader import sample_csv_text
from warranty_engine.sync.ports import AIClassificationResult, ServerClaimsResponse

CSV_TEXT = """Claim ID,Date,Model,Issue,Part,Cost
A1,2024-05-01,K5,Seat heater not working,Heater,150
A2,2024-05-20,K5,Seat heater smells burnt,Heater,1200
A3,2024-06-02,EV6,Cup holder broken,Console,30
A4,,EV6,Squeak from track,Track,0
"""


@pytest.fixture
def engine() -> WarrantyAnalyticsEngine:
    """Engine with in-memory state and default settings."""
    return WarrantyAnalyticsEngine(storage=InMemoryStorage(), settings=Settings())


class TestLoading:
    """Tests for CSV loading."""

    def test_load_csv(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test claims are cleaned, classified and counted."""
        result = engine.load_csv(CSV_TEXT)

        assert [claim.id for claim in engine.claims] == ["A1", "A2", "A3"]
        assert result.stats.dropped_rows == 1
        assert engine.stats == result.stats
        assert engine.claims[1].severity == "High"

    def test_load_file(self, engine: WarrantyAnalyticsEngine, tmp_path) -> None:
        """Test a BOM-prefixed file loads."""
        path = tmp_path / "claims.csv"
        path.write_text("\ufeff" + CSV_TEXT, encoding="utf-8")
        assert len(engine.load_file(path).claims) == 3


class TestAnalyze:
    """Tests for analysis."""

    def test_report(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test the report carries KPIs, aggregates and the rules version."""
        engine.load_csv(CSV_TEXT)
        report = engine.analyze()

        assert report.kpi.total_claims == 3
        assert report.kpi.total_cost == 1380
        assert report.rules_version == engine.rule_store.version
        assert report.stats.dropped_rows == 1
        assert [point.period for point in report.aggregated.monthly_trend] == ["2024-05", "2024-06"]

    def test_filters(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test explicit and persisted filters narrow the analysis."""
        engine.load_csv(CSV_TEXT)
        assert engine.analyze(FilterState(model="EV6")).kpi.total_claims == 1

        engine.filter_store.save(FilterState(model="K5"))
        assert engine.analyze().kpi.total_claims == 2
        assert [claim.id for claim in engine.filtered_claims()] == ["A1", "A2"]

    def test_formatter(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test the formatter wraps the report."""
        engine.load_csv(CSV_TEXT)
        assert "Total Claims: 3" in engine.analyze_with_formatter().to_text()

    def test_analyze_csv(self) -> None:
        """Test the one-shot helper on the sample export."""
        report = analyze_csv(sample_csv_text())
        assert report.kpi.total_claims == 20
        assert report.aggregated.model_pareto[0].name in {"Sentra", "Rogue"}


class TestRules:
    """Tests for rule management through the engine."""

    def test_apply_rule_set_reclassifies(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test activating a draft re-classifies loaded claims and persists it."""
        engine.load_csv(CSV_TEXT)
        editor = engine.editor()
        editor.add_rule("phenomena", label="Cup Holder", keywords="cup holder")
        candidate = editor.build(version="custom-2")

        preview = engine.preview(candidate)
        assert preview.candidate_unclassified == preview.baseline_unclassified - 1

        engine.apply_rule_set(candidate)
        assert engine.claims[2].phenomenon == "Cup Holder"
        assert json.loads(engine.storage.get(RULE_STORAGE_KEY))["version"] == "custom-2"

    def test_import_rules_failure_keeps_state(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test a rejected import leaves claims and rules alone."""
        engine.load_csv(CSV_TEXT)
        version = engine.rule_store.version
        before = list(engine.claims)

        with pytest.raises(RuleSetValidationError):
            engine.import_rules("{}")
        assert engine.rule_store.version == version
        assert engine.claims == before

    def test_persisted_rules_survive_restart(self, tmp_path) -> None:
        """Test file-backed state reloads the active rules."""
        settings = Settings(state_dir=tmp_path)
        first = WarrantyAnalyticsEngine(settings=settings, persist_state=True)
        first.apply_rule_set(first.editor().build(version="persisted-1"))

        second = WarrantyAnalyticsEngine(settings=settings, persist_state=True)
        assert second.rule_store.version == "persisted-1"


class TestImprovementAndRemote:
    """Tests for improvement metrics, enrichment and sync through the engine."""

    def test_improvement_metrics(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test stored actions are measured against loaded claims."""
        engine.load_csv(CSV_TEXT)
        action = engine.improvement_store.add("New pad", "Seat Heater / Thermal", "2024-05-15")

        metrics = engine.improvement_metrics()[action.id]
        assert (metrics.before_count, metrics.after_count) == (1, 1)

    def test_enrich(self, engine: WarrantyAnalyticsEngine) -> None:
        """Test provider results are applied to the loaded claims."""

        class Provider:
            def classify_batch(self, claims):
                return {"A3": AIClassificationResult(phenomenon="Console / Cup Holder")}

            def analyze(self, claims) -> str:
                return ""

        engine.load_csv(CSV_TEXT)
        engine.enrich(Provider())
        assert engine.claims[2].phenomenon == "Console / Cup Holder"

    def test_sync(self, engine: WarrantyAnalyticsEngine, make_claim) -> None:
        """Test a server sync replaces the loaded claims."""

        class Api:
            def fetch_claims(self, since=None):
                return ServerClaimsResponse(data=[make_claim("S1", "2024-06-01")], last_updated="t1")

            def upload_claims(self, claims):
                return None

        engine.load_csv(CSV_TEXT)
        claims = engine.sync("initial", api=Api())
        assert [claim.id for claim in claims] == ["S1"]
        assert engine.claims == claims
