"""
Warranty Analytics Engine - Main Orchestrator.
Coordinates ingestion, classification, analytics and synchronisation.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from .analytics.aggregation import aggregate_data, calculate_kpis
from .analytics.filters import FilterStore, apply_filters
from .analytics.improvement import ImprovementActionStore, calculate_improvement_metrics
from .authoring.editor import RuleSetEditor
from .authoring.preview import RulePreview, preview_rule_set
from .config import Settings, get_settings
from .core.models import (
    AnalysisReport,
    CleanedClaim,
    CleanResult,
    CleanStats,
    FilterState,
    ImprovementAction,
    ImprovementMetrics,
)
from .core.rule_engine import RuleEngine
from .core.rule_store import RuleSetStore
from .core.rules import ClassificationRuleSet
from .core.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .ingestion.cleaner import clean_data
from .ingestion.csv_reader import parse_csv
from .reporting.summary import AnalysisReportFormatter
from .sync.enrichment import enrich_claims
from .sync.http import ApiClient, HttpClaimsApi, HttpClassificationProvider
from .sync.ports import ClaimsApi, ClassificationProvider
from .sync.service import ClaimSyncService

logger = logging.getLogger(__name__)


class WarrantyAnalyticsEngine:
    """
    Main orchestrator for warranty claim analytics.

    Holds the loaded claim collection and the active rule set, and
    exposes the load, classify, analyze and sync workflow.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        settings: Settings | None = None,
        persist_state: bool = False,
    ) -> None:
        """
        Initialize the engine.

        Args:
            storage: Key-value store for rules, filters and improvement actions
            settings: Runtime settings (defaults to environment settings)
            persist_state: Use a JSON file store under ``settings.state_dir``
                when no storage is given; otherwise state stays in memory
        """
        self.settings = settings or get_settings()
        if storage is None:
            storage = JsonFileStorage(self.settings.state_dir) if persist_state else InMemoryStorage()
        self.storage = storage

        self.claims: list[CleanedClaim] = []
        self.stats: CleanStats | None = None

        # Initialize collaborators lazily
        self._rule_store: RuleSetStore | None = None
        self._rule_engine: RuleEngine | None = None
        self._filter_store: FilterStore | None = None
        self._improvement_store: ImprovementActionStore | None = None
        self._api_client: ApiClient | None = None
        self._sync_service: ClaimSyncService | None = None

    @property
    def rule_store(self) -> RuleSetStore:
        """Get or create the rule-set store."""
        if self._rule_store is None:
            self._rule_store = RuleSetStore(storage=self.storage)
        return self._rule_store

    @property
    def rule_engine(self) -> RuleEngine:
        """Get or create the rule engine."""
        if self._rule_engine is None:
            self._rule_engine = RuleEngine(self.rule_store)
        return self._rule_engine

    @property
    def filter_store(self) -> FilterStore:
        """Get or create the filter store."""
        if self._filter_store is None:
            self._filter_store = FilterStore(self.storage)
        return self._filter_store

    @property
    def improvement_store(self) -> ImprovementActionStore:
        """Get or create the improvement action store."""
        if self._improvement_store is None:
            self._improvement_store = ImprovementActionStore(self.storage)
        return self._improvement_store

    @property
    def api_client(self) -> ApiClient:
        """Get or create the HTTP client."""
        if self._api_client is None:
            self._api_client = ApiClient(self.settings)
        return self._api_client

    def sync_service(self, api: ClaimsApi | None = None) -> ClaimSyncService:
        """Get or create the sync service seeded with the loaded claims."""
        if self._sync_service is None or api is not None:
            self._sync_service = ClaimSyncService(api or HttpClaimsApi(self.api_client), self.claims)
        return self._sync_service

    def load_csv(self, csv_text: str) -> CleanResult:
        """
        Parse, clean and classify a CSV export, replacing the loaded claims.

        Args:
            csv_text: Raw CSV document

        Returns:
            CleanResult with the claims and row statistics
        """
        result = clean_data(parse_csv(csv_text), self.rule_store.get())
        self.claims = list(result.claims)
        self.stats = result.stats
        return result

    def load_file(self, path: str | Path) -> CleanResult:
        """Load a CSV file (UTF-8, BOM tolerated)."""
        return self.load_csv(Path(path).read_text(encoding="utf-8-sig"))

    def editor(self) -> RuleSetEditor:
        """Start a draft from the active rule set."""
        return RuleSetEditor(self.rule_store.get())

    def preview(self, candidate: ClassificationRuleSet) -> RulePreview:
        """Preview a candidate rule set against the loaded claims."""
        return preview_rule_set(self.claims, candidate)

    def apply_rule_set(self, rule_set: ClassificationRuleSet, persist: bool = True) -> list[CleanedClaim]:
        """
        Activate a rule set and re-classify the loaded claims with it.

        Args:
            rule_set: New rule set
            persist: Write the rule set to storage

        Returns:
            The re-classified claims
        """
        self.rule_store.set(rule_set, persist=persist)
        self.claims = self.rule_engine.apply_to_claims(self.claims)
        return self.claims

    def import_rules(self, content: str | bytes) -> list[CleanedClaim]:
        """Validate and apply a rule-set JSON document."""
        self.rule_store.import_json(content)
        self.claims = self.rule_engine.apply_to_claims(self.claims)
        return self.claims

    def filtered_claims(self, filters: FilterState | None = None) -> list[CleanedClaim]:
        """Apply explicit filters, or the persisted selection."""
        return apply_filters(self.claims, filters or self.filter_store.load())

    def analyze(self, filters: FilterState | None = None) -> AnalysisReport:
        """
        Compute KPIs and aggregates for the (filtered) claim collection.

        Args:
            filters: Filter selection (None uses the persisted selection)

        Returns:
            AnalysisReport snapshot
        """
        filters = filters or self.filter_store.load()
        claims = apply_filters(self.claims, filters)
        return AnalysisReport(
            rules_version=self.rule_store.version,
            filters=filters,
            stats=self.stats,
            kpi=calculate_kpis(claims),
            aggregated=aggregate_data(claims),
        )

    def analyze_with_formatter(self, filters: FilterState | None = None) -> AnalysisReportFormatter:
        """Analyze and return a formatter for output."""
        return AnalysisReportFormatter(self.analyze(filters))

    def improvement_metrics(
        self, actions: Sequence[ImprovementAction] | None = None
    ) -> dict[str, ImprovementMetrics]:
        """Measure improvement actions (stored ones by default) on all loaded claims."""
        if actions is None:
            actions = self.improvement_store.load()
        return calculate_improvement_metrics(self.claims, actions)

    def enrich(self, provider: ClassificationProvider | None = None) -> list[CleanedClaim]:
        """Refine weakly classified claims with the AI provider."""
        provider = provider or HttpClassificationProvider(self.api_client)
        self.claims = enrich_claims(self.claims, provider)
        return self.claims

    def sync(self, reason: str = "poll", api: ClaimsApi | None = None) -> list[CleanedClaim]:
        """Pull claims from the server into the engine."""
        service = self.sync_service(api)
        service.claims = list(self.claims)
        self.claims = service.sync_from_server(reason)
        return self.claims


# Convenience function for quick analyses
def analyze_csv(csv_text: str, filters: FilterState | None = None) -> AnalysisReport:
    """
    Convenience function: load a CSV export and analyze it with the default rules.

    Args:
        csv_text: Raw CSV document
        filters: Optional filter selection

    Returns:
        AnalysisReport snapshot
    """
    engine = WarrantyAnalyticsEngine()
    engine.load_csv(csv_text)
    return engine.analyze(filters or FilterState())
