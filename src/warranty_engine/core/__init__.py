"""
Core components for the Warranty Claim Analytics Engine.
"""

from .columns import DEFAULT_COLUMN_CANDIDATES, ColumnMapper, find_column, normalize_header
from .cost import CostParseResult, parse_cost_value
from .models import (
    KPI,
    AggregatedData,
    AnalysisReport,
    Breakdown,
    CleanedClaim,
    CleanResult,
    CleanStats,
    ClassificationResult,
    FilterState,
    ImportantClaim,
    ImprovementAction,
    ImprovementMetrics,
    ServerSyncStatus,
)
from .rule_engine import RuleEngine, apply_rules_to_claims, classify_claim
from .rule_store import (
    RuleSetStore,
    RuleSetValidationError,
    load_default_rule_set,
    parse_rule_set_from_json,
    serialize_rule_set,
)
from .rules import (
    ClassificationRule,
    ClassificationRuleSet,
    FlagRule,
    RuleCategory,
    Severity,
    SeverityRule,
)
from .storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .text import normalize_for_match, sanitize_text

__all__ = [
    # Text / parsing
    "ColumnMapper",
    "CostParseResult",
    "DEFAULT_COLUMN_CANDIDATES",
    "find_column",
    "normalize_for_match",
    "normalize_header",
    "parse_cost_value",
    "sanitize_text",
    # Models
    "AggregatedData",
    "AnalysisReport",
    "Breakdown",
    "CleanResult",
    "CleanStats",
    "CleanedClaim",
    "ClassificationResult",
    "FilterState",
    "ImportantClaim",
    "ImprovementAction",
    "ImprovementMetrics",
    "KPI",
    "ServerSyncStatus",
    # Rules
    "ClassificationRule",
    "ClassificationRuleSet",
    "FlagRule",
    "RuleCategory",
    "Severity",
    "SeverityRule",
    # Rule Engine / Store
    "RuleEngine",
    "RuleSetStore",
    "RuleSetValidationError",
    "apply_rules_to_claims",
    "classify_claim",
    "load_default_rule_set",
    "parse_rule_set_from_json",
    "serialize_rule_set",
    # Storage
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
]
