"""
Warranty Claim Analytics Engine.

Cleans warranty-claim exports, classifies each claim against a versioned
keyword taxonomy and turns the results into KPIs, trends and forecasts.
"""

from .core.models import (
    KPI,
    AggregatedData,
    AnalysisReport,
    CleanedClaim,
    CleanResult,
    FilterState,
    ImprovementAction,
    ImprovementMetrics,
)
from .core.rule_engine import RuleEngine, classify_claim
from .core.rule_store import RuleSetStore, RuleSetValidationError
from .core.rules import ClassificationRuleSet, Severity
from .engine import WarrantyAnalyticsEngine, analyze_csv
from .reporting.summary import AnalysisReportFormatter

__version__ = "0.1.0"

__all__ = [
    # Main Engine
    "WarrantyAnalyticsEngine",
    "analyze_csv",
    # Models
    "AggregatedData",
    "AnalysisReport",
    "CleanResult",
    "CleanedClaim",
    "FilterState",
    "ImprovementAction",
    "ImprovementMetrics",
    "KPI",
    # Rules
    "ClassificationRuleSet",
    "RuleEngine",
    "RuleSetStore",
    "RuleSetValidationError",
    "Severity",
    "classify_claim",
    # Reporting
    "AnalysisReportFormatter",
]
