"""
Analytics over cleaned claims: KPIs, aggregates, ranking, filters and improvements.
"""

from .aggregation import KEYWORDS_IGNORE, add_months, aggregate_data, calculate_kpis
from .filters import DEFAULT_FILTERS, FilterStore, apply_filters, filter_options
from .importance import ImportanceWeights, select_important_claims
from .improvement import ImprovementActionStore, calculate_improvement_metrics

__all__ = [
    "DEFAULT_FILTERS",
    "FilterStore",
    "ImportanceWeights",
    "ImprovementActionStore",
    "KEYWORDS_IGNORE",
    "add_months",
    "aggregate_data",
    "apply_filters",
    "calculate_improvement_metrics",
    "calculate_kpis",
    "filter_options",
    "select_important_claims",
]
