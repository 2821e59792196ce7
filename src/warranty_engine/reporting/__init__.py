"""
Reporting: CSV exports and analysis report formatting.
"""

from .csv_export import (
    TEMPLATE_CSV,
    build_claims_csv,
    build_summary_csv,
    build_unclassified_csv,
)
from .performance import ModelPerformance, append_performance_log, load_ground_truth, measure_accuracy
from .summary import AnalysisReportFormatter

__all__ = [
    "AnalysisReportFormatter",
    "ModelPerformance",
    "TEMPLATE_CSV",
    "append_performance_log",
    "build_claims_csv",
    "build_summary_csv",
    "build_unclassified_csv",
    "load_ground_truth",
    "measure_accuracy",
]
