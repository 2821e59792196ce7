"""
Rule authoring: draft editing and before/after preview.
"""

from .editor import RuleSetEditor, normalize_code, parse_list
from .preview import (
    DistributionDelta,
    RulePreview,
    build_distribution,
    count_unclassified,
    diff_distributions,
    is_unclassified,
    preview_rule_set,
)

__all__ = [
    "DistributionDelta",
    "RulePreview",
    "RuleSetEditor",
    "build_distribution",
    "count_unclassified",
    "diff_distributions",
    "is_unclassified",
    "normalize_code",
    "parse_list",
    "preview_rule_set",
]
