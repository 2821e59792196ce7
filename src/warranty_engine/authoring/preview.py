"""
Before/after preview of a candidate rule set.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..core.models import UNCLASSIFIED, CleanedClaim
from ..core.rule_engine import apply_rules_to_claims
from ..core.rules import ClassificationRuleSet

FALLBACK_PHENOMENON_LABEL = "Other / Unclassified"
DISTRIBUTION_FIELDS = ("phenomenon", "cause", "contamination")


def is_unclassified(claim: CleanedClaim) -> bool:
    """True when the claim has no specific phenomenon."""
    return not claim.phenomenon or claim.phenomenon in (UNCLASSIFIED, FALLBACK_PHENOMENON_LABEL)


def count_unclassified(claims: Iterable[CleanedClaim]) -> int:
    return sum(1 for claim in claims if is_unclassified(claim))


def build_distribution(claims: Iterable[CleanedClaim], field_name: str) -> dict[str, int]:
    """Count claims per label; missing and fallback labels are pooled as "Unclassified"."""
    counts: Counter[str] = Counter()
    for claim in claims:
        label = getattr(claim, field_name)
        if not label or label == FALLBACK_PHENOMENON_LABEL:
            label = UNCLASSIFIED
        counts[label] += 1
    return dict(counts)


@dataclass
class DistributionDelta:
    label: str
    baseline: int
    candidate: int

    @property
    def delta(self) -> int:
        return self.candidate - self.baseline


def diff_distributions(baseline: dict[str, int], candidate: dict[str, int]) -> list[DistributionDelta]:
    """Per-label change between two distributions, largest absolute change first."""
    labels = list(dict.fromkeys([*baseline, *candidate]))
    rows = [DistributionDelta(label, baseline.get(label, 0), candidate.get(label, 0)) for label in labels]
    return sorted(rows, key=lambda row: abs(row.delta), reverse=True)


@dataclass
class RulePreview:
    """Outcome of re-classifying a claim collection with a candidate rule set."""

    claims: list[CleanedClaim]
    baseline: dict[str, dict[str, int]]
    candidate: dict[str, dict[str, int]]
    phenomenon_diff: list[DistributionDelta] = field(default_factory=list)
    baseline_unclassified: int = 0
    candidate_unclassified: int = 0


def preview_rule_set(
    claims: Sequence[CleanedClaim], candidate_rules: ClassificationRuleSet
) -> RulePreview:
    """
    Re-classify claims with a candidate rule set without activating it.

    Args:
        claims: Claims as currently classified (the baseline)
        candidate_rules: Draft rule set to evaluate

    Returns:
        RulePreview with both distributions, the re-classified claims and a phenomenon diff
    """
    previewed = apply_rules_to_claims(claims, candidate_rules)
    baseline = {name: build_distribution(claims, name) for name in DISTRIBUTION_FIELDS}
    candidate = {name: build_distribution(previewed, name) for name in DISTRIBUTION_FIELDS}
    return RulePreview(
        claims=previewed,
        baseline=baseline,
        candidate=candidate,
        phenomenon_diff=diff_distributions(baseline["phenomenon"], candidate["phenomenon"]),
        baseline_unclassified=count_unclassified(claims),
        candidate_unclassified=count_unclassified(previewed),
    )
