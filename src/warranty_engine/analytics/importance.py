"""
Importance ranking for claims.
Scores each claim by severity, cost, recency, phenomenon trend and flags.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from pydantic import BaseModel, Field

from ..core.models import UNCLASSIFIED, CleanedClaim, ImportantClaim
from ..core.rules import Severity

SAFETY_RISK_FLAG = "Safety Risk"
REPEAT_REPAIR_FLAG = "Repeat Repair"
TOP_IMPORTANT_CLAIMS = 5


class ImportanceWeights(BaseModel):
    """Tunable weights of the importance score."""

    severity: dict[str, float] = Field(
        default_factory=lambda: {
            Severity.HIGH.value: 6,
            Severity.MEDIUM.value: 3,
            Severity.LOW.value: 1,
        }
    )
    cost_normalizer: float = 200
    cost_max_bonus: float = 4
    hot_days: int = 30
    hot_bonus: float = 4
    recent_days: int = 90
    recent_bonus: float = 2
    medium_growth_threshold: float = 20
    medium_growth_bonus: float = 2
    high_growth_threshold: float = 50
    high_growth_bonus: float = 4
    new_issue_bonus: float = 3
    cost_spike_multiplier: float = 1.6
    cost_spike_bonus: float = 2
    emerging_cost_bonus: float = 1
    safety_flag_bonus: float = 5
    repeat_flag_bonus: float = 3


DEFAULT_WEIGHTS = ImportanceWeights()


def parse_iso_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (or a longer ISO timestamp); None when invalid."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


@dataclass
class PhenomenonWindowStats:
    """Claim count and cost of one phenomenon in the recent and previous windows."""

    recent_count: int = 0
    previous_count: int = 0
    recent_cost: float = 0.0
    previous_cost: float = 0.0

    @property
    def recent_avg_cost(self) -> float:
        return self.recent_cost / self.recent_count if self.recent_count else 0.0

    @property
    def previous_avg_cost(self) -> float:
        return self.previous_cost / self.previous_count if self.previous_count else 0.0


def _phenomenon(claim: CleanedClaim) -> str:
    return claim.phenomenon or UNCLASSIFIED


def collect_window_stats(
    claims: Sequence[CleanedClaim],
    anchor: date,
    weights: ImportanceWeights = DEFAULT_WEIGHTS,
) -> dict[str, PhenomenonWindowStats]:
    """
    Bucket claims per phenomenon into two consecutive windows ending at the anchor.

    The recent window covers ``recent_days`` up to the anchor; the previous
    window covers the same span immediately before it.
    """
    recent_start = anchor - timedelta(days=weights.recent_days)
    previous_start = recent_start - timedelta(days=weights.recent_days)
    stats: dict[str, PhenomenonWindowStats] = {}

    for claim in claims:
        entry = stats.setdefault(_phenomenon(claim), PhenomenonWindowStats())
        claim_date = parse_iso_date(claim.date)
        if claim_date is None:
            continue
        if claim_date >= recent_start:
            entry.recent_count += 1
            entry.recent_cost += claim.cost or 0
        elif claim_date >= previous_start:
            entry.previous_count += 1
            entry.previous_cost += claim.cost or 0
    return stats


def score_claim(
    claim: CleanedClaim,
    anchor: date | None,
    stats: PhenomenonWindowStats,
    weights: ImportanceWeights = DEFAULT_WEIGHTS,
) -> float:
    """Compute the importance score of one claim."""
    score = weights.severity.get(claim.severity or Severity.LOW.value, 0)
    score += min((claim.cost or 0) / weights.cost_normalizer, weights.cost_max_bonus)

    claim_date = parse_iso_date(claim.date)
    if anchor is not None and claim_date is not None:
        if claim_date >= anchor - timedelta(days=weights.hot_days):
            score += weights.hot_bonus
        elif claim_date >= anchor - timedelta(days=weights.recent_days):
            score += weights.recent_bonus

    # Trend bonus
    if stats.previous_count == 0 and stats.recent_count > 0:
        score += weights.new_issue_bonus
    elif stats.previous_count > 0:
        growth = (stats.recent_count - stats.previous_count) / stats.previous_count * 100
        if growth >= weights.high_growth_threshold:
            score += weights.high_growth_bonus
        elif growth >= weights.medium_growth_threshold:
            score += weights.medium_growth_bonus

    # Cost spike bonus
    previous_avg = stats.previous_avg_cost
    recent_avg = stats.recent_avg_cost
    if previous_avg > 0 and recent_avg >= previous_avg * weights.cost_spike_multiplier:
        score += weights.cost_spike_bonus
    elif previous_avg == 0 and recent_avg > 0 and stats.recent_count >= 3:
        score += weights.emerging_cost_bonus

    flags = claim.flags or []
    if SAFETY_RISK_FLAG in flags:
        score += weights.safety_flag_bonus
    if REPEAT_REPAIR_FLAG in flags:
        score += weights.repeat_flag_bonus

    return score


def select_important_claims(
    claims: Sequence[CleanedClaim],
    limit: int = TOP_IMPORTANT_CLAIMS,
    weights: ImportanceWeights = DEFAULT_WEIGHTS,
) -> list[ImportantClaim]:
    """
    Rank claims by importance and return the top entries.

    Windows are anchored at the latest valid claim date. Ties are broken
    by cost, then by date (both descending).

    Args:
        claims: Claim collection
        limit: Number of claims to return
        weights: Scoring weights

    Returns:
        The highest-scoring claims with their scores
    """
    if not claims:
        return []

    valid_dates = [d for d in (parse_iso_date(claim.date) for claim in claims) if d]
    anchor = max(valid_dates) if valid_dates else None
    window_stats = collect_window_stats(claims, anchor, weights) if anchor else {}

    scored = [
        (
            score_claim(
                claim,
                anchor,
                window_stats.get(_phenomenon(claim), PhenomenonWindowStats()),
                weights,
            ),
            claim,
        )
        for claim in claims
    ]
    scored.sort(key=lambda item: (item[0], item[1].cost or 0, item[1].date), reverse=True)

    return [
        ImportantClaim(
            id=claim.id,
            date=claim.date,
            model=claim.model,
            description=claim.description,
            phenomenon=claim.phenomenon,
            severity=claim.severity,
            cost=claim.cost,
            score=round(score, 2),
        )
        for score, claim in scored[:limit]
    ]
