"""
Improvement action tracking.
Measures claim count and cost before and after a remediation start date.
"""

import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from pydantic import TypeAdapter, ValidationError

from ..core.models import UNCLASSIFIED, CleanedClaim, ImprovementAction, ImprovementMetrics
from ..core.storage import KeyValueStorage
from .importance import parse_iso_date

logger = logging.getLogger(__name__)

IMPROVEMENT_STORAGE_KEY = "autoseat_improvements"
DEFAULT_EVALUATION_WINDOW_DAYS = 30

_ACTION_LIST = TypeAdapter(list[ImprovementAction])


def shift_date(iso_date: str, days: int) -> str:
    """Shift an ISO date by whole days; invalid dates are returned unchanged."""
    parsed = parse_iso_date(iso_date)
    if parsed is None:
        return iso_date
    return (parsed + timedelta(days=days)).isoformat()


def evaluation_window(action: ImprovementAction) -> int:
    window = action.evaluation_window_days
    return window if window and window > 0 else DEFAULT_EVALUATION_WINDOW_DAYS


def measure_action(
    claims: Sequence[CleanedClaim], action: ImprovementAction
) -> ImprovementMetrics:
    """
    Compare a phenomenon's claims before and after an action started.

    The before window is ``[start - w, start)`` and the after window is
    ``[start, start + w]``, where ``w`` is the evaluation window in days.
    """
    window = evaluation_window(action)
    start = action.start_date
    before_start = shift_date(start, -window)
    after_end = shift_date(start, window)
    target = action.phenomenon or UNCLASSIFIED

    relevant = [claim for claim in claims if (claim.phenomenon or UNCLASSIFIED) == target]
    before = [claim for claim in relevant if before_start <= claim.date < start]
    after = [claim for claim in relevant if start <= claim.date <= after_end]

    before_cost = sum(claim.cost or 0 for claim in before)
    after_cost = sum(claim.cost or 0 for claim in after)

    return ImprovementMetrics(
        action_id=action.id,
        before_count=len(before),
        after_count=len(after),
        before_cost=before_cost,
        after_cost=after_cost,
        delta_count=len(after) - len(before),
        delta_cost=after_cost - before_cost,
    )


def calculate_improvement_metrics(
    claims: Sequence[CleanedClaim], actions: Iterable[ImprovementAction]
) -> dict[str, ImprovementMetrics]:
    """
    Measure every improvement action against a claim collection.

    Args:
        claims: Claim collection
        actions: Actions to evaluate (those without a start date are skipped)

    Returns:
        Metrics keyed by action id
    """
    return {
        action.id: measure_action(claims, action)
        for action in actions
        if action.start_date
    }


class ImprovementActionStore:
    """Persisted list of improvement actions."""

    def __init__(
        self, storage: KeyValueStorage, storage_key: str = IMPROVEMENT_STORAGE_KEY
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key

    def load(self) -> list[ImprovementAction]:
        raw = self.storage.get(self.storage_key)
        if not raw:
            return []
        try:
            return _ACTION_LIST.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring stored improvement actions: %d errors", exc.error_count())
            return []

    def _save(self, actions: list[ImprovementAction]) -> None:
        payload = _ACTION_LIST.dump_json(actions, by_alias=True, exclude_none=True)
        self.storage.set(self.storage_key, payload.decode("utf-8"))

    def add(
        self,
        name: str,
        phenomenon: str,
        start_date: str | date,
        target_reduction: float | None = None,
        notes: str | None = None,
        evaluation_window_days: int | None = None,
    ) -> ImprovementAction:
        """Create an action with a generated id and persist it."""
        action = ImprovementAction(
            id=f"imp-{uuid.uuid4().hex[:12]}",
            name=name,
            phenomenon=phenomenon,
            start_date=start_date.isoformat() if isinstance(start_date, date) else start_date,
            target_reduction=target_reduction,
            notes=notes,
            evaluation_window_days=evaluation_window_days,
        )
        actions = self.load()
        actions.append(action)
        self._save(actions)
        logger.info("Added improvement action id=%s phenomenon=%s", action.id, phenomenon)
        return action

    def remove(self, action_id: str) -> bool:
        """Delete an action; False when the id is unknown."""
        actions = self.load()
        remaining = [action for action in actions if action.id != action_id]
        if len(remaining) == len(actions):
            return False
        self._save(remaining)
        return True
