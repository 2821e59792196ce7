"""
Model performance tracking.
Scores enriched phenomenon labels against a ground-truth file and appends
the result to a JSON-lines log.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..core.models import CleanedClaim, WireModel

logger = logging.getLogger(__name__)

DEFAULT_PERFORMANCE_LOG = Path("logs") / "model-performance.log"


class GroundTruthError(ValueError):
    """Raised when a ground-truth file is not a mapping of claim id to labels."""


class GroundTruthLabel(WireModel):
    """Expected labels for one claim."""

    phenomenon: str | None = None
    severity: str | None = None


class ModelPerformance(WireModel):
    """One accuracy measurement of the classification provider."""

    timestamp: str
    provider: str
    dataset: str
    evaluated: int
    matches: int
    accuracy: float


_GROUND_TRUTH = TypeAdapter(dict[str, GroundTruthLabel])


def load_ground_truth(path: str | Path) -> dict[str, GroundTruthLabel]:
    """
    Load expected labels keyed by claim id.

    A missing file yields an empty mapping so the run still logs a
    zero-accuracy entry.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Ground truth file not found at %s; skipping accuracy calculation", path)
        return {}
    try:
        return _GROUND_TRUTH.validate_json(path.read_bytes())
    except ValidationError as exc:
        raise GroundTruthError(f"Invalid ground truth file {path}: {exc.error_count()} error(s)") from exc


def measure_accuracy(
    claims: Sequence[CleanedClaim],
    truth: Mapping[str, GroundTruthLabel],
    provider: str,
    dataset: str,
) -> ModelPerformance:
    """
    Compare claim phenomena with the expected labels.

    Only claims whose id appears in ``truth`` are evaluated. Accuracy is
    ``matches / evaluated`` rounded to three decimals, or 0 when nothing
    was evaluated.
    """
    evaluated = [claim for claim in claims if claim.id in truth]
    matches = sum(1 for claim in evaluated if truth[claim.id].phenomenon == claim.phenomenon)
    accuracy = matches / len(evaluated) if evaluated else 0.0
    return ModelPerformance(
        timestamp=datetime.now(timezone.utc).isoformat(),
        provider=provider,
        dataset=dataset,
        evaluated=len(evaluated),
        matches=matches,
        accuracy=round(accuracy, 3),
    )


def append_performance_log(entry: ModelPerformance, log_path: str | Path = DEFAULT_PERFORMANCE_LOG) -> Path:
    """Append ``entry`` as one JSON line, creating the log directory if needed."""
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(entry.model_dump_json(by_alias=True) + "\n")
    logger.info(
        "Model performance provider=%s evaluated=%d accuracy=%.3f",
        entry.provider,
        entry.evaluated,
        entry.accuracy,
    )
    return log_path
