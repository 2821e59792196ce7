"""
AI enrichment of weakly classified claims.
"""

import logging
from collections.abc import Sequence

from ..core.models import CleanedClaim
from ..core.rules import Severity
from .ports import ClassificationProvider

logger = logging.getLogger(__name__)


def needs_ai_enrichment(claim: CleanedClaim) -> bool:
    """Claims without a specific phenomenon, or rated High, go to the provider."""
    phenomenon = (claim.phenomenon or "").lower()
    return (
        not claim.phenomenon
        or "unclassified" in phenomenon
        or "other" in phenomenon
        or claim.severity == Severity.HIGH.value
    )


def enrich_claims(
    claims: Sequence[CleanedClaim], provider: ClassificationProvider
) -> list[CleanedClaim]:
    """
    Refine claims with a remote classification provider.

    Only non-empty phenomenon, cause and severity values from the provider
    override the rule-based ones. When the provider returns nothing the
    claims come back unchanged.

    Args:
        claims: Claim collection
        provider: Remote classification service

    Returns:
        Claims with provider results applied (copies where changed)
    """
    candidates = [claim for claim in claims if needs_ai_enrichment(claim)]
    if not candidates:
        return list(claims)

    results = provider.classify_batch(candidates)
    if not results:
        return list(claims)

    enriched: list[CleanedClaim] = []
    for claim in claims:
        result = results.get(claim.id)
        if result is None:
            enriched.append(claim)
            continue
        enriched.append(
            claim.model_copy(
                update={
                    "phenomenon": result.phenomenon or claim.phenomenon,
                    "cause": result.cause or claim.cause,
                    "severity": result.severity or claim.severity,
                }
            )
        )

    logger.info("AI enrichment candidates=%d updated=%d", len(candidates), len(results))
    return enriched
