"""
Upsert merge of claim collections.
"""

from collections.abc import Sequence

from ..core.models import CleanedClaim


def merge_claim(existing: CleanedClaim, incoming: CleanedClaim) -> CleanedClaim:
    """Overwrite the fields explicitly present in the incoming record."""
    updates = {name: getattr(incoming, name) for name in incoming.model_fields_set}
    return existing.model_copy(update=updates)


def merge_claim_lists(
    existing: Sequence[CleanedClaim], incoming: Sequence[CleanedClaim]
) -> list[CleanedClaim]:
    """
    Upsert incoming claims into an existing collection by id.

    Existing order is kept, matching ids are shallow-merged in place and
    new ids are appended. Neither input is modified.

    Args:
        existing: Current claim collection
        incoming: Claims received from the server

    Returns:
        The merged collection
    """
    if not existing:
        return list(incoming)
    if not incoming:
        return list(existing)

    merged = list(existing)
    positions = {claim.id: index for index, claim in enumerate(merged)}
    for claim in incoming:
        index = positions.get(claim.id)
        if index is None:
            positions[claim.id] = len(merged)
            merged.append(claim)
        else:
            merged[index] = merge_claim(merged[index], claim)
    return merged
