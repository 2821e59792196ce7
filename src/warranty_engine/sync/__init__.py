"""
Server synchronisation, remote ports and AI enrichment.
"""

from .enrichment import enrich_claims, needs_ai_enrichment
from .http import ApiClient, HttpClaimsApi, HttpClassificationProvider
from .merge import merge_claim_lists
from .ports import (
    AIClassificationResult,
    ClaimsApi,
    ClassificationProvider,
    ServerClaimsResponse,
    ServerEvent,
    UploadClaimsResult,
)
from .service import ClaimSyncService

__all__ = [
    "AIClassificationResult",
    "ApiClient",
    "ClaimSyncService",
    "ClaimsApi",
    "ClassificationProvider",
    "HttpClaimsApi",
    "HttpClassificationProvider",
    "ServerClaimsResponse",
    "ServerEvent",
    "UploadClaimsResult",
    "enrich_claims",
    "merge_claim_lists",
    "needs_ai_enrichment",
]
