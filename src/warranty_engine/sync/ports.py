"""
Remote service contracts used by synchronisation and enrichment.
"""

from typing import Protocol

from pydantic import Field

from ..core.models import CleanedClaim, WireModel
from ..core.rules import Severity

CLAIMS_UPDATED_EVENT = "claims.updated"
ANALYSIS_FALLBACK_MESSAGE = "Failed to communicate with the AI proxy."
EMPTY_ANALYSIS_MESSAGE = "No analysis could be generated."


class ServerClaimsResponse(WireModel):
    """Payload of ``GET /api/claims``."""

    data: list[CleanedClaim] = Field(default_factory=list)
    last_updated: str | None = None
    version: str | None = None


class UploadClaimsResult(WireModel):
    """Payload of ``POST /api/claims/upload``."""

    version: str | None = None
    last_updated: str | None = None


class ServerEvent(WireModel):
    """Notification pushed by the server."""

    type: str
    version: str | None = None
    last_updated: str | None = None
    at: str | None = None


class AIClassificationResult(WireModel):
    """Remote classification for one claim; empty fields leave the claim unchanged."""

    phenomenon: str | None = None
    cause: str | None = None
    severity: Severity | None = None


class ClaimsApi(Protocol):
    """Remote claim repository."""

    def fetch_claims(self, since: str | None = None) -> ServerClaimsResponse | None: ...

    def upload_claims(self, claims: list[CleanedClaim]) -> UploadClaimsResult | None: ...


class ClassificationProvider(Protocol):
    """Remote (AI) classification and analysis service."""

    def classify_batch(self, claims: list[CleanedClaim]) -> dict[str, AIClassificationResult]: ...

    def analyze(self, claims: list[CleanedClaim]) -> str: ...
