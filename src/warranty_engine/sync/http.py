"""
HTTP adapters for the claims API and the AI proxy.
Failures are logged and mapped to sentinel results; nothing is raised.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import requests
from pydantic import TypeAdapter, ValidationError

from ..config import Settings, get_settings
from ..core.models import CleanedClaim
from .ports import (
    ANALYSIS_FALLBACK_MESSAGE,
    EMPTY_ANALYSIS_MESSAGE,
    AIClassificationResult,
    ServerClaimsResponse,
    UploadClaimsResult,
)

logger = logging.getLogger(__name__)

UPLOAD_SOURCE = "python-engine"
ANALYSIS_SAMPLE_SIZE = 15

_CLASSIFICATION_RESULTS = TypeAdapter(dict[str, AIClassificationResult])


class ApiRequestError(RuntimeError):
    """Raised internally when a request fails; adapters convert it to a sentinel."""


class ApiClient:
    """
    Thin JSON client with bearer authentication.

    Shared by the claims and AI adapters; owns the ``requests.Session``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._session = session or requests.Session()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.api_token}",
        }

    def url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def request_json(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        url = self.url(path)
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=body,
                headers=self.headers,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise ApiRequestError(f"{method} {url} failed with status {status}") from exc
        except requests.RequestException as exc:
            raise ApiRequestError(f"{method} {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ApiRequestError(f"{method} {url} returned invalid JSON") from exc


class HttpClaimsApi:
    """``ClaimsApi`` backed by the claims REST endpoints."""

    def __init__(self, client: ApiClient | None = None) -> None:
        self.client = client or ApiClient()

    def fetch_claims(self, since: str | None = None) -> ServerClaimsResponse | None:
        params = {"since": since} if since else None
        try:
            payload = self.client.request_json("GET", "/api/claims", params=params)
            return ServerClaimsResponse.model_validate(payload)
        except (ApiRequestError, ValidationError) as exc:
            logger.warning("Failed to fetch claims from server: %s", exc)
            return None

    def upload_claims(self, claims: list[CleanedClaim]) -> UploadClaimsResult | None:
        if not claims:
            return None
        body = {
            "data": [claim.to_wire() for claim in claims],
            "source": UPLOAD_SOURCE,
            "uploadedAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            payload = self.client.request_json("POST", "/api/claims/upload", body=body)
            result = UploadClaimsResult.model_validate(payload or {})
        except (ApiRequestError, ValidationError) as exc:
            logger.warning("Failed to upload %d claims: %s", len(claims), exc)
            return None
        logger.info("Uploaded %d claims version=%s", len(claims), result.version)
        return result


def _classification_payload(claim: CleanedClaim) -> dict[str, Any]:
    return {
        key: value
        for key, value in {
            "id": claim.id,
            "description": claim.description,
            "model": claim.model,
            "part": claim.part_name,
            "cost": claim.cost,
            "phenomenon": claim.phenomenon,
            "cause": claim.cause,
            "severity": claim.severity,
        }.items()
        if value is not None
    }


class HttpClassificationProvider:
    """``ClassificationProvider`` backed by the AI proxy endpoints."""

    def __init__(self, client: ApiClient | None = None) -> None:
        self.client = client or ApiClient()

    def classify_batch(self, claims: list[CleanedClaim]) -> dict[str, AIClassificationResult]:
        batch = [_classification_payload(claim) for claim in claims if claim.description]
        if not batch:
            return {}
        try:
            payload = self.client.request_json("POST", "/api/ai/classify", body={"claims": batch})
        except ApiRequestError as exc:
            logger.warning("AI classification proxy failed: %s", exc)
            return {}

        results = payload.get("results") if isinstance(payload, dict) else None
        try:
            return _CLASSIFICATION_RESULTS.validate_python(results or {})
        except ValidationError as exc:
            logger.warning("AI classification proxy returned malformed results: %s", exc)
            return {}

    def analyze(self, claims: list[CleanedClaim]) -> str:
        sample = [
            {
                "id": claim.id,
                "model": claim.model,
                "description": claim.description,
                "part": claim.part_name,
                "phenomenon": claim.phenomenon,
                "cause": claim.cause,
                "severity": claim.severity,
            }
            for claim in claims[:ANALYSIS_SAMPLE_SIZE]
        ]
        try:
            payload = self.client.request_json("POST", "/api/ai/analyze", body={"claims": sample})
        except ApiRequestError as exc:
            logger.warning("AI analysis proxy failed: %s", exc)
            return ANALYSIS_FALLBACK_MESSAGE
        analysis = payload.get("analysis") if isinstance(payload, dict) else None
        return analysis or EMPTY_ANALYSIS_MESSAGE
