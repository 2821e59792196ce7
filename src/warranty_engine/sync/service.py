"""
Claim synchronisation with the remote server.
"""

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from ..core.models import CleanedClaim, ServerSyncStatus
from .merge import merge_claim_lists
from .ports import CLAIMS_UPDATED_EVENT, ClaimsApi, ServerEvent, UploadClaimsResult

logger = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_SYNCING = "syncing"
STATUS_ERROR = "error"


class ClaimSyncService:
    """
    Keeps a local claim collection in step with the server.

    The first successful fetch replaces the collection; once a
    ``lastUpdated`` cursor is known, later fetches are incremental and
    merged by claim id.
    """

    def __init__(self, api: ClaimsApi, claims: Sequence[CleanedClaim] | None = None) -> None:
        self.api = api
        self.claims: list[CleanedClaim] = list(claims or [])
        self.status = ServerSyncStatus()
        self.cursor: str | None = None

    def sync_from_server(self, reason: str = "poll") -> list[CleanedClaim]:
        """
        Pull claims from the server.

        Args:
            reason: Trigger label used in logs and error status ("initial", "poll", "event")

        Returns:
            The local claim collection after the sync
        """
        self.status = self.status.model_copy(update={"status": STATUS_SYNCING, "error": None})
        since = self.cursor
        response = self.api.fetch_claims(since)

        if response is None:
            self.status = self.status.model_copy(
                update={"status": STATUS_ERROR, "error": f"Server sync failed ({reason})"}
            )
            logger.warning("Server sync failed reason=%s since=%s", reason, since)
            return self.claims

        if response.last_updated:
            self.cursor = response.last_updated
        self.status = self.status.model_copy(
            update={
                "status": STATUS_IDLE,
                "last_synced_at": response.last_updated or self.status.last_synced_at,
                "server_version": response.version or self.status.server_version,
            }
        )

        if response.data:
            if since:
                self.claims = merge_claim_lists(self.claims, response.data)
            else:
                self.claims = list(response.data)
        elif not since:
            self.claims = []

        logger.info(
            "Server sync reason=%s received=%d total=%d incremental=%s",
            reason,
            len(response.data),
            len(self.claims),
            bool(since),
        )
        return self.claims

    def upload(self, claims: Sequence[CleanedClaim] | None = None) -> UploadClaimsResult | None:
        """Upload claims (defaults to the local collection) and advance the cursor."""
        payload = list(claims if claims is not None else self.claims)
        result = self.api.upload_claims(payload)
        timestamp = datetime.now(timezone.utc).isoformat()
        if result is None:
            if payload:
                self.status = self.status.model_copy(
                    update={"status": STATUS_ERROR, "error": "Failed to sync with server"}
                )
            return None

        if result.last_updated:
            self.cursor = result.last_updated
        self.status = self.status.model_copy(
            update={
                "status": STATUS_IDLE,
                "error": None,
                "last_uploaded_at": timestamp,
                "last_synced_at": result.last_updated or timestamp,
                "server_version": result.version or self.status.server_version,
            }
        )
        return result

    def handle_event(self, payload: dict[str, Any] | str | bytes) -> bool:
        """
        React to a server notification.

        A ``claims.updated`` event triggers a re-fetch; other event types
        are ignored and malformed payloads are logged and dropped.

        Returns:
            True when a sync was triggered
        """
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            event = ServerEvent.model_validate(data)
        except (ValueError, ValidationError) as exc:
            logger.warning("Ignoring malformed server event: %s", exc)
            return False

        if event.type != CLAIMS_UPDATED_EVENT:
            logger.debug("Ignoring server event type=%s", event.type)
            return False
        self.sync_from_server("event")
        return True
