"""Permission tracker: Pending -> Approved | Denied, one way only."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sidecar.models import PermissionEntry, PermissionRequestEvent, PermissionResponse

if TYPE_CHECKING:
    from sidecar.conversations.store import ConversationStore

logger = logging.getLogger(__name__)


class PermissionTracker:
    """Folds permission requests into entries and records the user's answer."""

    def __init__(self, store: "ConversationStore") -> None:
        self._store = store

    def on_permission_request(self, event: PermissionRequestEvent) -> None:
        transcript = self._store.transcript
        request = event.request
        if transcript.find_permission(request.id) is not None:
            logger.info("Permission request %s already shown, ignoring repeat", request.id)
            return
        transcript.append(
            PermissionEntry(id=transcript.new_id("permission", request.id), request=request)
        )

    def respond(self, request_id: str, approved: bool) -> bool:
        """Resolve a pending request. Returns False if it was already resolved.

        Raises PermissionRequestNotFoundError for an unknown request id.
        """
        transcript = self._store.transcript
        entry = transcript.find_permission(request_id)
        if entry is None:
            raise PermissionRequestNotFoundError(request_id)
        if not entry.pending:
            logger.info(
                "Permission request %s already %s, ignoring response",
                request_id,
                entry.response.value,
            )
            return False

        outcome = PermissionResponse.APPROVED if approved else PermissionResponse.DENIED
        transcript.replace(
            entry.model_copy(update={"response": outcome, "responded_at": datetime.now(UTC)})
        )
        return True


class PermissionRequestNotFoundError(Exception):
    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Permission request not found: {request_id}")
