"""Event router: dispatches each inbound host event to exactly one handler.

Pure dispatch. Ordering, deduplication and correlation live in the
components the handlers belong to.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from sidecar.conversations.store import ConversationStore
from sidecar.models import INBOUND_EVENT_TYPES

logger = logging.getLogger(__name__)


class EventRouter:
    """Routes host events by their type tag into the ConversationStore."""

    def __init__(self, store: ConversationStore) -> None:
        self._handlers: dict[str, Callable[[Any], None]] = {
            "stream_chunk": store.stream.on_stream_chunk,
            "task_complete": store.stream.on_task_complete,
            "error": store.stream.on_error,
            "tool_call": store.tools.on_tool_call,
            "tool_result": store.tools.on_tool_result,
            "permission_request": store.permissions.on_permission_request,
            "task_diff": store.on_task_diff,
            "conversation_cleared": store.on_conversation_cleared,
            "conversation_history": store.on_conversation_history,
            "conversation_list": store.on_conversation_list,
            "conversation_deleted": store.on_conversation_deleted,
            "mode_changed": store.on_mode_changed,
            "navigate": store.on_navigate,
            "token_usage": store.on_token_usage,
            "set_input_value": store.on_set_input_value,
        }

    @property
    def event_types(self) -> set[str]:
        return set(self._handlers)

    def dispatch(self, event: Mapping[str, Any]) -> bool:
        """Fold one event. Returns False if it was ignored.

        Unknown tags and malformed payloads are skipped without raising.
        """
        if not isinstance(event, Mapping):
            logger.warning("Ignoring non-object event: %r", event)
            return False

        event_type = event.get("type")
        handler = self._handlers.get(event_type) if isinstance(event_type, str) else None
        if handler is None:
            logger.debug("Ignoring unknown event type %r", event_type)
            return False

        payload_cls: type[BaseModel] = INBOUND_EVENT_TYPES[event_type]
        try:
            payload = payload_cls.model_validate(event)
        except ValidationError as e:
            logger.warning("Ignoring malformed %s event: %s", event_type, e)
            return False

        handler(payload)
        return True

    def dispatch_all(self, events: Iterable[Mapping[str, Any]]) -> int:
        """Fold events in order. Returns how many were dispatched."""
        return sum(1 for event in events if self.dispatch(event))
