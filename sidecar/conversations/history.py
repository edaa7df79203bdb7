"""Conversation history: host display messages -> transcript entries."""

import logging
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator

from sidecar.models import (
    AssistantMessage,
    Entry,
    PermissionEntry,
    PermissionRequest,
    PermissionResponse,
    SystemNotice,
    ToolActivity,
    ToolCall,
    ToolResult,
    UserMessage,
    WireModel,
)
from sidecar.transcript.transcript import Transcript
from sidecar.utils.json import json_str

logger = logging.getLogger(__name__)

_RESPONSE_LABELS = {
    "approved": PermissionResponse.APPROVED,
    "denied": PermissionResponse.DENIED,
}


class HistoryMessage(WireModel):
    """One stored message as the host replays it."""

    id: str | None = None
    role: Literal["user", "assistant", "system", "permission"]
    content: str = ""
    timestamp: datetime | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_results: list[ToolResult] = Field(default_factory=list)
    is_error: bool = False
    permission_request: PermissionRequest | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        # Stored tool turns sometimes nest the text one level down.
        if isinstance(value, dict) and "content" in value:
            value = value["content"]
        return json_str(value)

    @field_validator("tool_calls", "tool_results", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


def build_transcript(messages: list[dict[str, Any]]) -> Transcript:
    """Build a fresh transcript from a history payload.

    Malformed messages are skipped. History is settled: assistant text is
    never left streaming.
    """
    transcript = Transcript()
    for index, raw in enumerate(messages):
        try:
            message = HistoryMessage.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed history message %d: %s", index, e)
            continue
        for entry in _to_entries(message, transcript):
            transcript.append(entry)
    return transcript


def _to_entries(message: HistoryMessage, transcript: Transcript) -> list[Entry]:
    created_at = message.timestamp or datetime.now(UTC)
    taken: set[str] = set()

    if message.role == "permission":
        if message.permission_request is None:
            logger.warning("Skipping permission message %s without a request", message.id)
            return []
        request = message.permission_request
        response = _RESPONSE_LABELS.get(message.content.strip().lower(), PermissionResponse.PENDING)
        return [
            PermissionEntry(
                id=_fresh_id(transcript, taken, "permission", message.id or request.id),
                request=request,
                response=response,
                created_at=created_at,
            )
        ]

    if message.role == "user":
        return [
            UserMessage(
                id=_fresh_id(transcript, taken, "msg", message.id),
                text=message.content,
                created_at=created_at,
            )
        ]

    entries: list[Entry] = []
    if message.content and message.role == "assistant":
        entries.append(
            AssistantMessage(
                id=_fresh_id(transcript, taken, "msg", message.id),
                text=message.content,
                created_at=created_at,
            )
        )
    elif message.content:
        entries.append(
            SystemNotice(
                id=_fresh_id(transcript, taken, "notice", message.id),
                text=message.content,
                is_error=message.is_error,
                created_at=created_at,
            )
        )
    entries.extend(_pair_tools(message, transcript, created_at, taken))
    return entries


def _pair_tools(
    message: HistoryMessage,
    transcript: Transcript,
    created_at: datetime,
    taken: set[str],
) -> list[Entry]:
    """Pair each stored call with its result: by id, else by tool name."""
    results = list(message.tool_results)
    entries: list[Entry] = []

    for call in message.tool_calls:
        result = None
        if call.id:
            result = next((r for r in results if r.tool_call_id == call.id), None)
        if result is None:
            result = next(
                (r for r in results if r.tool_call_id is None and r.tool_name == call.name),
                None,
            )
        if result is not None:
            results.remove(result)
        entries.append(
            ToolActivity(
                id=_fresh_id(transcript, taken, "tool", call.id or message.id),
                call=call,
                result=result,
                created_at=created_at,
            )
        )

    for result in results:
        entries.append(
            ToolActivity(
                id=_fresh_id(transcript, taken, "result", message.id),
                result=result,
                created_at=created_at,
            )
        )
    return entries


def _fresh_id(transcript: Transcript, taken: set[str], prefix: str, preferred: str | None) -> str:
    # Entries from one message are appended together, so ids handed out to
    # earlier siblings are not in the transcript yet.
    entry_id = transcript.new_id(prefix, None if preferred in taken else preferred)
    while entry_id in taken:
        entry_id = transcript.new_id(prefix)
    taken.add(entry_id)
    return entry_id
