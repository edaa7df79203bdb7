"""Render projection: what the UI draws for a transcript.

Entries are flattened into view items. Approved permission prompts can be
compacted away, the task-completion tool call is shown as the turn's final
answer, and the streaming cursor is hidden while a tool call is still
streaming its arguments.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from sidecar.config import Settings
from sidecar.models import (
    AssistantMessage,
    DiffPreview,
    Entry,
    PermissionEntry,
    PermissionRequest,
    PermissionResponse,
    SystemNotice,
    TaskDiff,
    ToolActivity,
    ToolResult,
    UserMessage,
    WireModel,
)
from sidecar.transcript.transcript import Transcript
from sidecar.utils.json import json_str

PARAM_PREVIEW_LIMIT = 100

ViewKind = Literal["user", "assistant", "notice", "tool", "completion", "permission", "diff"]
ToolStatus = Literal["running", "succeeded", "failed"]


class ViewItem(WireModel):
    id: str
    kind: ViewKind
    created_at: datetime
    text: str | None = None
    show_cursor: bool = False
    is_error: bool = False

    # Tool activity
    tool_name: str | None = None
    params: dict[str, str] = Field(default_factory=dict)
    partial: bool = False
    status: ToolStatus | None = None
    result: ToolResult | None = None

    # Permission prompt
    request: PermissionRequest | None = None
    response: PermissionResponse | None = None

    diff: TaskDiff | None = None


def format_param_value(value: Any) -> str:
    """Collapsed-summary rendering of one tool parameter."""
    if isinstance(value, str):
        if len(value) > PARAM_PREVIEW_LIMIT:
            return value[:PARAM_PREVIEW_LIMIT] + "..."
        return value
    return json_str(value)


def completion_text(activity: ToolActivity, settings: Settings) -> str | None:
    """The final-answer text of a completion tool call, partial or not."""
    if activity.call is None or activity.call.name != settings.completion_tool:
        return None
    value = activity.call.params.get(settings.completion_field)
    if value is None:
        return ""
    return value if isinstance(value, str) else format_param_value(value)


def render(transcript: Transcript, settings: Settings) -> list[ViewItem]:
    """Project a transcript into the ordered list of items to draw."""
    entries = transcript.entries
    tool_streaming = any(
        isinstance(e, ToolActivity) and e.call is not None and e.call.partial
        for e in entries
    )

    items: list[ViewItem] = []
    for entry in entries:
        item = _render_entry(entry, settings, suppress_cursor=tool_streaming)
        if item is not None:
            items.append(item)
    return items


def _render_entry(entry: Entry, settings: Settings, *, suppress_cursor: bool) -> ViewItem | None:
    match entry:
        case UserMessage():
            return ViewItem(id=entry.id, kind="user", created_at=entry.created_at, text=entry.text)
        case AssistantMessage():
            return ViewItem(
                id=entry.id,
                kind="assistant",
                created_at=entry.created_at,
                text=entry.text,
                show_cursor=entry.streaming and not suppress_cursor,
            )
        case SystemNotice():
            return ViewItem(
                id=entry.id,
                kind="notice",
                created_at=entry.created_at,
                text=entry.text,
                is_error=entry.is_error,
            )
        case ToolActivity():
            return _render_tool(entry, settings)
        case PermissionEntry():
            if entry.response is PermissionResponse.APPROVED and settings.compact_approved_permissions:
                return None
            return ViewItem(
                id=entry.id,
                kind="permission",
                created_at=entry.created_at,
                request=entry.request,
                response=entry.response,
            )
        case DiffPreview():
            return ViewItem(id=entry.id, kind="diff", created_at=entry.created_at, diff=entry.diff)


def _render_tool(entry: ToolActivity, settings: Settings) -> ViewItem:
    if entry.result is None:
        status: ToolStatus = "running"
    else:
        status = "failed" if entry.result.is_error else "succeeded"

    call = entry.call
    answer = completion_text(entry, settings)
    return ViewItem(
        id=entry.id,
        kind="completion" if answer is not None else "tool",
        created_at=entry.created_at,
        text=answer,
        is_error=entry.result is not None and entry.result.is_error,
        tool_name=call.name if call is not None else entry.result.tool_name,
        params=(
            {key: format_param_value(value) for key, value in call.params.items()}
            if call is not None
            else {}
        ),
        partial=call is not None and call.partial,
        status=status,
        result=entry.result,
    )
