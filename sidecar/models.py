"""Canonical data structures, inbound host events and outbound actions.

Defined once here, referenced everywhere else. Entries are the units of a
conversation transcript; inbound event payloads are what the agent host
emits; actions are what the client sends back. Everything on the wire is
camelCase, everything in Python is snake_case.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sidecar.utils.json import json_str, parse_tool_params

WorkMode = Literal["architect", "code", "ask", "debug"]


class WireModel(BaseModel):
    """Base for everything that crosses the host boundary or the HTTP API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Canonical data structures
# ---------------------------------------------------------------------------


class ToolCall(WireModel):
    id: str | None = None
    name: str
    params: dict[str, Any] = Field(default_factory=dict)
    partial: bool = False

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, Any]:
        # Streaming arguments may still be an incomplete JSON string.
        return parse_tool_params(value)

    @field_validator("partial", mode="before")
    @classmethod
    def _coerce_partial(cls, value: Any) -> Any:
        # Absent and null mean complete; strings like "false" parse as bools.
        return False if value is None else value


class ToolResult(WireModel):
    tool_call_id: str | None = Field(
        default=None, validation_alias=AliasChoices("toolCallId", "tool_call_id"),
    )
    tool_name: str = Field(validation_alias=AliasChoices("toolName", "tool_name"))
    content: str = ""
    is_error: bool = Field(
        default=False, validation_alias=AliasChoices("isError", "is_error"),
    )

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        return json_str(value)


class PermissionRequest(WireModel):
    id: str
    tool_name: str
    operation: str
    target: str
    details: str | None = None


class PermissionResponse(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class TokenUsageSnapshot(WireModel):
    total_tokens: int
    available_tokens: int


class DiffLine(WireModel):
    type: Literal["context", "add", "remove"]
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None


class FileDiff(WireModel):
    path: str
    added: int = 0
    removed: int = 0
    lines: list[DiffLine] = Field(default_factory=list)


class DiffSummary(WireModel):
    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0


class TaskDiff(WireModel):
    task_id: str
    created_at: str
    summary: DiffSummary = Field(default_factory=DiffSummary)
    files: list[FileDiff] = Field(default_factory=list)


class SessionState(WireModel):
    """Per-session UI state the host drives beside the transcript."""

    is_processing: bool = False
    mode: WorkMode = "code"
    token_usage: TokenUsageSnapshot | None = None
    input_value: str = ""
    route: str | None = None


class ConversationSummary(WireModel):
    """Host-maintained projection of one stored conversation. Not authoritative."""

    id: str
    timestamp: datetime
    message_count: int = 0
    preview: str = ""
    is_current: bool = False


# ---------------------------------------------------------------------------
# Transcript entries, one variant per kind
# ---------------------------------------------------------------------------


class EntryBase(WireModel):
    """Fields shared by all entries. Entries are frozen; updates go through
    model_copy and Transcript.replace."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime = Field(default_factory=_now)


class UserMessage(EntryBase):
    kind: Literal["user"] = "user"
    text: str


class AssistantMessage(EntryBase):
    kind: Literal["assistant"] = "assistant"
    text: str
    streaming: bool = False


class SystemNotice(EntryBase):
    kind: Literal["notice"] = "notice"
    text: str
    is_error: bool = False


class ToolActivity(EntryBase):
    """A tool call paired with its result. call is None for an orphan result."""

    kind: Literal["tool"] = "tool"
    call: ToolCall | None = None
    result: ToolResult | None = None

    @property
    def resolved(self) -> bool:
        return self.result is not None


class PermissionEntry(EntryBase):
    kind: Literal["permission"] = "permission"
    request: PermissionRequest
    response: PermissionResponse = PermissionResponse.PENDING
    responded_at: datetime | None = None

    @property
    def pending(self) -> bool:
        return self.response is PermissionResponse.PENDING


class DiffPreview(EntryBase):
    kind: Literal["diff"] = "diff"
    diff: TaskDiff


Entry = Annotated[
    UserMessage | AssistantMessage | SystemNotice | ToolActivity | PermissionEntry | DiffPreview,
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Inbound events (host -> client), one per tag
# ---------------------------------------------------------------------------


class StreamChunkEvent(WireModel):
    type: Literal["stream_chunk"] = "stream_chunk"
    content: str
    is_streaming: bool


class ToolCallEvent(WireModel):
    type: Literal["tool_call"] = "tool_call"
    tool_call: ToolCall


class ToolResultEvent(ToolResult):
    type: Literal["tool_result"] = "tool_result"

    def to_result(self) -> ToolResult:
        return ToolResult(
            tool_call_id=self.tool_call_id,
            tool_name=self.tool_name,
            content=self.content,
            is_error=self.is_error,
        )


class ErrorEvent(WireModel):
    type: Literal["error"] = "error"
    message: str


class TaskCompleteEvent(WireModel):
    type: Literal["task_complete"] = "task_complete"


class TaskDiffEvent(WireModel):
    type: Literal["task_diff"] = "task_diff"
    diff: TaskDiff


class ConversationClearedEvent(WireModel):
    type: Literal["conversation_cleared"] = "conversation_cleared"


class ConversationHistoryEvent(WireModel):
    """History messages are parsed one by one so a bad message is skipped,
    not fatal to the whole load."""

    type: Literal["conversation_history"] = "conversation_history"
    messages: list[dict[str, Any]] = Field(default_factory=list)


class ConversationListEvent(WireModel):
    type: Literal["conversation_list"] = "conversation_list"
    conversations: list[ConversationSummary] = Field(default_factory=list)


class ConversationDeletedEvent(WireModel):
    type: Literal["conversation_deleted"] = "conversation_deleted"
    conversation_id: str


class PermissionRequestEvent(WireModel):
    type: Literal["permission_request"] = "permission_request"
    request: PermissionRequest


class ModeChangedEvent(WireModel):
    type: Literal["mode_changed"] = "mode_changed"
    mode: WorkMode


class NavigateEvent(WireModel):
    type: Literal["navigate"] = "navigate"
    route: str


class TokenUsageEvent(WireModel):
    type: Literal["token_usage"] = "token_usage"
    usage: TokenUsageSnapshot


class SetInputValueEvent(WireModel):
    type: Literal["set_input_value"] = "set_input_value"
    value: str


# ---------------------------------------------------------------------------
# Inbound event registry
# ---------------------------------------------------------------------------

INBOUND_EVENT_TYPES: dict[str, type[WireModel]] = {
    "stream_chunk": StreamChunkEvent,
    "tool_call": ToolCallEvent,
    "tool_result": ToolResultEvent,
    "error": ErrorEvent,
    "task_complete": TaskCompleteEvent,
    "task_diff": TaskDiffEvent,
    "conversation_cleared": ConversationClearedEvent,
    "conversation_history": ConversationHistoryEvent,
    "conversation_list": ConversationListEvent,
    "conversation_deleted": ConversationDeletedEvent,
    "permission_request": PermissionRequestEvent,
    "mode_changed": ModeChangedEvent,
    "navigate": NavigateEvent,
    "token_usage": TokenUsageEvent,
    "set_input_value": SetInputValueEvent,
}


# ---------------------------------------------------------------------------
# Outbound actions (client -> host)
# ---------------------------------------------------------------------------


class UserMessageAction(WireModel):
    type: Literal["user_message"] = "user_message"
    content: str


class ModeChangeAction(WireModel):
    type: Literal["mode_change"] = "mode_change"
    mode: WorkMode


class NewConversationAction(WireModel):
    type: Literal["new_conversation"] = "new_conversation"


class SwitchConversationAction(WireModel):
    type: Literal["switch_conversation"] = "switch_conversation"
    conversation_id: str


class DeleteConversationAction(WireModel):
    type: Literal["delete_conversation"] = "delete_conversation"
    conversation_id: str


class GetConversationListAction(WireModel):
    type: Literal["get_conversation_list"] = "get_conversation_list"


class PermissionResponseAction(WireModel):
    type: Literal["permission_response"] = "permission_response"
    request_id: str
    approved: bool


class CancelTaskAction(WireModel):
    type: Literal["cancel_task"] = "cancel_task"


class OpenDiffPanelAction(WireModel):
    type: Literal["open_diff_panel"] = "open_diff_panel"
    diff: TaskDiff
    file_path: str | None = None


HostAction = Annotated[
    UserMessageAction
    | ModeChangeAction
    | NewConversationAction
    | SwitchConversationAction
    | DeleteConversationAction
    | GetConversationListAction
    | PermissionResponseAction
    | CancelTaskAction
    | OpenDiffPanelAction,
    Field(discriminator="type"),
]
