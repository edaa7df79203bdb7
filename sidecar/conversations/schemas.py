"""Request and response schemas for the UI-facing endpoints."""

from sidecar.models import (
    ConversationSummary,
    PermissionResponse,
    SessionState,
    TaskDiff,
    WireModel,
    WorkMode,
)
from sidecar.transcript.view import ViewItem

# -- Requests --


class SendMessageRequest(WireModel):
    content: str


class PermissionDecisionRequest(WireModel):
    approved: bool


class ModeChangeRequest(WireModel):
    mode: WorkMode


class OpenDiffRequest(WireModel):
    diff: TaskDiff
    file_path: str | None = None


# -- Responses --


class TranscriptResponse(WireModel):
    items: list[ViewItem]
    session: SessionState
    active_conversation_id: str | None = None


class PermissionDecisionResponse(WireModel):
    request_id: str
    changed: bool
    response: PermissionResponse


class ConversationListResponse(WireModel):
    conversations: list[ConversationSummary]
    active_conversation_id: str | None = None
    switching_to: str | None = None


class DeleteConversationResponse(WireModel):
    conversation_id: str
    was_active: bool


class InputValueResponse(WireModel):
    value: str
