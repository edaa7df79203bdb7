"""FastAPI routes for the chat UI: transcript view and user actions."""

from fastapi import APIRouter, Depends, HTTPException, status

from sidecar.conversations.schemas import (
    ConversationListResponse,
    DeleteConversationResponse,
    InputValueResponse,
    ModeChangeRequest,
    OpenDiffRequest,
    PermissionDecisionRequest,
    PermissionDecisionResponse,
    SendMessageRequest,
    TranscriptResponse,
)
from sidecar.conversations.store import ConversationStore, EmptyMessageError
from sidecar.models import Entry, SessionState, UserMessage
from sidecar.transcript.permissions import PermissionRequestNotFoundError

router = APIRouter(prefix="/api", tags=["conversations"])


def get_store() -> ConversationStore:
    """Dependency placeholder, overridden in the app lifespan."""
    raise RuntimeError("ConversationStore not initialized")


@router.get("/transcript")
async def get_transcript(
    store: ConversationStore = Depends(get_store),
) -> TranscriptResponse:
    return TranscriptResponse(
        items=store.render(),
        session=store.session,
        active_conversation_id=store.active_conversation_id,
    )


@router.get("/transcript/entries")
async def get_entries(
    store: ConversationStore = Depends(get_store),
) -> list[Entry]:
    return store.transcript.entries


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    store: ConversationStore = Depends(get_store),
) -> UserMessage:
    try:
        return store.send_message(request.content)
    except EmptyMessageError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/permissions/{request_id}")
async def respond_permission(
    request_id: str,
    request: PermissionDecisionRequest,
    store: ConversationStore = Depends(get_store),
) -> PermissionDecisionResponse:
    try:
        changed = store.respond_permission(request_id, request.approved)
    except PermissionRequestNotFoundError:
        raise HTTPException(
            status_code=404, detail=f"Permission request not found: {request_id}",
        )
    entry = store.transcript.find_permission(request_id)
    assert entry is not None
    return PermissionDecisionResponse(
        request_id=request_id, changed=changed, response=entry.response,
    )


@router.get("/conversations")
async def list_conversations(
    store: ConversationStore = Depends(get_store),
) -> ConversationListResponse:
    return ConversationListResponse(
        conversations=store.summaries,
        active_conversation_id=store.active_conversation_id,
        switching_to=store.switching_to,
    )


@router.post("/conversations", status_code=status.HTTP_202_ACCEPTED)
async def new_conversation(
    store: ConversationStore = Depends(get_store),
) -> TranscriptResponse:
    store.new_conversation()
    return await get_transcript(store)


@router.post("/conversations/refresh", status_code=status.HTTP_202_ACCEPTED)
async def refresh_conversations(
    store: ConversationStore = Depends(get_store),
) -> ConversationListResponse:
    store.refresh_conversations()
    return await list_conversations(store)


@router.post("/conversations/{conversation_id}/switch", status_code=status.HTTP_202_ACCEPTED)
async def switch_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),
) -> TranscriptResponse:
    store.switch_to(conversation_id)
    return await get_transcript(store)


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),
) -> DeleteConversationResponse:
    was_active = store.delete(conversation_id)
    return DeleteConversationResponse(conversation_id=conversation_id, was_active=was_active)


@router.post("/mode", status_code=status.HTTP_202_ACCEPTED)
async def change_mode(
    request: ModeChangeRequest,
    store: ConversationStore = Depends(get_store),
) -> SessionState:
    store.change_mode(request.mode)
    return store.session


@router.post("/cancel", status_code=status.HTTP_202_ACCEPTED)
async def cancel_task(
    store: ConversationStore = Depends(get_store),
) -> SessionState:
    store.cancel_task()
    return store.session


@router.post("/diffs/open", status_code=status.HTTP_202_ACCEPTED)
async def open_diff(
    request: OpenDiffRequest,
    store: ConversationStore = Depends(get_store),
) -> dict:
    store.open_diff(request.diff, request.file_path)
    return {"status": "sent"}


@router.post("/input/take")
async def take_input(
    store: ConversationStore = Depends(get_store),
) -> InputValueResponse:
    return InputValueResponse(value=store.take_input())
