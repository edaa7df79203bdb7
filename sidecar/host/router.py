"""FastAPI routes for the host side: inbound events and outbound actions."""

import json as json_module
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import StreamingResponse

from sidecar.events.router import EventRouter
from sidecar.host.queue import QueueHostChannel
from sidecar.models import WireModel

router = APIRouter(prefix="/api/host", tags=["host"])


class DispatchResponse(WireModel):
    dispatched: bool


class BatchDispatchResponse(WireModel):
    received: int
    dispatched: int


def get_event_router() -> EventRouter:
    """Dependency placeholder, overridden in the app lifespan."""
    raise RuntimeError("EventRouter not initialized")


def get_host_channel() -> QueueHostChannel:
    """Dependency placeholder, overridden in the app lifespan."""
    raise RuntimeError("QueueHostChannel not initialized")


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def post_event(
    event: Any = Body(...),
    event_router: EventRouter = Depends(get_event_router),
) -> DispatchResponse:
    return DispatchResponse(dispatched=event_router.dispatch(event))


@router.post("/events/batch", status_code=status.HTTP_202_ACCEPTED)
async def post_events(
    events: list[Any] = Body(...),
    event_router: EventRouter = Depends(get_event_router),
) -> BatchDispatchResponse:
    dispatched = event_router.dispatch_all(events)
    return BatchDispatchResponse(received=len(events), dispatched=dispatched)


@router.get("/actions")
async def poll_actions(
    channel: QueueHostChannel = Depends(get_host_channel),
) -> list[dict[str, Any]]:
    return [action.to_wire() for action in channel.drain()]


@router.get("/actions/stream", response_model=None)
async def stream_actions(
    channel: QueueHostChannel = Depends(get_host_channel),
) -> StreamingResponse:
    return StreamingResponse(
        _stream_sse(channel),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


async def _stream_sse(channel: QueueHostChannel) -> AsyncIterator[str]:
    """Async generator that yields one SSE frame per outbound action."""
    while True:
        action = await channel.next_action()
        yield f"event: {action.type}\ndata: {json_module.dumps(action.to_wire())}\n\n"
