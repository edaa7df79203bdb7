"""Sidecar FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sidecar.config import load_settings
from sidecar.conversations.router import get_store
from sidecar.conversations.router import router as conversations_router
from sidecar.conversations.store import ConversationStore
from sidecar.events.router import EventRouter
from sidecar.host.queue import QueueHostChannel
from sidecar.host.router import get_event_router, get_host_channel
from sidecar.host.router import router as host_router

settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire the store, router and host channel for one client session."""
    logging.getLogger("sidecar").setLevel(settings.log_level)

    channel = QueueHostChannel()
    app.dependency_overrides[get_host_channel] = lambda: channel

    store = ConversationStore(channel, settings)
    app.dependency_overrides[get_store] = lambda: store

    event_router = EventRouter(store)
    app.dependency_overrides[get_event_router] = lambda: event_router

    # Ask for the conversation list up front so the picker is populated.
    store.refresh_conversations()

    app.state.store = store
    yield

    app.dependency_overrides.clear()


app = FastAPI(
    title="Sidecar",
    description="Transcript reconciliation client for an agent host process",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(conversations_router)
app.include_router(host_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
