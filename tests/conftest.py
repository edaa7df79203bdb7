"""Shared pytest fixtures for Sidecar tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from sidecar.config import Settings
from sidecar.conversations.router import get_store
from sidecar.conversations.store import ConversationStore
from sidecar.events.router import EventRouter
from sidecar.host.queue import QueueHostChannel
from sidecar.host.router import get_event_router, get_host_channel
from sidecar.main import app


@pytest.fixture
def settings():
    """Default settings, independent of the developer's environment."""
    return Settings()


@pytest.fixture
def host():
    """Outbound channel whose queued actions tests can drain."""
    return QueueHostChannel()


@pytest.fixture
def store(host, settings):
    """ConversationStore wired to the test host channel."""
    return ConversationStore(host, settings)


@pytest.fixture
def event_router(store):
    """EventRouter folding into the test store."""
    return EventRouter(store)


@pytest.fixture
async def client(host, store, event_router):
    """Async test client with the test store wired into the app."""
    app.dependency_overrides[get_host_channel] = lambda: host
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_event_router] = lambda: event_router
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
