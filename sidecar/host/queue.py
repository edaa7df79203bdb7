"""In-process host channel backed by an asyncio queue."""

import asyncio
import logging

from sidecar.host.base import HostChannel
from sidecar.models import HostAction

logger = logging.getLogger(__name__)


class QueueHostChannel(HostChannel):
    """Buffers outbound actions until the embedding transport collects them."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[HostAction] = asyncio.Queue()

    def send(self, action: HostAction) -> None:
        logger.debug("Queueing %s action", action.type)
        self._queue.put_nowait(action)

    async def next_action(self) -> HostAction:
        """Wait for the next outbound action."""
        return await self._queue.get()

    def drain(self) -> list[HostAction]:
        """Take every queued action without waiting."""
        actions: list[HostAction] = []
        while True:
            try:
                actions.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return actions

    @property
    def pending(self) -> int:
        return self._queue.qsize()
