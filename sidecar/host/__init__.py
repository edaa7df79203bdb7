"""Outbound boundary to the agent host process."""

from sidecar.host.base import HostChannel
from sidecar.host.queue import QueueHostChannel

__all__ = ["HostChannel", "QueueHostChannel"]
