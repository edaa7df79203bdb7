"""Inbound host events: tag-based dispatch into the conversation store."""

from sidecar.events.router import EventRouter

__all__ = ["EventRouter"]
