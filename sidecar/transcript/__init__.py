"""Transcript reconciliation: the entry arena and the components that fold
host events into it."""

from sidecar.transcript.permissions import PermissionTracker
from sidecar.transcript.stream import StreamAccumulator
from sidecar.transcript.tools import ToolCallCorrelator
from sidecar.transcript.transcript import Transcript

__all__ = ["PermissionTracker", "StreamAccumulator", "ToolCallCorrelator", "Transcript"]
