"""Abstract host channel: the outbound side of the client/host boundary."""

from abc import ABC, abstractmethod

from sidecar.models import HostAction


class HostChannel(ABC):
    """Delivers user actions to the agent host.

    Sending is fire-and-forget. There is no acknowledgement, timeout or
    retry: a later inbound event, if the host sends one, is the only answer.
    """

    @abstractmethod
    def send(self, action: HostAction) -> None:
        """Hand one action to the transport. Must not block."""
        ...
