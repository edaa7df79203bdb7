"""Active conversation state and the history / list flows around it."""

from sidecar.conversations.store import ConversationStore, EmptyMessageError

__all__ = ["ConversationStore", "EmptyMessageError"]
