"""Stream accumulator: folds streamed assistant text into one message.

The host does not promise a single streaming mode. A chunk may be a delta
(only the new suffix) or a snapshot (everything so far, possibly re-sent).
A chunk that is a prefix of the current text, or that extends it, is taken
as the new full text; anything else is appended as a delta.

Prefix detection is a heuristic: a genuine delta that happens to be a
prefix of the text so far (e.g. a repeated short word at the start of the
message) is mistaken for a shorter snapshot.
"""

import logging
from typing import TYPE_CHECKING

from sidecar.models import (
    AssistantMessage,
    ErrorEvent,
    StreamChunkEvent,
    SystemNotice,
    TaskCompleteEvent,
)

if TYPE_CHECKING:
    from sidecar.conversations.store import ConversationStore

logger = logging.getLogger(__name__)


def merge_chunk(current: str, content: str) -> str:
    """Resolve one incoming chunk against the text accumulated so far."""
    if not content:
        return current
    if content.startswith(current) or current.startswith(content):
        return content
    return current + content


class StreamAccumulator:
    """Owns the lifecycle of the single in-flight assistant message."""

    def __init__(self, store: "ConversationStore") -> None:
        self._store = store

    def append_chunk(self, content: str, is_streaming: bool) -> AssistantMessage | None:
        """Fold one chunk. Returns the affected entry, or None for a no-op."""
        transcript = self._store.transcript
        current = transcript.streaming_entry()

        if current is not None:
            updated = current.model_copy(
                update={
                    "text": merge_chunk(current.text, content),
                    "streaming": is_streaming,
                }
            )
            return transcript.replace(updated)

        if not content:
            return None

        return transcript.append(
            AssistantMessage(
                id=transcript.new_id("msg"),
                text=content,
                streaming=is_streaming,
            )
        )

    def finalize(self) -> AssistantMessage | None:
        """Close the streaming message, if there is one."""
        transcript = self._store.transcript
        current = transcript.streaming_entry()
        if current is None:
            return None
        return transcript.replace(current.model_copy(update={"streaming": False}))

    # -- Event handlers --

    def on_stream_chunk(self, event: StreamChunkEvent) -> None:
        self._store.session.is_processing = event.is_streaming
        self.append_chunk(event.content, event.is_streaming)

    def on_task_complete(self, event: TaskCompleteEvent) -> None:
        self.finalize()
        self._store.session.is_processing = False

    def on_error(self, event: ErrorEvent) -> None:
        """Surface a host error as a notice and end the turn."""
        self.finalize()
        transcript = self._store.transcript
        logger.warning("Host reported error: %s", event.message)
        transcript.append(
            SystemNotice(id=transcript.new_id("notice"), text=event.message, is_error=True)
        )
        self._store.session.is_processing = False
