"""Transcript: the ordered entries of one conversation, plus lookup indices.

Entries live in insertion order and are never re-sorted or removed one at a
time. Beside the list the transcript keeps the indices the fold components
need, so "most recent matching entry" lookups never rescan the list:

- entry id -> position
- tool call id -> entry id
- tool name -> unresolved tool entry ids, in append order
- the one assistant entry that is still streaming
- permission request id -> entry id, and which of those are still pending

All index maintenance happens in _index/_unindex, called from append and
replace only.
"""

import logging
from bisect import insort
from collections.abc import Iterable, Iterator
from uuid import uuid4

from sidecar.models import AssistantMessage, Entry, PermissionEntry, ToolActivity

logger = logging.getLogger(__name__)


class Transcript:
    """Ordered, append-mostly entry sequence for one conversation."""

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._entries: list[Entry] = []
        self._positions: dict[str, int] = {}
        self._tool_calls: dict[str, str] = {}
        self._unresolved_tools: dict[str, list[str]] = {}
        self._streaming_id: str | None = None
        self._permissions: dict[str, str] = {}
        self._pending_permissions: set[str] = set()
        for entry in entries:
            self.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._positions

    @property
    def entries(self) -> list[Entry]:
        """A snapshot copy of the entries, in order."""
        return list(self._entries)

    def get(self, entry_id: str) -> Entry | None:
        position = self._positions.get(entry_id)
        if position is None:
            return None
        return self._entries[position]

    def new_id(self, prefix: str, preferred: str | None = None) -> str:
        """Return an id not yet used in this transcript.

        The preferred id (a host-assigned one) wins when it is free.
        """
        if preferred and preferred not in self._positions:
            return preferred
        while True:
            candidate = f"{prefix}-{uuid4()}"
            if candidate not in self._positions:
                return candidate

    # -- Mutation --

    def append(self, entry: Entry) -> Entry:
        """Append an entry. Raises DuplicateEntryError if its id is taken."""
        if entry.id in self._positions:
            raise DuplicateEntryError(entry.id)
        self._index(entry, len(self._entries))
        self._entries.append(entry)
        return entry

    def replace(self, entry: Entry) -> Entry:
        """Swap in a new version of an existing entry, keeping its position."""
        position = self._positions.get(entry.id)
        if position is None:
            raise EntryNotFoundError(entry.id)
        previous = self._entries[position]
        if previous.kind != entry.kind:
            raise TranscriptError(
                f"Entry {entry.id} cannot change kind from {previous.kind} to {entry.kind}"
            )
        self._unindex(previous)
        try:
            self._index(entry, position)
        except TranscriptError:
            self._index(previous, position)
            raise
        self._entries[position] = entry
        return entry

    # -- Indexed lookups --

    def streaming_entry(self) -> AssistantMessage | None:
        """The assistant message still being streamed, if any."""
        if self._streaming_id is None:
            return None
        entry = self.get(self._streaming_id)
        assert isinstance(entry, AssistantMessage)
        return entry

    def find_tool_call(self, call_id: str) -> ToolActivity | None:
        entry_id = self._tool_calls.get(call_id)
        if entry_id is None:
            return None
        entry = self.get(entry_id)
        assert isinstance(entry, ToolActivity)
        return entry

    def latest_unresolved_tool(self, name: str) -> ToolActivity | None:
        """Most recently appended tool entry with this call name and no result.

        Recency of appending is the only tie-breaker between unresolved calls
        that share a name. Call ids are not consulted here.
        """
        ids = self._unresolved_tools.get(name)
        if not ids:
            return None
        entry = self.get(ids[-1])
        assert isinstance(entry, ToolActivity)
        return entry

    def find_permission(self, request_id: str) -> PermissionEntry | None:
        """Permission entry for a request id, pending or not."""
        entry_id = self._permissions.get(request_id)
        if entry_id is None:
            return None
        entry = self.get(entry_id)
        assert isinstance(entry, PermissionEntry)
        return entry

    def pending_permission(self, request_id: str) -> PermissionEntry | None:
        if request_id not in self._pending_permissions:
            return None
        return self.find_permission(request_id)

    @property
    def has_transient(self) -> bool:
        return (
            self._streaming_id is not None
            or bool(self._pending_permissions)
            or any(self._unresolved_tools.values())
        )

    def without_transient(self) -> "Transcript":
        """A new transcript holding only entries in a terminal state.

        Drops the streaming assistant message, unresolved tool activity and
        pending permission prompts.
        """
        kept = [entry for entry in self._entries if not _is_transient(entry)]
        dropped = len(self._entries) - len(kept)
        if dropped:
            logger.debug("Discarding %d in-flight entries", dropped)
        return Transcript(kept)

    # -- Index maintenance --

    def _index(self, entry: Entry, position: int) -> None:
        if isinstance(entry, AssistantMessage) and entry.streaming:
            if self._streaming_id is not None and self._streaming_id != entry.id:
                raise TranscriptError(
                    f"Assistant message {self._streaming_id} is already streaming"
                )
            self._streaming_id = entry.id
        self._positions[entry.id] = position
        if isinstance(entry, ToolActivity) and entry.call is not None:
            if entry.call.id:
                self._tool_calls.setdefault(entry.call.id, entry.id)
            if not entry.resolved:
                # Ordered by position, so a replaced entry keeps its recency.
                insort(
                    self._unresolved_tools.setdefault(entry.call.name, []),
                    entry.id,
                    key=self._positions.__getitem__,
                )
        elif isinstance(entry, PermissionEntry):
            owner = self._permissions.setdefault(entry.request.id, entry.id)
            if owner == entry.id and entry.pending:
                self._pending_permissions.add(entry.request.id)

    def _unindex(self, entry: Entry) -> None:
        if isinstance(entry, AssistantMessage) and self._streaming_id == entry.id:
            self._streaming_id = None
        elif isinstance(entry, ToolActivity) and entry.call is not None:
            if entry.call.id and self._tool_calls.get(entry.call.id) == entry.id:
                del self._tool_calls[entry.call.id]
            ids = self._unresolved_tools.get(entry.call.name)
            if ids and entry.id in ids:
                ids.remove(entry.id)
                if not ids:
                    del self._unresolved_tools[entry.call.name]
        elif isinstance(entry, PermissionEntry):
            if self._permissions.get(entry.request.id) == entry.id:
                del self._permissions[entry.request.id]
                self._pending_permissions.discard(entry.request.id)
        del self._positions[entry.id]


def _is_transient(entry: Entry) -> bool:
    if isinstance(entry, AssistantMessage):
        return entry.streaming
    if isinstance(entry, ToolActivity):
        return entry.call is not None and not entry.resolved
    if isinstance(entry, PermissionEntry):
        return entry.pending
    return False


class TranscriptError(Exception):
    pass


class DuplicateEntryError(TranscriptError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Duplicate entry id: {entry_id}")


class EntryNotFoundError(TranscriptError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")
