"""Contract tests for the Transcript arena and its indices."""

import pytest

from sidecar.models import (
    AssistantMessage,
    PermissionEntry,
    PermissionRequest,
    PermissionResponse,
    SystemNotice,
    ToolActivity,
    ToolCall,
    ToolResult,
    UserMessage,
)
from sidecar.transcript.transcript import (
    DuplicateEntryError,
    EntryNotFoundError,
    Transcript,
    TranscriptError,
)


def _request(request_id: str = "p1") -> PermissionRequest:
    return PermissionRequest(
        id=request_id, tool_name="write_file", operation="write", target="a.py",
    )


class TestAppendAndOrder:
    def test_insertion_order_preserved(self):
        transcript = Transcript()
        transcript.append(UserMessage(id="b", text="first"))
        transcript.append(UserMessage(id="a", text="second"))
        assert [e.id for e in transcript] == ["b", "a"]
        assert len(transcript) == 2
        assert "a" in transcript

    def test_duplicate_id_rejected(self):
        transcript = Transcript([UserMessage(id="u1", text="hi")])
        with pytest.raises(DuplicateEntryError):
            transcript.append(SystemNotice(id="u1", text="clash"))
        assert len(transcript) == 1

    def test_entries_is_a_copy(self):
        transcript = Transcript([UserMessage(id="u1", text="hi")])
        snapshot = transcript.entries
        snapshot.clear()
        assert len(transcript) == 1

    def test_new_id_prefers_free_host_id(self):
        transcript = Transcript([UserMessage(id="u1", text="hi")])
        assert transcript.new_id("msg", "t9") == "t9"
        fresh = transcript.new_id("msg", "u1")
        assert fresh != "u1"
        assert fresh.startswith("msg-")


class TestReplace:
    def test_replace_keeps_position(self):
        transcript = Transcript([
            AssistantMessage(id="a1", text="Hel", streaming=True),
            UserMessage(id="u1", text="hi"),
        ])
        transcript.replace(AssistantMessage(id="a1", text="Hello", streaming=True))
        assert [e.id for e in transcript] == ["a1", "u1"]
        assert transcript.get("a1").text == "Hello"

    def test_replace_unknown_id(self):
        with pytest.raises(EntryNotFoundError):
            Transcript().replace(UserMessage(id="nope", text="x"))

    def test_replace_cannot_change_kind(self):
        transcript = Transcript([UserMessage(id="e1", text="hi")])
        with pytest.raises(TranscriptError):
            transcript.replace(SystemNotice(id="e1", text="hi"))


class TestStreamingIndex:
    def test_single_streaming_entry(self):
        transcript = Transcript([AssistantMessage(id="a1", text="x", streaming=True)])
        assert transcript.streaming_entry().id == "a1"
        with pytest.raises(TranscriptError):
            transcript.append(AssistantMessage(id="a2", text="y", streaming=True))
        assert "a2" not in transcript

    def test_finalizing_clears_streaming_pointer(self):
        transcript = Transcript([AssistantMessage(id="a1", text="x", streaming=True)])
        transcript.replace(AssistantMessage(id="a1", text="x", streaming=False))
        assert transcript.streaming_entry() is None
        transcript.append(AssistantMessage(id="a2", text="y", streaming=True))
        assert transcript.streaming_entry().id == "a2"

    def test_failed_replace_leaves_indices_intact(self):
        transcript = Transcript([
            AssistantMessage(id="a1", text="x", streaming=True),
            AssistantMessage(id="a2", text="y", streaming=False),
        ])
        with pytest.raises(TranscriptError):
            transcript.replace(AssistantMessage(id="a2", text="y", streaming=True))
        assert transcript.streaming_entry().id == "a1"
        assert transcript.get("a2").streaming is False


class TestToolIndex:
    def test_find_by_call_id(self):
        transcript = Transcript([ToolActivity(id="e1", call=ToolCall(id="t1", name="read_file"))])
        assert transcript.find_tool_call("t1").id == "e1"
        assert transcript.find_tool_call("t2") is None

    def test_latest_unresolved_by_recency(self):
        transcript = Transcript([
            ToolActivity(id="e1", call=ToolCall(name="search_files")),
            ToolActivity(id="e2", call=ToolCall(name="search_files")),
            ToolActivity(id="e3", call=ToolCall(name="read_file")),
        ])
        assert transcript.latest_unresolved_tool("search_files").id == "e2"
        assert transcript.latest_unresolved_tool("list_files") is None

    def test_replacing_older_call_keeps_recency(self):
        """Updating a partial call in place must not make it the newest."""
        transcript = Transcript([
            ToolActivity(id="e1", call=ToolCall(name="search_files", partial=True)),
            ToolActivity(id="e2", call=ToolCall(name="search_files")),
        ])
        transcript.replace(ToolActivity(id="e1", call=ToolCall(name="search_files")))
        assert transcript.latest_unresolved_tool("search_files").id == "e2"

    def test_resolved_calls_leave_unresolved_index(self):
        transcript = Transcript([
            ToolActivity(id="e1", call=ToolCall(name="search_files")),
            ToolActivity(id="e2", call=ToolCall(name="search_files")),
        ])
        transcript.replace(ToolActivity(
            id="e2",
            call=ToolCall(name="search_files"),
            result=ToolResult(tool_name="search_files", content="x"),
        ))
        assert transcript.latest_unresolved_tool("search_files").id == "e1"

    def test_calls_with_ids_are_candidates(self):
        transcript = Transcript([
            ToolActivity(id="e1", call=ToolCall(name="read_file")),
            ToolActivity(id="e2", call=ToolCall(id="t2", name="read_file")),
        ])
        assert transcript.latest_unresolved_tool("read_file").id == "e2"

    def test_orphan_results_not_indexed(self):
        transcript = Transcript([
            ToolActivity(id="r1", result=ToolResult(tool_name="read_file", tool_call_id="t1")),
        ])
        assert transcript.find_tool_call("t1") is None
        assert transcript.latest_unresolved_tool("read_file") is None


class TestPermissionIndex:
    def test_pending_lookup(self):
        transcript = Transcript([PermissionEntry(id="p1", request=_request("p1"))])
        assert transcript.pending_permission("p1").id == "p1"

    def test_terminal_not_pending_but_findable(self):
        transcript = Transcript([PermissionEntry(id="p1", request=_request("p1"))])
        transcript.replace(PermissionEntry(
            id="p1", request=_request("p1"), response=PermissionResponse.DENIED,
        ))
        assert transcript.pending_permission("p1") is None
        assert transcript.find_permission("p1").response is PermissionResponse.DENIED


class TestTransient:
    def test_without_transient_drops_in_flight_entries(self):
        transcript = Transcript([
            UserMessage(id="u1", text="hi"),
            AssistantMessage(id="a0", text="done", streaming=False),
            ToolActivity(
                id="t0",
                call=ToolCall(name="read_file"),
                result=ToolResult(tool_name="read_file", content="x"),
            ),
            ToolActivity(id="t1", call=ToolCall(name="read_file")),
            PermissionEntry(id="p1", request=_request("p1")),
            AssistantMessage(id="a1", text="typing", streaming=True),
        ])
        assert transcript.has_transient

        settled = transcript.without_transient()
        assert [e.id for e in settled] == ["u1", "a0", "t0"]
        assert not settled.has_transient
        assert settled.streaming_entry() is None
        assert len(transcript) == 6
