"""Shared test helpers: wire-format host events and history messages."""

from typing import Any

from sidecar.host.queue import QueueHostChannel


def stream_chunk(content: str, is_streaming: bool = True) -> dict[str, Any]:
    return {"type": "stream_chunk", "content": content, "isStreaming": is_streaming}


def tool_call(
    name: str,
    call_id: str | None = None,
    params: dict[str, Any] | str | None = None,
    partial: bool | None = None,
) -> dict[str, Any]:
    """Create a tool_call event. Omitted optionals are left off the wire."""
    call: dict[str, Any] = {"type": "tool_use", "name": name, "params": params or {}}
    if call_id is not None:
        call["id"] = call_id
    if partial is not None:
        call["partial"] = partial
    return {"type": "tool_call", "toolCall": call}


def tool_result(
    tool_name: str,
    content: Any = "ok",
    tool_call_id: str | None = None,
    is_error: bool = False,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": "tool_result",
        "toolName": tool_name,
        "content": content,
        "isError": is_error,
    }
    if tool_call_id is not None:
        event["toolCallId"] = tool_call_id
    return event


def permission_request(
    request_id: str = "p1",
    tool_name: str = "write_file",
    operation: str = "write",
    target: str = "src/app.py",
    details: str | None = "Overwrite 12 lines",
) -> dict[str, Any]:
    request: dict[str, Any] = {
        "id": request_id,
        "toolName": tool_name,
        "operation": operation,
        "target": target,
    }
    if details is not None:
        request["details"] = details
    return {"type": "permission_request", "request": request}


def summary(
    conversation_id: str,
    is_current: bool = False,
    preview: str = "Refactor the parser",
    message_count: int = 4,
    timestamp: str = "2026-10-01T12:00:00Z",
) -> dict[str, Any]:
    return {
        "id": conversation_id,
        "timestamp": timestamp,
        "messageCount": message_count,
        "preview": preview,
        "isCurrent": is_current,
    }


def history_message(role: str, content: str = "", **fields: Any) -> dict[str, Any]:
    """A stored display message as the host replays it."""
    return {
        "role": role,
        "content": content,
        "timestamp": "2026-10-01T12:00:00Z",
        **fields,
    }


def sample_diff(task_id: str = "task-1") -> dict[str, Any]:
    return {
        "taskId": task_id,
        "createdAt": "2026-10-01T12:00:00Z",
        "summary": {"filesChanged": 1, "linesAdded": 1, "linesRemoved": 1},
        "files": [
            {
                "path": "src/app.py",
                "added": 1,
                "removed": 1,
                "lines": [
                    {"type": "remove", "content": "x = 1", "oldLineNumber": 3},
                    {"type": "add", "content": "x = 2", "newLineNumber": 3},
                ],
            }
        ],
    }


def sent_types(host: QueueHostChannel) -> list[str]:
    """Drain the host channel and return the action tags, in order."""
    return [action.type for action in host.drain()]
