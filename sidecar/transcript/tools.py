"""Tool call correlator: pairs tool invocations with their results.

Results are matched to calls by id first. When that fails, the fallback is
the most recently appended unresolved call of the same tool name, whatever
id that call carries. The fallback is deliberately simple: two unresolved
calls that share a name are told apart only by which was appended last, so
a result meant for the older call lands on the newer one. Results that
match nothing are kept as orphan entries rather than dropped, and an orphan
is never matched retroactively by a later call.
"""

import logging
from typing import TYPE_CHECKING

from sidecar.models import ToolActivity, ToolCall, ToolCallEvent, ToolResult, ToolResultEvent

if TYPE_CHECKING:
    from sidecar.conversations.store import ConversationStore

logger = logging.getLogger(__name__)


class ToolCallCorrelator:
    """Folds tool_call and tool_result events into ToolActivity entries."""

    def __init__(self, store: "ConversationStore") -> None:
        self._store = store

    def record_call(self, call: ToolCall) -> ToolActivity:
        """Append a tool call, or update a partial one with the same id."""
        transcript = self._store.transcript

        if call.id:
            existing = transcript.find_tool_call(call.id)
            if existing is not None:
                if existing.call is not None and not existing.call.partial:
                    logger.info("Tool call %s already complete, ignoring update", call.id)
                    return existing
                return transcript.replace(existing.model_copy(update={"call": call}))

        return transcript.append(
            ToolActivity(id=transcript.new_id("tool", call.id), call=call)
        )

    def record_result(self, result: ToolResult) -> ToolActivity | None:
        """Attach a result to its call. Returns None when it was a duplicate."""
        transcript = self._store.transcript
        target: ToolActivity | None = None

        if result.tool_call_id:
            target = transcript.find_tool_call(result.tool_call_id)
            if target is not None and target.resolved:
                logger.info(
                    "Duplicate result for tool call %s ignored", result.tool_call_id,
                )
                return None

        if target is None:
            target = transcript.latest_unresolved_tool(result.tool_name)

        if target is None:
            logger.warning(
                "No call found for %s result (id=%s), recording as orphan",
                result.tool_name,
                result.tool_call_id,
            )
            return transcript.append(
                ToolActivity(id=transcript.new_id("result"), result=result)
            )

        return transcript.replace(target.model_copy(update={"result": result}))

    # -- Event handlers --

    def on_tool_call(self, event: ToolCallEvent) -> None:
        self.record_call(event.tool_call)

    def on_tool_result(self, event: ToolResultEvent) -> None:
        self.record_result(event.to_result())
