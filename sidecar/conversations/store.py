"""Conversation store: owns the active transcript and the conversation list.

Every change to transcript state goes through here, either as a user
action (send, respond, switch, delete, ...) or as a fold dispatched by the
EventRouter to one of the components the store owns. Conversation changes
never merge: the active transcript is always swapped for a new one.
"""

import logging
from collections.abc import Iterable

from sidecar.config import Settings
from sidecar.conversations.history import build_transcript
from sidecar.host.base import HostChannel
from sidecar.models import (
    CancelTaskAction,
    ConversationClearedEvent,
    ConversationDeletedEvent,
    ConversationHistoryEvent,
    ConversationListEvent,
    ConversationSummary,
    DeleteConversationAction,
    DiffPreview,
    Entry,
    GetConversationListAction,
    ModeChangeAction,
    ModeChangedEvent,
    NavigateEvent,
    NewConversationAction,
    OpenDiffPanelAction,
    PermissionResponseAction,
    SessionState,
    SetInputValueEvent,
    SwitchConversationAction,
    TaskDiff,
    TaskDiffEvent,
    TokenUsageEvent,
    UserMessage,
    UserMessageAction,
    WorkMode,
)
from sidecar.transcript.permissions import PermissionTracker
from sidecar.transcript.stream import StreamAccumulator
from sidecar.transcript.tools import ToolCallCorrelator
from sidecar.transcript.transcript import Transcript
from sidecar.transcript.view import ViewItem, render

logger = logging.getLogger(__name__)


class ConversationStore:
    """Single owner of the active transcript, summaries and session state."""

    def __init__(self, host: HostChannel, settings: Settings | None = None) -> None:
        self._host = host
        self.settings = settings or Settings()
        self._transcript = Transcript()
        self._summaries: list[ConversationSummary] = []
        self.session = SessionState()
        self.active_conversation_id: str | None = None
        self.switching_to: str | None = None
        # History replies still owed for switch targets the user deleted.
        self._stale_histories = 0

        self.stream = StreamAccumulator(self)
        self.tools = ToolCallCorrelator(self)
        self.permissions = PermissionTracker(self)

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def summaries(self) -> list[ConversationSummary]:
        return list(self._summaries)

    def render(self) -> list[ViewItem]:
        return render(self._transcript, self.settings)

    # -- Transcript replacement --

    def load(self, entries: Iterable[Entry]) -> Transcript:
        """Atomically replace the active transcript with the given entries."""
        transcript = entries if isinstance(entries, Transcript) else Transcript(entries)
        self._replace(transcript)
        self.session.is_processing = False
        if self.switching_to is not None:
            self.active_conversation_id = self.switching_to
            self.switching_to = None
        return transcript

    def new_conversation(self) -> None:
        """Start over with an empty transcript; the host allocates the new id."""
        self._reset()
        self._host.send(NewConversationAction())

    def switch_to(self, conversation_id: str) -> None:
        """Ask the host for another conversation's history.

        In-flight entries of the current transcript are dropped right away;
        the rest is replaced when the history arrives.
        """
        self._replace(self._transcript.without_transient())
        self.session.is_processing = False
        self.session.token_usage = None
        self.switching_to = conversation_id
        self._summaries = [
            s.model_copy(update={"is_current": s.id == conversation_id}) for s in self._summaries
        ]
        self._host.send(SwitchConversationAction(conversation_id=conversation_id))

    def delete(self, conversation_id: str) -> bool:
        """Delete a conversation. Returns True if it was the open one.

        The open conversation is the active one, or the switch target while
        a switch is pending. Deleting it falls back to an empty transcript at
        once. The host starts the replacement conversation itself, so no
        new_conversation action is sent.
        """
        if conversation_id == self.switching_to:
            # The switch went out first, so its history reply is still owed.
            self._stale_histories += 1
        was_active = self._forget(conversation_id)
        self._host.send(DeleteConversationAction(conversation_id=conversation_id))
        return was_active

    def _forget(self, conversation_id: str) -> bool:
        self._summaries = [s for s in self._summaries if s.id != conversation_id]
        if conversation_id == self.switching_to:
            logger.info("Switch target %s deleted, starting empty", conversation_id)
        elif conversation_id == self.active_conversation_id:
            logger.info("Active conversation %s deleted, starting empty", conversation_id)
        else:
            return False
        self._reset()
        return True

    def _reset(self) -> None:
        self._replace(Transcript())
        self.session.is_processing = False
        self.session.token_usage = None
        self.active_conversation_id = None
        self.switching_to = None

    def _replace(self, transcript: Transcript) -> None:
        self._transcript = transcript

    # -- User actions --

    def send_message(self, content: str) -> UserMessage:
        """Show the user's message and forward it. Raises EmptyMessageError."""
        if not content.strip():
            raise EmptyMessageError()
        transcript = self._transcript
        entry = transcript.append(UserMessage(id=transcript.new_id("msg"), text=content))
        self.session.is_processing = True
        self._host.send(UserMessageAction(content=content))
        return entry

    def respond_permission(self, request_id: str, approved: bool) -> bool:
        """Record the user's decision. Returns False if it was already decided,
        in which case nothing is sent to the host."""
        changed = self.permissions.respond(request_id, approved)
        if changed:
            self._host.send(PermissionResponseAction(request_id=request_id, approved=approved))
        return changed

    def cancel_task(self) -> None:
        self._host.send(CancelTaskAction())
        self.session.is_processing = False

    def change_mode(self, mode: WorkMode) -> None:
        self.session.mode = mode
        self._host.send(ModeChangeAction(mode=mode))

    def refresh_conversations(self) -> None:
        self._host.send(GetConversationListAction())

    def open_diff(self, diff: TaskDiff, file_path: str | None = None) -> None:
        self._host.send(OpenDiffPanelAction(diff=diff, file_path=file_path))

    def take_input(self) -> str:
        """Return the draft input the host has filled in, and clear it."""
        value = self.session.input_value
        self.session.input_value = ""
        return value

    # -- Event handlers --

    def on_conversation_cleared(self, event: ConversationClearedEvent) -> None:
        self._replace(Transcript())
        self.session.is_processing = False

    def on_conversation_history(self, event: ConversationHistoryEvent) -> None:
        if self._stale_histories:
            self._stale_histories -= 1
            logger.info("Ignoring history for a deleted switch target")
            return
        self.load(build_transcript(event.messages))

    def on_conversation_list(self, event: ConversationListEvent) -> None:
        self._summaries = list(event.conversations)
        current = next((s.id for s in self._summaries if s.is_current), None)
        if current is not None and self.switching_to is None:
            self.active_conversation_id = current

    def on_conversation_deleted(self, event: ConversationDeletedEvent) -> None:
        self._forget(event.conversation_id)

    def on_task_diff(self, event: TaskDiffEvent) -> None:
        transcript = self._transcript
        transcript.append(
            DiffPreview(id=transcript.new_id("diff", f"diff-{event.diff.task_id}"), diff=event.diff)
        )

    def on_mode_changed(self, event: ModeChangedEvent) -> None:
        self.session.mode = event.mode

    def on_navigate(self, event: NavigateEvent) -> None:
        self.session.route = event.route

    def on_token_usage(self, event: TokenUsageEvent) -> None:
        self.session.token_usage = event.usage

    def on_set_input_value(self, event: SetInputValueEvent) -> None:
        self.session.input_value += event.value


class EmptyMessageError(Exception):
    def __init__(self) -> None:
        super().__init__("Message is empty")
