"""Main Textual TUI application.

Orchestrates the UI components. The app never renders replies from the
model directly: it sends through the orchestrator and redraws from store
snapshots delivered by the conversation feeds.
"""

import asyncio
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, ListView

from ..chat import ConversationOrchestrator
from ..store import ConversationFeed, ConversationListFeed, ConversationNotFoundError
from .callbacks import DebugPanelHandler
from .config import LogLevel
from .screens import ConfirmationScreen
from .styles import APP_CSS
from .themes import STREAMCHAT_NIGHT
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    ConversationItem,
    ConversationList,
    DebugPanel,
    copy_text,
)

logger = logging.getLogger(__name__)


class StreamChatApp(App):
    """Textual TUI for streaming chat."""

    CSS = APP_CSS
    TITLE = "streamchat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_conversation", "New Chat"),
        Binding("ctrl+x", "delete_conversation", "Delete Chat"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        orchestrator: ConversationOrchestrator,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._orchestrator = orchestrator
        self._store = orchestrator.store
        self._log_level = log_level
        self._active_id: str | None = None
        self._log_handler: DebugPanelHandler | None = None
        self._saved_handlers: list[logging.Handler] = []

    @property
    def active_conversation_id(self) -> str | None:
        return self._active_id

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ConversationList(id="conversation-list")
        with Vertical(id="chat-pane"):
            yield ChatHistoryWidget(id="chat-history")
            yield DebugPanel(id="debug-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    async def on_mount(self) -> None:
        self.register_theme(STREAMCHAT_NIGHT)
        self.theme = "streamchat-night"
        self.sub_title = f"{self._orchestrator.llm.model} | {self._store.backend_type}"

        self._install_log_handler()

        conversations = await self._orchestrator.list_conversations()
        if conversations:
            self._active_id = conversations[0].id
        else:
            self._active_id = (await self._orchestrator.create_conversation()).id

        self._watch_conversations()
        self._watch_messages(self._active_id)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        self._remove_log_handler()

    def _install_log_handler(self) -> None:
        """Send log records to the debug panel instead of the terminal."""
        panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            panel.log_level = LogLevel.from_string(self._log_level)
            panel.show()

        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        for handler in self._saved_handlers:
            root.removeHandler(handler)
        self._log_handler = DebugPanelHandler(panel, self)
        root.addHandler(self._log_handler)
        if self._log_level is not None:
            root.setLevel(panel.log_level)
        logger.info("Log panel attached")

    def _remove_log_handler(self) -> None:
        root = logging.getLogger()
        if self._log_handler is not None:
            root.removeHandler(self._log_handler)
            self._log_handler = None
        for handler in self._saved_handlers:
            root.addHandler(handler)
        self._saved_handlers = []

    @work(exclusive=True, group="conversation-list")
    async def _watch_conversations(self) -> None:
        """Keep the sidebar in step with the stored conversation list."""
        sidebar = self.query_one("#conversation-list", ConversationList)
        async for conversations in ConversationListFeed(self._store):
            await sidebar.sync(conversations, self._active_id)

    @work(exclusive=True, group="messages")
    async def _watch_messages(self, conversation_id: str) -> None:
        """Redraw the chat pane from snapshots of one conversation.

        Starting a new watch cancels the previous one.
        """
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        await chat.reset()
        async for messages in ConversationFeed(self._store, conversation_id):
            await chat.sync(messages)

    async def _switch_to(self, conversation_id: str) -> None:
        if conversation_id == self._active_id:
            return
        self._active_id = conversation_id
        logger.debug("Switched to conversation %s", conversation_id)
        self._watch_messages(conversation_id)
        self.query_one("#conversation-list", ConversationList).highlight(conversation_id)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, ConversationItem):
            await self._switch_to(event.item.conversation.id)
            self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Send user input to the active conversation."""
        if self._active_id is None:
            return
        try:
            await self._orchestrator.send_message(self._active_id, event.value)
        except (ValueError, ConversationNotFoundError) as e:
            logger.warning("Message not sent: %s", e)
            self.notify(f"Not sent: {e}", severity="error", timeout=4)

    async def action_new_conversation(self) -> None:
        conversation = await self._orchestrator.create_conversation()
        await self._switch_to(conversation.id)
        self.notify("New chat", timeout=2)

    def action_delete_conversation(self) -> None:
        """Ask for confirmation, then delete the active conversation."""
        if self._active_id is None:
            return
        conversation_id = self._active_id

        async def _on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                await self._delete(conversation_id)

        self.push_screen(
            ConfirmationScreen("Delete this chat and all of its messages?", title="Delete Chat"),
            _on_confirm,
        )

    async def _delete(self, conversation_id: str) -> None:
        try:
            await self._orchestrator.delete_conversation(conversation_id)
        except ConversationNotFoundError as e:
            self.notify(str(e), severity="warning", timeout=3)
            return

        remaining = await self._orchestrator.list_conversations()
        if remaining:
            next_id = remaining[0].id
        else:
            next_id = (await self._orchestrator.create_conversation()).id
        self._active_id = None
        await self._switch_to(next_id)
        self.notify("Chat deleted", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if not response:
            self.notify("No response to copy", severity="warning")
            return
        copy_text(self, response, "Response")


async def run_textual_tui(
    orchestrator: ConversationOrchestrator,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        orchestrator: Orchestrator with a connected store
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = StreamChatApp(orchestrator, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
