"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Conversation sidebar entries
- Message rendering and in-place updates while a reply streams
- Input history management
- Log rendering and scrolling
"""

from datetime import datetime

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Label, ListItem, ListView, RichLog, Static, TextArea

from ..render import ConsoleRenderer
from ..store import Conversation, Message, Role
from .config import (
    CONVERSATION_TITLE_MAX_LENGTH,
    INPUT_HISTORY_MAX_SIZE,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    LogLevel,
)


def copy_text(widget, text: str, label: str) -> None:
    """Copy to the system clipboard, falling back to the terminal (OSC 52)."""
    try:
        import pyperclip
        pyperclip.copy(text)
        widget.app.notify(f"{label} copied", timeout=2)
    except Exception:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} copied (terminal)", timeout=2)


class ConversationItem(ListItem):
    """Sidebar entry for one conversation."""

    def __init__(self, conversation: Conversation) -> None:
        super().__init__()
        self.conversation = conversation

    def compose(self) -> ComposeResult:
        title = self.conversation.title
        if len(title) > CONVERSATION_TITLE_MAX_LENGTH:
            title = title[:CONVERSATION_TITLE_MAX_LENGTH - 1] + "…"
        yield Label(title)


class ConversationList(ListView):
    """Conversation sidebar, newest first."""

    BORDER_TITLE = "Chats"

    async def sync(self, conversations: list[Conversation], active_id: str | None) -> None:
        """Rebuild the entries from a conversation list snapshot."""
        await self.clear()
        await self.extend(ConversationItem(c) for c in conversations)
        self.border_subtitle = str(len(conversations))
        if active_id is not None:
            self.highlight(active_id)

    def highlight(self, conversation_id: str) -> None:
        """Move the cursor to a conversation, if listed."""
        for index, item in enumerate(self.query(ConversationItem)):
            if item.conversation.id == conversation_id:
                self.index = index
                return


class MessageView(Vertical):
    """One chat message, re-rendered in place as its content grows.

    Clicking the message copies its raw content.
    """

    def __init__(self, message: Message, renderer: ConsoleRenderer) -> None:
        role_class = "user-message" if message.role is Role.USER else "assistant-message"
        super().__init__(classes=role_class)
        self._renderer = renderer
        self._message = message
        self._header = Static(self._header_text(), classes="message-header")
        self._body = Static(self._render_body(), classes="message-body")
        self.set_class(message.is_streaming, "-streaming")

    @property
    def message_id(self) -> str:
        return self._message.id

    @property
    def message(self) -> Message:
        return self._message

    def compose(self) -> ComposeResult:
        yield self._header
        yield self._body

    def show(self, message: Message) -> None:
        """Update to a newer snapshot of the same message."""
        if message == self._message:
            return
        self._message = message
        self._body.update(self._render_body())
        self.set_class(message.is_streaming, "-streaming")

    def _header_text(self) -> str:
        prefix = "> You" if self._message.role is Role.USER else "< Assistant"
        return f"{prefix} [{self._message.created_at.astimezone().strftime(MESSAGE_TIMESTAMP_FORMAT)}]"

    def _render_body(self):
        if self._message.role is Role.USER:
            return Text(self._message.content)
        return self._renderer.render_message(self._message.content, self._message.is_streaming)

    def on_click(self, event: Click) -> None:
        event.stop()
        if self._message.content:
            copy_text(self, self._message.content, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable message list that mirrors conversation snapshots.

    Views are keyed by message id: new messages are mounted, changed ones
    are updated in place and vanished ones removed. The view follows the
    newest content while scrolled to the bottom.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "No conversation"
    ALLOW_SELECT = True

    def __init__(self, *args, renderer: ConsoleRenderer | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._renderer = renderer or ConsoleRenderer()
        self._messages: list[Message] = []

    async def sync(self, messages: list[Message]) -> None:
        """Apply a conversation snapshot."""
        follow = self.scroll_y >= self.max_scroll_y - 1
        views = {view.message_id: view for view in self.query(MessageView)}
        wanted = {message.id for message in messages}

        for message_id, view in views.items():
            if message_id not in wanted:
                await view.remove()

        new_views = []
        for message in messages:
            view = views.get(message.id)
            if view is None:
                new_views.append(MessageView(message, self._renderer))
            else:
                view.show(message)
        if new_views:
            await self.mount_all(new_views)

        self._messages = messages
        self.border_subtitle = f"{len(messages)} messages" if messages else "Say something below"
        if follow or new_views:
            self.scroll_end(animate=False)

    async def reset(self) -> None:
        """Drop all views, e.g. when switching conversations."""
        self._messages = []
        await self.remove_children()
        self.border_subtitle = "No conversation"

    def get_last_response(self) -> str | None:
        """Get the last finished assistant response."""
        for message in reversed(self._messages):
            if message.role is Role.ASSISTANT and not message.is_streaming:
                return message.content
        return None


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self) -> ComposeResult:
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: terminals do not report modifiers with Enter, so Ctrl+J
        submits.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index == -1:
                return
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class DebugPanel(RichLog):
    """Log panel showing application log records above a level threshold.

    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Hidden"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.INFO, **kwargs) -> None:
        super().__init__(
            *args,
            markup=False,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        self.display = False

    def write_record(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        line = Text()
        line.append(datetime.now().strftime(LOG_TIMESTAMP_FORMAT), style="dim")
        line.append(" ")
        line.append(f"{LogLevel.name(level):<7}", style=self.LEVEL_COLORS.get(level, "bold red"))
        line.append(f"[{component}] ", style="magenta")
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self._update_subtitle()

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
        else:
            self.show()
        return bool(self.display)

    def get_plain_text(self) -> str:
        """Get plain text content of the log for copying."""
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        copy_text(self, text, "Log")
