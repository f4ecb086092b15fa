"""Terminal UI module for streamchat.

Provides a Textual-based TUI for streaming conversations.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (sidebar, message views, input history, log)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (confirmation screens)
- callbacks.py: Logging integration (how the log panel receives records)
- app.py: Application orchestration (user interaction flow)
"""

from .app import StreamChatApp, run_textual_tui
from .callbacks import DebugPanelHandler
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, ConversationList, DebugPanel, MessageView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "ConversationList",
    "DebugPanel",
    "DebugPanelHandler",
    "LogLevel",
    "MessageView",
    "StreamChatApp",
    "run_textual_tui",
]
