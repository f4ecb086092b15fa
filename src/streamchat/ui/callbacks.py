"""Logging integration for the TUI.

Hides the details of how log records reach the debug panel. Records may
be emitted from any thread, so panel writes are marshalled onto the app
thread.
"""

import logging
import threading
from typing import TYPE_CHECKING

from .config import LOG_MAX_MESSAGE_LENGTH

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel


class DebugPanelHandler(logging.Handler):
    """Forwards log records to the debug panel.

    Usage:
        handler = DebugPanelHandler(panel, app)
        logging.getLogger().addHandler(handler)
    """

    def __init__(self, panel: "DebugPanel", app: "App", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.panel = panel
        self.app = app

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]!r}"
            if len(message) > LOG_MAX_MESSAGE_LENGTH:
                message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
            component = record.name.rsplit(".", 1)[-1]

            if self.app._thread_id != threading.get_ident():
                self.app.call_from_thread(self.panel.write_record, component, message, record.levelno)
            else:
                self.panel.write_record(component, message, record.levelno)
        except Exception:
            self.handleError(record)
