"""Chat orchestration module for streamchat.

Runs the send-then-stream lifecycle of conversation turns.
"""

from .orchestrator import ConversationOrchestrator
from .tasks import TaskRunner
from .titles import TitleGenerator, clean_title

__all__ = [
    "ConversationOrchestrator",
    "TaskRunner",
    "TitleGenerator",
    "clean_title",
]
