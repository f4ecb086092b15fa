"""
streamchat: streaming chat with incremental markdown and code rendering.

Each subpackage hides one design decision: where messages live (store),
which model answers (llm), how a token stream becomes stored text
(streaming), how turns are scheduled (chat) and how text is displayed
(render).
"""

__version__ = "0.1.0"

from .render import segment
from .store import Conversation, Message, Role

__all__ = [
    "Conversation",
    "Message",
    "Role",
    "segment",
]
