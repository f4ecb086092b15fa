"""Message rendering module for streamchat.

Turns stored message content, complete or still streaming, into
presentational output.
"""

from .base import MessageRenderer
from .console import ConsoleRenderer
from .html import HtmlRenderer
from .segmenter import Segment, SegmentKind, reassemble, segment

__all__ = [
    "ConsoleRenderer",
    "HtmlRenderer",
    "MessageRenderer",
    "Segment",
    "SegmentKind",
    "reassemble",
    "segment",
]
