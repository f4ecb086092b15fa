"""Abstract base class for message renderers.

This module defines how a message becomes presentational output.
The abstraction hides:
- Output target (HTML string, terminal renderables)
- Markdown conversion library
- Syntax highlighting engine

The render pass itself (pending indicator, segmentation, streaming caret)
is shared by every target.
"""

from abc import ABC, abstractmethod
from typing import Any

from .segmenter import Segment, segment

# Code blocks with more lines than this get line numbers
LINE_NUMBER_THRESHOLD = 5

PENDING_TEXT = "Thinking..."


def count_lines(code: str) -> int:
    """Count newline-separated lines; a final newline opens an empty last line."""
    return code.count("\n") + 1


def spans_many_lines(code: str) -> bool:
    """Check whether code runs past the line threshold."""
    return count_lines(code) > LINE_NUMBER_THRESHOLD


def show_line_numbers(code: str) -> bool:
    """Check whether a code block is long enough to number its lines."""
    return spans_many_lines(code)


class MessageRenderer(ABC):
    """Abstract message renderer.

    Subclasses produce one output element per segment; the base class
    decides which elements make up a message.
    """

    @abstractmethod
    def render_code(self, seg: Segment) -> Any:
        """Render a code segment as a titled, highlighted block."""

    @abstractmethod
    def render_prose(self, seg: Segment) -> Any:
        """Render a prose segment through markdown conversion."""

    @abstractmethod
    def render_pending(self) -> Any:
        """Render the indicator shown before the first token arrives."""

    @abstractmethod
    def render_caret(self) -> Any:
        """Render the caret appended while a reply is streaming."""

    @abstractmethod
    def compose(self, parts: list[Any]) -> Any:
        """Combine rendered parts into the final output."""

    def render(self, segments: tuple[Segment, ...] | list[Segment]) -> list[Any]:
        """Render segments in document order.

        Args:
            segments: Output of the segmenter

        Returns:
            One rendered element per segment
        """
        return [
            self.render_code(seg) if seg.is_code else self.render_prose(seg)
            for seg in segments
        ]

    def render_message(self, content: str, is_streaming: bool = False) -> Any:
        """Render a whole message from its latest stored snapshot.

        Args:
            content: Full message content
            is_streaming: Whether the message is still being generated

        Returns:
            Composed output for the target
        """
        if is_streaming and not content:
            return self.compose([self.render_pending()])

        parts = self.render(segment(content, is_streaming))
        if is_streaming:
            parts.append(self.render_caret())
        return self.compose(parts)
