"""Terminal message renderer using Rich.

Hides the details of how segments look in a terminal: Rich Markdown for
prose, Rich Syntax inside a titled panel for code. Code spans in prose that
run past the line threshold are cut out and shown as code panels.
"""

from typing import Any

from markdown_it import MarkdownIt
from rich import box
from rich.console import Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from .base import PENDING_TEXT, MessageRenderer, show_line_numbers
from .segmenter import Segment
from .spans import keep_code_span_sources, split_long_code_spans

DEFAULT_CODE_THEME = "monokai"
CARET = "▌"


class ConsoleRenderer(MessageRenderer):
    """Renders messages to Rich renderables.

    Usage:
        renderer = ConsoleRenderer()
        console.print(renderer.render_message(message.content, message.is_streaming))
    """

    def __init__(self, code_theme: str = DEFAULT_CODE_THEME, hyperlinks: bool = True):
        self._code_theme = code_theme
        self._hyperlinks = hyperlinks
        self._md = keep_code_span_sources(MarkdownIt("commonmark").enable("table"))

    def render_code(self, seg: Segment) -> Panel:
        return self._code_panel(seg.text, seg.language or "text", seg.complete)

    def render_prose(self, seg: Segment) -> Markdown | Group:
        parts = split_long_code_spans(self._md, seg.text)
        if not any(is_code for is_code, _ in parts):
            return self._markdown(seg.text)
        return Group(*(
            self._code_panel(text, "text") if is_code else self._markdown(text)
            for is_code, text in parts
        ))

    def _markdown(self, text: str) -> Markdown:
        return Markdown(
            text,
            code_theme=self._code_theme,
            hyperlinks=self._hyperlinks,
        )

    def _code_panel(self, code: str, language: str, complete: bool = True) -> Panel:
        syntax = Syntax(
            code.rstrip("\n"),
            language,
            theme=self._code_theme,
            line_numbers=show_line_numbers(code),
            word_wrap=True,
        )
        return Panel(
            syntax,
            title=language,
            title_align="left",
            box=box.ROUNDED,
            border_style="magenta" if complete else "yellow",
            padding=(0, 1),
        )

    def render_pending(self) -> Text:
        text = Text()
        for color in ("magenta", "bright_magenta", "blue"):
            text.append("● ", style=color)
        text.append(PENDING_TEXT, style="dim")
        return text

    def render_caret(self) -> Text:
        return Text(CARET, style="blink bold magenta")

    def compose(self, parts: list[Any]) -> Group:
        return Group(*parts)
