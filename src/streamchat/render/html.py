"""HTML message renderer using markdown-it-py and Pygments.

Hidden design decisions:
- markdown-it-py with the CommonMark preset plus tables, raw HTML disabled
- Links open in a new browsing context with a safe ``rel``
- Pygments HTML formatter for every code block, table-style line numbers
- Code spans running past the line threshold are shown as code blocks
"""

from html import escape
from typing import Any

from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

from .base import PENDING_TEXT, MessageRenderer, show_line_numbers
from .segmenter import Segment, language_from_info
from .spans import keep_code_span_sources, long_code_span

DEFAULT_STYLE = "monokai"


def highlight_code(code: str, language: str, style: str = DEFAULT_STYLE) -> str:
    """Highlight code as HTML.

    Args:
        code: Source text
        language: Language tag; unknown tags fall back to plain text
        style: Pygments style name

    Returns:
        HTML fragment from the Pygments formatter
    """
    try:
        lexer = get_lexer_by_name(language)
    except ClassNotFound:
        lexer = TextLexer()
    formatter = HtmlFormatter(
        style=style,
        cssclass="highlight",
        linenos="table" if show_line_numbers(code) else False,
    )
    return highlight(code, lexer, formatter)


def code_block_html(code: str, language: str, complete: bool = True, style: str = DEFAULT_STYLE) -> str:
    """Wrap highlighted code in a block titled with its language."""
    classes = "code-block" if complete else "code-block streaming"
    return (
        f'<div class="{classes}">'
        f'<div class="code-block-title">{escape(language)}</div>'
        f"{highlight_code(code, language, style)}"
        "</div>"
    )


def _render_link_open(self, tokens, idx, options, env):
    token = tokens[idx]
    token.attrSet("target", "_blank")
    token.attrSet("rel", "noopener noreferrer")
    return self.renderToken(tokens, idx, options, env)


def _render_fence(self, tokens, idx, options, env):
    token = tokens[idx]
    return code_block_html(token.content, language_from_info(token.info))


def _render_code_block(self, tokens, idx, options, env):
    return code_block_html(tokens[idx].content, "text")


def _render_code_inline(self, tokens, idx, options, env):
    source = long_code_span(tokens[idx])
    if source is None:
        return self.code_inline(tokens, idx, options, env)
    return code_block_html(source, "text")


def create_markdown() -> MarkdownIt:
    """Create the markdown converter used for prose segments."""
    md = keep_code_span_sources(MarkdownIt("commonmark", {"html": False}).enable("table"))
    md.add_render_rule("link_open", _render_link_open)
    md.add_render_rule("fence", _render_fence)
    md.add_render_rule("code_block", _render_code_block)
    md.add_render_rule("code_inline", _render_code_inline)
    return md


class HtmlRenderer(MessageRenderer):
    """Renders messages to an HTML string."""

    def __init__(self, style: str = DEFAULT_STYLE):
        self._style = style
        self._md = create_markdown()

    def render_code(self, seg: Segment) -> str:
        return code_block_html(seg.text, seg.language or "text", seg.complete, self._style)

    def render_prose(self, seg: Segment) -> str:
        return f'<div class="prose">{self._md.render(seg.text)}</div>'

    def render_pending(self) -> str:
        dots = '<span class="dot"></span>' * 3
        return f'<div class="pending">{dots}<span>{PENDING_TEXT}</span></div>'

    def render_caret(self) -> str:
        return '<span class="caret"></span>'

    def compose(self, parts: list[Any]) -> str:
        return '<div class="message">' + "".join(parts) + "</div>"

    def stylesheet(self) -> str:
        """Get the CSS rules for highlighted code."""
        return HtmlFormatter(style=self._style).get_style_defs(".highlight")
