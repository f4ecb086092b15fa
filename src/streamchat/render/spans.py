"""Inline code spans long enough to be shown as code blocks.

markdown-it folds the line breaks inside a code span into spaces, so the
span's raw source is kept on the token (``token.meta["source"]``) by
wrapping the ``backticks`` inline rule.
"""

from markdown_it import MarkdownIt
from markdown_it.rules_inline import backtick
from markdown_it.rules_inline.state_inline import StateInline
from markdown_it.token import Token

from .base import spans_many_lines

SOURCE_KEY = "source"


def _backtick_keeping_source(state: StateInline, silent: bool) -> bool:
    start = state.pos
    token_count = len(state.tokens)
    if not backtick(state, silent):
        return False
    if not silent and len(state.tokens) > token_count:
        token = state.tokens[-1]
        if token.type == "code_inline":
            width = len(token.markup)
            token.meta[SOURCE_KEY] = state.src[start + width:state.pos - width]
    return True


def keep_code_span_sources(md: MarkdownIt) -> MarkdownIt:
    """Make ``md`` record the raw source of every code span."""
    md.inline.ruler.at("backticks", _backtick_keeping_source)
    return md


def long_code_span(token: Token) -> str | None:
    """Get the raw source of a code span that spans too many lines to stay inline.

    Returns:
        The span's source text, or None for any other token
    """
    if token.type != "code_inline" or not token.meta:
        return None
    source = token.meta.get(SOURCE_KEY)
    if source is None or not spans_many_lines(source):
        return None
    return source


def split_long_code_spans(md: MarkdownIt, text: str) -> list[tuple[bool, str]]:
    """Cut prose around its long code spans.

    Args:
        md: Parser set up with ``keep_code_span_sources``
        text: Prose markdown

    Returns:
        ``(is_code, text)`` pairs in document order; code pairs hold the
        span source without its backticks
    """
    spans = []
    for block in md.parse(text):
        for child in block.children or ():
            source = long_code_span(child)
            if source is not None:
                spans.append((child.markup, source))

    parts: list[tuple[bool, str]] = []
    position = 0
    for marker, source in spans:
        raw = f"{marker}{source}{marker}"
        start = text.find(raw, position)
        # Indented continuation lines are not verbatim in the source
        if start < 0:
            continue
        if start > position:
            parts.append((False, text[position:start]))
        parts.append((True, source))
        position = start + len(raw)
    if position < len(text):
        parts.append((False, text[position:]))
    return parts
