"""Segmentation of (possibly truncated) message text into prose and code.

Hides the design decisions about:
- What counts as a fenced code block (triple backticks opening a line)
- How an opened-but-unclosed fence is presented while a reply streams
- How the exact delimiter text is kept so segmentation is lossless

The segmenter is a pure function of its input. It is re-run on every
observed change of a message, never fed deltas.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

FENCE = "```"
DEFAULT_LANGUAGE = "text"

# Opening fence at a line start, optional info string, newline, shortest
# content, then the first closing fence with nothing but blanks after it
# on its line.
_COMPLETE_BLOCK = re.compile(
    r"(?:^|(?<=\n))"
    r"(?P<opening>```(?P<info>[^\n]*)\n)"
    r"(?P<code>.*?)"
    r"(?P<closing>```)"
    r"(?=[ \t]*(?:\n|\Z))",
    re.DOTALL,
)


class SegmentKind(str, Enum):
    """Kinds of segment a message can be split into."""

    PROSE = "prose"
    CODE = "code"


@dataclass(frozen=True)
class Segment:
    """A typed span of message text.

    ``opening`` and ``closing`` hold the delimiter text consumed around a code
    segment; they are empty for prose.
    """

    kind: SegmentKind
    text: str
    language: str | None = None
    complete: bool = True
    opening: str = ""
    closing: str = ""

    @property
    def is_code(self) -> bool:
        return self.kind is SegmentKind.CODE

    @property
    def source(self) -> str:
        """The exact input text this segment was cut from."""
        return f"{self.opening}{self.text}{self.closing}"


def language_from_info(info: str) -> str:
    """Get the language tag from a fence info string.

    Args:
        info: Characters following the opening backticks on the same line

    Returns:
        First word of the info string, or ``"text"`` when there is none
    """
    words = info.split()
    return words[0] if words else DEFAULT_LANGUAGE


def prose(text: str) -> Segment:
    return Segment(kind=SegmentKind.PROSE, text=text)


def _pending_code(tail: str) -> Segment | None:
    """Build the incomplete code segment for a tail that opens a fence.

    Returns None while the fence is still bare (no info string and nothing
    but whitespace after it), so the caller can keep showing it as prose.
    """
    rest = tail[len(FENCE):]
    info, newline, content = rest.partition("\n")
    if not info and not content.strip():
        return None
    return Segment(
        kind=SegmentKind.CODE,
        text=content,
        language=language_from_info(info),
        complete=False,
        opening=f"{FENCE}{info}{newline}",
    )


@lru_cache(maxsize=128)
def segment(text: str, still_streaming: bool = False) -> tuple[Segment, ...]:
    """Split message text into ordered prose and code segments.

    Args:
        text: Full message content seen so far
        still_streaming: Whether more text may still arrive

    Returns:
        Segments in document order. Concatenating ``segment.source`` for all
        of them gives back ``text`` exactly.
    """
    segments: list[Segment] = []
    position = 0

    for match in _COMPLETE_BLOCK.finditer(text):
        if match.start() > position:
            segments.append(prose(text[position:match.start()]))
        segments.append(Segment(
            kind=SegmentKind.CODE,
            text=match.group("code"),
            language=language_from_info(match.group("info")),
            complete=True,
            opening=match.group("opening"),
            closing=match.group("closing"),
        ))
        position = match.end()

    tail = text[position:]
    if not tail:
        return tuple(segments)

    pending = None
    if still_streaming and tail.startswith(FENCE):
        pending = _pending_code(tail)
    segments.append(pending or prose(tail))
    return tuple(segments)


def reassemble(segments: tuple[Segment, ...] | list[Segment]) -> str:
    """Rebuild the original text from its segments."""
    return "".join(s.source for s in segments)
