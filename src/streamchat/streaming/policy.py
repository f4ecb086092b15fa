"""Flush throttling for streamed replies.

Decides when accumulated text is persisted while a reply streams. Writing
on every delta would multiply store writes and client redraws; writing
only at the end would hide progress. The policy flushes on every Nth
accepted delta, or whenever the text length lands on a multiple of M.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CHUNK_INTERVAL = 3
DEFAULT_LENGTH_INTERVAL = 15


class FlushPolicy(BaseModel):
    """Pure flush decision over a running chunk counter and text length."""

    model_config = ConfigDict(frozen=True)

    chunk_interval: int = Field(
        default=DEFAULT_CHUNK_INTERVAL,
        ge=1,
        description="Flush after every this many non-empty deltas"
    )
    length_interval: int = Field(
        default=DEFAULT_LENGTH_INTERVAL,
        ge=1,
        description="Flush when the text length is a multiple of this"
    )

    def should_flush(self, chunk_count: int, content_length: int) -> bool:
        """Check whether the current accumulation should be persisted now.

        Args:
            chunk_count: Non-empty deltas accepted so far
            content_length: Length of the accumulated text

        Returns:
            True if either trigger fires
        """
        return (
            chunk_count % self.chunk_interval == 0
            or content_length % self.length_interval == 0
        )
