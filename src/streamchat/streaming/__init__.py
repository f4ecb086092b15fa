"""Streaming delivery module for streamchat.

Consumes model token streams into stored messages under a flush policy.
"""

from .consumer import FALLBACK_MESSAGE, OutcomeStatus, StreamConsumer, StreamOutcome
from .policy import FlushPolicy

__all__ = [
    "FALLBACK_MESSAGE",
    "FlushPolicy",
    "OutcomeStatus",
    "StreamConsumer",
    "StreamOutcome",
]
