"""Simulated streaming: reveal engine, loading indicator and scheduling."""

from .engine import RevealEngine, RevealOutcome, RevealState, chunk_words
from .loader import LoadingIndicator
from .scheduler import AsyncioScheduler, RepeatingTask, Scheduler

__all__ = [
    "AsyncioScheduler",
    "LoadingIndicator",
    "RepeatingTask",
    "RevealEngine",
    "RevealOutcome",
    "RevealState",
    "Scheduler",
    "chunk_words",
]
