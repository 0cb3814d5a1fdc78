"""Transition engine and alert text formatting."""

from .formatting import format_duration, format_timestamp, hostname_of
from .transitions import Transition, TransitionEngine, evaluate

__all__ = [
    "format_duration",
    "format_timestamp",
    "hostname_of",
    "Transition",
    "TransitionEngine",
    "evaluate",
]
