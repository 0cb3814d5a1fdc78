"""Availability probes."""

from .base import NO_RESPONSE, BaseProbe, classify, is_valid_code
from .http import HttpProber

__all__ = [
    "NO_RESPONSE",
    "BaseProbe",
    "classify",
    "is_valid_code",
    "HttpProber",
]
