"""Base probe interface and code classification."""

from abc import ABC, abstractmethod

from ..data.models import ProbeResult, Status

# Reserved code meaning "no response at all" (DNS failure, refused, timeout)
NO_RESPONSE = 0


def is_valid_code(code: int) -> bool:
    """True for a syntactically valid 3-digit HTTP status code."""
    return 100 <= code <= 999


def classify(code: int) -> Status:
    """Map an HTTP code to a target status.

    2xx and 3xx are UP; 4xx, 5xx, NO_RESPONSE and anything unexpected are DOWN.
    """
    if 200 <= code <= 399:
        return Status.UP
    return Status.DOWN


class BaseProbe(ABC):
    """Abstract base class for availability probes.

    Implementations must never raise: every failure is reported as a DOWN
    result, with NO_RESPONSE as the code when nothing answered.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in debug output (e.g., 'http')."""
        pass

    @abstractmethod
    def probe(self, target: str) -> ProbeResult:
        """Check one target and return its classified result."""
        pass
