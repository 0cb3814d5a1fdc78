"""Human-readable rendering of timestamps, durations and hostnames."""

from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlparse
from zoneinfo import ZoneInfo

TIMESTAMP_FORMAT = "%B %d, %Y %H:%M:%S %Z"


def format_timestamp(epoch: int, tz_name: str = "UTC") -> str:
    """Render epoch seconds as ``Month DD, YYYY HH:MM:SS TZ`` in ``tz_name``."""
    moment = datetime.fromtimestamp(epoch, tz=timezone.utc).astimezone(ZoneInfo(tz_name))
    return moment.strftime(TIMESTAMP_FORMAT)


def format_duration(seconds: int) -> str:
    """Render a duration as ``Xd Yh Zm``, ``Xh Ym`` or ``Xm``.

    Under one hour a partial minute counts as a whole one (125s -> 3m);
    from one hour on, minutes are truncated (3661s -> 1h 1m).

    Examples:
        >>> format_duration(125)
        '3m'
        >>> format_duration(90000)
        '1d 1h 0m'
    """
    seconds = max(0, int(seconds))
    if seconds < 3600:
        minutes = -(-seconds // 60)
        if minutes < 60:
            return f"{minutes}m"
        seconds = 3600

    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    return f"{hours}h {minutes}m"


def hostname_of(url: str) -> str:
    """Host part of a URL, or the URL itself when it has none."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return host or url
