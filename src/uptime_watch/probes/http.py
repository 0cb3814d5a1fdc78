"""HTTP probe with bounded retries.

Each attempt issues a HEAD (or GET) request, following redirects and keeping
cookies across the redirect chain. Only connection-level failures are
retried: the first valid status code of any class ends the attempt loop.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..app.config import ProbeSettings
from ..data.models import ProbeResult
from ..log import Logger, silent
from .base import NO_RESPONSE, BaseProbe, classify, is_valid_code


def _make_session(user_agent: str) -> requests.Session:
    s = requests.Session()
    # Retries belong to the attempt loop, so the adapter never retries
    adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({"User-Agent": user_agent})
    return s


class HttpProber(BaseProbe):
    """Probe HTTP targets with ``max_retries`` attempts spaced ``retry_delay`` apart.

    Each attempt gets ``timeout=(connect, max_timeout)``, with the connect
    timeout capped at ``max_timeout``. requests applies the second value to
    each socket read, not to the whole exchange: a server that keeps
    trickling bytes (slow headers, or a redirect chain of slow hops) can hold
    one attempt open longer than ``max_timeout``, though never indefinitely
    while each read stays within it.
    """

    def __init__(
        self,
        settings: ProbeSettings,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        log: Logger = silent,
    ):
        self.settings = settings
        self._session = session
        self._sleep = sleep
        self._log = log

    @property
    def name(self) -> str:
        return "http"

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = _make_session(self.settings.user_agent)
        return self._session

    def probe(self, target: str) -> ProbeResult:
        max_retries = max(1, self.settings.max_retries)
        code = NO_RESPONSE
        attempt = 0
        for attempt in range(1, max_retries + 1):
            code = self._attempt(target)
            self._log(f"[probe] {target} attempt {attempt}/{max_retries}: HTTP {code:03d}")
            if is_valid_code(code):
                break
            code = NO_RESPONSE
            if attempt < max_retries:
                self._sleep(self.settings.retry_delay)

        status = classify(code)
        self._log(f"[probe] {target} is {status.value} (HTTP {code:03d})")
        return ProbeResult(target=target, http_code=code, status=status, attempts=attempt)

    def _attempt(self, target: str) -> int:
        """Issue one request; return its status code or NO_RESPONSE."""
        max_timeout = self.settings.max_timeout
        try:
            resp = self.session.request(
                self.settings.method,
                target,
                allow_redirects=True,
                timeout=(min(self.settings.connect_timeout, max_timeout), max_timeout),
            )
        except requests.RequestException as exc:
            self._log(f"[probe] {target} no response: {exc}")
            return NO_RESPONSE
        try:
            return int(resp.status_code)
        except (TypeError, ValueError):
            return NO_RESPONSE
        finally:
            resp.close()

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
