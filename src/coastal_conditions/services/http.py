"""
Shared HTTP clients.

Two pre-configured ``requests.Session`` objects:

- ``session`` retries transient failures (timeouts, connection resets,
  429/502/503/504) with exponential backoff. Use it for single-source calls
  such as tides or air quality.
- ``no_retry_session`` never retries. Weather tiers use it because the next
  tier in the waterfall is the fallback.

Usage::

    from coastal_conditions.services.http import session

    resp = session.get("https://api.example.com/v1/data", timeout=30)
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from coastal_conditions.config import get_settings

#: Default retry strategy: handles the transient errors we see in practice.
DEFAULT_RETRY = Retry(
    total=4,
    backoff_factor=2,  # 0s, 2s, 4s, 8s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

#: Single attempt, for callers that handle fallback themselves.
NO_RETRY = Retry(total=0, connect=0, read=0, redirect=3, raise_on_status=False)

DEFAULT_TIMEOUT = 30  # seconds


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str | None = None,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
        user_agent: ``User-Agent`` header sent with every request (defaults
            to the ``USER_AGENT`` setting; Met.no rejects anonymous clients).
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent or get_settings().user_agent

    # Inject a default timeout so callers don't need to pass ``timeout=``.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level sessions; import and use directly.
session: requests.Session = create_session()
no_retry_session: requests.Session = create_session(retry=NO_RETRY, timeout=15)
