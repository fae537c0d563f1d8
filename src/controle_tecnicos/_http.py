"""Internal HTTP session management."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx

from controle_tecnicos.retry import NO_RETRY, RetryPolicy

logger = logging.getLogger(__name__)


class _HttpSession:
    """
    Manages one reusable httpx client shared by every provider.

    The client is opened lazily and carries the User-Agent the public
    OpenStreetMap services require. A caller-supplied client (e.g. one
    built on ``httpx.MockTransport``) is used as-is and never closed here.
    """

    def __init__(
        self,
        user_agent: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._user_agent = user_agent
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    def get_client(self) -> httpx.Client:
        """Return an open client, creating one if needed."""
        if self._client is None:
            self._client = httpx.Client(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    def get(
        self,
        url: str,
        params: Optional[dict] = None,
        retry: RetryPolicy = NO_RETRY,
    ) -> Optional[httpx.Response]:
        """
        Send a GET request, retrying rate-limited responses per *retry*.

        Returns None when the final attempt is still rate-limited.
        Transport errors propagate to the caller.
        """
        client = self.get_client()
        attempt = 1
        while True:
            response = client.get(
                url, params=params, headers={"User-Agent": self._user_agent}
            )
            if not retry.should_retry(response.status_code, attempt):
                break
            logger.info(
                f"Rate limited by {response.url.host}, retrying in {retry.delay}s"
            )
            self._sleep(retry.delay)
            attempt += 1

        if response.status_code in retry.statuses:
            logger.warning(
                f"Still rate limited by {response.url.host} after {attempt} attempt(s)"
            )
            return None
        return response

    def close(self) -> None:
        """Close the client if this session opened it."""
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None
