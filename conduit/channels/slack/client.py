from __future__ import annotations
from typing import Any
import httpx
from conduit.core.retry import RateLimitError, TransientError, retry_async
from conduit.observability.logging import get_logger

log = get_logger("slack.client")

class ResponseUrlClient:
    """Posts to the ``response_url`` Slack attaches to interactive payloads.

    Used to replace or delete the message holding the interactive control.
    Transient failures are retried here, not by the channel.
    """
    def __init__(self, http: httpx.AsyncClient | None = None, max_attempts: int = 3,
                 min_wait: float = 0.5, max_wait: float = 5.0):
        self._http = http or httpx.AsyncClient(timeout=10.0)
        self._max_attempts = max_attempts
        self._min_wait = min_wait
        self._max_wait = max_wait

    async def post(self, url: str, body: dict[str, Any]) -> None:
        await retry_async(self._post_once, url, body, max_attempts=self._max_attempts,
                          min_wait=self._min_wait, max_wait=self._max_wait)
        log.debug("response_url_posted", keys=sorted(body))

    async def _post_once(self, url: str, body: dict[str, Any]) -> None:
        try:
            res = await self._http.post(url, json=body)
        except httpx.TransportError as e:
            raise TransientError(str(e)) from e
        if res.status_code == 429:
            raise RateLimitError(f"response_url rate limited: {res.text}")
        if res.status_code >= 500:
            raise TransientError(f"response_url answered {res.status_code}")
        res.raise_for_status()

    async def aclose(self) -> None:
        await self._http.aclose()
