"""
HTTP client utilities for spm-audit.

This module provides the asynchronous client used for every GitHub REST
call. It sends the versioned ``Accept`` header and a User-Agent, bounds
the number of requests in flight with a semaphore, and retries timeouts,
transport failures and 5xx responses with exponential backoff.

Status handling follows the GitHub API:

- 404 is raised as :class:`~spmaudit.exceptions.GitHubError` and never
  retried; the API uses it both for missing repositories and for missing
  releases, so callers decide whether it means "fall back" or "fail".
- 429 is retried after ``Retry-After`` seconds, a bounded number of times.
- 403 with ``X-RateLimit-Remaining: 0`` is the anonymous or token quota
  running out; it is raised as :class:`~spmaudit.exceptions.RateLimitError`
  with the reset time so the user knows when lookups will work again.
- Any other 4xx is raised as :class:`~spmaudit.exceptions.NetworkError`
  immediately.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from spmaudit.utils.logger import get_logger
from spmaudit.__version__ import __version__
from spmaudit.exceptions import GitHubError, NetworkError, RateLimitError
from spmaudit.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_CONCURRENCY,
    GITHUB_ACCEPT_HEADER,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

_MAX_429_RETRIES = 5


def _rate_limit_reset(response: httpx.Response) -> Optional[str]:
    """Return the quota reset time of an exhausted GitHub rate limit.

    ``None`` when the response is not a rate-limit rejection.
    """
    if response.status_code != 403:
        return None
    if response.headers.get("X-RateLimit-Remaining") != "0":
        return None

    reset = response.headers.get("X-RateLimit-Reset", "")
    if not reset.isdigit():
        return "unknown"
    return datetime.fromtimestamp(int(reset), tz=timezone.utc).strftime(
        "%H:%M:%S UTC"
    )


class HTTPClient:
    """Asynchronous GitHub API client with retries and concurrency control.

    One client is shared by every lookup of a run; its semaphore is what
    bounds the number of simultaneous connections to GitHub.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Maximum number of retry attempts after the first try.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of requests in flight at once.
        headers: Extra default headers sent with every request.
        transport: Optional httpx transport, used by tests to fake GitHub.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json(
        ...         "https://api.github.com/repos/apple/swift-nio/releases"
        ...     )
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency
        self.headers: Dict[str, str] = {
            "User-Agent": self.user_agent,
            "Accept": GITHUB_ACCEPT_HEADER,
        }
        if headers:
            self.headers.update(headers)

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Create the underlying httpx client on first use."""
        if self._client is None:
            options: Dict[str, Any] = {
                "timeout": httpx.Timeout(self.timeout),
                "follow_redirects": True,
                "headers": self.headers,
            }
            if self._transport is not None:
                options["transport"] = self._transport
            else:
                options["http2"] = True
            self._client = httpx.AsyncClient(**options)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _check_status(self, response: httpx.Response, url: str) -> None:
        """Raise for 4xx responses other than 429; 5xx go to the retry loop."""
        status = response.status_code
        if status == 404:
            raise GitHubError(f"Resource not found: {url}", url=url, status_code=404)

        reset = _rate_limit_reset(response)
        if reset is not None:
            raise RateLimitError(
                f"GitHub API rate limit exceeded (resets at {reset}); "
                "set GITHUB_TOKEN or log in with gh for a higher limit",
                reset_at=reset,
                url=url,
                status_code=403,
            )

        if 400 <= status < 500:
            raise NetworkError(
                f"HTTP {status} error for {url}",
                url=url,
                status_code=status,
                response_body=response.text,
            )

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request with retry and backoff logic."""
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        last_exc: Optional[Exception] = None
        retry_429_count = 0

        for attempt in range(self.max_retries + 1):
            try:
                async with self._semaphore:
                    response = await self._client.request(method, clean_url, **kwargs)

                if response.status_code == 429:
                    retry_429_count += 1
                    if retry_429_count > _MAX_429_RETRIES:
                        raise NetworkError(
                            f"Rate limit exceeded after {_MAX_429_RETRIES} retries",
                            url=clean_url,
                            status_code=429,
                        )
                    retry_after = int(response.headers.get("Retry-After", "1"))
                    logger.warning(
                        "Rate limited (429), retrying after %ds (%d/%d)",
                        retry_after,
                        retry_429_count,
                        _MAX_429_RETRIES,
                    )
                    await asyncio.sleep(retry_after)
                    continue

                self._check_status(response, clean_url)
                response.raise_for_status()
                return response

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            except httpx.TransportError as exc:
                last_exc = exc
                logger.warning(
                    "Network error (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            except httpx.HTTPStatusError as exc:
                last_exc = exc
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    exc.response.status_code,
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)

        status_code = None
        if isinstance(last_exc, httpx.HTTPStatusError):
            status_code = last_exc.response.status_code

        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempts: {clean_url}",
            url=clean_url,
            status_code=status_code,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """Fetch a URL and decode the body as JSON.

        GitHub list endpoints return arrays, so any JSON value is accepted.

        Raises:
            NetworkError: If the body is not valid JSON.
        """
        response = await self.get(url, **kwargs)

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc
