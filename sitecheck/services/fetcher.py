"""
sitecheck Fetch Adapter

Thin async HTTP layer shared by every check:
- GET/HEAD with per-call timeouts
- Redirect following (capped)
- Relaxed TLS validation (certificates are checked separately)
- Statuses in [200, 500) are returned, everything else raises FetchError
"""

import asyncio
import logging
import ssl
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

CertificateProbe = Callable[[str], Awaitable[bool]]


class FetchError(Exception):
    """A request that did not produce an inspectable response."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class FetchConfig:
    user_agent: str = "sitecheck/0.1 (+website checker)"
    page_timeout: float = 30.0
    probe_timeout: float = 5.0
    tls_timeout: float = 10.0
    max_redirects: int = 5


@dataclass
class FetchResponse:
    url: str
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    elapsed_ms: int = 0


class Fetcher:
    """Async HTTP client scoped to a single audit.

    Use as an async context manager so the underlying connection pool is
    released when the audit finishes.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or FetchConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            verify=False,
            timeout=self.config.page_timeout,
            headers={"User-Agent": self.config.user_agent},
            transport=self._transport,
        )

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        timeout: float | None = None,
    ) -> FetchResponse:
        """
        Issue a GET or HEAD request.

        Args:
            url: Absolute URL to request
            method: "GET" or "HEAD"
            timeout: Seconds before giving up (defaults to the page timeout)

        Returns:
            FetchResponse for any final status in [200, 500)

        Raises:
            FetchError: on status >= 500 (or < 200), timeouts, redirect loops,
                connection/DNS/protocol errors and URLs httpx cannot build
        """
        method = method.upper()
        if method not in ("GET", "HEAD"):
            raise ValueError(f"Unsupported method: {method}")

        if self._client is None:
            await self.start()

        timeout = self.config.page_timeout if timeout is None else timeout
        start_time = time.perf_counter()

        try:
            response = await self._client.request(method, url, timeout=timeout)
        except httpx.TimeoutException as e:
            raise FetchError(f"Timeout after {timeout:g}s fetching {url}") from e
        except httpx.TooManyRedirects as e:
            raise FetchError(f"Too many redirects (max {self.config.max_redirects}) fetching {url}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"{type(e).__name__}: {e}" if str(e) else type(e).__name__) from e
        except (httpx.InvalidURL, ValueError) as e:
            raise FetchError(f"Invalid URL: {e}") from e

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        status = response.status_code

        if status < 200 or status >= 500:
            raise FetchError(f"Request failed with status code {status}", status=status)

        logger.debug(f"{method} {url} -> {status} ({elapsed_ms}ms)")

        return FetchResponse(
            url=str(response.url),
            status=status,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.text if method == "GET" else "",
            elapsed_ms=elapsed_ms,
        )

    async def head_status(self, url: str, timeout: float | None = None) -> int | None:
        """Status of a HEAD probe, or None if the probe failed."""
        timeout = self.config.probe_timeout if timeout is None else timeout
        try:
            response = await self.fetch(url, "HEAD", timeout=timeout)
        except FetchError as e:
            logger.debug(f"HEAD probe failed for {url}: {e}")
            return None
        return response.status

    async def head_ok(self, url: str, timeout: float | None = None) -> bool:
        """True if a HEAD probe returns exactly 200."""
        return await self.head_status(url, timeout) == 200


async def check_certificate(hostname: str, port: int = 443, timeout: float = 10.0) -> bool:
    """
    Handshake with hostname:port using a verifying TLS context.

    Returns True only if the peer certificate is trusted and matches the
    hostname. Verification failures, socket errors and timeouts return False.
    """
    if not hostname:
        return False

    ctx = ssl.create_default_context()
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(hostname, port, ssl=ctx, server_hostname=hostname),
            timeout=timeout,
        )
    except (OSError, asyncio.TimeoutError) as e:
        # ssl.SSLError and ssl.CertificateError are OSError subclasses
        logger.debug(f"TLS handshake with {hostname}:{port} failed: {e}")
        return False

    authorized = writer.get_extra_info("peercert") is not None
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return authorized
