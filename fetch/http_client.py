import asyncio
import httpx
import logging
from typing import Optional, Dict

from models.page import FetchedPage

# Default timeout configuration (in milliseconds)
DEFAULT_TIMEOUT_MS = 15000
MIN_TIMEOUT_MS = 3000
MAX_TIMEOUT_MS = 45000
DEFAULT_CONNECT_TIMEOUT = 5.0

# Retry policy: transport failures only, backoff grows linearly per attempt
DEFAULT_MAX_RETRIES = 2
RETRY_BACKOFF_MS = 150

DEFAULT_HEADERS = {
    # Some origins serve different content or block clients without a UA
    "User-Agent": "AutoCSP/0.1",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class FetchError(Exception):
    """Raised when a page could not be fetched after all retries."""

    def __init__(self, message: str, kind: str, url: str, attempt: int, retries: int):
        super().__init__(message)
        self.message = message
        self.kind = kind # "timeout" or "network"
        self.url = url
        self.attempt = attempt
        self.retries = retries

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "message": self.message,
            "url": self.url,
            "attempt": self.attempt,
            "retries": self.retries,
        }


def clamp_timeout_ms(value) -> int:
    """Clamp a caller-supplied timeout into [MIN_TIMEOUT_MS, MAX_TIMEOUT_MS]; bad input gives the default."""
    try:
        timeout_ms = int(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_MS
    if timeout_ms <= 0:
        return DEFAULT_TIMEOUT_MS
    return min(MAX_TIMEOUT_MS, max(MIN_TIMEOUT_MS, timeout_ms))


async def _fetch_once(
    url: str,
    headers: Dict[str, str],
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport],
) -> FetchedPage:
    logger = logging.getLogger(__name__)
    timeout_config = httpx.Timeout(
        timeout=timeout,
        connect=min(timeout, DEFAULT_CONNECT_TIMEOUT)
    )

    async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True, transport=transport) as client:
        async with client.stream("GET", url, headers=headers) as response:
            # Read the body even on error statuses so callers can inspect error pages
            try:
                await response.aread()
                html = response.text
            except (httpx.HTTPError, UnicodeDecodeError) as e:
                logger.debug(f"Body read failed for {url}: {e}")
                html = ""

            response_headers = {k.lower(): v for k, v in response.headers.items()}
            logger.debug(f"HTTP {response.status_code} {response.url} ({len(html)} chars)")
            return FetchedPage(
                url=url,
                final_url=str(response.url),
                status=response.status_code,
                headers=response_headers,
                html=html,
                csp_header=response_headers.get("content-security-policy"),
            )


async def fetch_page(
    url: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_retries: int = DEFAULT_MAX_RETRIES,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FetchedPage:
    """
    Fetches a page, following redirects, with a per-attempt deadline and retries.

    Only transport failures are retried; 4xx/5xx responses are returned as-is.

    Args:
        url: The URL to fetch
        timeout_ms: Deadline for each attempt in milliseconds (default: 15000)
        max_retries: Additional attempts after the first failure (default: 2)
        headers: Optional headers merged over DEFAULT_HEADERS
        transport: Optional httpx transport (mainly for tests)

    Returns:
        FetchedPage with the final URL, status, headers, body and CSP header

    Raises:
        FetchError: once every attempt has failed
    """
    logger = logging.getLogger(__name__)
    request_headers = {**DEFAULT_HEADERS, **(headers or {})}
    timeout = timeout_ms / 1000.0
    attempt = 0

    while True:
        attempt += 1
        logger.debug(f"HTTP GET {url} (attempt {attempt}/{max_retries + 1}, timeout: {timeout}s)")
        try:
            return await asyncio.wait_for(
                _fetch_once(url, request_headers, timeout, transport),
                timeout=timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            kind, error = "timeout", e
            message = f"Timed out after {timeout_ms}ms"
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            kind, error = "network", e
            message = str(e) or type(e).__name__

        if attempt > max_retries:
            logger.warning(f"HTTP {kind} for {url} after {attempt} attempts: {message}")
            raise FetchError(message, kind=kind, url=url, attempt=attempt, retries=max_retries) from error

        backoff = RETRY_BACKOFF_MS * attempt / 1000.0
        logger.debug(f"HTTP {kind} for {url}: {message}; retrying in {backoff:.2f}s")
        await asyncio.sleep(backoff)
