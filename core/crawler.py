"""Breadth-first same-origin crawl that aggregates resource manifests."""
import logging
from collections import deque
from typing import Deque, Dict, Optional, Set, Tuple
from urllib.parse import urljoin, urlsplit

from collectors.static import collect_resources, resolve_origin
from core.html_utils import extract_anchor_hrefs
from fetch.http_client import DEFAULT_TIMEOUT_MS, FetchError, fetch_page
from models.crawl import COLLECTED, SKIPPED, CollectOutcome, CrawlResult
from models.manifest import ResourceManifest

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 15
MAX_DEPTH = 3
FOLLOW_SCHEMES = {"http", "https"}


def clamp_depth(value) -> int:
    """Clamp a caller-supplied crawl depth into [0, MAX_DEPTH]; bad input gives 0."""
    try:
        depth = int(value)
    except (TypeError, ValueError):
        return 0
    return min(MAX_DEPTH, max(0, depth))


def _next_url(href: str, base: str) -> Optional[str]:
    try:
        url = urljoin(base, href.strip())
        scheme = urlsplit(url).scheme.lower()
    except ValueError:
        return None
    if scheme not in FOLLOW_SCHEMES:
        return None
    return url


async def crawl(
    start_url: str,
    depth: int,
    same_origin_only: bool = True,
    max_pages: int = DEFAULT_MAX_PAGES,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    headers: Optional[Dict[str, str]] = None,
) -> CrawlResult:
    """
    Crawl from start_url breadth first and merge the resources of every page.

    Pages are fetched one at a time. A page that cannot be fetched is
    recorded as a skipped outcome and contributes nothing.

    Args:
        start_url: First page; its origin bounds the crawl when same_origin_only
        depth: Maximum link distance from start_url
        same_origin_only: Only follow links on the start URL's origin
        max_pages: Maximum number of URLs visited
        timeout_ms: Per-attempt fetch timeout
        headers: Extra request headers for every fetch

    Returns:
        CrawlResult with visited URLs, the merged manifest and per-page outcomes
    """
    depth = max(0, depth)
    start_origin = resolve_origin(start_url)
    visited: Set[str] = set()
    pages = []
    queue: Deque[Tuple[str, int]] = deque([(start_url, 0)])
    aggregate = ResourceManifest()
    outcomes = []

    while queue and len(visited) < max_pages:
        url, level = queue.popleft()
        if url in visited:
            continue
        visited.add(url)
        pages.append(url)

        try:
            page = await fetch_page(url, timeout_ms=timeout_ms, headers=headers)
        except FetchError as e:
            logger.debug(f"Crawl skipped {url}: {e.kind} ({e.message})")
            outcomes.append(CollectOutcome(url=url, status=SKIPPED, reason=f"{e.kind}: {e.message}"))
            continue

        aggregate.merge(collect_resources(page.html, page.final_url))
        outcomes.append(CollectOutcome(url=url, status=COLLECTED, final_url=page.final_url))
        logger.debug(f"Crawled {url} (depth {level}, status {page.status})")

        if level >= depth:
            continue
        for href in extract_anchor_hrefs(page.html):
            next_url = _next_url(href, page.final_url)
            if not next_url or next_url in visited:
                continue
            if same_origin_only and resolve_origin(next_url) != start_origin:
                continue
            queue.append((next_url, level + 1))

    logger.info(f"Crawl of {start_url} visited {len(pages)} pages ({len([o for o in outcomes if not o.collected])} skipped)")
    return CrawlResult(pages=pages, resources=aggregate, outcomes=outcomes)
