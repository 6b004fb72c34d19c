"""Bounded regex scanning over raw HTML and CSS text."""
import logging
from typing import List

import regex

# Configuration
MAX_SCAN_LENGTH = 1_000_000  # 1MB - text beyond this is not scanned
PATTERN_TIMEOUT = 0.3  # 300ms timeout per scan

# Anchor hrefs without query or fragment; links carrying either are not followed
ANCHOR_HREF_PATTERN = regex.compile(r'<a[^>]+href=["\']([^"\'#?]+)["\']', regex.IGNORECASE)
# CSS url(...) references, quotes stripped by the caller
CSS_URL_PATTERN = regex.compile(r'url\(([^)]+)\)', regex.IGNORECASE)

logger = logging.getLogger(__name__)


def findall_bounded(pattern: "regex.Pattern", text: str, label: str = "pattern") -> List[str]:
    """
    Find all matches of a compiled pattern with size and time limits.

    Args:
        pattern: Compiled `regex` pattern with at most one group
        text: Text to scan; truncated to MAX_SCAN_LENGTH
        label: Name used in log messages

    Returns:
        List of matches, or an empty list when the scan times out
    """
    if not text:
        return []
    if len(text) > MAX_SCAN_LENGTH:
        logger.debug(f"Truncating {label} scan to {MAX_SCAN_LENGTH} chars (original {len(text)})")
        text = text[:MAX_SCAN_LENGTH]
    try:
        return pattern.findall(text, timeout=PATTERN_TIMEOUT)
    except TimeoutError:
        logger.warning(f"{label} scan timed out after {PATTERN_TIMEOUT}s")
        return []


def extract_anchor_hrefs(html: str) -> List[str]:
    """Anchor hrefs from raw HTML, in document order."""
    return [href for href in findall_bounded(ANCHOR_HREF_PATTERN, html, "anchor") if href]


def extract_css_urls(css: str) -> List[str]:
    """url(...) targets in a CSS block with surrounding quotes removed."""
    urls = []
    for raw in findall_bounded(CSS_URL_PATTERN, css, "css url"):
        value = raw.replace('"', "").replace("'", "").strip()
        if value:
            urls.append(value)
    return urls
