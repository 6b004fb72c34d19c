"""Static resource collection from fetched HTML."""
import logging
import re
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup

from core.html_utils import extract_css_urls
from models.manifest import ResourceManifest

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"
COLLECTED_TAGS = ["script", "link", "style", "img"]

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}
ORIGIN_SCHEMES = {"http", "https", "ws", "wss"}

STYLESHEET_RELS = {"stylesheet"}
CONNECT_HINT_RELS = {"preconnect", "dns-prefetch"}
# Browsers convert CR LF and lone CR to LF before building the DOM; inline
# hashes must be taken over the converted text
NEWLINE_PATTERN = re.compile(r"\r\n?")


def is_data_uri(url: str) -> bool:
    return url.strip().lower().startswith("data:")


def resolve_origin(url: str, base: Optional[str] = None) -> Optional[str]:
    """
    Resolve url against base and return its scheme://host[:port] origin.

    Default ports are dropped and the host is lower-cased. Returns None for
    malformed URLs and for schemes without a network origin.
    """
    if not url:
        return None
    try:
        absolute = urljoin(base, url.strip()) if base else url.strip()
        parts = urlsplit(absolute)
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if scheme not in ORIGIN_SCHEMES or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def _inline_text(tag: Tag) -> str:
    return "".join(str(child) for child in tag.contents if isinstance(child, NavigableString))


def _rel_tokens(tag: Tag) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel]


def _attr(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value or None


def collect_resources(html: str, page_url: str) -> ResourceManifest:
    """
    Parse HTML into a resource manifest.

    Discovery is best effort: unparseable markup and malformed URLs simply
    yield fewer resources.

    Args:
        html: Raw HTML of the page
        page_url: Final URL of the page, used as base for relative URLs

    Returns:
        ResourceManifest with inline code, origins by class and data: counts
    """
    manifest = ResourceManifest()
    if not html:
        return manifest

    try:
        soup = BeautifulSoup(NEWLINE_PATTERN.sub("\n", html), HTML_PARSER)
    except ParserRejectedMarkup as e:
        logger.debug(f"HTML parse degraded for {page_url}: {e}")
        return manifest

    def add_origin(target, url: str) -> None:
        o = resolve_origin(url, page_url)
        if o:
            target.add(o)

    for tag in soup.find_all(COLLECTED_TAGS):
        name = tag.name.lower()

        if name == "script":
            src = _attr(tag, "src")
            if src:
                if is_data_uri(src):
                    manifest.data_uri_counts.scripts += 1
                else:
                    add_origin(manifest.external_script_origins, src)
            else:
                code = _inline_text(tag)
                if code.strip():
                    manifest.inline_scripts.append(code)

        elif name == "link":
            href = _attr(tag, "href")
            if not href:
                continue
            rels = set(_rel_tokens(tag))
            if rels & STYLESHEET_RELS:
                if is_data_uri(href):
                    manifest.data_uri_counts.styles += 1
                else:
                    add_origin(manifest.external_style_origins, href)
            # Connection hints are the only static signal for connect-src
            if rels & CONNECT_HINT_RELS:
                add_origin(manifest.connect_origins, href)

        elif name == "img":
            src = _attr(tag, "src")
            if not src:
                continue
            if is_data_uri(src):
                manifest.data_uri_counts.images += 1
            else:
                add_origin(manifest.image_origins, src)

        elif name == "style":
            css = _inline_text(tag)
            if css.strip():
                manifest.inline_styles.append(css)
            # Heuristic: url(...) references in inline CSS are treated as fonts
            for url in extract_css_urls(css):
                if is_data_uri(url):
                    manifest.data_uri_counts.styles += 1
                else:
                    add_origin(manifest.font_origins, url)

    logger.debug(
        f"Collected from {page_url}: {len(manifest.inline_scripts)} inline scripts, "
        f"{len(manifest.inline_styles)} inline styles, {manifest.origin_count()} origins"
    )
    return manifest
