"""Tests for the breadth-first crawler with a fake fetcher."""
from unittest.mock import AsyncMock, patch

import pytest

from core.crawler import clamp_depth, crawl
from fetch.http_client import FetchError
from models.page import FetchedPage


def make_site(pages):
    """Build a fetch_page replacement serving a dict of url -> html."""
    async def fake_fetch(url, **kwargs):
        if url not in pages:
            raise FetchError("Connection refused", kind="network", url=url, attempt=3, retries=2)
        return FetchedPage(url=url, final_url=url, status=200, headers={}, html=pages[url])
    return AsyncMock(side_effect=fake_fetch)


@pytest.mark.asyncio
async def test_single_page_without_links():
    site = make_site({"https://example.com/": "<html><script>a()</script></html>"})
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=2)
    assert result.pages == ["https://example.com/"]
    assert result.resources.inline_scripts == ["a()"]
    assert site.await_count == 1


@pytest.mark.asyncio
async def test_breadth_first_same_origin_and_merge():
    site = make_site({
        "https://example.com/": (
            '<a href="/a">A</a><a href="https://other.com/x">X</a>'
            '<a href="/b">B</a><script src="https://cdn.one.com/x.js"></script>'
        ),
        "https://example.com/a": '<a href="/c">C</a><img src="https://img.example.net/p.png"><script>a()</script>',
        "https://example.com/b": '<script src="https://cdn.two.com/y.js"></script><script>a()</script>',
        "https://example.com/c": "<script>c()</script>",
    })
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=1)

    assert result.pages == ["https://example.com/", "https://example.com/a", "https://example.com/b"]
    assert set(result.resources.external_script_origins) == {"https://cdn.one.com", "https://cdn.two.com"}
    assert result.resources.image_origins.as_list() == ["https://img.example.net"]
    # inline code is concatenated, duplicates included
    assert result.resources.inline_scripts == ["a()", "a()"]


@pytest.mark.asyncio
async def test_depth_limits_traversal():
    site = make_site({
        "https://example.com/": '<a href="/1">1</a>',
        "https://example.com/1": '<a href="/2">2</a>',
        "https://example.com/2": '<a href="/3">3</a>',
        "https://example.com/3": "",
    })
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=2)
    assert result.pages == ["https://example.com/", "https://example.com/1", "https://example.com/2"]


@pytest.mark.asyncio
async def test_max_pages_is_exact():
    links = "".join(f'<a href="/p{i}">p</a>' for i in range(10))
    pages = {"https://example.com/": links}
    pages.update({f"https://example.com/p{i}": "" for i in range(10)})
    site = make_site(pages)
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=3, max_pages=4)
    assert len(result.pages) == 4
    assert site.await_count == 4


@pytest.mark.asyncio
async def test_unreachable_page_is_skipped_not_fatal():
    site = make_site({
        "https://example.com/": '<a href="/missing">m</a><a href="/ok">ok</a>',
        "https://example.com/ok": "<style>p{}</style>",
    })
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=1)

    assert result.pages == ["https://example.com/", "https://example.com/missing", "https://example.com/ok"]
    assert result.resources.inline_styles == ["p{}"]
    assert [o.url for o in result.skipped] == ["https://example.com/missing"]
    assert result.skipped[0].reason.startswith("network")


@pytest.mark.asyncio
async def test_cross_origin_followed_when_not_same_origin_only():
    site = make_site({
        "https://example.com/": '<a href="https://other.com/">o</a><a href="mailto:x@example.com">m</a>',
        "https://other.com/": "",
    })
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=1, same_origin_only=False)
    assert result.pages == ["https://example.com/", "https://other.com/"]


@pytest.mark.asyncio
async def test_links_with_query_or_fragment_are_not_followed():
    site = make_site({
        "https://example.com/": '<a href="/search?q=1">s</a><a href="#top">t</a>',
    })
    with patch("core.crawler.fetch_page", new=site):
        result = await crawl("https://example.com/", depth=1)
    assert result.pages == ["https://example.com/"]


@pytest.mark.parametrize("value,expected", [(0, 0), (2, 2), (5, 3), (-1, 0), ("x", 0), (None, 0)])
def test_clamp_depth(value, expected):
    assert clamp_depth(value) == expected
