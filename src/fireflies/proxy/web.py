# Web retrieval for the proxy — DuckDuckGo HTML search and page fetching.
# Created: 2026-10-06
#
# Candidate pages of one search are fetched concurrently, each with its own
# timeout; results keep the order DuckDuckGo returned them in.

from __future__ import annotations

import asyncio
import html
import logging
import re
from urllib.parse import parse_qs, urljoin, urlparse

import httpx

from fireflies.config import Settings
from fireflies.extract import extract_text

logger = logging.getLogger(__name__)

_DDG_SEARCH_URL = "https://html.duckduckgo.com/html/"
_DDG_BASE = "https://duckduckgo.com"
_RESULT_LINK_RE = re.compile(r'<a[^>]+class="result__a"[^>]+href="([^"]+)"')
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


def parse_result_links(page: str, limit: int = 3) -> list[str]:
    """Pull the real target URLs out of a DuckDuckGo HTML results page."""
    urls: list[str] = []
    for match in _RESULT_LINK_RE.finditer(page):
        if len(urls) >= limit:
            break
        link = urljoin(_DDG_BASE, html.unescape(match.group(1)))
        target = parse_qs(urlparse(link).query).get("uddg")
        if target and target[0]:
            urls.append(target[0])
        else:
            logger.debug("Skipping result link without uddg: %s", link)
    return urls


async def search_urls(client: httpx.AsyncClient, query: str, settings: Settings) -> list[str]:
    resp = await client.get(
        _DDG_SEARCH_URL,
        params={"q": query},
        timeout=settings.search_fetch_timeout,
    )
    resp.raise_for_status()
    urls = parse_result_links(resp.text, limit=settings.search_max_urls)
    logger.info("DuckDuckGo returned %d URLs for %r", len(urls), query)
    return urls


async def fetch_page_record(client: httpx.AsyncClient, url: str, settings: Settings) -> dict:
    """Fetch one search candidate as a ``urlsWithContent`` record."""
    try:
        resp = await client.get(url, timeout=settings.search_fetch_timeout)
        if resp.status_code >= 400:
            return {"url": url, "error": f"HTTP {resp.status_code}", "success": False}
        content = extract_text(resp.text)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.info("Fetch failed for %s: %s", url, e)
        return {"url": url, "error": str(e) or type(e).__name__, "success": False}

    if len(content) <= settings.search_min_content:
        return {"url": url, "error": "Insufficient content", "success": False}
    return {"url": url, "content": content[: settings.search_content_chars], "success": True}


def _client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": _USER_AGENT},
        follow_redirects=True,
        **kwargs,
    )


async def search_and_fetch(query: str, settings: Settings) -> dict:
    """Proxy ``search`` action: resolve URLs, then fetch and extract each."""
    try:
        async with _client() as client:
            urls = await search_urls(client, query, settings)
            records = await asyncio.gather(
                *(fetch_page_record(client, url, settings) for url in urls)
            )
    except httpx.HTTPError as e:
        logger.error("Search failed for %r: %s", query, e)
        return {"urls": [], "urlsWithContent": [], "error": f"Search failed: {e}"}

    ok = [r["url"] for r in records if r["success"]]
    logger.info("Search completed: %d URLs, %d with content", len(urls), len(ok))
    return {"urls": ok, "urlsWithContent": list(records)}


async def scrape(url: str, settings: Settings) -> dict:
    """Proxy ``web`` action: fetch and extract a single page."""
    if not url:
        return {"content": None, "error": "URL is required for web scraping", "success": False}

    try:
        async with _client(timeout=settings.scrape_timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            content = extract_text(resp.text)
    except httpx.HTTPStatusError as e:
        return _scrape_error(url, f"HTTP {e.response.status_code}")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        return _scrape_error(url, str(e) or type(e).__name__)

    if len(content) < settings.scrape_min_content:
        return _scrape_error(url, "Insufficient content extracted")

    logger.info("Web content fetched from %s: %d chars", url, len(content))
    return {"content": content[: settings.scrape_content_chars], "success": True}


def _scrape_error(url: str, reason: str) -> dict:
    logger.warning("Web scraping failed for %s: %s", url, reason)
    return {"content": None, "error": f"Web scraping failed: {reason}", "success": False}
