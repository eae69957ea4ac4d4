from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple
import xml.etree.ElementTree as ET

from .fetch import FetchGateway
from .logger import get_logger

logger = get_logger(__name__)

_SITEMAP_DIRECTIVE = re.compile(r"^sitemap:", re.IGNORECASE)


def _local_name(tag) -> str:
    # "{http://www.sitemaps.org/schemas/sitemap/0.9}loc" -> "loc"
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].split(":")[-1].lower()


def _iter_named(root: ET.Element, name: str):
    for el in root.iter():
        if _local_name(el.tag) == name:
            yield el


def _first_loc(entry: ET.Element) -> Optional[str]:
    for el in entry.iter():
        if el is entry:
            continue
        if _local_name(el.tag) == "loc":
            text = (el.text or "").strip()
            return text or None
    return None


def parse_robots_sitemaps(robots_text: str) -> List[str]:
    """Return the distinct ``Sitemap:`` values declared in a robots.txt body."""
    found: Dict[str, None] = {}
    for line in robots_text.splitlines():
        trimmed = line.strip()
        if not _SITEMAP_DIRECTIVE.match(trimmed):
            continue
        # Keep any colons in the value (scheme separators, ports)
        value = trimmed.split(":", 1)[1].strip()
        if value:
            found[value] = None
    return list(found)


def discover_sitemaps(origin: str, fetcher: FetchGateway) -> List[str]:
    """
    Discover sitemap URLs for a site origin.
    1) ``Sitemap:`` directives in /robots.txt
    2) fallback to /sitemap.xml when robots.txt is missing or declares none
    """
    origin = origin.rstrip("/")
    robots_url = f"{origin}/robots.txt"
    robots_text = fetcher.fetch(robots_url)

    sitemaps: List[str] = []
    if robots_text:
        sitemaps = parse_robots_sitemaps(robots_text)
        if sitemaps:
            logger.info(f"Discovered {len(sitemaps)} sitemap URL(s) from robots.txt")

    if not sitemaps:
        fallback = f"{origin}/sitemap.xml"
        logger.info(f"No Sitemap directives found in {robots_url}; falling back to {fallback}")
        sitemaps = [fallback]
    return sitemaps


def parse_sitemap_document(root: ET.Element) -> Tuple[List[str], List[str]]:
    """
    Split a parsed sitemap document into (child sitemap URLs, page URLs).

    A document containing a ``sitemapindex`` element is an index and only
    yields child sitemaps; anything else is read as a URL set.
    """
    is_index = any(True for _ in _iter_named(root, "sitemapindex"))
    if is_index:
        children = [loc for loc in map(_first_loc, _iter_named(root, "sitemap")) if loc]
        return children, []
    pages = [loc for loc in map(_first_loc, _iter_named(root, "url")) if loc]
    return [], pages


def extract_urls_from_sitemap(sitemap_url: str, fetcher: FetchGateway) -> List[str]:
    """
    Collect every page URL reachable from one sitemap or sitemap index.

    Indexes are expanded depth-first in document order with an explicit
    stack. Each sitemap is fetched at most once per call, so cyclic or
    repeated ``<sitemap>`` references terminate. A node that fails to fetch
    or parse contributes nothing and does not stop its siblings.
    """
    visited: Set[str] = set()
    urls: Dict[str, None] = {}
    stack: List[str] = [sitemap_url]

    while stack:
        url = stack.pop()
        if url in visited:
            continue
        visited.add(url)

        root = fetcher.fetch(url, parse_xml=True)
        if root is None:
            logger.warning(f"Skipping sitemap {url}: could not fetch or parse")
            continue

        children, pages = parse_sitemap_document(root)
        if children:
            logger.debug(f"Sitemap index {url} references {len(children)} sitemap(s)")
            # Reversed so the first child is processed next
            stack.extend(reversed(children))
        for page in pages:
            urls[page] = None
        if pages:
            logger.debug(f"Collected {len(pages)} URL(s) from {url}")

    return list(urls)


def collect_page_urls(sitemap_urls: Iterable[str], fetcher: FetchGateway) -> List[str]:
    """Merge the page URLs of several sitemaps into one de-duplicated list."""
    collected: Dict[str, None] = {}
    for sm in sitemap_urls:
        urls = extract_urls_from_sitemap(sm, fetcher)
        logger.info(f"Collected {len(urls)} URLs from sitemap: {sm}")
        for u in urls:
            collected[u] = None
    return list(collected)
