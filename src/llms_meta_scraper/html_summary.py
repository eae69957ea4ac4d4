from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Optional

from .fetch import FetchGateway
from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageRecord:
    url: str
    title: str = ""
    description: str = ""

    @property
    def is_complete(self) -> bool:
        """True when url, title and description are all non-blank."""
        return bool(self.url.strip() and self.title.strip() and self.description.strip())


class _MetaParser(HTMLParser):
    """
    Collects the first <title> and the first of each relevant <meta> tag.
    Later duplicates are ignored, matching "first element wins" lookups.
    """

    def __init__(self) -> None:
        super().__init__()
        self.in_title = False
        self.in_script = False
        self.in_style = False
        self.title_seen = False
        self.title: str = ""
        self.og_title: Optional[str] = None
        self.description: Optional[str] = None
        self.og_description: Optional[str] = None

    def handle_starttag(self, tag, attrs):
        tag_lower = tag.lower()
        if tag_lower == "title":
            # Only the first <title> counts
            if not self.title_seen:
                self.in_title = True
                self.title_seen = True
        elif tag_lower == "script":
            self.in_script = True
        elif tag_lower == "style":
            self.in_style = True
        elif tag_lower == "meta":
            self._handle_meta(attrs)

    def _handle_meta(self, attrs):
        attr_dict = {}
        for k, v in attrs:
            # First occurrence of a repeated attribute wins
            attr_dict.setdefault(k.lower(), v)
        content = attr_dict.get("content") or ""

        name = (attr_dict.get("name") or "").lower()
        if name == "description" and self.description is None:
            self.description = content
        prop = (attr_dict.get("property") or "").lower()
        if prop == "og:title" and self.og_title is None:
            self.og_title = content
        elif prop == "og:description" and self.og_description is None:
            self.og_description = content

    def handle_endtag(self, tag):
        tag_lower = tag.lower()
        if tag_lower == "title":
            self.in_title = False
        elif tag_lower == "script":
            self.in_script = False
        elif tag_lower == "style":
            self.in_style = False

    def handle_data(self, data):
        if self.in_script or self.in_style:
            return
        if self.in_title:
            self.title += data


def extract_meta(html: str, url: str) -> PageRecord:
    """
    Extract a page's title and description.

    Title: <title> text, then og:title. Description: meta description, then
    og:description. Missing values become "". Malformed HTML is parsed on a
    best-effort basis and never raises.
    """
    parser = _MetaParser()
    try:
        parser.feed(html or "")
        parser.close()
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Failed to parse HTML for {url}: {e}")

    title = parser.title.strip() or (parser.og_title or "").strip()
    description = (parser.description or "").strip() or (parser.og_description or "").strip()
    return PageRecord(url=url, title=title, description=description)


def fetch_page_record(url: str, fetcher: FetchGateway) -> PageRecord:
    """
    Fetch a page and extract its metadata.
    A failed fetch still produces a record (with empty title/description)
    so the URL shows up in the CSV export.
    """
    html = fetcher.fetch(url)
    if html is None:
        return PageRecord(url=url)
    return extract_meta(html, url)
