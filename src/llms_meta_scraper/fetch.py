from __future__ import annotations

from typing import Iterable, Optional, Set, Union
from urllib.parse import urlparse
import xml.etree.ElementTree as ET

import requests

from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "MetaScraperBot/1.0 (+https://hypelocal.com)"
DEFAULT_TIMEOUT_S = 20.0


class FetchGateway:
    """
    Transparent GET passthrough used by every stage of a scrape.

    Any failure (bad URL, host not allowed, network error, non-2xx status,
    unparsable XML) is logged and reported as ``None``; nothing is raised.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        allowed_hosts: Optional[Iterable[str]] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.session.headers.setdefault(
            "Accept", "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
        )
        # Empty allow-list means every host is allowed
        self.allowed_hosts: Set[str] = {h.strip().lower() for h in (allowed_hosts or []) if h.strip()}
        self.timeout = timeout

    def is_allowed(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
            parsed.port  # noqa: B018  raises ValueError on out-of-range ports
        except ValueError:
            # e.g. "http://[bad/page" from a sitemap <loc>
            return False
        if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
            return False
        if not self.allowed_hosts:
            return True
        return parsed.hostname.lower() in self.allowed_hosts

    def fetch_text(self, url: str) -> Optional[str]:
        if not self.is_allowed(url):
            logger.warning(f"Refusing to fetch {url}: invalid URL or host not allowed")
            return None
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Could not fetch {url}: {e}")
            return None
        return resp.content.decode("utf-8", errors="replace")

    def fetch(self, url: str, parse_xml: bool = False) -> Union[str, ET.Element, None]:
        """
        Fetch ``url`` and return its body as text, or as the root element of
        the parsed XML document when ``parse_xml`` is set.
        """
        text = self.fetch_text(url)
        if text is None or not parse_xml:
            return text
        try:
            return ET.fromstring(text.lstrip("\ufeff").strip())
        except ET.ParseError as e:
            logger.warning(f"Failed to parse XML from {url}: {e}")
            logger.debug(f"XML content preview (first 500 chars): {text[:500]}")
            return None
