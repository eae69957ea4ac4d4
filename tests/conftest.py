"""
Shared fixtures: an offline FetchGateway that serves canned bodies.
"""
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from llms_meta_scraper.fetch import FetchGateway


class StaticGateway(FetchGateway):
    """Serves bodies from a dict; unknown URLs behave like failed fetches."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.pages = dict(pages or {})
        self.calls: List[str] = []

    def fetch_text(self, url: str) -> Optional[str]:
        self.calls.append(url)
        if not self.is_allowed(url):
            return None
        return self.pages.get(url)


@pytest.fixture
def gateway_factory():
    return StaticGateway


URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
{entries}
</urlset>"""

SITEMAP_INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
{entries}
</sitemapindex>"""


def make_urlset(*urls: str) -> str:
    entries = "\n".join(f"  <url><loc>{u}</loc></url>" for u in urls)
    return URLSET.format(entries=entries)


def make_index(*sitemaps: str) -> str:
    entries = "\n".join(f"  <sitemap><loc>{u}</loc></sitemap>" for u in sitemaps)
    return SITEMAP_INDEX.format(entries=entries)


@pytest.fixture
def urlset():
    return make_urlset


@pytest.fixture
def sitemap_index():
    return make_index
