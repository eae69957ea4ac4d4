from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import AppConfig
from .faq import FaqItem, fetch_faq_items
from .fetch import FetchGateway
from .html_summary import PageRecord, fetch_page_record
from .logger import get_logger
from .renderer import (
    group_of,
    render_llms_txt,
    render_metadata_csv,
    write_llms_txt,
    write_metadata_csv,
)
from .sitemap import collect_page_urls, discover_sitemaps
from .url_utils import normalize_site_url, parse_delay, resolve_faq_url

logger = get_logger(__name__)

StatusCallback = Callable[[str], None]


class ScrapeError(Exception):
    """A run-ending failure; ``str(exc)`` is the status message to show."""


class InputError(ScrapeError, ValueError):
    """The site or FAQ URL is missing or malformed. Raised before any fetch."""


class DiscoveryError(ScrapeError):
    """No sitemap, or no page URLs in any sitemap."""


@dataclass
class ScrapeResult:
    origin: str
    sitemap_urls: List[str] = field(default_factory=list)
    page_urls: List[str] = field(default_factory=list)
    records: List[PageRecord] = field(default_factory=list)
    faq_items: List[FaqItem] = field(default_factory=list)
    llms_txt: str = ""
    csv_text: str = ""
    status: str = ""


class _Status:
    """Holds the single current status message and forwards it."""

    def __init__(self, callback: Optional[StatusCallback]) -> None:
        self.callback = callback
        self.message = ""

    def __call__(self, message: str, level: str = "info") -> None:
        self.message = message
        getattr(logger, level)(message)
        if self.callback:
            self.callback(message)


def _origin_or_fail(site_url: str, status: _Status) -> str:
    try:
        return normalize_site_url(site_url)
    except ValueError as e:
        status(str(e), "error")
        raise InputError(str(e)) from None


def discover_page_urls(
    site_url: str,
    fetcher: FetchGateway,
    *,
    status_callback: Optional[StatusCallback] = None,
) -> ScrapeResult:
    """
    Sitemap phase only: normalize the site URL, discover sitemaps and
    collect page URLs. Raises InputError / DiscoveryError.
    """
    status = _Status(status_callback)
    origin = _origin_or_fail(site_url, status)

    result = ScrapeResult(origin=origin)
    status(f"Discovering sitemaps for {origin}...")
    result.sitemap_urls = discover_sitemaps(origin, fetcher)
    if not result.sitemap_urls:
        status("No sitemap URLs discovered.", "error")
        raise DiscoveryError(status.message)

    status(f"Found {len(result.sitemap_urls)} sitemap URL(s). Fetching URLs...")
    result.page_urls = collect_page_urls(result.sitemap_urls, fetcher)
    if not result.page_urls:
        status("No URLs found in the discovered sitemaps.", "error")
        raise DiscoveryError(status.message)

    result.status = status.message
    return result


def _scrape_pages(
    urls: List[str],
    fetcher: FetchGateway,
    *,
    delay_s: float,
    status: _Status,
    sleep: Callable[[float], None],
) -> List[PageRecord]:
    records: List[PageRecord] = []
    total = len(urls)
    for count, url in enumerate(urls, start=1):
        # Politeness delay between successive page fetches
        if count > 1 and delay_s > 0:
            sleep(delay_s)
        records.append(fetch_page_record(url, fetcher))
        status(f"Scraping pages: {count} / {total}", "debug")
    return records


def _extract_faq(faq_url: str, fetcher: FetchGateway, status: _Status) -> List[FaqItem]:
    status(f"Fetching FAQ page: {faq_url}")
    items = fetch_faq_items(faq_url, fetcher)
    if items is None:
        status("Could not fetch FAQ page.", "warning")
        return []
    if not items:
        status("No FAQs detected on the FAQ page with current heuristics.")
        return []
    status(f"Found {len(items)} FAQ item(s). They will be appended to llms.txt.")
    return items


def scrape_site(
    site_url: str,
    fetcher: FetchGateway,
    *,
    faq_url: Optional[str] = None,
    request_delay: object = 0,
    status_callback: Optional[StatusCallback] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ScrapeResult:
    """
    End-to-end run:
    - validate the site URL and the optional FAQ URL
    - discover sitemaps (robots.txt, then /sitemap.xml) and collect page URLs
    - fetch every page in turn and extract title / meta description
    - optionally extract FAQ pairs from ``faq_url``
    - render grouped llms.txt text and the CSV export

    Raises InputError for a bad site or FAQ URL (before any request is made)
    and DiscoveryError when the sitemap phase finds nothing. Per-page and FAQ
    fetch/parse failures never abort the run.
    """
    status = _Status(status_callback)

    faq_target: Optional[str] = None
    if faq_url and faq_url.strip():
        faq_target = resolve_faq_url(faq_url, _origin_or_fail(site_url, status))
        if not faq_target:
            status("Invalid FAQ URL. Please check and try again.", "error")
            raise InputError(status.message)

    result = discover_page_urls(site_url, fetcher, status_callback=status_callback)

    delay_s = parse_delay(request_delay)
    status(f"Found {len(result.page_urls)} URL(s). Scraping pages...")
    result.records = _scrape_pages(
        result.page_urls, fetcher, delay_s=delay_s, status=status, sleep=sleep
    )

    if faq_target:
        result.faq_items = _extract_faq(faq_target, fetcher, status)

    result.llms_txt = render_llms_txt(result.records, result.faq_items)
    result.csv_text = render_metadata_csv(result.records)

    status(f"Done. Scraped {len(result.records)} page(s).")
    result.status = status.message
    return result


def build_fetcher(config: AppConfig) -> FetchGateway:
    return FetchGateway(
        user_agent=config.fetch.user_agent,
        allowed_hosts=config.fetch.allowed_hosts,
        timeout=config.fetch.timeout,
    )


def _print_summary(urls: List[str]) -> None:
    logger.info(f"Total URLs discovered: {len(urls)}")

    by_group: Dict[str, int] = defaultdict(int)
    for u in urls:
        by_group[group_of(u)] += 1

    logger.info("URLs by group:")
    for group, count in sorted(by_group.items(), key=lambda x: (-x[1], x[0])):
        logger.info(f"  - {group}: {count}")

    # Show a small sample for quick inspection
    logger.info("Sample URLs:")
    for u in urls[:10]:
        logger.info(f"  [{group_of(u)}] {u}")


def generate_outputs(
    config: AppConfig,
    *,
    fetcher: Optional[FetchGateway] = None,
    dry_run: bool = False,
    base_dir: Optional[Path] = None,
    status_callback: Optional[StatusCallback] = None,
) -> ScrapeResult:
    """
    Run a scrape from configuration and write llms.txt and the CSV export.
    Relative output paths are resolved against ``base_dir`` (default: cwd).
    With ``dry_run`` only the sitemap phase runs and nothing is written.
    """
    fetcher = fetcher or build_fetcher(config)

    if dry_run:
        result = discover_page_urls(
            config.site.url, fetcher, status_callback=status_callback
        )
        _print_summary(result.page_urls)
        result.status = f"Dry run: found {len(result.page_urls)} URL(s). Nothing written."
        return result

    result = scrape_site(
        config.site.url,
        fetcher,
        faq_url=config.site.faq_url,
        request_delay=config.fetch.request_delay,
        status_callback=status_callback,
    )

    base = base_dir or Path.cwd()
    llms_path = Path(config.output.llms_txt)
    if not llms_path.is_absolute():
        llms_path = base / llms_path
    write_llms_txt(result.llms_txt, llms_path)

    if config.output.csv:
        csv_path = Path(config.output.csv)
        if not csv_path.is_absolute():
            csv_path = base / csv_path
        write_metadata_csv(result.records, csv_path)
    return result
