import argparse
import sys
from pathlib import Path

from .config import AppConfig, SiteConfig, load_config
from .faq import fetch_faq_items
from .fetch import FetchGateway
from .generator import ScrapeError, generate_outputs
from .logger import set_log_level
from .renderer import faq_section_lines
from .url_utils import parse_delay


DEFAULT_CONFIG_NAME = "llms-scraper.config.yml"


def cmd_init(args):
    """Create a starter config file in the current directory."""
    target = Path(args.path or DEFAULT_CONFIG_NAME)
    if target.exists() and not args.force:
        print(f"[WARN] Config file already exists: {target}", file=sys.stderr)
        return 1

    template = """# llms-meta-scraper config
#
# Usually you only need to change:
# 1) site.url      -- the site to summarize (sitemaps are discovered from it)
# 2) site.faq_url  -- optional page to pull FAQ question/answer pairs from

site:
  url: "https://example.com"
  # Absolute URL, or a path relative to the site
  # faq_url: "/faq"

fetch:
  # Seconds to wait between page fetches (0 = no delay)
  request_delay: 0
  timeout: 20
  user_agent: "MetaScraperBot/1.0 (+https://hypelocal.com)"
  # Restrict fetching to these hosts; empty list allows all
  allowed_hosts: []

output:
  llms_txt: "llms.txt"
  csv: "meta_from_sitemap.csv"
"""
    target.write_text(template, encoding="utf-8")
    print(f"[OK] Created config file: {target}")
    return 0


def _resolve_config(args) -> AppConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config_path = Path(args.config or DEFAULT_CONFIG_NAME)
    if args.config or config_path.exists():
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Run `llms-meta-scraper init` first, or pass --url."
            )
        config = load_config(config_path, validate=not args.no_validate)
    elif args.url:
        config = AppConfig(site=SiteConfig(url=args.url))
    else:
        raise FileNotFoundError(
            f"Config file not found: {config_path}. "
            f"Run `llms-meta-scraper init` first, or pass --url."
        )

    if args.url:
        config.site.url = args.url
    if args.faq_url is not None:
        config.site.faq_url = args.faq_url or None
    if args.delay is not None:
        config.fetch.request_delay = parse_delay(args.delay)
    if args.output:
        config.output.llms_txt = args.output
    if args.csv is not None:
        config.output.csv = args.csv or None
    return config


def cmd_generate(args):
    """Discover sitemaps, scrape page metadata and write llms.txt + CSV."""
    try:
        config = _resolve_config(args)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print("[ERROR] Config validation failed:", file=sys.stderr)
        print(f"{e}", file=sys.stderr)
        print("\nHint: use --no-validate to skip validation (not recommended)", file=sys.stderr)
        return 1
    except Exception as e:  # noqa: BLE001
        print(f"[ERROR] Failed to load config: {e}", file=sys.stderr)
        return 1

    try:
        result = generate_outputs(config, dry_run=bool(args.dry_run))
    except ScrapeError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print(f"[OK] {result.status}")
    return 0


def cmd_faq(args):
    """Extract FAQ items from one page and print them in llms.txt format."""
    url = args.url
    # Any explicit scheme (in any case) is kept; the gateway rejects non-web ones
    if "://" not in url:
        url = "https://" + url

    fetcher = FetchGateway()
    items = fetch_faq_items(url, fetcher)
    if items is None:
        print(f"[ERROR] Could not fetch FAQ page: {url}", file=sys.stderr)
        return 1
    if not items:
        print("[INFO] No FAQs detected on the page with current heuristics.")
        return 0

    print("\n".join(faq_section_lines(items)).strip())
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="llms-meta-scraper",
        description="Build an llms.txt summary and metadata CSV from a site's sitemaps.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging."
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only show warnings and errors."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # init
    p_init = subparsers.add_parser(
        "init", help=f"Create a starter {DEFAULT_CONFIG_NAME} in current directory."
    )
    p_init.add_argument(
        "-p",
        "--path",
        help=f"Config file path (default: {DEFAULT_CONFIG_NAME})",
    )
    p_init.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing config file.",
    )
    p_init.set_defaults(func=cmd_init)

    # generate
    p_gen = subparsers.add_parser(
        "generate",
        help="Scrape the site and write llms.txt and the metadata CSV.",
    )
    p_gen.add_argument(
        "-c",
        "--config",
        help=f"Config file path (default: {DEFAULT_CONFIG_NAME} if present)",
    )
    p_gen.add_argument("--url", help="Site URL (overrides site.url).")
    p_gen.add_argument(
        "--faq-url",
        help="FAQ page URL or path (overrides site.faq_url; empty string disables).",
    )
    p_gen.add_argument(
        "--delay",
        help="Seconds to wait between page fetches (overrides fetch.request_delay).",
    )
    p_gen.add_argument("-o", "--output", help="llms.txt output path.")
    p_gen.add_argument(
        "--csv", help="CSV output path (empty string disables the CSV export)."
    )
    p_gen.add_argument(
        "--dry-run",
        action="store_true",
        help="Only discover sitemaps and URLs; print a summary and write nothing.",
    )
    p_gen.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip configuration validation (not recommended).",
    )
    p_gen.set_defaults(func=cmd_generate)

    # faq
    p_faq = subparsers.add_parser(
        "faq", help="Extract FAQ question/answer pairs from a single page."
    )
    p_faq.add_argument("url", help="FAQ page URL (e.g., https://example.com/faq)")
    p_faq.set_defaults(func=cmd_faq)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level("DEBUG")
    elif args.quiet:
        set_log_level("WARNING")

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1

    return int(func(args)) or 0


if __name__ == "__main__":
    raise SystemExit(main())
