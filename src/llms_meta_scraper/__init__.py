"""
LLMS Meta Scraper

Sitemap-driven page metadata scraper that renders an llms.txt summary
(with an optional FAQ section) and a metadata CSV export.
"""

__all__ = [
    "__version__",
    "config",
    "faq",
    "fetch",
    "generator",
    "html_summary",
    "renderer",
    "sitemap",
]

__version__ = "0.1.0"
