from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from .faq import FaqItem
from .html_summary import PageRecord
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_GROUP = "Page"
NO_ROWS_COMMENT = "// No complete rows (URL + title + description) found."
FAQ_HEADING = "Frequently Asked Questions (FAQ)"
FAQ_UNDERLINE = "=" * len(FAQ_HEADING)
CSV_HEADER = ("url", "meta_title", "meta_description")


def title_from_slug(slug: str) -> str:
    """"post-category" -> "Post Category", "how_to__guides" -> "How To Guides"."""
    if not slug:
        return ""
    parts = [p for p in re.split(r"[-_]+", slug) if p]
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def group_of(url: str) -> str:
    """
    Group name from the URL path:
    - "/" or a single segment ("/about-us")        -> "Page"
    - "/folder1/slug", "/folder1/folder2/slug"     -> the last folder before
      the slug, title-cased ("Folder1", "Folder2")
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return DEFAULT_GROUP
    if not parsed.scheme or not parsed.netloc:
        return DEFAULT_GROUP

    path = parsed.path or "/"
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    segments = [seg for seg in path.split("/") if seg]
    if len(segments) <= 1:
        return DEFAULT_GROUP
    return title_from_slug(segments[-2]) or DEFAULT_GROUP


def format_bullet(record: PageRecord) -> str:
    return f"- [{record.title.strip()}]({record.url.strip()}): {record.description.strip()}"


def group_records(records: Iterable[PageRecord]) -> Dict[str, List[str]]:
    """
    Bucket complete records into bullet lines per group.
    "Page" comes first when present; other groups keep first-seen order.
    """
    groups: Dict[str, List[str]] = {}
    for record in records:
        if not record.is_complete:
            continue
        groups.setdefault(group_of(record.url), []).append(format_bullet(record))

    if DEFAULT_GROUP in groups:
        ordered = {DEFAULT_GROUP: groups.pop(DEFAULT_GROUP)}
        ordered.update(groups)
        return ordered
    return groups


def faq_section_lines(faq_items: Sequence[FaqItem]) -> List[str]:
    lines: List[str] = ["", FAQ_HEADING, FAQ_UNDERLINE, ""]
    for item in faq_items:
        q = (item.question or "").strip()
        a = (item.answer or "").strip()
        if not q or not a:
            continue
        lines.extend(["- user question:", q, "", "- agent answer:", a, "", "---", ""])
    return lines


def render_llms_txt(
    records: Iterable[PageRecord], faq_items: Optional[Sequence[FaqItem]] = None
) -> str:
    groups = group_records(records)
    lines: List[str] = []

    if not groups:
        lines.append(f"## {DEFAULT_GROUP}")
        lines.append("")
        lines.append(NO_ROWS_COMMENT)
    else:
        names = list(groups)
        for index, name in enumerate(names):
            lines.append(f"## {name}")
            lines.append("")
            lines.extend(groups[name])
            if index < len(names) - 1:
                # blank lines between groups
                lines.append("")
                lines.append("")

    if faq_items:
        lines.extend(faq_section_lines(faq_items))

    return "\n".join(lines)


def render_metadata_csv(records: Iterable[PageRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow([record.url, record.title, record.description])
    return buf.getvalue()


def write_llms_txt(text: str, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info(f"Wrote llms.txt to {path}")


def write_metadata_csv(records: Iterable[PageRecord], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the csv module's own line endings
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(render_metadata_csv(records))
    logger.info(f"Wrote metadata CSV to {path}")
