"""
FAQ extraction from a single HTML page.

Three strategies are tried in order and the first one that finds anything
wins; results are never merged across strategies:

1. schema.org FAQPage microdata (itemtype / itemprop attributes)
2. schema.org FAQPage / Question objects in JSON-LD script blocks
3. question-like h2/h3/h4 headings followed by answer text
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .fetch import FetchGateway
from .logger import get_logger

logger = get_logger(__name__)

FAQ_PAGE_ITEMTYPES = ("https://schema.org/FAQPage", "http://schema.org/FAQPage")

QUESTION_STARTERS = (
    "what",
    "how",
    "why",
    "when",
    "where",
    "who",
    "does",
    "do",
    "can",
    "is",
    "are",
    "should",
    "will",
    "could",
)

_STOP_HEADINGS = {"h1", "h2", "h3", "h4"}
_ANSWER_TAGS = {"p", "div", "li", "section", "article"}

# Property names checked in this order; the first present one is used
_MAIN_ENTITY_KEYS = ("mainEntity", "mainEntityOfPage", "mainEntityOfPageList")
_ANSWER_KEYS = ("acceptedAnswer", "acceptedAnswers", "suggestedAnswer")


@dataclass(frozen=True)
class FaqItem:
    question: str
    answer: str


def _make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def looks_like_question(text: str) -> bool:
    t = (text or "").strip().lower()
    if not t:
        return False
    if "?" in t:
        return True
    return any(t.startswith(word + " ") for word in QUESTION_STARTERS)


# ---------- 1) microdata ----------


def extract_faq_microdata(soup: BeautifulSoup) -> List[FaqItem]:
    faqs: List[FaqItem] = []
    roots = soup.find_all(attrs={"itemtype": lambda v: v in FAQ_PAGE_ITEMTYPES})
    for root in roots:
        # mainEntityOfPage is only consulted when mainEntity finds nothing
        entities = root.select('[itemprop="mainEntity"]')
        if not entities:
            entities = root.select('[itemprop="mainEntityOfPage"]')

        for ent in entities:
            q_el = ent.select_one('[itemprop="name"]')
            a_el = ent.select_one('[itemprop="text"]')
            question = q_el.get_text().strip() if q_el else ""
            answer = a_el.get_text().strip() if a_el else ""
            if question and answer:
                faqs.append(FaqItem(question, answer))
    return faqs


# ---------- 2) JSON-LD ----------


def _has_type(node: Any, type_substring: str) -> bool:
    if not isinstance(node, dict):
        return False
    t = node.get("@type") or node.get("type")
    if not t:
        return False
    needle = type_substring.lower()
    if isinstance(t, list):
        return any(needle in str(v).lower() for v in t)
    return needle in str(t).lower()


def _first_present(node: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = node.get(key)
        if value:
            return value
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value] if value else []


def _question_pairs(q_obj: Dict[str, Any]) -> List[FaqItem]:
    question = str(q_obj.get("name") or q_obj.get("headline") or "").strip()
    if not question:
        return []
    pairs: List[FaqItem] = []
    for ans in _as_list(_first_present(q_obj, _ANSWER_KEYS)):
        if not isinstance(ans, dict):
            continue
        answer = str(ans.get("text") or ans.get("description") or "").strip()
        if answer:
            pairs.append(FaqItem(question, answer))
    return pairs


def extract_faqs_from_ld_json(data: Any) -> List[FaqItem]:
    """
    Walk one parsed JSON-LD value and collect every question/answer pair,
    however deeply the Question objects are nested. May contain duplicates.

    Nodes are visited depth-first in document order with an explicit stack,
    so nesting depth is not limited by the interpreter's recursion limit.
    """
    faqs: List[FaqItem] = []
    stack: List[Any] = [data]

    while stack:
        node = stack.pop()
        if isinstance(node, list):
            # Reversed so the first element is visited next
            stack.extend(reversed(node))
            continue
        if not isinstance(node, dict):
            continue

        if _has_type(node, "faqpage"):
            for ent in _as_list(_first_present(node, _MAIN_ENTITY_KEYS)):
                if _has_type(ent, "question"):
                    faqs.extend(_question_pairs(ent))
        elif _has_type(node, "question"):
            faqs.extend(_question_pairs(node))

        stack.extend(reversed(list(node.values())))

    return faqs


def _dedupe(items: List[FaqItem]) -> List[FaqItem]:
    seen = set()
    unique: List[FaqItem] = []
    for item in items:
        key = (item.question, item.answer)
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def extract_faq_ld_json(soup: BeautifulSoup) -> List[FaqItem]:
    faqs: List[FaqItem] = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            # ignore broken or absurdly nested JSON-LD blocks
            continue
        faqs.extend(extract_faqs_from_ld_json(data))
    return _dedupe(faqs)


# ---------- 3) headings ----------


def _answer_after(heading: Tag) -> str:
    parts: List[str] = []
    for node in heading.next_siblings:
        if isinstance(node, Tag):
            tag = node.name.lower()
            if tag in _STOP_HEADINGS:
                break
            if tag in _ANSWER_TAGS:
                text = node.get_text().strip()
                if text:
                    parts.append(text)
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            # Bare text only; comments, doctypes and CDATA are skipped
            text = str(node).strip()
            if text:
                parts.append(text)
    return "\n\n".join(parts).strip()


def extract_faq_headings(soup: BeautifulSoup) -> List[FaqItem]:
    faqs: List[FaqItem] = []
    for heading in soup.find_all(["h2", "h3", "h4"]):
        question = heading.get_text().strip()
        if not looks_like_question(question):
            continue
        answer = _answer_after(heading)
        if answer:
            faqs.append(FaqItem(question, answer))
    return faqs


_STRATEGIES: Tuple[Tuple[str, Callable[[BeautifulSoup], List[FaqItem]]], ...] = (
    ("schema.org microdata", extract_faq_microdata),
    ("JSON-LD schema.org", extract_faq_ld_json),
    ("heading-based heuristic", extract_faq_headings),
)


def extract_faq_items(html: str) -> List[FaqItem]:
    """Extract FAQ pairs using the first strategy that yields any."""
    soup = _make_soup(html)
    for label, strategy in _STRATEGIES:
        items = strategy(soup)
        if items:
            logger.info(f"FAQ: found {len(items)} item(s) via {label}")
            return items
    logger.info("FAQ: no items found by any strategy")
    return []


def fetch_faq_items(faq_url: str, fetcher: FetchGateway) -> Optional[List[FaqItem]]:
    """
    Fetch a FAQ page and extract its items.
    Returns None when the page could not be fetched.
    """
    html = fetcher.fetch(faq_url)
    if html is None:
        return None
    return extract_faq_items(html)
