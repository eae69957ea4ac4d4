from __future__ import annotations

import math
from typing import Any, Optional
from urllib.parse import urljoin, urlparse


_WEB_SCHEMES = {"http", "https"}


def is_absolute_web_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme.lower() in _WEB_SCHEMES and bool(parsed.netloc)


def origin_of(url: str) -> str:
    """
    Return ``scheme://host[:port]`` for an absolute http(s) URL.
    - lower-case scheme and host
    - drop credentials and default ports

    Raises ValueError when the URL has no usable host or a bad port.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if scheme not in _WEB_SCHEMES or not host or any(c.isspace() for c in host):
        raise ValueError(f"Not an absolute http(s) URL: {url}")
    port = parsed.port  # raises ValueError on out-of-range ports
    if ":" in host:
        host = f"[{host}]"
    if port and not ((scheme == "http" and port == 80) or (scheme == "https" and port == 443)):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def normalize_site_url(raw: Optional[str]) -> str:
    """
    Turn user input into a site origin.
    "example.com", "https://example.com/some/page" -> "https://example.com"

    Schemeless input defaults to https. Raises ValueError on empty or
    unusable input.
    """
    text = (raw or "").strip()
    if not text:
        raise ValueError("Please enter a site URL.")

    if is_absolute_web_url(text):
        candidate = text
    elif "://" in text:
        # Some other scheme, or a scheme with no host
        raise ValueError("Invalid URL. Please check and try again.")
    else:
        candidate = f"https://{text}"
    try:
        return origin_of(candidate)
    except ValueError:
        raise ValueError("Invalid URL. Please check and try again.") from None


def resolve_faq_url(raw: Optional[str], origin: str) -> Optional[str]:
    """
    Resolve the FAQ page address against the site origin.
    - absolute http(s) URLs are kept as-is
    - paths ("/faq", "./faq", "faq?x", "#top") are joined onto the origin
    - other schemeless input ("example.com/faq") gets https://

    Returns None when nothing usable remains, including hosts or ports
    that ``origin_of`` rejects.
    """
    text = (raw or "").strip()
    if not text:
        return None
    try:
        if is_absolute_web_url(text):
            resolved = text
        elif "://" in text:
            return None
        elif text.startswith(("/", ".", "?", "#")):
            resolved = urljoin(origin.rstrip("/") + "/", text)
        elif "." in text.split("/", 1)[0]:
            resolved = f"https://{text}"
        else:
            resolved = urljoin(origin.rstrip("/") + "/", text)
        if not is_absolute_web_url(resolved):
            return None
        origin_of(resolved)
    except ValueError:
        return None
    return resolved


def parse_delay(value: Any) -> float:
    """Seconds between page fetches; non-numeric, negative or non-finite -> 0."""
    if value is None or value == "":
        return 0.0
    try:
        delay = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(delay) or delay < 0:
        return 0.0
    return delay
