"""
Config validation helpers.
Each check returns (is_valid, error_message) or a list of error messages.
"""
from __future__ import annotations

from urllib.parse import urlparse
from typing import Any, List, Tuple


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Check that a URL is an absolute http(s) URL.

    Returns:
        (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL must not be empty"

    url = url.strip()
    if not url:
        return False, "URL must not be empty"

    try:
        parsed = urlparse(url)
        if not parsed.scheme:
            return False, f"URL is missing a scheme: {url}"
        if parsed.scheme not in ("http", "https"):
            return False, f"URL scheme must be http or https: {url}"
        if not parsed.netloc:
            return False, f"URL is missing a host: {url}"
        return True, ""
    except ValueError as e:
        return False, f"Invalid URL: {e}"


def validate_site_url(url: str) -> Tuple[bool, str]:
    """Like validate_url, but schemeless input ("example.com") is accepted."""
    if isinstance(url, str) and url.strip() and "://" not in url:
        url = "https://" + url.strip()
    is_valid, msg = validate_url(url)
    if not is_valid:
        return False, f"site.url is invalid: {msg}"
    return True, ""


def validate_domain(domain: str) -> Tuple[bool, str]:
    """
    Check a bare host name (no scheme, no path).

    Returns:
        (is_valid, error_message)
    """
    if not domain or not isinstance(domain, str):
        return False, "Host must not be empty"

    domain = domain.strip().lower()

    if domain.startswith(("http://", "https://")):
        return False, f"Host must not include a scheme: {domain}"

    if "/" in domain:
        return False, f"Host must not include a path: {domain}"

    if "." not in domain and domain != "localhost":
        return False, f"Invalid host: {domain}"

    return True, ""


def validate_seconds(value: Any) -> Tuple[bool, str]:
    """Durations must be non-negative numbers of seconds."""
    if isinstance(value, bool):
        return False, f"Value must be a number of seconds: {value}"
    try:
        delay = float(value)
    except (TypeError, ValueError):
        return False, f"Value must be a number of seconds: {value}"
    if delay < 0:
        return False, f"Value must not be negative: {value}"
    return True, ""


def validate_config_basic(config_dict: dict) -> List[str]:
    """
    Validate the basic structure of a config mapping.

    Returns:
        List of error messages (empty when valid)
    """
    errors: List[str] = []

    if not isinstance(config_dict, dict):
        errors.append("Config must be a YAML mapping")
        return errors

    if "site" not in config_dict:
        errors.append("Config is missing the 'site' section")
        return errors

    site = config_dict.get("site")
    if not isinstance(site, dict):
        errors.append("'site' must be a mapping")
        return errors

    url = site.get("url")
    if not url:
        errors.append("'site.url' is required")
    else:
        is_valid, msg = validate_site_url(str(url))
        if not is_valid:
            errors.append(msg)

    faq_url = site.get("faq_url")
    if faq_url is not None and not isinstance(faq_url, str):
        errors.append("'site.faq_url' must be a string")

    fetch = config_dict.get("fetch") or {}
    if not isinstance(fetch, dict):
        errors.append("'fetch' must be a mapping")
        return errors

    if "timeout" in fetch:
        is_valid, msg = validate_seconds(fetch["timeout"])
        if not is_valid or float(fetch["timeout"]) == 0:
            errors.append(f"'fetch.timeout' must be a positive number: {fetch['timeout']}")

    allowed_hosts = fetch.get("allowed_hosts", [])
    if allowed_hosts:
        if not isinstance(allowed_hosts, list):
            errors.append("'fetch.allowed_hosts' must be a list")
        else:
            for i, host in enumerate(allowed_hosts):
                is_valid, msg = validate_domain(host)
                if not is_valid:
                    errors.append(f"'fetch.allowed_hosts[{i}]' {msg}")

    output = config_dict.get("output") or {}
    if not isinstance(output, dict):
        errors.append("'output' must be a mapping")

    return errors
