from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .fetch import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT
from .url_utils import parse_delay
from .validators import validate_config_basic


@dataclass
class SiteConfig:
    url: str
    # Absolute URL, or a path relative to the site origin
    faq_url: Optional[str] = None


@dataclass
class FetchConfig:
    request_delay: float = 0.0
    timeout: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    # Empty list allows every host
    allowed_hosts: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    llms_txt: str = "llms.txt"
    # None disables the CSV export
    csv: Optional[str] = "meta_from_sitemap.csv"


@dataclass
class AppConfig:
    site: SiteConfig
    fetch: FetchConfig = field(default_factory=FetchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _load_raw_config(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def config_from_dict(raw: Dict[str, Any], validate: bool = True) -> AppConfig:
    if validate:
        errors = validate_config_basic(raw)
        if errors:
            raise ValueError("\n".join(f"- {e}" for e in errors))

    site_raw = raw.get("site") or {}
    if not site_raw.get("url"):
        raise ValueError("Config `site.url` is required")

    faq_url = site_raw.get("faq_url")
    site = SiteConfig(
        url=str(site_raw["url"]).strip(),
        faq_url=str(faq_url).strip() if faq_url else None,
    )

    fetch_raw = raw.get("fetch") or {}
    allowed_hosts_raw = fetch_raw.get("allowed_hosts") or []
    fetch = FetchConfig(
        request_delay=parse_delay(fetch_raw.get("request_delay", 0)),
        timeout=float(fetch_raw.get("timeout", DEFAULT_TIMEOUT_S)),
        user_agent=str(fetch_raw.get("user_agent") or DEFAULT_USER_AGENT),
        allowed_hosts=[str(h).lower() for h in allowed_hosts_raw],
    )

    output_raw = raw.get("output") or {}
    csv_path = output_raw.get("csv", OutputConfig.csv)
    output = OutputConfig(
        llms_txt=str(output_raw.get("llms_txt") or "llms.txt"),
        csv=str(csv_path) if csv_path else None,
    )

    return AppConfig(site=site, fetch=fetch, output=output)


def load_config(path: Path, validate: bool = True) -> AppConfig:
    return config_from_dict(_load_raw_config(path), validate=validate)
