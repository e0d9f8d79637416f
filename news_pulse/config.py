from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List, Optional

NEWS_CATEGORIES = ["business", "entertainment", "general", "health", "science", "sports", "technology"]

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(slots=True)
class AggregatorConfig:
    """Runtime configuration for ingestion, the feed and the HTTP surface."""

    newsapi_key: Optional[str] = None
    categories: List[str] = field(default_factory=lambda: list(NEWS_CATEGORIES))
    articles_per_category: int = 5
    page_size: int = 10
    min_search_length: int = 3
    allowed_domains: List[str] = field(default_factory=list)
    max_per_source: Optional[int] = None
    lexicon_path: Optional[str] = None
    enable_rss: bool = True
    admin_api_key: Optional[str] = None
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "AggregatorConfig":
        return cls(
            newsapi_key=_env("NEWS_API_KEY") or _env("NEWSAPI_KEY"),
            categories=[c.lower() for c in _env_list("NEWS_PULSE_CATEGORIES")] or list(NEWS_CATEGORIES),
            articles_per_category=_env_int("NEWS_PULSE_ARTICLES_PER_CATEGORY", 5),
            page_size=_env_int("NEWS_PULSE_PAGE_SIZE", 10),
            min_search_length=_env_int("NEWS_PULSE_MIN_SEARCH_LENGTH", 3),
            allowed_domains=_env_list("NEWS_PULSE_ALLOWED_DOMAINS"),
            max_per_source=_env_cap("NEWS_PULSE_MAX_PER_SOURCE"),
            lexicon_path=_env("NEWS_PULSE_LEXICON_PATH"),
            enable_rss=_env_flag("NEWS_PULSE_ENABLE_RSS", default=True),
            admin_api_key=_env("ADMIN_API_KEY"),
            environment=_env("NEWS_PULSE_ENV") or "development",
            log_level=(_env("NEWS_PULSE_LOG_LEVEL") or "INFO").upper(),
        )


def _env(name: str) -> Optional[str]:
    """Stripped value of ``name``; unset and blank both read as ``None``."""
    value = os.environ.get(name, "").strip()
    return value or None


def _env_list(name: str) -> List[str]:
    raw = _env(name)
    if raw is None:
        return []
    return list(filter(None, map(str.strip, raw.split(","))))


def _to_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name}={raw!r} is not an integer") from None


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    number = _to_int(name, raw)
    if number < 1:
        raise ValueError(f"{name}={raw!r} must be at least 1")
    return number


def _env_cap(name: str) -> Optional[int]:
    """Optional upper bound; zero or a negative number turns it off."""
    raw = _env(name)
    if raw is None:
        return None
    number = _to_int(name, raw)
    return number if number > 0 else None


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY
