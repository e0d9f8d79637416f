from __future__ import annotations

from datetime import datetime, timezone
import difflib
import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional

import feedparser
import requests

from ..models import RawArticle
from .base import BaseProvider, first_text

logger = logging.getLogger(__name__)

_TERM_RE = re.compile(r"[a-z0-9]+")
FUZZY_CUTOFF = 0.82


class RSSProvider(BaseProvider):
    """Reads articles from RSS feeds registered per category."""

    name = "rss"

    DEFAULT_FEEDS: Dict[str, str] = {
        "business": "https://www.wired.com/feed/category/business/latest/rss",
        "science": "https://www.wired.com/feed/category/science/latest/rss",
        "technology": "https://www.wired.com/feed/category/gear/latest/rss",
    }

    def __init__(self, feeds: Mapping[str, str] | None = None, timeout: float = 10) -> None:
        self._feeds = dict(feeds or self.DEFAULT_FEEDS)
        self._timeout = timeout

    def top_headlines(self, category: str, limit: int = 10) -> Iterable[RawArticle]:
        url = self._feeds.get(category)
        if not url:
            return []
        return self._read(category, url)[:limit]

    def search(self, query: str, limit: int = 10) -> Iterable[RawArticle]:
        results: List[RawArticle] = []
        for category, url in self._feeds.items():
            for article in self._read(category, url):
                text = f"{article.title} {article.description or ''} {article.content or ''}"
                if not _mentions(query, text):
                    continue
                results.append(article)
                if len(results) >= limit:
                    return results
        return results

    def _read(self, category: str, url: str) -> List[RawArticle]:
        try:
            response = requests.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Skipping RSS feed %s: %s", url, exc)
            return []
        feed = feedparser.parse(response.content)
        source = (feed.get("feed") or {}).get("title") or f"RSS {category.title()}"
        return [
            RawArticle(
                title=entry.get("title") or "",
                url=entry.get("link") or "",
                source=source,
                published_at=_parse_published(entry),
                content=_get_content(entry),
                description=first_text(entry.get("summary")),
                image_url=_image_url(entry),
            )
            for entry in feed.entries or []
        ]


def _get_content(entry: Mapping[str, object]) -> Optional[str]:
    parts: List[str] = []
    for part in entry.get("content") or []:
        if isinstance(part, Mapping) and isinstance(part.get("value"), str):
            parts.append(part["value"])
    if parts:
        return "\n\n".join(parts)
    return first_text(entry.get("summary"))


def _image_url(entry: Mapping[str, object]) -> Optional[str]:
    for media in entry.get("media_content") or []:
        if isinstance(media, Mapping) and media.get("url"):
            return str(media["url"])
    return None


def _parse_published(entry: Mapping[str, object]) -> Optional[datetime]:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def _mentions(query: str, text: str) -> bool:
    """Whether ``text`` carries any word of ``query``, tolerating near-misspellings."""
    terms = _TERM_RE.findall(query.lower())
    if not terms:
        return True
    haystack = text.lower()
    vocabulary = sorted(set(_TERM_RE.findall(haystack)))
    for term in terms:
        if term in haystack:
            return True
        if len(term) > 2 and difflib.get_close_matches(term, vocabulary, n=1, cutoff=FUZZY_CUTOFF):
            return True
    return False
