from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import requests

from ..models import RawArticle
from .base import BaseProvider

logger = logging.getLogger(__name__)


class NewsAPIProvider(BaseProvider):
    """Fetches articles from newsapi.org."""

    name = "newsapi"
    BASE_URL = "https://newsapi.org/v2"

    def __init__(self, api_key: str, country: str = "us", timeout: float = 10) -> None:
        if not api_key:
            raise ValueError("NewsAPIProvider requires an API key")
        self._api_key = api_key
        self._country = country
        self._timeout = timeout

    def top_headlines(self, category: str, limit: int = 10) -> Iterable[RawArticle]:
        params = {"country": self._country, "category": category, "pageSize": limit}
        return self._articles(self._get("top-headlines", params), category)

    def search(self, query: str, limit: int = 10) -> Iterable[RawArticle]:
        params = {"q": query, "pageSize": limit, "language": "en", "sortBy": "publishedAt"}
        return self._articles(self._get("everything", params), query)

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Mapping[str, Any]:
        response = requests.get(
            f"{self.BASE_URL}/{endpoint}",
            params=params,
            headers={"Authorization": self._api_key},
            timeout=self._timeout,
        )
        response.raise_for_status()
        return response.json()

    def _articles(self, payload: Mapping[str, Any], label: str) -> Iterable[RawArticle]:
        if payload.get("status") != "ok":
            logger.warning("NewsAPI returned status %r for %s", payload.get("status"), label)
            return []
        return [
            RawArticle(
                title=article.get("title") or "",
                url=article.get("url") or "",
                source=(article.get("source") or {}).get("name") or "",
                published_at=_parse_date(article.get("publishedAt")),
                content=article.get("content"),
                description=article.get("description"),
                image_url=article.get("urlToImage"),
            )
            for article in payload.get("articles") or []
        ]


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
