from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
import logging
import threading
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

import requests

from .config import AggregatorConfig
from .lexicon import Lexicon, load_lexicon
from .models import Article, RawArticle
from .providers.base import BaseProvider, ProviderList
from .providers.mock_provider import MockProvider
from .providers.newsapi_provider import NewsAPIProvider
from .providers.rss_provider import RSSProvider
from .sentiment import classify
from .store import ArticleStore
from .text import dedupe_key, summarize, truncate

logger = logging.getLogger(__name__)

SEARCH_TOPIC = "search"


class NewsIngestor:
    """Fetches, normalizes, classifies and stores articles."""

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        store: Optional[ArticleStore] = None,
        providers: Optional[Iterable[BaseProvider]] = None,
        lexicon: Optional[Lexicon] = None,
    ) -> None:
        self.config = config or AggregatorConfig.from_env()
        self.store = store if store is not None else ArticleStore()
        self.lexicon = lexicon or load_lexicon(self.config.lexicon_path)
        if providers is not None:
            self.providers: ProviderList = list(providers)
        else:
            self.providers = self._build_providers()
        if not self.providers:
            raise RuntimeError("No providers configured for NewsIngestor")
        self._lock = threading.Lock()
        # dedupe key -> id of the article that first carried the story
        self._story_ids: Dict[str, int] = {}

    def _build_providers(self) -> ProviderList:
        providers: ProviderList = []
        if self.config.newsapi_key:
            providers.append(NewsAPIProvider(self.config.newsapi_key))
        if self.config.enable_rss:
            providers.append(RSSProvider())
        if not providers:
            logger.warning("No NEWS_API_KEY and RSS disabled; falling back to offline sample articles")
            providers.append(MockProvider())
        return providers

    def refresh_all(self, per_category: Optional[int] = None) -> int:
        """Refresh every configured category, skipping the ones that fail."""
        per_category = per_category or self.config.articles_per_category
        logger.info("Starting news update for %d categories", len(self.config.categories))
        batch: Counter[str] = Counter()
        stored = 0
        for category in self.config.categories:
            try:
                stored += self._refresh(category, per_category, batch)
            except Exception:
                logger.exception("Failed to update news for category %s", category)
        logger.info("News update completed: %d articles stored", stored)
        return stored

    def refresh_category(self, category: str, limit: Optional[int] = None) -> int:
        return self._refresh(category, limit or self.config.articles_per_category, Counter())

    def _refresh(self, category: str, limit: int, batch: Counter[str]) -> int:
        if not category or not category.strip():
            raise ValueError("Category must be provided")
        category = category.strip().lower()
        logger.info("Fetching news for category: %s", category)
        stored = 0
        for provider in self.providers:
            for raw in provider.top_headlines(category, limit=limit):
                if self.process(raw, category, batch) is not None:
                    stored += 1
        return stored

    def search(self, query: str, limit: Optional[int] = None) -> int:
        """Pull provider results for a user search into the store.

        Provider failures are logged and swallowed so the local feed can still
        answer the search.
        """
        if not query or not query.strip():
            raise ValueError("Query must be provided")
        query = query.strip()
        if len(query) < self.config.min_search_length:
            return 0
        limit = limit or self.config.articles_per_category
        batch: Counter[str] = Counter()
        stored = 0
        for provider in self.providers:
            try:
                for raw in provider.search(query, limit=limit):
                    if self.process(raw, SEARCH_TOPIC, batch) is not None:
                        stored += 1
            except requests.RequestException:
                logger.exception("Error fetching search results from %s for %r", provider.name, query)
        return stored

    def process(self, raw: RawArticle, category: str, batch: Optional[Counter[str]] = None) -> Optional[Article]:
        """Normalize, classify and persist one article.

        ``batch`` counts new articles per source for the current refresh; the
        per-source cap applies within it. Returns ``None`` when the article is
        skipped.
        """
        if not raw.title or not raw.url or not raw.source:
            logger.warning("Skipping article with missing data: %r", raw.title)
            return None
        if not domain_allowed(raw.url, self.config.allowed_domains):
            logger.debug("Skipping article from disallowed domain: %s", raw.url)
            return None
        batch = batch if batch is not None else Counter()

        content = raw.content or raw.description or "No content available"
        fields = dict(
            title=raw.title,
            content=content,
            summary=truncate(raw.description or summarize(raw.content)) or "No summary available",
            source_url=raw.url,
            source_name=raw.source,
            topic=category.capitalize(),
            published_at=raw.published_at or datetime.now(timezone.utc),
            image_url=raw.image_url,
        )
        key = dedupe_key(raw.title, raw.description or raw.content)

        # Lookup and insert must not interleave between refresh threads.
        with self._lock:
            existing = self.store.find_by_url(raw.url)
            if existing is None:
                known = self._story_ids.get(key) if key else None
                if known is not None and self.store.get_article(known) is not None:
                    logger.debug("Skipping duplicate story: %s", raw.title)
                    return None
                limit = self.config.max_per_source
                if limit is not None and batch[raw.source] >= limit:
                    logger.debug("Source cap reached for %s", raw.source)
                    return None
                article = self.store.create_article(**fields)
                batch[raw.source] += 1
            else:
                article = self.store.update_article(existing.id, **fields)
            if key:
                self._story_ids[key] = article.id

        result = classify(article.title, article.content, category, lexicon=self.lexicon)
        self.store.save_classification(article.id, result)
        logger.info("Saved article %d (%s): %s", article.id, result.label.value, article.title)
        return article


def domain_allowed(url: str, allowed: Iterable[str]) -> bool:
    """True when ``url`` is on one of ``allowed`` or a subdomain of it.

    An empty allow-list admits everything, as do URLs without a host.
    """
    suffixes = tuple(domain.strip(".").lower() for domain in allowed if domain.strip("."))
    host = (urlparse(url).hostname or "").rstrip(".")
    if not suffixes or not host:
        return True
    return any(host == suffix or host.endswith("." + suffix) for suffix in suffixes)
