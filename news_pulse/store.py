from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    Article,
    ArticleInteraction,
    ArticleView,
    ClassificationResult,
    FeedQuery,
    SentimentLabel,
    Stats,
    UserPreferences,
)

_ARTICLE_FIELDS = {"title", "content", "summary", "source_url", "source_name", "image_url", "topic", "published_at"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class ArticleStore:
    """In-memory keyed storage for articles, classifications and user data."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._article_ids = count(1)
        self._articles: Dict[int, Article] = {}
        self._ids_by_url: Dict[str, int] = {}
        self._classifications: Dict[int, ClassificationResult] = {}
        self._preferences: Dict[int, UserPreferences] = {}
        self._interactions: Dict[Tuple[int, int], ArticleInteraction] = {}

    # Articles

    def create_article(
        self,
        *,
        title: str,
        content: str,
        summary: str,
        source_url: str,
        source_name: str,
        topic: str,
        published_at: datetime,
        image_url: Optional[str] = None,
    ) -> Article:
        with self._lock:
            article = Article(
                id=next(self._article_ids),
                title=title,
                content=content,
                summary=summary,
                source_url=source_url,
                source_name=source_name,
                topic=topic,
                published_at=_as_aware(published_at),
                fetched_at=_utcnow(),
                image_url=image_url,
            )
            self._articles[article.id] = article
            self._ids_by_url[source_url] = article.id
            return article

    def update_article(self, article_id: int, **changes: object) -> Article:
        unknown = set(changes) - _ARTICLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown article fields: {', '.join(sorted(unknown))}")
        if isinstance(changes.get("published_at"), datetime):
            changes["published_at"] = _as_aware(changes["published_at"])  # type: ignore[arg-type]
        with self._lock:
            existing = self._require_article(article_id)
            updated = replace(existing, **changes)
            if updated.source_url != existing.source_url:
                self._ids_by_url.pop(existing.source_url, None)
                self._ids_by_url[updated.source_url] = article_id
            self._articles[article_id] = updated
            return updated

    def get_article(self, article_id: int) -> Optional[Article]:
        return self._articles.get(article_id)

    def find_by_url(self, url: str) -> Optional[Article]:
        with self._lock:
            article_id = self._ids_by_url.get(url)
            return self._articles.get(article_id) if article_id is not None else None

    def list_articles(self, limit: int = 10, offset: int = 0) -> List[Article]:
        return _page(self._newest_first(), limit, offset)

    def __len__(self) -> int:
        return len(self._articles)

    # Classifications

    def save_classification(self, article_id: int, result: ClassificationResult) -> None:
        """Store ``result`` for an article, replacing any earlier classification."""
        with self._lock:
            self._require_article(article_id)
            self._classifications[article_id] = result

    def get_classification(self, article_id: int) -> Optional[ClassificationResult]:
        return self._classifications.get(article_id)

    # Feed

    def feed(self, query: FeedQuery, user_id: Optional[int] = None) -> List[ArticleView]:
        with self._lock:
            articles: Iterable[Article] = self._newest_first()
            if query.topic:
                topic = query.topic.lower()
                articles = [a for a in articles if a.topic.lower() == topic]
            if query.sentiment is not None:
                label = SentimentLabel(query.sentiment)
                articles = [a for a in articles if self._label_of(a.id) == label]
            if query.search:
                terms = [term for term in query.search.lower().split() if term]
                articles = [a for a in articles if _mentions_any(a, terms)]
            if query.sources:
                sources = {source.lower() for source in query.sources}
                articles = [a for a in articles if a.source_name.lower() in sources]
            if query.personalized and user_id is not None:
                preferences = self._preferences.get(user_id)
                if preferences is not None:
                    articles = [a for a in articles if _matches_preferences(a, preferences)]
            return [self._view(article, user_id) for article in _page(list(articles), query.limit, query.offset)]

    def view(self, article_id: int, user_id: Optional[int] = None) -> Optional[ArticleView]:
        with self._lock:
            article = self._articles.get(article_id)
            return self._view(article, user_id) if article is not None else None

    # Preferences

    def get_preferences(self, user_id: int) -> Optional[UserPreferences]:
        return self._preferences.get(user_id)

    def update_preferences(
        self,
        user_id: int,
        topics: Optional[List[str]] = None,
        keywords: Optional[List[str]] = None,
        sources: Optional[List[str]] = None,
    ) -> UserPreferences:
        with self._lock:
            current = self._preferences.get(user_id) or UserPreferences(user_id=user_id)
            updated = UserPreferences(
                user_id=user_id,
                topics=list(topics) if topics is not None else current.topics,
                keywords=list(keywords) if keywords is not None else current.keywords,
                sources=list(sources) if sources is not None else current.sources,
            )
            self._preferences[user_id] = updated
            return updated

    # Interactions

    def get_interaction(self, user_id: int, article_id: int) -> Optional[ArticleInteraction]:
        return self._interactions.get((user_id, article_id))

    def set_interaction(
        self,
        user_id: int,
        article_id: int,
        is_saved: Optional[bool] = None,
        is_read: Optional[bool] = None,
    ) -> ArticleInteraction:
        with self._lock:
            self._require_article(article_id)
            current = self._interactions.get((user_id, article_id))
            interaction = ArticleInteraction(
                user_id=user_id,
                article_id=article_id,
                is_saved=is_saved if is_saved is not None else bool(current and current.is_saved),
                is_read=is_read if is_read is not None else bool(current and current.is_read),
                interacted_at=_utcnow(),
            )
            self._interactions[(user_id, article_id)] = interaction
            return interaction

    def saved_articles(self, user_id: int, limit: int = 10, offset: int = 0) -> List[ArticleView]:
        with self._lock:
            saved = [a for a in self._newest_first() if self._is_saved(user_id, a.id)]
            return [self._view(article, user_id) for article in _page(saved, limit, offset)]

    # Stats

    def stats(self, user_id: int, now: Optional[datetime] = None) -> Stats:
        now = _as_aware(now or _utcnow())
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        with self._lock:
            articles_today = sum(1 for a in self._articles.values() if a.published_at >= start_of_day)
            labels = [result.label for result in self._classifications.values()]
            positive = sum(1 for label in labels if label is SentimentLabel.POSITIVE)
            preferences = self._preferences.get(user_id)
        return Stats(
            articles_today=articles_today,
            positive_news=round(positive / len(labels) * 100) if labels else 0,
            active_topics=len(preferences.topics) if preferences else 0,
        )

    def _newest_first(self) -> List[Article]:
        return sorted(self._articles.values(), key=lambda a: a.published_at, reverse=True)

    def _label_of(self, article_id: int) -> Optional[SentimentLabel]:
        result = self._classifications.get(article_id)
        return result.label if result is not None else None

    def _is_saved(self, user_id: int, article_id: int) -> bool:
        interaction = self._interactions.get((user_id, article_id))
        return interaction is not None and interaction.is_saved

    def _view(self, article: Article, user_id: Optional[int]) -> ArticleView:
        return ArticleView(
            article=article,
            sentiment=self._classifications.get(article.id),
            interaction=self._interactions.get((user_id, article.id)) if user_id is not None else None,
        )

    def _require_article(self, article_id: int) -> Article:
        article = self._articles.get(article_id)
        if article is None:
            raise KeyError(f"Unknown article id {article_id}")
        return article


def _page(items: List[Article], limit: int, offset: int) -> List[Article]:
    offset = max(offset, 0)
    return items[offset : offset + max(limit, 0)]


def _mentions_any(article: Article, terms: List[str]) -> bool:
    if not terms:
        return True
    title = article.title.lower()
    content = article.content.lower()
    return any(term in title or term in content for term in terms)


def _matches_preferences(article: Article, preferences: UserPreferences) -> bool:
    if preferences.topics and article.topic.lower() not in {t.lower() for t in preferences.topics}:
        return False
    if preferences.sources and article.source_name.lower() not in {s.lower() for s in preferences.sources}:
        return False
    if preferences.keywords:
        return _mentions_any(article, [k.lower() for k in preferences.keywords if k.strip()])
    return True
