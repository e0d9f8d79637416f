from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Polarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(slots=True)
class RawArticle:
    """Raw article data collected from a provider."""

    title: str
    url: str
    source: str
    published_at: Optional[datetime]
    content: Optional[str]
    description: Optional[str]
    image_url: Optional[str] = None


@dataclass(slots=True)
class Article:
    """Normalized article as kept by the store."""

    id: int
    title: str
    content: str
    summary: str
    source_url: str
    source_name: str
    topic: str
    published_at: datetime
    fetched_at: datetime
    image_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SentimentMatch:
    """A lexicon hit worth mentioning in an explanation."""

    excerpt: str
    polarity: Polarity
    reason: str


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    label: SentimentLabel
    score: float
    explanation: str


@dataclass(slots=True)
class UserPreferences:
    user_id: int
    topics: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ArticleInteraction:
    user_id: int
    article_id: int
    is_saved: bool = False
    is_read: bool = False
    interacted_at: Optional[datetime] = None


@dataclass(slots=True)
class ArticleView:
    """An article joined with its classification and the caller's interaction."""

    article: Article
    sentiment: Optional[ClassificationResult] = None
    interaction: Optional[ArticleInteraction] = None


@dataclass(slots=True)
class FeedQuery:
    """Filters and paging for a feed request. ``None`` means "don't filter"."""

    topic: Optional[str] = None
    sentiment: Optional[SentimentLabel] = None
    search: Optional[str] = None
    sources: List[str] = field(default_factory=list)
    personalized: bool = False
    limit: int = 10
    offset: int = 0


@dataclass(slots=True)
class Stats:
    articles_today: int
    positive_news: int
    active_topics: int
