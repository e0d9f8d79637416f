from datetime import datetime, timezone

import pytest

from news_pulse import AggregatorConfig, ArticleStore, NewsIngestor
from news_pulse.providers import MockProvider

FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return AggregatorConfig(categories=["business", "technology"], articles_per_category=5, enable_rss=False)


@pytest.fixture
def store():
    return ArticleStore()


@pytest.fixture
def ingestor(config, store):
    return NewsIngestor(config, store=store, providers=[MockProvider(now=FIXED_NOW)])
