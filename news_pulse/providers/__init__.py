"""Article sources used by the ingestion pipeline."""

from .base import BaseProvider, ProviderList
from .mock_provider import MockProvider
from .newsapi_provider import NewsAPIProvider
from .rss_provider import RSSProvider

__all__ = ["BaseProvider", "ProviderList", "MockProvider", "NewsAPIProvider", "RSSProvider"]
