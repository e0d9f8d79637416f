"""News Pulse package initializer."""

from .config import AggregatorConfig
from .ingestion import NewsIngestor
from .lexicon import DEFAULT_LEXICON, Lexicon, load_lexicon
from .models import ClassificationResult, SentimentLabel
from .sentiment import classify
from .store import ArticleStore

__all__ = [
    "AggregatorConfig",
    "ArticleStore",
    "ClassificationResult",
    "DEFAULT_LEXICON",
    "Lexicon",
    "NewsIngestor",
    "SentimentLabel",
    "classify",
    "load_lexicon",
]
