from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..models import RawArticle


class BaseProvider(ABC):
    """Abstract base class for article sources."""

    name = "provider"

    @abstractmethod
    def top_headlines(self, category: str, limit: int = 10) -> Iterable[RawArticle]:
        """Yield the latest ``RawArticle`` objects for a category."""

    @abstractmethod
    def search(self, query: str, limit: int = 10) -> Iterable[RawArticle]:
        """Yield ``RawArticle`` objects matching a free-text query."""


ProviderList = List[BaseProvider]


def first_text(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None
