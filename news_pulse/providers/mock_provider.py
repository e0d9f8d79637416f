from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from ..models import RawArticle
from .base import BaseProvider


class MockProvider(BaseProvider):
    """Returns hard-coded articles for offline development and tests."""

    name = "mock"

    def __init__(self, now: Optional[datetime] = None) -> None:
        self._now = now

    def top_headlines(self, category: str, limit: int = 10) -> Iterable[RawArticle]:
        return self._sample(category)[:limit]

    def search(self, query: str, limit: int = 10) -> Iterable[RawArticle]:
        return self._sample(query)[:limit]

    def _sample(self, subject: str) -> List[RawArticle]:
        now = self._now or datetime.now(timezone.utc)
        slug = subject.lower().replace(" ", "-")
        return [
            RawArticle(
                title=f"{subject.title()} sector posts record growth",
                url=f"https://example.com/{slug}/record-growth",
                source="Example News",
                published_at=now - timedelta(hours=2),
                content=(
                    f"The {subject} sector reported very strong results this quarter. "
                    "Analysts were optimistic about continued expansion and new investments."
                ),
                description="Strong quarter lifts the outlook.",
                image_url=f"https://example.com/{slug}/growth.jpg",
            ),
            RawArticle(
                title=f"Regulators raise concerns over {subject} practices",
                url=f"https://example.com/{slug}/regulators",
                source="Market Watchers",
                published_at=now - timedelta(days=1),
                content=(
                    f"A new lawsuit alleges fraud in parts of the {subject} industry. "
                    "Officials warned the crisis is not a good sign for investors."
                ),
                description=None,
            ),
        ]
