from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional

_POSITIVE = (
    "good", "great", "excellent", "positive", "success", "successful",
    "breakthrough", "win", "wins", "improve", "improves", "improved",
    "improving", "benefit", "benefits", "happy", "best", "growth", "surge",
    "strong", "record", "gain", "gains", "optimistic", "upbeat", "increase",
    "exceed", "exceeds", "sustainable", "expansion", "progress", "boost",
    "thrive", "celebrate", "hope", "praise",
)

_NEGATIVE = (
    "bad", "worst", "terrible", "negative", "fail", "fails", "failed",
    "failure", "crisis", "problem", "problems", "issue", "issues", "threat",
    "risk", "risks", "danger", "fear", "fears", "conflict", "loss", "losses",
    "decline", "drop", "warning", "weak", "downturn", "concern", "concerns",
    "miss", "lawsuit", "penalty", "fraud", "downgrade", "scandal", "collapse",
    "recession", "attack",
)

_NEGATORS = (
    "not", "no", "never", "neither", "nor", "none", "nobody", "nothing",
    "without", "hardly", "barely", "isn't", "aren't", "wasn't", "weren't",
    "don't", "doesn't", "didn't", "won't", "can't", "cannot", "couldn't",
    "shouldn't", "wouldn't",
)

_INTENSIFIERS = (
    "very", "extremely", "highly", "really", "incredibly", "remarkably",
    "significantly", "hugely", "deeply", "especially", "particularly",
    "exceptionally", "most",
)

# Keys match NewsAPI category names.
_TOPICS = {
    "business": {
        "positive": ("profit", "profits", "revenue", "dividend", "rally", "upgrade"),
        "negative": ("layoffs", "bankruptcy", "debt", "inflation", "selloff"),
    },
    "entertainment": {
        "positive": ("acclaimed", "blockbuster", "award", "premiere", "sequel"),
        "negative": ("flop", "cancelled", "controversy", "backlash"),
    },
    "general": {
        "positive": ("relief", "peace", "rescue", "agreement"),
        "negative": ("disaster", "violence", "casualties", "unrest"),
    },
    "health": {
        "positive": ("cure", "treatment", "vaccine", "approval", "remission"),
        "negative": ("outbreak", "pandemic", "disease", "virus", "mortality"),
    },
    "science": {
        "positive": ("discovery", "discovered", "milestone", "launch"),
        "negative": ("extinction", "pollution", "contamination", "drought"),
    },
    "sports": {
        "positive": ("victory", "champion", "championship", "comeback", "undefeated"),
        "negative": ("defeat", "injury", "suspension", "relegation"),
    },
    "technology": {
        "positive": ("innovation", "innovative", "launch", "upgrade", "faster"),
        "negative": ("breach", "hack", "outage", "vulnerability", "bug"),
    },
}


def _words(values: Iterable[Any], name: str) -> FrozenSet[str]:
    if isinstance(values, str):
        raise ValueError(f"Lexicon field `{name}` must be a list of words")
    words = set()
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Lexicon field `{name}` contains a non-word entry: {value!r}")
        words.add(value.strip().lower())
    return frozenset(words)


def _window(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"Lexicon field `{name}` must be a positive integer")
    return value


@dataclass(frozen=True, slots=True)
class TopicLexicon:
    """Per-topic words that are scored regardless of negation context."""

    positive: FrozenSet[str] = frozenset()
    negative: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Lexicon:
    """Immutable word tables consumed by :func:`news_pulse.sentiment.classify`.

    ``topics`` is exposed as a read-only mapping keyed by the exact topic
    string passed to ``classify``; lookups are case-sensitive.
    """

    positive: FrozenSet[str]
    negative: FrozenSet[str]
    negators: FrozenSet[str]
    intensifiers: FrozenSet[str]
    topics: Mapping[str, TopicLexicon] = field(default_factory=dict)
    negation_window: int = 3
    intensifier_window: int = 2

    def __post_init__(self) -> None:
        object.__setattr__(self, "topics", MappingProxyType(dict(self.topics)))

    def topic(self, name: str) -> Optional[TopicLexicon]:
        return self.topics.get(name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["Lexicon"] = None) -> "Lexicon":
        """Build a lexicon from plain data; missing keys are taken from ``base``."""
        if not isinstance(data, Mapping):
            raise ValueError("Lexicon data must be a mapping")

        def pick(key: str, fallback: FrozenSet[str]) -> FrozenSet[str]:
            if key in data:
                return _words(data[key], key)
            if base is None:
                raise ValueError(f"Lexicon field `{key}` is required")
            return fallback

        topics = dict(base.topics) if base is not None else {}
        raw_topics = data.get("topics") or {}
        if not isinstance(raw_topics, Mapping):
            raise ValueError("Lexicon field `topics` must be a mapping")
        for name, entry in raw_topics.items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"Lexicon topic `{name}` must be a mapping")
            topics[str(name)] = TopicLexicon(
                positive=_words(entry.get("positive", ()), f"topics.{name}.positive"),
                negative=_words(entry.get("negative", ()), f"topics.{name}.negative"),
            )

        empty: FrozenSet[str] = frozenset()
        return cls(
            positive=pick("positive", base.positive if base else empty),
            negative=pick("negative", base.negative if base else empty),
            negators=pick("negators", base.negators if base else empty),
            intensifiers=pick("intensifiers", base.intensifiers if base else empty),
            topics=topics,
            negation_window=_window(
                data.get("negation_window", base.negation_window if base else 3), "negation_window"
            ),
            intensifier_window=_window(
                data.get("intensifier_window", base.intensifier_window if base else 2), "intensifier_window"
            ),
        )


DEFAULT_LEXICON = Lexicon.from_mapping(
    {
        "positive": _POSITIVE,
        "negative": _NEGATIVE,
        "negators": _NEGATORS,
        "intensifiers": _INTENSIFIERS,
        "topics": _TOPICS,
    }
)


def load_lexicon(path: Optional[str | Path] = None) -> Lexicon:
    """Load a JSON lexicon layered over the built-in tables.

    Returns :data:`DEFAULT_LEXICON` when ``path`` is empty.
    """
    if not path:
        return DEFAULT_LEXICON
    with open(path, "r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Lexicon file {path} is not valid JSON: {exc}") from None
    return Lexicon.from_mapping(data, base=DEFAULT_LEXICON)
