from __future__ import annotations

from collections import Counter
from functools import lru_cache
import re
from typing import List, Optional, Pattern

_SENTENCE_BREAK_RE = re.compile(r"[.!?]+")
_TOKEN_EDGE_RE = re.compile(r"^[^\w']+|[^\w']+$")
_WORD_RE = re.compile(r"[a-z']+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def split_sentences(text: str) -> List[str]:
    """Split on runs of ``.``, ``!`` and ``?``, dropping blank pieces."""
    return [piece.strip() for piece in _SENTENCE_BREAK_RE.split(text) if piece.strip()]


def tokenize(sentence: str) -> List[str]:
    tokens = (_TOKEN_EDGE_RE.sub("", raw) for raw in sentence.split())
    return [token for token in tokens if token]


@lru_cache(maxsize=1024)
def _word_pattern(word: str) -> Pattern[str]:
    return re.compile(rf"\b{re.escape(word)}\b")


def count_word(text: str, word: str) -> int:
    """Count whole-word occurrences of ``word`` in ``text``."""
    if not text or not word:
        return 0
    return len(_word_pattern(word).findall(text))


def summarize(text: Optional[str], max_sentences: int = 2) -> Optional[str]:
    """Pick the ``max_sentences`` sentences with the most frequent vocabulary."""
    if not text:
        return None
    sentences = [part.strip() for part in re.split(r"(?<=[.!?])\s+", text.strip()) if part.strip()]
    if len(sentences) <= max_sentences:
        return " ".join(sentences) or None
    frequencies = Counter(_WORD_RE.findall(text.lower()))
    if not frequencies:
        return " ".join(sentences[:max_sentences])
    peak = max(frequencies.values())

    def weight(sentence: str) -> float:
        words = _WORD_RE.findall(sentence.lower())
        if not words:
            return 0.0
        return sum(frequencies[word] / peak for word in words) / len(words)

    best = sorted(range(len(sentences)), key=lambda idx: weight(sentences[idx]), reverse=True)
    return " ".join(sentences[idx] for idx in sorted(best[:max_sentences]))


def truncate(text: Optional[str], limit: int = 280) -> Optional[str]:
    if not text or len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def dedupe_key(title: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
    """Normalized key used to spot the same story syndicated under several URLs."""
    normalized = _NON_ALNUM_RE.sub("", (title or "").strip().lower())
    if normalized:
        return normalized
    normalized = _NON_ALNUM_RE.sub("", (fallback or "").strip().lower()[:120])
    return normalized or None
