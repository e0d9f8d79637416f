"""Rule-based sentiment classification for news articles.

Scores are the share of positive weight in the total sentiment weight found
in an article. Every contribution comes from a literal lexicon hit, so the
explanation attached to a result can always be traced back to the text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .lexicon import DEFAULT_LEXICON, Lexicon
from .models import ClassificationResult, Polarity, SentimentLabel, SentimentMatch
from .text import count_word, split_sentences, tokenize

POSITIVE_THRESHOLD = 0.67
NEGATIVE_THRESHOLD = 0.33
NEUTRAL_SCORE = 0.5

INTENSIFIED_WEIGHT = 2.0
NEGATED_POSITIVE_WEIGHT = 1.0
NEGATED_NEGATIVE_WEIGHT = 0.5
TOPIC_WEIGHT = 1.5
HEADLINE_WEIGHT = 2.0

MAX_REASONS = 3


class ModifierState(Enum):
    NONE = "none"
    NEGATED = "negated"
    INTENSIFIED = "intensified"


class _ContextWindow:
    """Countdown of modifier windows inside a single sentence.

    A modifier opens a window covering the tokens that follow it. Every
    token after the trigger, modifiers included, consumes one step.
    """

    __slots__ = ("_spans", "_remaining", "_opened_at")

    def __init__(self, negation_span: int, intensifier_span: int) -> None:
        self._spans = {ModifierState.NEGATED: negation_span, ModifierState.INTENSIFIED: intensifier_span}
        self._remaining = {ModifierState.NEGATED: 0, ModifierState.INTENSIFIED: 0}
        self._opened_at: Dict[ModifierState, int] = {}

    @property
    def state(self) -> ModifierState:
        if self._remaining[ModifierState.NEGATED] > 0:
            return ModifierState.NEGATED
        if self._remaining[ModifierState.INTENSIFIED] > 0:
            return ModifierState.INTENSIFIED
        return ModifierState.NONE

    def opened_at(self, state: ModifierState) -> int:
        return self._opened_at[state]

    def open(self, state: ModifierState, position: int) -> None:
        self.step()
        self._remaining[state] = self._spans[state]
        self._opened_at[state] = position

    def step(self) -> None:
        for state, remaining in self._remaining.items():
            if remaining > 0:
                self._remaining[state] = remaining - 1


@dataclass
class _Tally:
    positive: float = 0.0
    negative: float = 0.0
    matches: List[SentimentMatch] = field(default_factory=list)

    def add(self, polarity: Polarity, weight: float, excerpt: Optional[str] = None, reason: str = "") -> None:
        if polarity is Polarity.POSITIVE:
            self.positive += weight
        else:
            self.negative += weight
        if excerpt is not None:
            self.matches.append(SentimentMatch(excerpt=excerpt, polarity=polarity, reason=reason))

    @property
    def total(self) -> float:
        return self.positive + self.negative


def classify(title: str, body: str, topic: str, *, lexicon: Optional[Lexicon] = None) -> ClassificationResult:
    """Classify an article from its headline, body and topic key."""
    lexicon = lexicon or DEFAULT_LEXICON
    title_text = (title or "").lower()
    body_text = (body or "").lower()
    text = f"{title_text} {body_text}"
    tally = _Tally()

    for sentence in split_sentences(text):
        _scan_sentence(tokenize(sentence), lexicon, tally)

    _scan_topic(text, topic, lexicon, tally)
    _scan_headline(title_text, lexicon, tally)

    score = NEUTRAL_SCORE if tally.total == 0 else tally.positive / tally.total
    label = label_for_score(score)
    return ClassificationResult(label=label, score=score, explanation=_explain(label, score, tally))


def label_for_score(score: float) -> SentimentLabel:
    if score >= POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score <= NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _scan_sentence(tokens: List[str], lexicon: Lexicon, tally: _Tally) -> None:
    window = _ContextWindow(lexicon.negation_window, lexicon.intensifier_window)
    for position, token in enumerate(tokens):
        if token in lexicon.negators:
            window.open(ModifierState.NEGATED, position)
            continue
        if token in lexicon.intensifiers:
            window.open(ModifierState.INTENSIFIED, position)
            continue

        state = window.state
        if token in lexicon.positive:
            polarity = Polarity.POSITIVE
        elif token in lexicon.negative:
            polarity = Polarity.NEGATIVE
        else:
            window.step()
            continue

        excerpt = None
        if state is not ModifierState.NONE:
            excerpt = " ".join(tokens[window.opened_at(state) : position + 1])

        if state is ModifierState.NEGATED:
            if polarity is Polarity.POSITIVE:
                tally.add(Polarity.NEGATIVE, NEGATED_POSITIVE_WEIGHT, excerpt, "positive term negated")
            else:
                tally.add(Polarity.POSITIVE, NEGATED_NEGATIVE_WEIGHT, excerpt, "negative term negated")
        elif state is ModifierState.INTENSIFIED:
            tally.add(polarity, INTENSIFIED_WEIGHT, excerpt, f"{polarity.value} term intensified")
        else:
            tally.add(polarity, 1.0)
        window.step()


def _scan_topic(text: str, topic: str, lexicon: Lexicon, tally: _Tally) -> None:
    entry = lexicon.topic(topic) if topic else None
    if entry is None:
        return
    for polarity, words in ((Polarity.POSITIVE, entry.positive), (Polarity.NEGATIVE, entry.negative)):
        for word in sorted(words):
            hits = count_word(text, word)
            if hits:
                tally.add(polarity, TOPIC_WEIGHT * hits, word, f"{topic} term")


def _scan_headline(title: str, lexicon: Lexicon, tally: _Tally) -> None:
    if not title.strip():
        return
    for polarity, words in ((Polarity.POSITIVE, lexicon.positive), (Polarity.NEGATIVE, lexicon.negative)):
        for word in sorted(words):
            hits = count_word(title, word)
            if hits:
                tally.add(polarity, HEADLINE_WEIGHT * hits, word, "headline term")


def _explain(label: SentimentLabel, score: float, tally: _Tally) -> str:
    parts = [f"Classified as {label.value} (score {score:.4f})."]
    if tally.total == 0:
        parts.append("No sentiment indicators were found.")
        return " ".join(parts)
    for polarity, heading in ((Polarity.POSITIVE, "Positive signals"), (Polarity.NEGATIVE, "Negative signals")):
        reasons = [
            f"'{match.excerpt}' ({match.reason})" for match in tally.matches if match.polarity is polarity
        ][:MAX_REASONS]
        if reasons:
            parts.append(f"{heading}: {', '.join(reasons)}.")
    return " ".join(parts)
