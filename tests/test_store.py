from datetime import datetime, timedelta, timezone

import pytest

from news_pulse.models import ClassificationResult, FeedQuery, SentimentLabel
from news_pulse.sentiment import classify

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _add(store, title, topic="Business", source="Example News", hours_ago=0, content=None):
    return store.create_article(
        title=title,
        content=content or f"{title} body",
        summary="summary",
        source_url=f"https://example.com/{title.lower().replace(' ', '-')}",
        source_name=source,
        topic=topic,
        published_at=NOW - timedelta(hours=hours_ago),
    )


def test_articles_get_increasing_ids_and_are_listed_newest_first(store):
    older = _add(store, "Older", hours_ago=5)
    newer = _add(store, "Newer", hours_ago=1)
    assert (older.id, newer.id) == (1, 2)
    assert [a.id for a in store.list_articles()] == [newer.id, older.id]
    assert store.find_by_url(newer.source_url) == newer
    assert len(store) == 2


def test_naive_timestamps_are_treated_as_utc(store):
    article = store.create_article(
        title="Naive",
        content="x",
        summary="x",
        source_url="https://example.com/naive",
        source_name="Example",
        topic="General",
        published_at=datetime(2026, 1, 1, 8, 0),
    )
    assert article.published_at.tzinfo is timezone.utc


def test_update_article_rejects_unknown_fields(store):
    article = _add(store, "Original")
    updated = store.update_article(article.id, title="Renamed")
    assert updated.title == "Renamed"
    assert store.get_article(article.id).title == "Renamed"
    with pytest.raises(ValueError):
        store.update_article(article.id, id=99)
    with pytest.raises(KeyError):
        store.update_article(404, title="missing")


def test_save_classification_overwrites_previous_result(store):
    article = _add(store, "Story")
    store.save_classification(article.id, classify("", "bad", ""))
    store.save_classification(article.id, classify("", "good", ""))
    assert store.get_classification(article.id).label is SentimentLabel.POSITIVE
    with pytest.raises(KeyError):
        store.save_classification(999, classify("", "", ""))


def test_feed_filters_by_topic_sentiment_search_and_source(store):
    happy = _add(store, "Chip launch", topic="Technology", source="Wired", hours_ago=1)
    gloomy = _add(store, "Chip recall", topic="Technology", source="Verge", hours_ago=2)
    other = _add(store, "Bank merger", topic="Business", hours_ago=3)
    store.save_classification(happy.id, ClassificationResult(SentimentLabel.POSITIVE, 0.9, ""))
    store.save_classification(gloomy.id, ClassificationResult(SentimentLabel.NEGATIVE, 0.1, ""))

    def ids(**kwargs):
        return [view.article.id for view in store.feed(FeedQuery(**kwargs))]

    assert ids() == [happy.id, gloomy.id, other.id]
    assert ids(topic="technology") == [happy.id, gloomy.id]
    assert ids(topic="Technology", sentiment=SentimentLabel.NEGATIVE) == [gloomy.id]
    assert ids(sentiment=SentimentLabel.NEUTRAL) == []
    assert ids(search="MERGER recall") == [gloomy.id, other.id]
    assert ids(sources=["wired"]) == [happy.id]
    assert ids(limit=1, offset=1) == [gloomy.id]
    assert ids(offset=10) == []


def test_feed_views_carry_classification_and_interaction(store):
    article = _add(store, "Story")
    store.save_classification(article.id, ClassificationResult(SentimentLabel.NEUTRAL, 0.5, "x"))
    store.set_interaction(7, article.id, is_read=True)
    anonymous = store.feed(FeedQuery())[0]
    personal = store.feed(FeedQuery(), user_id=7)[0]
    assert anonymous.sentiment.score == 0.5
    assert anonymous.interaction is None
    assert personal.interaction.is_read is True


def test_personalized_feed_applies_preferences(store):
    ai = _add(store, "AI chips", topic="Technology", source="Wired", content="new ai accelerator")
    phones = _add(store, "Phones", topic="Technology", source="Wired", hours_ago=1)
    _add(store, "Banks", topic="Business", source="Wired", hours_ago=2)
    store.update_preferences(1, topics=["technology"], keywords=["accelerator"])

    personalized = store.feed(FeedQuery(personalized=True), user_id=1)
    assert [view.article.id for view in personalized] == [ai.id]
    # Users without preferences get the unfiltered feed.
    assert len(store.feed(FeedQuery(personalized=True), user_id=2)) == 3
    assert phones.id in [view.article.id for view in store.feed(FeedQuery(personalized=False), user_id=1)]


def test_update_preferences_merges_partial_updates(store):
    assert store.get_preferences(3) is None
    store.update_preferences(3, topics=["Sports"], sources=["ESPN"])
    updated = store.update_preferences(3, keywords=["final"])
    assert updated.topics == ["Sports"]
    assert updated.sources == ["ESPN"]
    assert updated.keywords == ["final"]
    assert store.get_preferences(3) == updated


def test_interactions_keep_unspecified_flags(store):
    article = _add(store, "Story")
    first = store.set_interaction(1, article.id, is_saved=True)
    assert (first.is_saved, first.is_read) == (True, False)
    second = store.set_interaction(1, article.id, is_read=True)
    assert (second.is_saved, second.is_read) == (True, True)
    assert store.get_interaction(1, article.id) == second
    assert store.get_interaction(2, article.id) is None
    with pytest.raises(KeyError):
        store.set_interaction(1, 999, is_saved=True)


def test_saved_articles_are_paginated_newest_first(store):
    first = _add(store, "First", hours_ago=3)
    second = _add(store, "Second", hours_ago=2)
    third = _add(store, "Third", hours_ago=1)
    for article in (first, second, third):
        store.set_interaction(1, article.id, is_saved=True)
    store.set_interaction(1, second.id, is_saved=False)

    saved = store.saved_articles(1)
    assert [view.article.id for view in saved] == [third.id, first.id]
    assert all(view.interaction.is_saved for view in saved)
    assert [view.article.id for view in store.saved_articles(1, limit=1, offset=1)] == [first.id]
    assert store.saved_articles(2) == []


def test_stats(store):
    today = _add(store, "Today", hours_ago=1)
    _add(store, "Yesterday", hours_ago=30)
    store.save_classification(today.id, ClassificationResult(SentimentLabel.POSITIVE, 0.8, ""))
    assert store.stats(1, now=NOW).positive_news == 100
    store.update_preferences(1, topics=["Business", "Health"])

    stats = store.stats(1, now=NOW)
    assert stats.articles_today == 1
    assert stats.active_topics == 2


def test_stats_without_classifications(store):
    stats = store.stats(1, now=NOW)
    assert (stats.articles_today, stats.positive_news, stats.active_topics) == (0, 0, 0)
