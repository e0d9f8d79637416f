import pytest

from news_pulse.config import NEWS_CATEGORIES, AggregatorConfig

_VARS = [
    "NEWS_API_KEY",
    "NEWSAPI_KEY",
    "NEWS_PULSE_CATEGORIES",
    "NEWS_PULSE_ARTICLES_PER_CATEGORY",
    "NEWS_PULSE_PAGE_SIZE",
    "NEWS_PULSE_MIN_SEARCH_LENGTH",
    "NEWS_PULSE_ALLOWED_DOMAINS",
    "NEWS_PULSE_MAX_PER_SOURCE",
    "NEWS_PULSE_LEXICON_PATH",
    "NEWS_PULSE_ENABLE_RSS",
    "ADMIN_API_KEY",
    "NEWS_PULSE_ENV",
    "NEWS_PULSE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AggregatorConfig.from_env()
    assert config.newsapi_key is None
    assert config.categories == NEWS_CATEGORIES
    assert config.articles_per_category == 5
    assert config.page_size == 10
    assert config.min_search_length == 3
    assert config.max_per_source is None
    assert config.enable_rss is True
    assert config.is_production is False
    assert config.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("NEWSAPI_KEY", "legacy-key")
    monkeypatch.setenv("NEWS_PULSE_CATEGORIES", "Business, sports,,")
    monkeypatch.setenv("NEWS_PULSE_ARTICLES_PER_CATEGORY", "8")
    monkeypatch.setenv("NEWS_PULSE_ALLOWED_DOMAINS", "reuters.com, apnews.com")
    monkeypatch.setenv("NEWS_PULSE_MAX_PER_SOURCE", "2")
    monkeypatch.setenv("NEWS_PULSE_ENABLE_RSS", "off")
    monkeypatch.setenv("NEWS_PULSE_ENV", "Production")
    monkeypatch.setenv("NEWS_PULSE_LOG_LEVEL", "debug")

    config = AggregatorConfig.from_env()
    assert config.newsapi_key == "legacy-key"
    assert config.categories == ["business", "sports"]
    assert config.articles_per_category == 8
    assert config.allowed_domains == ["reuters.com", "apnews.com"]
    assert config.max_per_source == 2
    assert config.enable_rss is False
    assert config.is_production is True
    assert config.log_level == "DEBUG"


def test_primary_api_key_wins(monkeypatch):
    monkeypatch.setenv("NEWS_API_KEY", "primary")
    monkeypatch.setenv("NEWSAPI_KEY", "legacy")
    assert AggregatorConfig.from_env().newsapi_key == "primary"


def test_non_positive_source_limit_disables_cap(monkeypatch):
    monkeypatch.setenv("NEWS_PULSE_MAX_PER_SOURCE", "0")
    assert AggregatorConfig.from_env().max_per_source is None


@pytest.mark.parametrize(
    "name,value",
    [
        ("NEWS_PULSE_PAGE_SIZE", "ten"),
        ("NEWS_PULSE_ARTICLES_PER_CATEGORY", "-1"),
        ("NEWS_PULSE_MAX_PER_SOURCE", "many"),
    ],
)
def test_invalid_integers_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        AggregatorConfig.from_env()


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("NEWS_PULSE_PAGE_SIZE", "   ")
    monkeypatch.setenv("NEWS_PULSE_CATEGORIES", " , ,")
    monkeypatch.setenv("NEWS_PULSE_ENV", "")
    config = AggregatorConfig.from_env()
    assert config.page_size == 10
    assert config.categories == NEWS_CATEGORIES
    assert config.environment == "development"
