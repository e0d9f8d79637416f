from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import logging
import threading
from typing import Optional

from flask import Flask, jsonify, request

from news_pulse import AggregatorConfig, NewsIngestor, classify
from news_pulse.models import ArticleInteraction, ArticleView, ClassificationResult, FeedQuery, SentimentLabel, UserPreferences


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config: Optional[AggregatorConfig] = None, ingestor: Optional[NewsIngestor] = None) -> Flask:
    app = Flask(__name__)
    config = config or (ingestor.config if ingestor is not None else AggregatorConfig.from_env())
    ingestor = ingestor or NewsIngestor(config)
    store = ingestor.store
    app.extensions["news_pulse.ingestor"] = ingestor

    def _int_arg(name: str, default: int) -> int:
        value = request.args.get(name)
        if value is None or value == "":
            return default
        try:
            parsed = int(value)
        except ValueError:
            raise ValueError(f"`{name}` must be an integer") from None
        if parsed < 0:
            raise ValueError(f"`{name}` must not be negative")
        return parsed

    def _refresh_allowed() -> bool:
        if not config.is_production:
            return True
        return bool(config.admin_api_key) and request.args.get("key") == config.admin_api_key

    def _bool_arg(name: str) -> bool:
        return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes", "on"}

    def _user_id() -> Optional[int]:
        value = request.headers.get("X-User-Id") or request.args.get("user_id")
        if value is None or not value.strip():
            return None
        try:
            parsed = int(value)
        except ValueError:
            raise ValueError("User id must be an integer") from None
        if parsed <= 0:
            raise ValueError("User id must be positive")
        return parsed

    def _require_user():
        """Return ``(user_id, None)`` or ``(None, error_response)``."""
        try:
            user_id = _user_id()
        except ValueError as exc:
            return None, (jsonify({"error": str(exc)}), 400)
        if user_id is None:
            return None, (jsonify({"error": "User id required (X-User-Id header or user_id parameter)"}), 401)
        return user_id, None

    @app.get("/health")
    def healthcheck():
        return {"status": "ok", "articles": len(store)}

    @app.get("/api/articles")
    def list_articles():
        try:
            sentiment = request.args.get("sentiment")
            search = (request.args.get("search") or "").strip()
            query = FeedQuery(
                topic=request.args.get("topic") or None,
                sentiment=SentimentLabel(sentiment) if sentiment else None,
                search=search or None,
                sources=request.args.getlist("source"),
                personalized=_bool_arg("personalized"),
                limit=_int_arg("limit", config.page_size),
                offset=_int_arg("offset", 0),
            )
            user_id = _user_id()
            if query.search:
                app.logger.info("User searched for: %r", query.search)
                ingestor.search(query.search)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify([serialize_view(view) for view in store.feed(query, user_id=user_id)])

    @app.get("/api/articles/saved")
    def saved_articles():
        user_id, error = _require_user()
        if error:
            return error
        try:
            limit = _int_arg("limit", config.page_size)
            offset = _int_arg("offset", 0)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify([serialize_view(view) for view in store.saved_articles(user_id, limit, offset)])

    @app.post("/api/articles/<int:article_id>/interaction")
    def update_interaction(article_id: int):
        user_id, error = _require_user()
        if error:
            return error
        payload = request.get_json(silent=True) or {}
        flags = {key: payload.get(key) for key in ("is_saved", "is_read")}
        if any(value is not None and not isinstance(value, bool) for value in flags.values()):
            return jsonify({"error": "`is_saved` and `is_read` must be booleans"}), 400
        try:
            interaction = store.set_interaction(user_id, article_id, **flags)
        except KeyError:
            return jsonify({"error": "Article not found"}), 404
        return jsonify(serialize_interaction(interaction))

    @app.get("/api/preferences")
    def get_preferences():
        user_id, error = _require_user()
        if error:
            return error
        preferences = store.get_preferences(user_id) or UserPreferences(user_id=user_id)
        return jsonify(asdict(preferences))

    @app.put("/api/preferences")
    def put_preferences():
        user_id, error = _require_user()
        if error:
            return error
        payload = request.get_json(silent=True) or {}
        updates = {}
        for key in ("topics", "keywords", "sources"):
            value = payload.get(key)
            if value is None:
                continue
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                return jsonify({"error": f"`{key}` must be a list of strings"}), 400
            updates[key] = [item.strip() for item in value if item.strip()]
        return jsonify(asdict(store.update_preferences(user_id, **updates)))

    @app.get("/api/stats")
    def get_stats():
        user_id, error = _require_user()
        if error:
            return error
        return jsonify(asdict(store.stats(user_id)))

    @app.get("/api/articles/<int:article_id>")
    def get_article(article_id: int):
        view = store.view(article_id)
        if view is None:
            return jsonify({"error": "Article not found"}), 404
        return jsonify(serialize_view(view))

    @app.post("/api/classify")
    def classify_text():
        payload = request.get_json(silent=True) or {}
        title = payload.get("title", "")
        body = payload.get("body", "")
        topic = payload.get("topic", "")
        if not all(isinstance(value, str) for value in (title, body, topic)):
            return jsonify({"error": "`title`, `body` and `topic` must be strings"}), 400
        result = classify(title, body, topic, lexicon=ingestor.lexicon)
        return jsonify(serialize_result(result))

    @app.post("/api/news/refresh")
    def refresh_all():
        if not _refresh_allowed():
            return jsonify({"error": "Unauthorized access"}), 403
        try:
            count = _int_arg("count", config.articles_per_category)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        worker = threading.Thread(target=ingestor.refresh_all, args=(count,), name="news-refresh", daemon=True)
        worker.start()
        return jsonify({"message": "News update initiated. Check logs for progress."}), 202

    @app.post("/api/news/refresh/<category>")
    def refresh_category(category: str):
        if not _refresh_allowed():
            return jsonify({"error": "Unauthorized access"}), 403
        try:
            stored = ingestor.refresh_category(category, _int_arg("count", 10))
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        except Exception as exc:  # pragma: no cover - runtime guard
            app.logger.exception("News refresh error for category %s", category)
            return jsonify({"error": "Failed to refresh category news", "detail": str(exc)}), 500
        return jsonify({"message": f"News refreshed for category: {category}", "stored": stored})

    return app


def serialize_result(result: ClassificationResult) -> dict:
    return {"label": result.label.value, "score": result.score, "explanation": result.explanation}


def serialize_interaction(interaction: ArticleInteraction) -> dict:
    data = asdict(interaction)
    if interaction.interacted_at is not None:
        data["interacted_at"] = interaction.interacted_at.isoformat()
    return data


def serialize_view(view: ArticleView) -> dict:
    data = asdict(view.article)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
    data["sentiment"] = serialize_result(view.sentiment) if view.sentiment is not None else None
    data["interaction"] = serialize_interaction(view.interaction) if view.interaction is not None else None
    return data


if __name__ == "__main__":
    _config = AggregatorConfig.from_env()
    configure_logging(_config.log_level)
    app = create_app(_config)
    _ingestor = app.extensions["news_pulse.ingestor"]
    threading.Thread(target=_ingestor.refresh_all, args=(3,), name="news-seed", daemon=True).start()
    app.run(debug=True, host="0.0.0.0", port=8008)
