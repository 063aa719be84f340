"""
Flask web server for TrendSage.

Routes
──────
POST /api/search                     Full trend search (documents + AI summary)
GET  /api/search/quick?q=&limit=     Document list only
POST /api/search/regenerate          Re-summarise caller-supplied documents
GET  /api/search/suggestions?q=      Autocomplete suggestions
GET  /api/trending?limit=            Trending topics by search frequency
GET  /api/trending/categories        Curated topics by category
GET  /api/trending/chart/<topic>     Publication trend chart data
GET  /api/trending/featured          Curated featured topics
POST /api/analytics/card-view        Record a trend card view
POST /api/analytics/share            Record a share
GET  /api/analytics/summary?range=   Aggregated usage analytics
GET  /api/analytics/goal-progress    Unique users vs. the 69-user goal
GET  /health                         Liveness check
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, request
from pydantic import TypeAdapter, ValidationError
from werkzeug.exceptions import HTTPException

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from trendsage import __version__
from trendsage.analytics import AnalyticsStore
from trendsage.catalog import CATEGORIES, FEATURED
from trendsage.documents import DEFAULT_LIMIT, build_document_source
from trendsage.errors import ProviderError, QueryValidationError
from trendsage.models import Document
from trendsage.search import SearchOrchestrator, get_search_suggestions, validate_query
from trendsage.summarizer import build_summarizer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

_documents_adapter = TypeAdapter(list[Document])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _orchestrator() -> SearchOrchestrator:
    return current_app.extensions["trendsage"]


def _analytics() -> AnalyticsStore:
    return _orchestrator().analytics


def _session_id(body: Optional[dict] = None) -> str:
    """Body ``sessionId``, then the ``x-session-id`` header, then anonymous."""
    return (body or {}).get("sessionId") or request.headers.get("x-session-id") or "anonymous"


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _limit(value, default: int = DEFAULT_LIMIT) -> int:
    if value is None or value == "":
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise QueryValidationError("Invalid limit", "limit must be a positive integer")
    if limit < 1:
        raise QueryValidationError("Invalid limit", "limit must be a positive integer")
    return limit


# ── Search ─────────────────────────────────────────────────────────────────

@api.post("/search")
def search():
    """Main search: documents → summary → sub-topics → chart → analytics."""
    body = _json_body()
    options = body.get("options") or {}
    if not isinstance(options, dict):
        options = {}

    response = _orchestrator().search(
        body.get("query"),
        limit=_limit(options.get("limit")),
        session_id=request.headers.get("x-session-id") or "anonymous",
        user_agent=request.headers.get("User-Agent"),
        ip=request.remote_addr,
    )
    return jsonify(response.to_json())


@api.get("/search/quick")
def quick_search():
    """Document list without any AI processing."""
    if not request.args.get("q", "").strip():
        raise QueryValidationError(
            "Invalid query", 'Query parameter "q" is required'
        )
    q = validate_query(request.args["q"])
    results = _orchestrator().quick_search(q, limit=_limit(request.args.get("limit")))
    return jsonify(
        {
            "query": q,
            "documents": [d.to_json() for d in results.documents],
            "totalResults": results.total_results,
        }
    )


@api.post("/search/regenerate")
def regenerate():
    """Regenerate the summary for documents the client already holds."""
    body = _json_body()
    documents = body.get("documents")
    if not body.get("query") or not isinstance(documents, list) or not documents:
        raise QueryValidationError(
            "Invalid request", "Please provide query and documents array"
        )
    query = validate_query(body["query"])
    try:
        parsed = _documents_adapter.validate_python(documents)
    except ValidationError as exc:
        raise QueryValidationError("Invalid request", f"Malformed documents: {exc}")

    return jsonify(_orchestrator().regenerate(query, parsed).to_json())


@api.get("/search/suggestions")
def suggestions():
    return jsonify({"suggestions": get_search_suggestions(request.args.get("q"))})


# ── Trending ───────────────────────────────────────────────────────────────

@api.get("/trending")
def trending():
    """Trending topics ranked by search frequency."""
    limit = _limit(request.args.get("limit"), default=10)
    topics = _analytics().trending_topics(limit)
    return jsonify({"topics": [t.to_json() for t in topics], "updatedAt": _now()})


@api.get("/trending/categories")
def trending_categories():
    return jsonify({"categories": CATEGORIES, "updatedAt": _now()})


@api.get("/trending/chart/<path:topic>")
def trending_chart(topic: str):
    return jsonify(_orchestrator().chart(topic).to_json())


@api.get("/trending/featured")
def trending_featured():
    return jsonify({"featured": FEATURED, "updatedAt": _now()})


# ── Analytics ──────────────────────────────────────────────────────────────

@api.post("/analytics/card-view")
def card_view():
    body = _json_body()
    if not body.get("cardId"):
        raise QueryValidationError("Invalid request", "cardId is required")
    event = _analytics().track_card_view(
        card_id=str(body["cardId"]),
        query=body.get("query"),
        session_id=_session_id(body),
    )
    return jsonify({"success": True, "eventId": event.id})


@api.post("/analytics/share")
def share():
    body = _json_body()
    if not body.get("platform") or not body.get("query"):
        raise QueryValidationError("Invalid request", "platform and query are required")
    event = _analytics().track_share(
        platform=str(body["platform"]),
        query=str(body["query"]),
        session_id=_session_id(body),
    )
    return jsonify({"success": True, "eventId": event.id})


@api.get("/analytics/summary")
def analytics_summary():
    time_range = request.args.get("range", "7d")
    return jsonify(_analytics().summary(time_range).to_json())


@api.get("/analytics/goal-progress")
def goal_progress():
    return jsonify(_analytics().goal_progress().to_json())


# ── App factory ────────────────────────────────────────────────────────────

def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[SearchOrchestrator] = None,
) -> Flask:
    """Build the Flask app.

    Args:
        settings: Configuration; read from the environment when omitted.
        orchestrator: Pre-wired pipeline (tests inject mocks); built from
            *settings* when omitted.
    """
    settings = settings or Settings()
    if orchestrator is None:
        orchestrator = SearchOrchestrator(
            documents=build_document_source(settings),
            summarizer=build_summarizer(settings),
            analytics=AnalyticsStore(capacity=settings.analytics_capacity),
        )

    app = Flask(__name__)
    app.extensions["trendsage"] = orchestrator
    app.register_blueprint(api)

    @app.get("/health")
    def health():
        return jsonify({"status": "healthy", "timestamp": _now(), "version": __version__})

    @app.errorhandler(QueryValidationError)
    def handle_validation(exc: QueryValidationError):
        return jsonify({"error": exc.error, "message": exc.message}), 400

    @app.errorhandler(ProviderError)
    def handle_provider(exc: ProviderError):
        logger.error("Provider failure: %s", exc)
        return jsonify(
            {
                "error": "Provider error",
                "message": "An upstream service failed. Please try again later.",
            }
        ), 502

    @app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({"error": "Endpoint not found"}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.name, "message": exc.description}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(
            {"error": "Internal server error", "message": "Something went wrong"}
        ), 500

    logger.info(
        "TrendSage app ready (documents=%s, summarizer=%s, development=%s)",
        type(orchestrator.documents).__name__,
        type(orchestrator.summarizer).__name__,
        settings.development,
    )
    return app


app = create_app()


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    app.run(debug=settings.debug, host="0.0.0.0", port=settings.port)
