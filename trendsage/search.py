"""Search orchestration and query helpers.

Responsibilities:
- Sanitise and validate the user's query
- Sequence document retrieval → trend summary → sub-topics → chart
- Record the search in the analytics store (best effort)
- Assemble the ``SearchResponse`` returned by the web layer

Also provides autocomplete suggestions over a fixed topic dictionary.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from trendsage.analytics import AnalyticsStore
from trendsage.charts import publication_trend
from trendsage.documents import DEFAULT_LIMIT, DocumentSource
from trendsage.errors import QueryValidationError
from trendsage.models import (
    Document,
    PublicationTrend,
    RegeneratedSummary,
    ResultMetadata,
    SearchResponse,
    SearchResults,
    TrendResults,
)
from trendsage.summarizer import Summarizer

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 500
MIN_QUERY_LENGTH = 2
NO_RESULTS_MESSAGE = "No relevant documents found for this query"

# ── Query sanitisation ─────────────────────────────────────────────────────

_ANGLE_BRACKETS = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_query(value: Any) -> str:
    """Normalise raw user input into a safe query string.

    Non-strings become ``""``. The result is trimmed, capped at 500
    characters, free of ``<``/``>`` and has single spaces only.

    Examples:
        >>> sanitize_query("  AI   in <b>healthcare</b> ")
        'AI in bhealthcare/b'
        >>> sanitize_query(42)
        ''
    """
    if not isinstance(value, str):
        return ""
    cleaned = value.strip()[:MAX_QUERY_LENGTH]
    cleaned = _ANGLE_BRACKETS.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def validate_query(value: Any) -> str:
    """Sanitise *value* and reject empty or too-short queries.

    Raises:
        QueryValidationError: If the sanitised query is empty or shorter
            than two characters.
    """
    query = sanitize_query(value)
    if not query:
        raise QueryValidationError("Invalid query", "Please provide a valid search query")
    if len(query) < MIN_QUERY_LENGTH:
        raise QueryValidationError(
            "Query too short",
            f"Search query must be at least {MIN_QUERY_LENGTH} characters",
        )
    return query


# ── Suggestions ────────────────────────────────────────────────────────────

#: Autocomplete dictionary.
SUGGESTIONS: tuple[str, ...] = (
    "AI in healthcare",
    "AI drug discovery",
    "AI diagnostics",
    "artificial intelligence ethics",
    "carbon-neutral startups",
    "carbon capture technology",
    "climate tech investment",
    "Web3 funding decline",
    "Web3 enterprise adoption",
    "blockchain sustainability",
    "renewable energy investment",
    "renewable energy storage",
    "electric vehicle market",
    "EV battery technology",
    "generative AI enterprise",
    "generative AI regulation",
    "fintech regulation",
    "fintech innovation",
    "remote work productivity",
    "hybrid work models",
    "quantum computing applications",
    "cybersecurity trends",
    "edge computing growth",
    "sustainable agriculture tech",
    "space technology commercialization",
)
MAX_SUGGESTIONS = 8


def get_search_suggestions(partial: Optional[str]) -> list[str]:
    """Return up to eight dictionary entries containing *partial*.

    Matching is case-insensitive; inputs shorter than two characters yield
    no suggestions.
    """
    if not partial or len(partial) < MIN_QUERY_LENGTH:
        return []
    needle = partial.lower()
    return [s for s in SUGGESTIONS if needle in s.lower()][:MAX_SUGGESTIONS]


# ── Orchestrator ───────────────────────────────────────────────────────────


class SearchOrchestrator:
    """Runs the full search pipeline for one query.

    Stages run sequentially and a failure in any stage before analytics
    aborts the request. Analytics recording never fails a search.
    """

    def __init__(
        self,
        documents: DocumentSource,
        summarizer: Summarizer,
        analytics: AnalyticsStore,
        chart: Callable[[str], PublicationTrend] = publication_trend,
    ) -> None:
        self.documents = documents
        self.summarizer = summarizer
        self.analytics = analytics
        self.chart = chart

    def search(
        self,
        raw_query: Any,
        limit: int = DEFAULT_LIMIT,
        session_id: str = "anonymous",
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> SearchResponse:
        """Perform a full trend search.

        Args:
            raw_query: Unsanitised user input.
            limit: Maximum number of documents to analyse.
            session_id: Opaque client session identifier.
            user_agent: Recorded with the analytics event.
            ip: Recorded with the analytics event.

        Returns:
            A ``SearchResponse``; ``results`` is ``None`` when no documents
            were found.

        Raises:
            QueryValidationError: If the query is empty or too short.
            ProviderError: If document retrieval or generation fails.
        """
        query = validate_query(raw_query)
        logger.info("Search query=%r limit=%d session=%s", query, limit, session_id)

        found = self.documents.search(query, limit=limit)
        if not found.documents:
            logger.info("No documents for query=%r", query)
            return SearchResponse(
                query=query,
                timestamp=datetime.now(timezone.utc),
                results=None,
                message=NO_RESULTS_MESSAGE,
            )

        summary = self.summarizer.summarize(query, found.documents)
        sub_topics = self.summarizer.sub_topics(query, found.documents)
        trend = self.chart(query)

        self._record_search(query, found, session_id, user_agent, ip)

        return SearchResponse(
            query=query,
            timestamp=datetime.now(timezone.utc),
            results=TrendResults(
                overview=summary.overview,
                key_takeaways=summary.key_takeaways,
                watch_list=summary.watch_list,
                confidence_score=summary.confidence_score,
                trend_direction=summary.trend_direction,
                time_horizon=summary.time_horizon,
                sources=summary.sources,
                sub_topics=sub_topics,
                chart_data=trend.trend,
                metadata=ResultMetadata(
                    total_documents=found.total_results,
                    generated_at=summary.generated_at,
                    model=summary.model,
                ),
            ),
        )

    def _record_search(
        self,
        query: str,
        found: SearchResults,
        session_id: str,
        user_agent: Optional[str],
        ip: Optional[str],
    ) -> None:
        try:
            self.analytics.track_search(
                query=query,
                results_count=len(found.documents),
                session_id=session_id,
                user_agent=user_agent,
                ip=ip,
            )
        except Exception:
            logger.exception("Failed to record search analytics for query=%r", query)

    def quick_search(self, query: str, limit: int = DEFAULT_LIMIT) -> SearchResults:
        """Document retrieval only, without any generation."""
        return self.documents.search(query, limit=limit)

    def regenerate(self, query: str, documents: list[Document]) -> RegeneratedSummary:
        """Re-run summary and sub-topic generation over caller-supplied documents."""
        summary = self.summarizer.summarize(query, documents)
        sub_topics = self.summarizer.sub_topics(query, documents)
        return RegeneratedSummary(
            query=query,
            overview=summary.overview,
            key_takeaways=summary.key_takeaways,
            watch_list=summary.watch_list,
            confidence_score=summary.confidence_score,
            trend_direction=summary.trend_direction,
            sub_topics=sub_topics,
            regenerated_at=datetime.now(timezone.utc),
        )
