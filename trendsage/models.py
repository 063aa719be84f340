"""
Pydantic models shared across the TrendSage core.

Every model serialises with camelCase keys (``model_dump(by_alias=True)``)
to match the JSON contract of the web API, and accepts either camelCase or
snake_case on input.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model with camelCase aliases for the HTTP contract."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Enums ──────────────────────────────────────────────────────────────────


class TrendDirection(str, Enum):
    RISING = "rising"
    STABLE = "stable"
    DECLINING = "declining"


class TimeHorizon(str, Enum):
    SHORT_TERM = "short-term"
    MEDIUM_TERM = "medium-term"
    LONG_TERM = "long-term"


class TrendStrength(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ── Documents ──────────────────────────────────────────────────────────────


class Document(WireModel):
    """One retrieved scholarly record."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = ""
    title: str
    authors: list[str] = Field(default_factory=list)
    abstract: str = ""
    url: Optional[str] = None
    source: str = "Academic Source"
    published_date: str = ""
    citations: int = Field(default=0, ge=0)
    relevance_score: float = 0.0
    fields_of_study: list[str] = Field(default_factory=list)
    is_open_access: bool = False
    quartile_ranking: Optional[str] = None


class SearchResults(WireModel):
    """Output of a document search: a page of documents plus the raw total."""

    documents: list[Document] = Field(default_factory=list)
    total_results: int = 0


# ── Summaries ──────────────────────────────────────────────────────────────


class Source(WireModel):
    """Citation-facing projection of a Document."""

    index: int
    title: str
    url: Optional[str] = None
    source: str = ""
    published_date: str = ""


class KeyTakeaway(WireModel):
    text: str
    citations: list[int] = Field(default_factory=list)


class TrendSummary(WireModel):
    """LLM-derived synthesis of a document set for a query."""

    overview: str
    key_takeaways: list[KeyTakeaway]
    watch_list: list[str]
    confidence_score: int = Field(ge=1, le=10)
    trend_direction: TrendDirection
    time_horizon: TimeHorizon
    sources: list[Source] = Field(default_factory=list)
    generated_at: Optional[datetime] = None
    model: str = ""


class SubTopic(WireModel):
    name: str
    description: str
    relevant_sources: list[int] = Field(default_factory=list)
    trend_strength: TrendStrength


# ── Charts ─────────────────────────────────────────────────────────────────


class ChartPoint(WireModel):
    year: int
    publications: int


class PublicationTrend(WireModel):
    """Synthetic six-year publication series. Not real data."""

    query: str
    trend: list[ChartPoint]
    growth_rate: str
    total_publications: int


# ── Search responses ───────────────────────────────────────────────────────


class ResultMetadata(WireModel):
    total_documents: int
    generated_at: Optional[datetime] = None
    model: str = ""


class TrendResults(WireModel):
    overview: str
    key_takeaways: list[KeyTakeaway]
    watch_list: list[str]
    confidence_score: int
    trend_direction: TrendDirection
    time_horizon: TimeHorizon
    sources: list[Source]
    sub_topics: list[SubTopic]
    chart_data: list[ChartPoint]
    metadata: ResultMetadata


class SearchResponse(WireModel):
    query: str
    timestamp: datetime
    results: Optional[TrendResults] = None
    message: Optional[str] = None

    def to_json(self) -> dict:
        # ``message`` is only part of the contract for empty result sets
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"message"} if self.message is None else None,
        )


class RegeneratedSummary(WireModel):
    query: str
    overview: str
    key_takeaways: list[KeyTakeaway]
    watch_list: list[str]
    confidence_score: int
    trend_direction: TrendDirection
    sub_topics: list[SubTopic]
    regenerated_at: datetime


# ── Analytics ──────────────────────────────────────────────────────────────


def _event_id() -> str:
    return str(uuid.uuid4())


class SearchEvent(WireModel):
    type: Literal["search"] = "search"
    id: str = Field(default_factory=_event_id)
    query: str
    results_count: int = 0
    session_id: str = "anonymous"
    timestamp: datetime
    user_agent: Optional[str] = None
    ip: Optional[str] = None


class CardViewEvent(WireModel):
    type: Literal["card_view"] = "card_view"
    id: str = Field(default_factory=_event_id)
    card_id: str
    query: Optional[str] = None
    session_id: str = "anonymous"
    timestamp: datetime


class ShareEvent(WireModel):
    type: Literal["share"] = "share"
    id: str = Field(default_factory=_event_id)
    platform: str
    query: str
    session_id: str = "anonymous"
    timestamp: datetime


class TrendingTopicEntry(WireModel):
    query: str
    search_count: int
    last_searched: datetime


class SummaryTotals(WireModel):
    total_searches: int
    unique_users: int
    card_views: int
    shares: int
    time_range: str


class QueryCount(WireModel):
    query: str
    count: int


class DailyStats(WireModel):
    date: str
    searches: int
    unique_users: int


class AnalyticsSummary(WireModel):
    summary: SummaryTotals
    top_queries: list[QueryCount]
    daily_breakdown: list[DailyStats]
    shares_by_platform: dict[str, int]


class GoalProgress(WireModel):
    goal: int
    current: int
    progress: float
    remaining: int
    message: str
