"""
In-memory usage analytics for TrendSage.

Storage
───────
searches     deque[SearchEvent]     most recent ``capacity`` events
card_views   deque[CardViewEvent]   most recent ``capacity`` events
shares       deque[ShareEvent]      most recent ``capacity`` events
trending     dict[str, (count, last_searched)]  keyed by normalised query

All three event kinds share one retention policy: once a deque is full the
oldest event is dropped. The trending map is never evicted; it lives for the
process lifetime. A single lock guards every mutation, so the store is safe
to share between Flask request threads.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, deque
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from trendsage.models import (
    AnalyticsSummary,
    CardViewEvent,
    DailyStats,
    GoalProgress,
    QueryCount,
    SearchEvent,
    ShareEvent,
    SummaryTotals,
    TrendingTopicEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10_000

#: Supported summary windows. Unknown values fall back to ``7d``.
TIME_WINDOWS: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_TIME_RANGE = "7d"

TOP_QUERY_LIMIT = 10
#: Below this many distinct queries, ``trending_topics`` serves the fallback list.
MIN_TRENDING_QUERIES = 5
USER_GOAL = 69

#: Demo topics shown until enough real searches have been recorded.
FALLBACK_TOPICS: list[tuple[str, int]] = [
    ("AI in healthcare", 156),
    ("carbon-neutral startups", 89),
    ("Web3 funding decline", 72),
    ("renewable energy investment", 65),
    ("generative AI enterprise", 112),
    ("electric vehicle market", 98),
    ("fintech regulation", 54),
    ("remote work productivity", 47),
]


def normalize_query(query: str) -> str:
    """Trending-topic key: trimmed and lower-cased."""
    return query.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsStore:
    """Process-lifetime event log with aggregate queries.

    Args:
        capacity: Events retained per kind before the oldest are dropped.
        clock: Callable returning the current aware UTC ``datetime``;
            tests inject a fixed clock.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.capacity = capacity
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._searches: deque[SearchEvent] = deque(maxlen=capacity)
        self._card_views: deque[CardViewEvent] = deque(maxlen=capacity)
        self._shares: deque[ShareEvent] = deque(maxlen=capacity)
        self._trending: dict[str, tuple[int, datetime]] = {}

    # ── Ingestion ──────────────────────────────────────────────────────────

    def track_search(
        self,
        query: str,
        results_count: int = 0,
        session_id: str = "anonymous",
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> SearchEvent:
        """Record a search and bump its trending-topic counter."""
        now = self._clock()
        event = SearchEvent(
            query=query,
            results_count=results_count,
            session_id=session_id,
            timestamp=now,
            user_agent=user_agent,
            ip=ip,
        )
        key = normalize_query(query)
        with self._lock:
            self._searches.append(event)
            count, _ = self._trending.get(key, (0, now))
            self._trending[key] = (count + 1, now)
        logger.debug("Tracked search query=%r session=%s", query, session_id)
        return event

    def track_card_view(
        self,
        card_id: str,
        query: Optional[str] = None,
        session_id: str = "anonymous",
    ) -> CardViewEvent:
        event = CardViewEvent(
            card_id=card_id, query=query, session_id=session_id, timestamp=self._clock()
        )
        with self._lock:
            self._card_views.append(event)
        return event

    def track_share(
        self,
        platform: str,
        query: str,
        session_id: str = "anonymous",
    ) -> ShareEvent:
        event = ShareEvent(
            platform=platform, query=query, session_id=session_id, timestamp=self._clock()
        )
        with self._lock:
            self._shares.append(event)
        return event

    # ── Queries ────────────────────────────────────────────────────────────

    def summary(self, time_range: str = DEFAULT_TIME_RANGE) -> AnalyticsSummary:
        """Aggregate events newer than ``now - window``.

        Args:
            time_range: ``"24h"``, ``"7d"`` or ``"30d"``; anything else is
                treated as ``"7d"``.

        Returns:
            Totals, top queries, a per-UTC-day breakdown and share counts
            per platform.
        """
        if time_range not in TIME_WINDOWS:
            time_range = DEFAULT_TIME_RANGE
        start = self._clock() - TIME_WINDOWS[time_range]

        with self._lock:
            searches = [e for e in self._searches if e.timestamp >= start]
            card_views = sum(1 for e in self._card_views if e.timestamp >= start)
            shares = [e for e in self._shares if e.timestamp >= start]

        # Counter keeps first-seen order, so ties rank by first appearance
        query_counts = Counter(e.query.lower() for e in searches)
        top_queries = sorted(query_counts.items(), key=lambda kv: kv[1], reverse=True)

        daily: dict[str, tuple[int, set[str]]] = {}
        for event in searches:
            day = event.timestamp.astimezone(timezone.utc).date().isoformat()
            count, sessions = daily.get(day, (0, set()))
            sessions.add(event.session_id)
            daily[day] = (count + 1, sessions)

        return AnalyticsSummary(
            summary=SummaryTotals(
                total_searches=len(searches),
                unique_users=len({e.session_id for e in searches}),
                card_views=card_views,
                shares=len(shares),
                time_range=time_range,
            ),
            top_queries=[
                QueryCount(query=q, count=c) for q, c in top_queries[:TOP_QUERY_LIMIT]
            ],
            daily_breakdown=[
                DailyStats(date=day, searches=count, unique_users=len(sessions))
                for day, (count, sessions) in sorted(daily.items())
            ],
            shares_by_platform=dict(Counter(e.platform for e in shares)),
        )

    def trending_topics(self, limit: int = 10) -> list[TrendingTopicEntry]:
        """Rank normalised queries by cumulative search count.

        Until ``MIN_TRENDING_QUERIES`` distinct queries have been seen, a
        fixed list of demo topics is returned instead.
        """
        with self._lock:
            entries = [
                TrendingTopicEntry(query=q, search_count=c, last_searched=ts)
                for q, (c, ts) in self._trending.items()
            ]

        if len(entries) < MIN_TRENDING_QUERIES:
            now = self._clock()
            entries = [
                TrendingTopicEntry(query=q, search_count=c, last_searched=now)
                for q, c in FALLBACK_TOPICS
            ]

        entries.sort(key=lambda e: e.search_count, reverse=True)
        return entries[:max(limit, 0)]

    def goal_progress(self, goal: int = USER_GOAL) -> GoalProgress:
        """Progress of 30-day unique users towards *goal*."""
        current = self.summary("30d").summary.unique_users
        progress = min(current / goal * 100, 100)
        remaining = max(goal - current, 0)
        return GoalProgress(
            goal=goal,
            current=current,
            progress=round(progress, 1),
            remaining=remaining,
            message=(
                "🎉 Goal achieved!"
                if current >= goal
                else f"{remaining} more users needed to reach goal"
            ),
        )
