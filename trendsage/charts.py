"""Synthetic publication-trend series for the trend chart.

There is no real publication-count source behind this: the numbers are a
compound-growth curve with per-point jitter, meant only to give the chart
something plausible to draw.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import Optional

from trendsage.models import ChartPoint, PublicationTrend

#: Number of yearly points, ending with the current year.
YEARS = 6


def publication_trend(
    query: str,
    rng: Optional[random.Random] = None,
    year: Optional[int] = None,
) -> PublicationTrend:
    """Generate a six-year publication series for *query*.

    Args:
        query: Echoed back; has no influence on the numbers.
        rng: Optional seeded random source for reproducible output.
        year: Last year of the series (defaults to the current UTC year).

    Returns:
        A ``PublicationTrend`` with points for ``year-5 … year``.
    """
    rng = rng or random.Random()
    year = year or datetime.now(timezone.utc).year

    base = 100 + math.floor(rng.random() * 200)
    growth = 0.1 + rng.random() * 0.3

    points: list[ChartPoint] = []
    for k in range(YEARS):
        jitter = 0.9 + rng.random() * 0.2
        value = math.floor(base * (1 + growth) ** k * jitter)
        points.append(ChartPoint(year=year - (YEARS - 1) + k, publications=value))

    return PublicationTrend(
        query=query,
        trend=points,
        growth_rate=f"{round(growth * 100)}%",
        total_publications=sum(p.publications for p in points),
    )
