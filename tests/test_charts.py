"""Tests for trendsage/charts.py — synthetic publication trend series."""

from __future__ import annotations

import random

from trendsage.charts import publication_trend


class TestPublicationTrend:
    def test_six_consecutive_years_ending_now(self):
        trend = publication_trend("ev batteries", rng=random.Random(1), year=2026)
        assert [p.year for p in trend.trend] == [2021, 2022, 2023, 2024, 2025, 2026]

    def test_echoes_query_and_totals(self):
        trend = publication_trend("ev batteries", rng=random.Random(2), year=2026)
        assert trend.query == "ev batteries"
        assert trend.total_publications == sum(p.publications for p in trend.trend)
        assert trend.growth_rate.endswith("%")
        assert 10 <= int(trend.growth_rate[:-1]) <= 40

    def test_values_within_growth_envelope(self):
        for seed in range(25):
            trend = publication_trend("x", rng=random.Random(seed), year=2026)
            first = trend.trend[0].publications
            assert 90 <= first < 330
            for p in trend.trend:
                assert p.publications > 0

    def test_seeded_rng_is_reproducible(self):
        a = publication_trend("x", rng=random.Random(42), year=2026)
        b = publication_trend("x", rng=random.Random(42), year=2026)
        assert a == b

    def test_defaults_to_current_year(self):
        trend = publication_trend("x")
        assert len(trend.trend) == 6
        assert trend.trend[-1].year - trend.trend[0].year == 5
