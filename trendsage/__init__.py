"""
TrendSage core package.

Modules
───────
models      — Pydantic data models (Document, TrendSummary, SubTopic, events)
documents   — Veritus paper search client + deterministic mock source
summarizer  — Claude trend summary / sub-topic generation + mock summariser
charts      — synthetic publication-trend series
analytics   — in-memory event log, trending topics, usage summaries
search      — query sanitisation, suggestions, search orchestrator
catalog     — curated trending categories and featured topics
errors      — error taxonomy mapped to HTTP status codes by web/app.py
"""

__version__ = "1.0.0"
