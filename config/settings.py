"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.has_veritus_key     # False → deterministic mock documents
    settings.has_anthropic_key   # False → deterministic mock summaries
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

#: Placeholder values shipped in ``.env.example``; treated as "not configured".
VERITUS_PLACEHOLDER = "your_veritus_api_key_here"
ANTHROPIC_PLACEHOLDER = "your_anthropic_api_key_here"


def _configured(value: str, placeholder: str) -> bool:
    return bool(value) and value != placeholder


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    veritus_api_key: str = field(
        default_factory=lambda: os.environ.get("VERITUS_API_KEY", "")
    )
    veritus_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "VERITUS_API_URL", "https://api.veritus.ai"
        ).rstrip("/")
    )
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )

    # ── Runtime mode ────────────────────────────────────────────────────────
    #: ``development`` lets provider failures fall back to mock data.
    app_env: str = field(
        default_factory=lambda: os.environ.get("APP_ENV", "production")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "3001"))
    )

    # ── Timeouts (seconds) ──────────────────────────────────────────────────
    document_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DOCUMENT_TIMEOUT", "30"))
    )
    llm_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TIMEOUT", "60"))
    )

    # ── AI Models ───────────────────────────────────────────────────────────
    #: Model used for both the trend summary and the sub-topic passes.
    summary_model: str = field(
        default_factory=lambda: os.environ.get("SUMMARY_MODEL", "claude-haiku-4-5")
    )

    # ── Analytics ───────────────────────────────────────────────────────────
    #: Events retained per kind (searches, card views, shares).
    analytics_capacity: int = field(
        default_factory=lambda: int(os.environ.get("ANALYTICS_CAPACITY", "10000"))
    )

    @property
    def has_veritus_key(self) -> bool:
        return _configured(self.veritus_api_key, VERITUS_PLACEHOLDER)

    @property
    def has_anthropic_key(self) -> bool:
        return _configured(self.anthropic_api_key, ANTHROPIC_PLACEHOLDER)

    @property
    def development(self) -> bool:
        """True when provider failures may be masked with mock data."""
        return self.app_env.lower() == "development"
