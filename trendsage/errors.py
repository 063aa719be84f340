"""
Error taxonomy shared by the TrendSage core and the web layer.

TrendSageError
├── QueryValidationError   malformed / missing / short input  → HTTP 400
└── ProviderError          document search or LLM call failed → HTTP 502
    └── ParseError         LLM reply was not the expected JSON
"""

from __future__ import annotations


class TrendSageError(Exception):
    """Base class for all TrendSage errors."""


class QueryValidationError(TrendSageError):
    """Client supplied an unusable request.

    ``error`` is the short machine-facing label, ``message`` the human text.
    """

    def __init__(self, error: str, message: str) -> None:
        super().__init__(message)
        self.error = error
        self.message = message


class ProviderError(TrendSageError):
    """A third-party provider call failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ParseError(ProviderError):
    """The LLM answered, but not with the structured payload we asked for."""
