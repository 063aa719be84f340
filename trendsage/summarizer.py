"""AI trend summarisation using the Claude API.

Provides two generation passes over the same document set:

1. **Trend summary** — ``summarize()``:
   overview, cited key takeaways, watch list, confidence, direction and
   time horizon.

2. **Sub-topics** — ``sub_topics()``:
   3–4 clustered themes, each pointing back at its supporting sources.

``ClaudeSummarizer`` talks to the API; ``MockSummarizer`` returns fixed
templates. ``build_summarizer(settings)`` selects one by whether an
Anthropic key is configured.

Citation indices are 1-based positions in the source list. Indices the
model invents beyond that range are dropped before a result is returned.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Protocol

import anthropic
from pydantic import ValidationError

from trendsage.errors import ParseError, ProviderError
from trendsage.models import (
    Document,
    KeyTakeaway,
    Source,
    SubTopic,
    TimeHorizon,
    TrendDirection,
    TrendStrength,
    TrendSummary,
    WireModel,
)

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)


# ── Prompts ────────────────────────────────────────────────────────────────

SUMMARY_TEMPERATURE = 0.7
SUMMARY_MAX_TOKENS = 1500
SUB_TOPIC_TEMPERATURE = 0.5
SUB_TOPIC_MAX_TOKENS = 800

_SUMMARY_SYSTEM = (
    "You are an expert market research analyst specializing in trend analysis. "
    "Always respond with valid JSON only, no commentary, no markdown fences. "
    "Be concise and factual, cite sources using [n] format, and never make "
    "claims that are not supported by the provided documents."
)

_SUB_TOPIC_SYSTEM = (
    "You are an expert at categorizing and organizing research topics. "
    "Respond with valid JSON only."
)

_SUMMARY_INSTRUCTIONS = """Please provide:
1. A concise overview paragraph (3-4 sentences) summarizing the current state of this trend
2. 4-5 key takeaways, each citing the relevant source numbers
3. 2-3 future predictions or emerging developments to watch
4. A confidence score (1-10) for how well-established this trend is based on the evidence

Format your response as JSON with this structure:
{
  "overview": "string",
  "keyTakeaways": [{"text": "string", "citations": [1, 2]}],
  "watchList": ["string"],
  "confidenceScore": number,
  "trendDirection": "rising" | "stable" | "declining",
  "timeHorizon": "short-term" | "medium-term" | "long-term"
}"""

_SUB_TOPIC_INSTRUCTIONS = """Return JSON:
{
  "subTopics": [
    {
      "name": "Sub-topic name",
      "description": "One sentence description",
      "relevantSources": [1, 2],
      "trendStrength": "high" | "medium" | "low"
    }
  ]
}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_summary_prompt(query: str, documents: list[Document]) -> str:
    context = "\n\n".join(
        f'[{i}] "{doc.title}" ({doc.source}, {doc.published_date})\n'
        f"Abstract: {doc.abstract}"
        for i, doc in enumerate(documents, start=1)
    )
    return (
        f'Based on the following research documents about "{query}", generate a '
        f"comprehensive trend analysis.\n\n"
        f"RESEARCH DOCUMENTS:\n{context}\n\n"
        f"{_SUMMARY_INSTRUCTIONS}"
    )


def build_sub_topic_prompt(query: str, documents: list[Document]) -> str:
    summaries = "\n".join(
        f"[{i}] {doc.title}: {doc.abstract[:200]}..."
        for i, doc in enumerate(documents, start=1)
    )
    return (
        f'Given these research documents about "{query}", identify 3-4 distinct '
        f"sub-topics or perspectives.\n\nDocuments:\n{summaries}\n\n"
        f"{_SUB_TOPIC_INSTRUCTIONS}"
    )


# ── Citation helpers ───────────────────────────────────────────────────────


def build_sources(documents: list[Document]) -> list[Source]:
    """Project documents onto the 1-based citation list."""
    return [
        Source(
            index=i,
            title=doc.title,
            url=doc.url,
            source=doc.source,
            published_date=doc.published_date,
        )
        for i, doc in enumerate(documents, start=1)
    ]


def valid_citations(indices: list[int], source_count: int) -> list[int]:
    """Keep only indices in ``1..source_count``, preserving order."""
    return [i for i in indices if 1 <= i <= source_count]


def _bound_takeaways(takeaways: list[KeyTakeaway], source_count: int) -> list[KeyTakeaway]:
    return [
        t.model_copy(update={"citations": valid_citations(t.citations, source_count)})
        for t in takeaways
    ]


def _bound_sub_topics(topics: list[SubTopic], source_count: int) -> list[SubTopic]:
    return [
        t.model_copy(
            update={"relevant_sources": valid_citations(t.relevant_sources, source_count)}
        )
        for t in topics
    ]


class _SubTopicsPayload(WireModel):
    sub_topics: list[SubTopic]


# ── Summarisers ────────────────────────────────────────────────────────────


class Summarizer(Protocol):
    def summarize(self, query: str, documents: list[Document]) -> TrendSummary:
        ...

    def sub_topics(self, query: str, documents: list[Document]) -> list[SubTopic]:
        ...


class MockSummarizer:
    """Fixed-template summaries for running without an Anthropic key."""

    model = "mock"

    def summarize(self, query: str, documents: list[Document]) -> TrendSummary:
        year = datetime.now(timezone.utc).year
        takeaways = [
            KeyTakeaway(
                text=(
                    f"Research output in {query} has grown substantially, with leading "
                    "institutions publishing studies on applications and "
                    "implementation strategies."
                ),
                citations=[1, 2],
            ),
            KeyTakeaway(
                text=(
                    "Investment in this sector has reached record levels, with venture "
                    "capital and corporate R&D budgets allocating significant resources."
                ),
                citations=[1],
            ),
            KeyTakeaway(
                text=(
                    "Regulatory frameworks are evolving to accommodate innovation while "
                    "ensuring safety and ethical considerations."
                ),
                citations=[3, 4],
            ),
            KeyTakeaway(
                text=(
                    "Cross-industry collaboration is accelerating adoption and driving "
                    "standardization efforts."
                ),
                citations=[2, 3],
            ),
            KeyTakeaway(
                text=(
                    "Emerging markets are showing increased interest, potentially "
                    "reshaping the global competitive landscape."
                ),
                citations=[4],
            ),
        ]
        sources = build_sources(documents)
        return TrendSummary(
            overview=(
                f"{query} is experiencing significant momentum in {year}, with research "
                "publications increasing by approximately 45% year-over-year. Key "
                "drivers include technological advancement, increased investment from "
                "both public and private sectors, and growing market demand."
            ),
            key_takeaways=_bound_takeaways(takeaways, len(sources)),
            watch_list=[
                "Integration with AI and automation technologies expected to unlock new use cases",
                "Regulatory clarity in major markets could accelerate mainstream adoption",
                "Sustainability considerations increasingly influencing development priorities",
            ],
            confidence_score=8,
            trend_direction=TrendDirection.RISING,
            time_horizon=TimeHorizon.MEDIUM_TERM,
            sources=sources,
            generated_at=datetime.now(timezone.utc),
            model=self.model,
        )

    def sub_topics(self, query: str, documents: list[Document]) -> list[SubTopic]:
        topics = [
            SubTopic(
                name="Technology & Innovation",
                description=f"Technical advances driving {query} forward",
                relevant_sources=[1, 2],
                trend_strength=TrendStrength.HIGH,
            ),
            SubTopic(
                name="Market & Investment",
                description="Funding trends and commercial developments",
                relevant_sources=[2, 3],
                trend_strength=TrendStrength.HIGH,
            ),
            SubTopic(
                name="Regulation & Policy",
                description="Evolving regulatory landscape and compliance requirements",
                relevant_sources=[3, 4],
                trend_strength=TrendStrength.MEDIUM,
            ),
        ]
        return _bound_sub_topics(topics, len(documents))


class ClaudeSummarizer:
    """Generates trend summaries and sub-topics with the Claude API.

    The Anthropic client is lazy-initialised so that the class can be
    instantiated in tests without a live API key.
    """

    def __init__(self, settings: Settings, fallback: Optional[Summarizer] = None) -> None:
        """Initialise the summariser.

        Args:
            settings: Application configuration.
            fallback: Summariser used when the provider call fails; ``None``
                means failures are raised as ``ProviderError``.
        """
        self.settings = settings
        self.fallback = fallback
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.llm_timeout,
                max_retries=0,
            )
        return self._client

    @property
    def model(self) -> str:
        return self.settings.summary_model

    # ── Provider plumbing ──────────────────────────────────────────────────

    def _complete(self, system: str, prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise ProviderError("anthropic", str(exc)) from exc

        text = "".join(
            getattr(block, "text", "")
            for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise ParseError("anthropic", "empty completion")
        return text

    @staticmethod
    def _parse_json(text: str) -> dict:
        cleaned = _FENCE_RE.sub("", text.strip())
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ParseError("anthropic", f"reply is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseError("anthropic", "reply is not a JSON object")
        return data

    # ── Trend summary ──────────────────────────────────────────────────────

    def summarize(self, query: str, documents: list[Document]) -> TrendSummary:
        """Generate a cited trend summary for *documents*.

        Args:
            query: The sanitised search query.
            documents: Retrieved documents; their order defines citation indices.

        Returns:
            A ``TrendSummary`` whose sources are recomputed from *documents*.

        Raises:
            ProviderError: On API failures, when no fallback is configured.
            ParseError: If the reply is not a well-formed summary.
        """
        try:
            text = self._complete(
                _SUMMARY_SYSTEM,
                build_summary_prompt(query, documents),
                SUMMARY_TEMPERATURE,
                SUMMARY_MAX_TOKENS,
            )
            data = self._parse_json(text)
            data.pop("sources", None)
            try:
                parsed = TrendSummary.model_validate(data)
            except ValidationError as exc:
                raise ParseError("anthropic", f"malformed trend summary: {exc}") from exc
        except ProviderError:
            if self.fallback is None:
                raise
            logger.warning("Trend summary failed for query=%r; using mock summary", query)
            return self.fallback.summarize(query, documents)

        sources = build_sources(documents)
        return parsed.model_copy(
            update={
                "key_takeaways": _bound_takeaways(parsed.key_takeaways, len(sources)),
                "sources": sources,
                "generated_at": datetime.now(timezone.utc),
                "model": self.model,
            }
        )

    # ── Sub-topics ─────────────────────────────────────────────────────────

    def sub_topics(self, query: str, documents: list[Document]) -> list[SubTopic]:
        """Cluster *documents* into 3–4 labelled sub-topics."""
        try:
            text = self._complete(
                _SUB_TOPIC_SYSTEM,
                build_sub_topic_prompt(query, documents),
                SUB_TOPIC_TEMPERATURE,
                SUB_TOPIC_MAX_TOKENS,
            )
            data = self._parse_json(text)
            try:
                payload = _SubTopicsPayload.model_validate(data)
            except ValidationError as exc:
                raise ParseError("anthropic", f"malformed sub-topics: {exc}") from exc
        except ProviderError:
            if self.fallback is None:
                raise
            logger.warning("Sub-topics failed for query=%r; using mock sub-topics", query)
            return self.fallback.sub_topics(query, documents)

        return _bound_sub_topics(payload.sub_topics, len(documents))


def build_summarizer(settings: Settings) -> Summarizer:
    """Return the Claude summariser when a key is configured, the mock otherwise."""
    if not settings.has_anthropic_key:
        logger.warning("Using mock summaries (no Anthropic API key configured)")
        return MockSummarizer()
    fallback = MockSummarizer() if settings.development else None
    return ClaudeSummarizer(settings, fallback=fallback)
