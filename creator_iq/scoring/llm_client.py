"""LLM providers for the scoring tiers.

Provider A is OpenAI (chat completions in JSON mode); provider B is Anthropic
(tool use for structured output). Both implement the same contract:

    await provider.score(report, sample_text, metadata) -> ProviderScore

and raise ``ProviderUnconfiguredError``, ``ProviderTransportError`` or
``ProviderMalformedError``. SDK imports are deferred to first use so a missing
key never costs an import, and SDK-level retries are disabled: each tier makes
exactly one attempt.
"""

import json
import logging
import math
import re
from typing import Any, Protocol

from pydantic import ValidationError

from creator_iq.features.schemas import FeatureReport
from creator_iq.ingestion.schemas import AccountMetadata
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import (
    ProviderMalformedError,
    ProviderTransportError,
    ProviderUnconfiguredError,
)
from creator_iq.scoring.prompts import SCORE_TOOL, SYSTEM_PROMPT, render_analysis_prompt
from creator_iq.scoring.schemas import ProviderScore

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMProvider(Protocol):
    """Contract shared by the provider tiers."""

    name: str

    @property
    def configured(self) -> bool: ...

    @property
    def model(self) -> str: ...

    async def score(
        self,
        report: FeatureReport,
        sample_text: str,
        metadata: AccountMetadata | None = None,
    ) -> ProviderScore: ...

    async def close(self) -> None: ...


def _require_number(data: dict[str, Any], field: str, provider: str) -> float:
    value = data.get(field)
    if isinstance(value, bool):
        raise ProviderMalformedError(f"{provider}: field {field!r} is a boolean")
    if not isinstance(value, (int, float)):
        # Models sometimes quote numbers
        try:
            value = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ProviderMalformedError(
                f"{provider}: field {field!r} is not numeric: {value!r}"
            ) from None
    if not math.isfinite(value):
        raise ProviderMalformedError(f"{provider}: field {field!r} is not finite")
    return float(value)


def parse_score_payload(raw: str | dict[str, Any] | None, provider: str) -> ProviderScore:
    """Parse a provider response into a ``ProviderScore``.

    Accepts a dict (tool input) or text containing a JSON object, possibly
    wrapped in prose or markdown fences.

    Raises:
        ProviderMalformedError: No JSON object, missing fields, non-numeric
            score/confidence, or empty analysis.
    """
    if isinstance(raw, dict):
        data = raw
    else:
        if not raw:
            raise ProviderMalformedError(f"{provider}: empty response")
        match = _JSON_OBJECT.search(raw)
        if not match:
            raise ProviderMalformedError(f"{provider}: no JSON object in response")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ProviderMalformedError(f"{provider}: invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProviderMalformedError(f"{provider}: payload is not an object")

    score = _require_number(data, "score", provider)
    confidence = _require_number(data, "confidence", provider)
    try:
        return ProviderScore(
            score=score,
            confidence=confidence,
            analysis=str(data.get("analysis") or "").strip(),
        )
    except ValidationError as e:
        raise ProviderMalformedError(f"{provider}: {e.errors()[0]['msg']}") from e


class _BaseProvider:
    """Shared lazy-client plumbing."""

    name = "base"

    def __init__(self, config: ScoringConfig) -> None:
        self._config = config
        self._client: Any = None

    def _build_prompt(
        self,
        report: FeatureReport,
        sample_text: str,
        metadata: AccountMetadata | None,
    ) -> str:
        return render_analysis_prompt(
            report,
            sample_text,
            username=metadata.username if metadata else None,
            display_name=metadata.display_name if metadata else None,
        )

    async def close(self) -> None:
        """Clean up the SDK client."""
        if self._client is not None:
            await self._client.close()
            self._client = None


class OpenAIProvider(_BaseProvider):
    """Provider A: OpenAI chat completions."""

    name = "openai"

    @property
    def configured(self) -> bool:
        return self._config.openai_configured

    @property
    def model(self) -> str:
        return self._config.openai_model

    def _get_client(self) -> Any:
        """Lazy-initialize OpenAI async client."""
        if self._client is None:
            import openai

            self._client = openai.AsyncOpenAI(
                api_key=self._config.openai_api_key.get_secret_value(),
                timeout=self._config.llm_timeout,
                max_retries=0,
            )
        return self._client

    async def score(
        self,
        report: FeatureReport,
        sample_text: str,
        metadata: AccountMetadata | None = None,
    ) -> ProviderScore:
        if not self.configured:
            raise ProviderUnconfiguredError("SCORING_OPENAI_API_KEY is not set")

        import openai

        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(report, sample_text, metadata)},
                ],
                temperature=self._config.llm_temperature,
                max_tokens=self._config.llm_max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APIError as e:
            raise ProviderTransportError(f"openai: {type(e).__name__}: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise ProviderMalformedError("openai: response has no choices") from e
        return parse_score_payload(content, self.name)


class AnthropicProvider(_BaseProvider):
    """Provider B: Anthropic messages with a forced ``submit_score`` tool call."""

    name = "anthropic"

    @property
    def configured(self) -> bool:
        return self._config.anthropic_configured

    @property
    def model(self) -> str:
        return self._config.anthropic_model

    def _get_client(self) -> Any:
        """Lazy-initialize Anthropic async client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.anthropic_api_key.get_secret_value(),
                timeout=self._config.llm_timeout,
                max_retries=0,
            )
        return self._client

    async def score(
        self,
        report: FeatureReport,
        sample_text: str,
        metadata: AccountMetadata | None = None,
    ) -> ProviderScore:
        if not self.configured:
            raise ProviderUnconfiguredError("SCORING_ANTHROPIC_API_KEY is not set")

        import anthropic

        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=self._config.llm_max_tokens,
                temperature=self._config.llm_temperature,
                system=SYSTEM_PROMPT,
                messages=[
                    {"role": "user", "content": self._build_prompt(report, sample_text, metadata)},
                ],
                tools=[SCORE_TOOL],
                tool_choice={"type": "tool", "name": SCORE_TOOL["name"]},
            )
        except anthropic.APIError as e:
            raise ProviderTransportError(f"anthropic: {type(e).__name__}: {e}") from e

        blocks = getattr(response, "content", None) or []
        for block in blocks:
            if getattr(block, "type", None) == "tool_use" and block.name == SCORE_TOOL["name"]:
                return parse_score_payload(block.input, self.name)

        # Some models answer in prose despite tool_choice
        text = "".join(b.text for b in blocks if getattr(b, "type", None) == "text")
        if text:
            return parse_score_payload(text, self.name)
        raise ProviderMalformedError("anthropic: response contained no tool_use block")
