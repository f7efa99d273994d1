"""Tests for the LLM providers and payload parsing."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from creator_iq.ingestion.schemas import AccountMetadata
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import (
    ProviderMalformedError,
    ProviderTransportError,
    ProviderUnconfiguredError,
)
from creator_iq.scoring.llm_client import (
    AnthropicProvider,
    OpenAIProvider,
    parse_score_payload,
)
from creator_iq.scoring.prompts import SCORE_TOOL, render_analysis_prompt

VALID_JSON = '{"score": 121, "analysis": "Clear, structured writing.", "confidence": 74}'


class TestParseScorePayload:
    """Response parsing shared by both providers."""

    def test_plain_json(self) -> None:
        payload = parse_score_payload(VALID_JSON, "openai")

        assert payload.score == 121
        assert payload.confidence == 74
        assert payload.analysis == "Clear, structured writing."

    def test_json_wrapped_in_prose_and_fences(self) -> None:
        raw = f"Here is my assessment:\n```json\n{VALID_JSON}\n```\nThanks!"
        assert parse_score_payload(raw, "openai").score == 121

    def test_dict_input(self) -> None:
        payload = parse_score_payload(
            {"score": 99.4, "analysis": "ok", "confidence": 50}, "anthropic",
        )
        assert payload.score == pytest.approx(99.4)

    def test_quoted_numbers_accepted(self) -> None:
        payload = parse_score_payload(
            {"score": "130", "analysis": "ok", "confidence": "60"}, "openai",
        )
        assert payload.score == 130
        assert payload.confidence == 60

    def test_out_of_range_values_kept_raw(self) -> None:
        # Clamping happens when the ScoreResult is built
        payload = parse_score_payload(
            {"score": 400, "analysis": "ok", "confidence": 150}, "openai",
        )
        assert payload.score == 400

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "no json here",
            "{not: valid}",
            '{"analysis": "missing score", "confidence": 50}',
            '{"score": "high", "analysis": "x", "confidence": 50}',
            '{"score": true, "analysis": "x", "confidence": 50}',
            '{"score": 100, "analysis": "", "confidence": 50}',
            '{"score": 100, "analysis": "x"}',
            '{"score": NaN, "analysis": "x", "confidence": 50}',
            '{"score": Infinity, "analysis": "x", "confidence": 50}',
        ],
    )
    def test_malformed(self, raw) -> None:
        with pytest.raises(ProviderMalformedError):
            parse_score_payload(raw, "openai")


class TestPrompt:
    def test_render_includes_metadata_and_sample(self, sample_report) -> None:
        prompt = render_analysis_prompt(
            sample_report, "first post\n\nsecond post", username="alice", display_name="Alice",
        )

        assert "- Username: alice" in prompt
        assert "- Number of posts analyzed: 5" in prompt
        assert "first post\n\nsecond post" in prompt
        assert '"score": <IQ score between 55-145>' in prompt

    def test_render_without_metadata(self, sample_report) -> None:
        prompt = render_analysis_prompt(sample_report, "")
        assert "- Username: Unknown" in prompt


def _openai_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [SimpleNamespace(message=SimpleNamespace(content=content))]
    return response


class TestOpenAIProvider:
    """Provider A."""

    async def test_score(self, scoring_config, sample_report) -> None:
        provider = OpenAIProvider(scoring_config)
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response(VALID_JSON))

        with patch.object(provider, "_get_client", return_value=client):
            payload = await provider.score(
                sample_report, "sample", AccountMetadata(username="alice"),
            )

        assert payload.score == 121
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "- Username: alice" in kwargs["messages"][1]["content"]

    async def test_api_error_is_transport(self, scoring_config, sample_report) -> None:
        provider = OpenAIProvider(scoring_config)
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
            )
        )

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ProviderTransportError):
                await provider.score(sample_report, "sample")

    async def test_no_choices_is_malformed(self, scoring_config, sample_report) -> None:
        provider = OpenAIProvider(scoring_config)
        response = MagicMock()
        response.choices = []
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=response)

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ProviderMalformedError):
                await provider.score(sample_report, "sample")

    async def test_empty_content_is_malformed(self, scoring_config, sample_report) -> None:
        provider = OpenAIProvider(scoring_config)
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response(None))

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ProviderMalformedError):
                await provider.score(sample_report, "sample")

    async def test_unconfigured(self, sample_report) -> None:
        provider = OpenAIProvider(ScoringConfig(openai_api_key=None))

        assert provider.configured is False
        with pytest.raises(ProviderUnconfiguredError):
            await provider.score(sample_report, "sample")

    async def test_close(self, scoring_config) -> None:
        provider = OpenAIProvider(scoring_config)
        client = AsyncMock()
        provider._client = client

        await provider.close()

        client.close.assert_awaited_once()
        assert provider._client is None


def _anthropic_response(*blocks: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(content=list(blocks))


class TestAnthropicProvider:
    """Provider B."""

    async def test_tool_use(self, scoring_config, sample_report) -> None:
        provider = AnthropicProvider(scoring_config)
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=_anthropic_response(
                SimpleNamespace(type="text", text="Let me think."),
                SimpleNamespace(
                    type="tool_use",
                    name=SCORE_TOOL["name"],
                    input={"score": 112, "analysis": "Solid.", "confidence": 66},
                ),
            )
        )

        with patch.object(provider, "_get_client", return_value=client):
            payload = await provider.score(sample_report, "sample")

        assert payload.score == 112
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["tools"] == [SCORE_TOOL]
        assert kwargs["tool_choice"] == {"type": "tool", "name": "submit_score"}
        assert kwargs["model"] == scoring_config.anthropic_model

    async def test_text_fallback(self, scoring_config, sample_report) -> None:
        provider = AnthropicProvider(scoring_config)
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=_anthropic_response(SimpleNamespace(type="text", text=VALID_JSON))
        )

        with patch.object(provider, "_get_client", return_value=client):
            assert (await provider.score(sample_report, "sample")).score == 121

    async def test_empty_response_is_malformed(self, scoring_config, sample_report) -> None:
        provider = AnthropicProvider(scoring_config)
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=_anthropic_response())

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ProviderMalformedError):
                await provider.score(sample_report, "sample")

    async def test_api_error_is_transport(self, scoring_config, sample_report) -> None:
        provider = AnthropicProvider(scoring_config)
        client = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(
                request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"),
            )
        )

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ProviderTransportError):
                await provider.score(sample_report, "sample")

    async def test_unconfigured(self, sample_report) -> None:
        provider = AnthropicProvider(ScoringConfig(anthropic_api_key=None))

        with pytest.raises(ProviderUnconfiguredError):
            await provider.score(sample_report, "sample")
