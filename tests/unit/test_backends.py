"""Unit tests for response parsing and the concrete backends."""

from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from debt_collector.backends.base import (
    SYSTEM_PROMPT,
    AnalysisResult,
    build_analysis_prompt,
)
from debt_collector.backends.mock import MockBackend
from debt_collector.backends.openai import OpenAIBackend
from debt_collector.backends.parsing import parse_analysis_response
from debt_collector.exceptions import BackendError


class TestParseAnalysisResponse:
    """Tests for parse_analysis_response."""

    def test_full_response(self, make_item, full_response):
        result = parse_analysis_response(full_response, make_item(), backend="x")

        assert result.explanation == "Hardcoded credentials bypass secret rotation."
        assert result.severity == 5
        assert result.priority == "HIGH"
        assert result.business_impact == "Credential leak exposes production data."
        assert result.fix_estimate == "2-4 hours"
        assert result.recommendation == "Move the secret into the vault client."
        assert result.confidence == pytest.approx(0.9)
        assert result.backend == "x"
        assert result.raw_response == full_response

    def test_unlabelled_text(self, make_item):
        raw = "  This is just prose about the code.  "
        result = parse_analysis_response(raw, make_item(severity=4))

        assert result.explanation == "This is just prose about the code."
        assert result.priority == "MEDIUM"
        assert result.severity == 4
        assert result.confidence == pytest.approx(0.5)

    def test_explanation_fallback_is_truncated(self, make_item):
        result = parse_analysis_response("x" * 500, make_item())
        assert len(result.explanation) == 200

    def test_empty_response(self, make_item):
        result = parse_analysis_response("", make_item())

        assert result.explanation == ""
        assert result.priority == "MEDIUM"

    def test_markdown_bold_and_lowercase_labels(self, make_item):
        raw = "**Explanation**: Risky.\nseverity: 4\n**PRIORITY:** low"
        result = parse_analysis_response(raw, make_item())

        assert result.explanation == "Risky."
        assert result.severity == 4
        assert result.priority == "LOW"

    def test_first_label_wins(self, make_item):
        raw = "SEVERITY: 2\nSEVERITY: 5"
        assert parse_analysis_response(raw, make_item()).severity == 2

    @pytest.mark.parametrize(
        "value,expected",
        [("9", 5), ("0", 1), ("-3", 1), ("4 (high)", 4), ("unknown", 2)],
    )
    def test_severity_is_clamped(self, make_item, value, expected):
        result = parse_analysis_response(f"SEVERITY: {value}", make_item(severity=2))
        assert result.severity == expected

    @pytest.mark.parametrize(
        "value,expected",
        [("High - fix now", "HIGH"), ("urgent", "MEDIUM"), ("", "MEDIUM")],
    )
    def test_priority(self, make_item, value, expected):
        result = parse_analysis_response(f"PRIORITY: {value}", make_item())
        assert result.priority == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0.75", 0.75),
            ("1", 1.0),
            ("85%", 0.85),
            ("62.5%", 0.625),
            ("85", 0.85),
            ("1.5", 1.0),
            ("150", 1.0),
            ("-1", 0.0),
        ],
    )
    def test_confidence_values(self, make_item, value, expected):
        result = parse_analysis_response(f"CONFIDENCE: {value}", make_item())
        assert result.confidence == pytest.approx(expected)

    def test_heuristic_confidence_grows_with_labels(self, make_item):
        partial = parse_analysis_response("EXPLANATION: a\nSEVERITY: 3", make_item())
        full = parse_analysis_response(
            "EXPLANATION: a\nSEVERITY: 3\nPRIORITY: LOW\nIMPACT: b\nFIX: 1h",
            make_item(),
        )

        assert partial.confidence == pytest.approx(0.5 + 0.45 * 2 / 5)
        assert full.confidence == pytest.approx(0.95)


class TestBuildAnalysisPrompt:
    def test_contains_item_and_context(self, make_item):
        item = make_item(message="drop legacy path", file_path="core/x.py", risk=61.5)

        prompt = build_analysis_prompt(item, "CTX")

        assert "File: core/x.py (Line 1)" in prompt
        assert "Type: TODO" in prompt
        assert "Comment: drop legacy path" in prompt
        assert "Risk: 61.5/100" in prompt
        assert "Context:\nCTX" in prompt

    def test_system_prompt_lists_labels(self):
        for label in ("EXPLANATION", "SEVERITY", "PRIORITY", "RECOMMENDATION"):
            assert f"{label}:" in SYSTEM_PROMPT


def _completion(content: str, total_tokens: int = 500):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.total_tokens = total_tokens
    return response


@pytest.fixture
def async_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


class TestOpenAIBackend:
    """Tests for OpenAIBackend with a mocked async client."""

    def test_requires_key(self):
        with pytest.raises(ValueError, match="Valid OpenAI API key required"):
            OpenAIBackend(api_key="")

    def test_name_and_cost(self, async_client):
        backend = OpenAIBackend(api_key="sk-test", model="gpt-4", client=async_client)

        assert backend.name == "openai-gpt-4"
        assert backend.cost_per_1k == 0.03
        assert backend.is_available()

    def test_unknown_model_uses_default_cost(self, async_client):
        backend = OpenAIBackend(api_key="sk", model="my-model", client=async_client)
        assert backend.cost_per_1k == OpenAIBackend.DEFAULT_COST_PER_1K

    @pytest.mark.asyncio
    async def test_analyze(self, async_client, make_item, full_response):
        async_client.chat.completions.create.return_value = _completion(
            full_response, total_tokens=500
        )
        backend = OpenAIBackend(api_key="sk", model="gpt-4", client=async_client)

        result = await backend.analyze(make_item(), "context")

        assert result.priority == "HIGH"
        assert result.backend == "openai-gpt-4"
        assert result.cost == pytest.approx(0.015)
        assert result.latency_ms >= 0

        kwargs = async_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4"
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert "context" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, async_client, make_item):
        async_client.chat.completions.create.side_effect = openai.OpenAIError("down")
        backend = OpenAIBackend(api_key="sk", client=async_client)

        with pytest.raises(BackendError, match="openai error: down") as exc_info:
            await backend.analyze(make_item(), "")

        assert isinstance(exc_info.value.__cause__, openai.OpenAIError)

    @pytest.mark.asyncio
    async def test_empty_choices(self, async_client, make_item):
        response = _completion("")
        response.choices = []
        async_client.chat.completions.create.return_value = response
        backend = OpenAIBackend(api_key="sk", client=async_client)

        with pytest.raises(BackendError, match="empty response"):
            await backend.analyze(make_item(), "")


class TestMockBackend:
    """Tests for the scripted backend."""

    @pytest.mark.asyncio
    async def test_script_order(self, make_item, full_response):
        canned = AnalysisResult(explanation="canned", severity=1, priority="LOW")
        backend = MockBackend(script=[full_response, canned, BackendError("boom")])
        item = make_item()

        first = await backend.analyze(item, "a")
        second = await backend.analyze(item, "b")
        with pytest.raises(BackendError):
            await backend.analyze(item, "c")
        fallback = await backend.analyze(item, "d")

        assert first.priority == "HIGH"
        assert first.backend == "mock"
        assert second is canned
        assert fallback.severity == 3
        assert fallback.recommendation
        assert [ctx for _, ctx in backend.calls] == ["a", "b", "c", "d"]

    def test_availability(self):
        assert not MockBackend(available=False).is_available()
