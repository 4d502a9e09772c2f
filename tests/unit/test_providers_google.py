"""Tests for the Google (Gemini) provider adapter."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from truthvote.core.errors import (
    ModelNotFoundError,
    ProviderAuthError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from truthvote.providers.base import PromptMessage
from truthvote.providers.google import (
    PROVIDER_ID,
    GoogleProvider,
    _build_contents,
    _map_error,
)

# ── Helpers ─────────────────────────────────────────────────────


def _genai_error(cls_name: str, message: str) -> Exception:
    """Build a google.genai error across SDK constructor signatures."""
    from google.genai import errors as genai_errors

    cls = getattr(genai_errors, cls_name)
    try:
        return cls(message)
    except TypeError:
        return cls(message, {})


def _response(
    text: str | None = '{"verdict": "Mixed"}',
    prompt_tokens: int = 30,
    candidate_tokens: int = 15,
) -> MagicMock:
    resp = MagicMock()
    resp.text = text
    resp.usage_metadata = MagicMock()
    resp.usage_metadata.prompt_token_count = prompt_tokens
    resp.usage_metadata.candidates_token_count = candidate_tokens
    return resp


def _client(response: Any = None, *, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=response if response is not None else _response(),
        side_effect=error,
    )
    return client


_MSGS = [PromptMessage(role="user", content="Claim: the moon is cheese")]


# ── Identity / message building ─────────────────────────────────


def test_provider_id():
    assert GoogleProvider(client=_client()).provider_id == PROVIDER_ID == "google"


def test_build_contents_splits_system():
    system, contents = _build_contents(
        [
            PromptMessage(role="system", content="Be neutral."),
            PromptMessage(role="user", content="Claim"),
            PromptMessage(role="assistant", content="Earlier answer"),
        ]
    )
    assert system == "Be neutral."
    assert contents == [
        {"role": "user", "parts": [{"text": "Claim"}]},
        {"role": "model", "parts": [{"text": "Earlier answer"}]},
    ]


def test_build_contents_without_system():
    system, contents = _build_contents(_MSGS)
    assert system is None
    assert len(contents) == 1


# ── send ────────────────────────────────────────────────────────


async def test_send_basic():
    client = _client(_response("verdict text", 100, 20))
    resp = await GoogleProvider(client=client).send(_MSGS, "gemini-2.5-pro")
    assert resp.content == "verdict text"
    assert resp.usage.input_tokens == 100
    assert resp.usage.output_tokens == 20
    assert resp.model_info.display_name == "Gemini 2.5 Pro"


async def test_send_config():
    client = _client()
    await GoogleProvider(client=client).send(
        _MSGS, "gemini-2.5-pro", max_tokens=2048, temperature=0.2
    )
    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-pro"
    config = kwargs["config"]
    assert config.max_output_tokens == 2048
    assert config.temperature == 0.2
    assert config.response_mime_type is None


async def test_send_json_mode():
    client = _client()
    await GoogleProvider(client=client).send(
        _MSGS, "gemini-2.5-pro", response_format="json"
    )
    config = client.aio.models.generate_content.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"


async def test_send_missing_text_and_usage():
    resp = _response(text=None)
    resp.usage_metadata = None
    result = await GoogleProvider(client=_client(resp)).send(_MSGS, "gemini-2.5-pro")
    assert result.content == ""
    assert result.usage.total_tokens == 0


async def test_send_unknown_model():
    resp = await GoogleProvider(client=_client()).send(_MSGS, "gemini-next")
    assert resp.model_info.display_name == "Gemini (gemini-next)"


async def test_send_client_error_raises_mapped():
    client = _client(error=_genai_error("ClientError", "API key not valid"))
    with pytest.raises(ProviderAuthError):
        await GoogleProvider(client=client).send(_MSGS, "gemini-2.5-pro")


async def test_send_server_error_raises_mapped():
    client = _client(error=_genai_error("ServerError", "503 unavailable"))
    with pytest.raises(ProviderOverloadedError):
        await GoogleProvider(client=client).send(_MSGS, "gemini-2.5-pro")


# ── _map_error ──────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("cls_name", "message", "expected"),
    [
        ("ClientError", "API key not valid", ProviderAuthError),
        ("ClientError", "404 model not found", ModelNotFoundError),
        ("ClientError", "429 rate limit exceeded", ProviderRateLimitError),
        ("ClientError", "request timed out", ProviderTimeoutError),
        ("ServerError", "503 overloaded", ProviderOverloadedError),
    ],
)
def test_map_error(cls_name: str, message: str, expected: type) -> None:
    assert isinstance(_map_error(_genai_error(cls_name, message)), expected)


# ── health_check ────────────────────────────────────────────────


async def test_health_check_ok():
    assert await GoogleProvider(client=_client()).health_check() is True


async def test_health_check_failure():
    client = _client(error=RuntimeError("down"))
    assert await GoogleProvider(client=client).health_check() is False
