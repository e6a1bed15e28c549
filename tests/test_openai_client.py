"""Tests for the OpenAI wrapper that need no network."""

import asyncio
import base64
from types import SimpleNamespace

import pytest

from ratemyfit.ai.openai_client import OpenAIClient, OpenAIConfig, sniff_base64_mime

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class _FailingCompletions:
    async def create(self, **kwargs):
        raise RuntimeError("rate limited")


class _RecordingCompletions:
    def __init__(self):
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content="looks sharp")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def client(monkeypatch) -> OpenAIClient:
    monkeypatch.delenv("OPENAI_CHAT_MODEL", raising=False)
    monkeypatch.delenv("OPENAI_VISION_MODEL", raising=False)
    return OpenAIClient(OpenAIConfig(api_key="sk-test"))


def _with_completions(client: OpenAIClient, completions) -> None:
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_sniff_base64_mime() -> None:
    assert sniff_base64_mime(base64.b64encode(PNG_BYTES).decode()) == "image/png"
    assert sniff_base64_mime("/9j/4AAQSkZJRg") == "image/jpeg"
    assert sniff_base64_mime("UklGRiQAAABXRUJQ") == "image/webp"
    assert sniff_base64_mime("bm90IGFuIGltYWdl") == "image/jpeg"


def test_image_content_variants(client, tmp_path) -> None:
    b64 = base64.b64encode(PNG_BYTES).decode()

    raw = asyncio.run(client.image_content(b64))
    assert raw["image_url"]["url"] == f"data:image/png;base64,{b64}"

    from_bytes = asyncio.run(client.image_content(PNG_BYTES))
    assert from_bytes == raw

    data_url = "data:image/webp;base64,UklGR"
    assert asyncio.run(client.image_content(data_url))["image_url"]["url"] == data_url

    photo = tmp_path / "outfit.png"
    photo.write_bytes(PNG_BYTES)
    assert asyncio.run(client.image_content(photo)) == raw

    assert asyncio.run(client.image_content(tmp_path / "missing.jpg")) is None


def test_failed_request_returns_empty_string(client) -> None:
    _with_completions(client, _FailingCompletions())
    assert asyncio.run(client.generate("list garments")) == ""
    assert asyncio.run(client.generate_with_image("rate", PNG_BYTES)) == ""


def test_vision_request_shape(client) -> None:
    completions = _RecordingCompletions()
    _with_completions(client, completions)

    text = asyncio.run(
        client.generate_with_image("rate", PNG_BYTES, system="critic", temperature=0.9, max_tokens=800)
    )

    assert text == "looks sharp"
    kwargs = completions.kwargs
    assert kwargs["model"] == "gpt-4.1"
    assert kwargs["temperature"] == 0.9
    assert kwargs["max_tokens"] == 800
    assert kwargs["messages"][0] == {"role": "system", "content": "critic"}
    assert kwargs["messages"][1]["content"][1]["type"] == "image_url"


def test_gpt5_models_use_completion_token_limit(client) -> None:
    completions = _RecordingCompletions()
    _with_completions(client, completions)

    asyncio.run(client.generate("list garments", model="gpt-5-mini", max_tokens=300))

    assert completions.kwargs["max_completion_tokens"] == 300
    assert "max_tokens" not in completions.kwargs
