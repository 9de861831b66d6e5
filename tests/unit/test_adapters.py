from __future__ import annotations

import json

import httpx
import pytest

from ideaforge.core.config.schema import ProviderConfig
from ideaforge.core.providers.base import ProviderRequest
from ideaforge.core.providers.gemini_adapter import GeminiAdapter
from ideaforge.core.providers.huggingface_adapter import HuggingFaceAdapter
from ideaforge.core.providers.ollama_adapter import OllamaAdapter
from ideaforge.core.providers.openai_adapter import OpenAIChatAdapter
from ideaforge.core.runtime.errors import BackendRejected, TransportExhausted
from ideaforge.core.runtime.retries import ResilientTransport, RetryPolicy


class _Recorder:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


async def _no_sleep(_seconds: float) -> None:
    return None


def _transport(recorder: _Recorder, max_retries: int = 0) -> ResilientTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return ResilientTransport(client, RetryPolicy(max_retries=max_retries), sleep=_no_sleep)


REQUEST = ProviderRequest(instruction="Be brief.", content="Concept: kites", max_output_tokens=77)


@pytest.mark.asyncio
async def test_ollama_builds_generate_call():
    rec = _Recorder(httpx.Response(200, json={"response": "1. Idea"}))
    adapter = OllamaAdapter(ProviderConfig(base_url="http://ollama.test/", model="llama3.2", temperature=0.7), _transport(rec))

    out = await adapter.generate(REQUEST)

    assert out == "1. Idea"
    assert str(rec.requests[0].url) == "http://ollama.test/api/generate"
    assert rec.body == {
        "model": "llama3.2",
        "prompt": "Be brief.\n\nConcept: kites",
        "stream": False,
        "options": {"num_predict": 77, "temperature": 0.7},
    }
    assert "authorization" not in rec.requests[0].headers


@pytest.mark.asyncio
async def test_ollama_is_eligible_without_credential_but_needs_url():
    rec = _Recorder(httpx.Response(200))
    assert OllamaAdapter(ProviderConfig(base_url="http://ollama.test"), _transport(rec)).is_configured()
    assert not OllamaAdapter(ProviderConfig(base_url=None), _transport(rec)).is_configured()


@pytest.mark.asyncio
async def test_gemini_uses_api_key_header_for_google_keys():
    rec = _Recorder(httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "hi"}]}}]}))
    cfg = ProviderConfig(base_url="https://gl.test/v1beta/models", api_key="AIzaSyTEST", model="gemini-2.0-flash")
    adapter = GeminiAdapter(cfg, _transport(rec))

    assert await adapter.generate(REQUEST) == "hi"
    sent = rec.requests[0]
    assert str(sent.url) == "https://gl.test/v1beta/models/gemini-2.0-flash:generateContent"
    assert sent.headers["x-goog-api-key"] == "AIzaSyTEST"
    assert "authorization" not in sent.headers
    assert rec.body == {"contents": [{"parts": [{"text": "Be brief.\n\nConcept: kites"}]}]}


@pytest.mark.asyncio
async def test_gemini_uses_bearer_for_oauth_tokens_and_model_override():
    rec = _Recorder(httpx.Response(200, json={"candidates": [{"text": "ok"}]}))
    cfg = ProviderConfig(base_url="https://gl.test/models", api_key="ya29.token", model="gemini-2.0-flash")
    adapter = GeminiAdapter(cfg, _transport(rec))

    req = ProviderRequest(instruction="", content="hello", model="gemini-pro")
    assert await adapter.generate(req) == "ok"
    sent = rec.requests[0]
    assert sent.headers["authorization"] == "Bearer ya29.token"
    assert "x-goog-api-key" not in sent.headers
    assert str(sent.url).endswith("/gemini-pro:generateContent")
    assert rec.body["contents"][0]["parts"][0]["text"] == "hello"


@pytest.mark.asyncio
async def test_openai_sends_instruction_as_system_message():
    rec = _Recorder(httpx.Response(200, json={"choices": [{"message": {"content": "fused"}}]}))
    cfg = ProviderConfig(base_url="https://oa.test/v1", api_key="sk-1", model="gpt-3.5-turbo", temperature=0.9)
    adapter = OpenAIChatAdapter(cfg, _transport(rec))

    assert await adapter.generate(REQUEST) == "fused"
    assert str(rec.requests[0].url) == "https://oa.test/v1/chat/completions"
    assert rec.requests[0].headers["authorization"] == "Bearer sk-1"
    assert rec.body["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Concept: kites"},
    ]
    assert rec.body["max_tokens"] == 77
    assert rec.body["temperature"] == 0.9


@pytest.mark.asyncio
async def test_huggingface_builds_inputs_call_and_rejects_quota_errors():
    rec = _Recorder(httpx.Response(429, text="rate limited"))
    cfg = ProviderConfig(base_url="https://hf.test", api_key="hf_x", model="gpt2")
    adapter = HuggingFaceAdapter(cfg, _transport(rec))

    with pytest.raises(BackendRejected):
        await adapter.generate(REQUEST)
    assert str(rec.requests[0].url) == "https://hf.test/models/gpt2"
    assert rec.body == {
        "inputs": "Be brief.\n\nConcept: kites",
        "parameters": {"max_new_tokens": 77, "temperature": 0.7},
    }


@pytest.mark.asyncio
async def test_cloud_adapters_need_a_credential():
    rec = _Recorder(httpx.Response(200))
    assert not GeminiAdapter(ProviderConfig(base_url="https://gl.test"), _transport(rec)).is_configured()
    assert not OpenAIChatAdapter(ProviderConfig(base_url="https://oa.test", api_key="  "), _transport(rec)).is_configured()
    assert OpenAIChatAdapter(ProviderConfig(base_url="https://oa.test", api_key="sk"), _transport(rec)).is_configured()
    assert not OpenAIChatAdapter(ProviderConfig(enabled=False, base_url="https://oa.test", api_key="sk"), _transport(rec)).is_configured()


@pytest.mark.asyncio
async def test_server_errors_surface_as_transport_exhausted():
    rec = _Recorder(httpx.Response(502, text="bad gateway"))
    adapter = OllamaAdapter(ProviderConfig(base_url="http://ollama.test"), _transport(rec, max_retries=2))

    with pytest.raises(TransportExhausted):
        await adapter.generate(REQUEST)
    assert len(rec.requests) == 3
