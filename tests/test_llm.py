"""
Tests for the hosted LLM client: backend selection and error propagation.
No network: OpenAI is mocked and the HF router goes through httpx.MockTransport.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from enrichlab.agent import llm
from enrichlab.core.errors import ServiceUnavailableError


def test_no_credentials_raises_service_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "")
    monkeypatch.setattr(llm, "HF_API_KEY", "")

    assert llm.active_backend() == "none"
    with pytest.raises(ServiceUnavailableError):
        llm.complete("hello")


def test_openai_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "sk-test")
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="  hi there  "))]
    )
    with patch("enrichlab.agent.llm.OpenAI", return_value=client):
        out = llm.complete("hello", temperature=0.3, max_tokens=50)

    assert out == "hi there"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == llm.OPENAI_LLM_MODEL
    assert kwargs["messages"] == [{"role": "user", "content": "hello"}]
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 50


def test_openai_errors_propagate(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "sk-test")
    client = MagicMock()
    client.chat.completions.create.side_effect = RuntimeError("quota exceeded")
    with patch("enrichlab.agent.llm.OpenAI", return_value=client):
        with pytest.raises(RuntimeError, match="quota exceeded"):
            llm.complete("hello")


def _hf_client_factory(handler):
    real_client = httpx.Client

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    return factory


def test_hf_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "")
    monkeypatch.setattr(llm, "HF_API_KEY", "hf-test")
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"choices": [{"message": {"content": " from hf "}}]})

    with patch("enrichlab.agent.llm.httpx.Client", side_effect=_hf_client_factory(handler)):
        out = llm.complete("hello", temperature=0.0)

    assert llm.active_backend() == "huggingface"
    assert llm.active_model() == llm.HF_LLM_MODEL
    assert out == "from hf"
    assert seen["auth"] == "Bearer hf-test"


def test_hf_http_error_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "")
    monkeypatch.setattr(llm, "HF_API_KEY", "hf-test")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    with patch("enrichlab.agent.llm.httpx.Client", side_effect=_hf_client_factory(handler)):
        with pytest.raises(httpx.HTTPStatusError):
            llm.complete("hello")
