import asyncio
import json

import httpx
import pytest

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import CompletionProviderError, ValidationError
from schema_chat.domain.models import ChatMessage
from schema_chat.providers import create_provider
from schema_chat.providers.azure_client import AzureClient
from schema_chat.providers.openai_client import OpenAIClient
from schema_chat.providers.registry import GPT_3_5, get_model


SSE_BODY = b'data: {"choices": [{"delta": {}, "finish_reason": "stop"}]}\n\n'
MESSAGES = [ChatMessage(role="user", content="how many users?")]


def capture(captured, response):
    def handler(request):
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["json"] = json.loads(request.content)
        return response

    return httpx.MockTransport(handler)


def open_stream(client):
    async def scenario():
        upstream = await client.open_stream("sys", MESSAGES, GPT_3_5, 0.5, "sk-test")
        await upstream.aclose()
        return upstream

    return asyncio.run(scenario())


def test_create_provider_by_kind():
    assert isinstance(create_provider(PipelineConfig()), OpenAIClient)
    assert isinstance(create_provider(PipelineConfig(provider_kind="gateway", deployment_id="d")), AzureClient)


def test_direct_request_shape():
    captured = {}
    cfg = PipelineConfig(api_host="https://api.openai.com/", organization_id="org-1")
    client = OpenAIClient(cfg, transport=capture(captured, httpx.Response(200, content=SSE_BODY)))
    upstream = open_stream(client)
    assert upstream.status_code == 200
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["headers"]["authorization"] == "Bearer sk-test"
    assert captured["headers"]["openai-organization"] == "org-1"
    body = captured["json"]
    assert body["model"] == "gpt-3.5-turbo"
    assert body["messages"][0] == {"role": "system", "content": "sys"}
    assert body["messages"][1] == {"role": "user", "content": "how many users?"}
    assert body["max_tokens"] == 1000
    assert body["temperature"] == 0.5
    assert body["stream"] is True


def test_direct_without_organization():
    captured = {}
    client = OpenAIClient(PipelineConfig(), transport=capture(captured, httpx.Response(200, content=SSE_BODY)))
    open_stream(client)
    assert "openai-organization" not in captured["headers"]


def test_gateway_request_shape():
    captured = {}
    cfg = PipelineConfig(
        api_host="https://example.openai.azure.com",
        provider_kind="gateway",
        deployment_id="schema-gpt",
        api_version="2023-05-15",
        organization_id="org-ignored",
    )
    client = AzureClient(cfg, transport=capture(captured, httpx.Response(200, content=SSE_BODY)))
    open_stream(client)
    assert captured["url"] == (
        "https://example.openai.azure.com/openai/deployments/schema-gpt/chat/completions?api-version=2023-05-15"
    )
    assert captured["headers"]["api-key"] == "sk-test"
    assert "authorization" not in captured["headers"]
    assert "openai-organization" not in captured["headers"]
    assert "model" not in captured["json"]
    assert captured["json"]["stream"] is True
    assert captured["json"]["max_tokens"] == 1000


def test_gateway_requires_deployment():
    client = AzureClient(PipelineConfig(provider_kind="gateway"))
    with pytest.raises(ValidationError):
        open_stream(client)


def test_structured_provider_error():
    body = {"error": {"message": "bad request", "type": "invalid_request_error", "param": "model", "code": "x"}}
    client = OpenAIClient(PipelineConfig(), transport=capture({}, httpx.Response(400, json=body)))
    with pytest.raises(CompletionProviderError) as exc:
        open_stream(client)
    err = exc.value
    assert err.message == "bad request"
    assert err.error_type == "invalid_request_error"
    assert err.param == "model"
    assert err.provider_code == "x"
    assert err.http_status == 400


def test_plain_provider_error():
    client = OpenAIClient(PipelineConfig(), transport=capture({}, httpx.Response(502, text="upstream down")))
    with pytest.raises(CompletionProviderError) as exc:
        open_stream(client)
    assert "upstream down" in exc.value.message
    assert exc.value.error_type is None
    assert exc.value.extra["status"] == 502


def test_network_error_is_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = OpenAIClient(PipelineConfig(), transport=httpx.MockTransport(handler))
    with pytest.raises(CompletionProviderError):
        open_stream(client)


def test_registry_lookup():
    assert get_model("GPT-4").id == "gpt-4"
    with pytest.raises(KeyError):
        get_model("unknown")
