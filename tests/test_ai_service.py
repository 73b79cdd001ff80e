import json

import httpx
import pytest

from app.exceptions import GenerationCredentialError, GenerationError
from app.services.ai_service import NO_DESCRIPTION, AIService


def make_service(handler, api_key="test-key"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AIService(api_key=api_key, base_url="https://llm.test/v1/", model_name="test-model", client=client)


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.mark.asyncio
async def test_returns_trimmed_answer_and_sends_prompt():
    requests = []

    def handler(request):
        requests.append(request)
        return completion("  Widgets Inc sells premium industrial widgets.\n")

    service = make_service(handler)
    answer = await service.describe_company(
        "Widgets Inc sells premium widgets", "example.com", "what does this company sell"
    )

    assert answer == "Widgets Inc sells premium industrial widgets."
    request = requests[0]
    assert str(request.url) == "https://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"

    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert body["max_tokens"] == 150
    assert body["temperature"] == 0.7
    system, user = body["messages"]
    assert system["role"] == "system"
    assert "concisely" in system["content"]
    assert "example.com" in user["content"]
    assert "what does this company sell" in user["content"]
    assert "Widgets Inc sells premium widgets" in user["content"]


@pytest.mark.asyncio
async def test_default_question_when_none_given():
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return completion("A company.")

    await make_service(handler).describe_company("text", "example.com", None)

    assert "What does this company do?" in requests[0]["messages"][1]["content"]


@pytest.mark.asyncio
async def test_empty_output_returns_placeholder():
    service = make_service(lambda request: completion("   "))
    assert await service.describe_company("text", "example.com") == NO_DESCRIPTION


@pytest.mark.asyncio
async def test_missing_choices_returns_placeholder():
    service = make_service(lambda request: httpx.Response(200, json={"choices": []}))
    assert await service.describe_company("text", "example.com") == NO_DESCRIPTION


@pytest.mark.asyncio
async def test_missing_credential_is_distinct_error():
    calls = []

    def handler(request):
        calls.append(request)
        return completion("never")

    with pytest.raises(GenerationCredentialError):
        await make_service(handler, api_key="").describe_company("text", "example.com")
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_credential_is_distinct_error(status_code):
    service = make_service(lambda request: httpx.Response(status_code, json={"error": "invalid key"}))

    with pytest.raises(GenerationCredentialError) as exc_info:
        await service.describe_company("text", "example.com")
    assert "OPENAI_API_KEY" in str(exc_info.value)


@pytest.mark.asyncio
async def test_other_failures_are_wrapped():
    service = make_service(lambda request: httpx.Response(500, text="upstream exploded"))

    with pytest.raises(GenerationError) as exc_info:
        await service.describe_company("text", "example.com")

    assert not isinstance(exc_info.value, GenerationCredentialError)
    assert str(exc_info.value).startswith("Summarization failed:")
    assert "500" in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_failures_are_wrapped():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(GenerationError) as exc_info:
        await make_service(handler).describe_company("text", "example.com")
    assert "read timed out" in str(exc_info.value)
