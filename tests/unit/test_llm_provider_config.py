import asyncio
import json

import httpx
import pytest

from interview_prep.core.config import Settings
from interview_prep.core.errors import GenerationError, MalformedResponseError
from interview_prep.services.generation import (
    GenerationClient,
    LLMProvider,
    MockLLMProvider,
    OpenAICompatibleLLMProvider,
    build_llm_provider,
    parse_json_object,
)


class _StaticProvider(LLMProvider):
    def __init__(self, text: str) -> None:
        self.text = text

    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        return self.text


class _FailingProvider(LLMProvider):
    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        raise RuntimeError("simulated provider failure")


def test_build_llm_provider_mock():
    settings = Settings(llm_provider="mock")
    provider = build_llm_provider(settings)
    assert isinstance(provider, MockLLMProvider)


def test_build_llm_provider_rejects_key_in_provider_field():
    bad_value = "gsk_example_secret_value"
    settings = Settings(llm_provider=bad_value, llm_api_key="")
    with pytest.raises(ValueError) as exc:
        build_llm_provider(settings)

    message = str(exc.value)
    assert "API key" in message
    assert bad_value not in message


def test_build_llm_provider_groq_uses_default_compatible_base_url():
    settings = Settings(
        llm_provider="groq",
        llm_api_key="dummy-key",
        llm_model="llama-3.3-70b-versatile",
        llm_base_url="https://api.openai.com/v1",
    )
    provider = build_llm_provider(settings)

    assert isinstance(provider, OpenAICompatibleLLMProvider)
    assert provider.base_url == "https://api.groq.com/openai/v1"


def test_build_llm_provider_openai_requires_key():
    with pytest.raises(ValueError):
        build_llm_provider(Settings(llm_provider="openai", llm_api_key=""))


def test_build_llm_provider_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_llm_provider(Settings(llm_provider="carrier-pigeon"))


def test_parse_json_object_strips_code_fence():
    parsed = parse_json_object('```json\n{"companyName": "Acme Corp"}\n```')
    assert parsed == {"companyName": "Acme Corp"}


def test_parse_json_object_rejects_arrays():
    with pytest.raises(MalformedResponseError):
        parse_json_object("[1, 2, 3]")


def test_client_reports_missing_required_keys():
    client = GenerationClient(_StaticProvider('{"companyName": "Acme Corp"}'))
    with pytest.raises(MalformedResponseError) as exc:
        asyncio.run(client.call("Task: job_research\n", required_keys=("companyName", "jobTitle")))

    assert exc.value.missing_keys == ["jobTitle"]


def test_client_wraps_provider_failures():
    client = GenerationClient(_FailingProvider())
    with pytest.raises(GenerationError) as exc:
        asyncio.run(client.call("Task: company_research\n"))

    assert "company_research" in str(exc.value)
    assert "simulated provider failure" in str(exc.value)


def test_client_rejects_non_json_text():
    client = GenerationClient(_StaticProvider("Sure! Here is the company overview."))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.call("Task: company_research\n"))


def test_openai_compatible_provider_sends_json_mode_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"score": 7}'}}]})

    provider = OpenAICompatibleLLMProvider(
        api_key="dummy-key",
        model="gpt-4o",
        base_url="https://llm.example.com/v1/",
        temperature=0.1,
        max_tokens=500,
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )
    text = asyncio.run(provider.generate("Task: grading\n", system_prompt="Be strict."))

    assert text == '{"score": 7}'
    assert seen["url"] == "https://llm.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer dummy-key"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert seen["body"]["messages"][0] == {"role": "system", "content": "Be strict."}


def test_openai_compatible_provider_raises_on_error_status():
    provider = OpenAICompatibleLLMProvider(
        api_key="dummy-key",
        model="gpt-4o",
        base_url="https://llm.example.com/v1",
        temperature=0.1,
        max_tokens=500,
        timeout_seconds=5,
        transport=httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited")),
    )
    client = GenerationClient(provider)
    with pytest.raises(GenerationError) as exc:
        asyncio.run(client.call("Task: grading\n"))

    assert "429" in str(exc.value)


def test_mock_provider_honours_needed_count():
    client = GenerationClient(MockLLMProvider())
    payload = asyncio.run(
        client.call("Task: round_questions\nInterview Round: Technical Assessment\nNeeded: 6\n")
    )

    assert len(payload["questions"]) == 6
    assert payload["questions"][0]["question"].startswith("Technical Assessment")
