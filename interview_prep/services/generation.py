import json
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import httpx

from interview_prep.core.config import Settings
from interview_prep.core.errors import GenerationError, MalformedResponseError
from interview_prep.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert AI assistant. Analyze the input and respond with a JSON object. "
    "Format your response as a valid JSON object. Be precise and factual."
)

TASK_LINE_PATTERN = re.compile(r"^\s*Task:\s*([a-z_]+)", re.MULTILINE)
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def prompt_task(prompt: str) -> str:
    match = TASK_LINE_PATTERN.search(prompt or "")
    return match.group(1) if match else "unknown"


def prompt_field(prompt: str, label: str, default: str = "") -> str:
    match = re.search(rf"^\s*{re.escape(label)}:\s*(.+)$", prompt or "", flags=re.MULTILINE)
    return match.group(1).strip() if match else default


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        raise NotImplementedError


def _mock_count(prompt: str, default: int) -> int:
    try:
        return max(1, int(prompt_field(prompt, "Needed", str(default))))
    except ValueError:
        return default


def _mock_response(prompt: str) -> dict[str, Any]:
    task = prompt_task(prompt)
    company = prompt_field(prompt, "Company", "Example Company")
    title = prompt_field(prompt, "Job Title", "Software Engineer")

    if task == "job_research":
        return {
            "companyName": "Example Company",
            "jobTitle": "Software Engineer",
            "location": "Remote",
            "requiredSkills": ["Python", "SQL", "Communication"],
            "jobResponsibilities": ["Build and operate backend services"],
            "companyCulture": ["Collaborative"],
            "hiringProcess": ["Recruiter screen", "Technical interview", "Onsite"],
            "keyTechnologies": ["Python", "PostgreSQL"],
        }
    if task in {"linkedin_job", "linkedin_profile"}:
        return {"notes": "No additional LinkedIn context (mock provider)."}
    if task == "career_page":
        return {"requiredSkills": ["Testing"], "companyCulture": ["Ownership"]}
    if task == "profile_analysis":
        return {
            "summary": "Engineer with backend experience (mock provider).",
            "experiences": [],
            "skills": ["Python"],
        }
    if task == "highlights":
        return {
            "relevantPoints": ["Hands-on Python experience matches the core stack"],
            "gapAreas": ["Limited evidence of large-scale system design"],
            "suggestedTalkingPoints": ["Walk through a recent backend project end to end"],
        }
    if task == "company_research":
        return {
            "description": f"{company} builds software products (mock provider).",
            "culture": ["Collaborative"],
            "businessFocus": ["Software products"],
            "teamInfo": [f"{title} works within a cross-functional team"],
            "roleDetails": [f"{title} owns services end to end"],
            "usefulUrls": [],
        }
    if task == "interview_patterns":
        return {"interviewRounds": []}
    if task in {"round_questions", "repair_round"}:
        round_name = prompt_field(prompt, "Interview Round", "Interview")
        count = _mock_count(prompt, 5)
        return {
            "questions": [
                {
                    "question": f"{round_name} question {idx + 1}: tell us about relevant work.",
                    "talkingPoints": [
                        "Describe the situation and your responsibility",
                        "Explain the actions you took",
                        "Quantify the result",
                    ],
                }
                for idx in range(count)
            ]
        }
    if task == "repair_talking_points":
        count = _mock_count(prompt, 3)
        return {"talkingPoints": [f"Additional supporting point {idx + 1}" for idx in range(count)]}
    if task == "repair_highlights":
        return {
            "relevantPoints": [
                f"Additional relevant point {idx + 1}" for idx in range(_mock_count(prompt, 1))
            ],
            "gapAreas": ["Additional gap area to prepare for"],
        }
    if task == "repair_company_info":
        return {
            "culture": ["Collaborative"],
            "businessFocus": ["Software products"],
            "teamInfo": ["Cross-functional team"],
            "roleDetails": ["Owns services end to end"],
        }
    if task == "grading":
        return {
            "score": 6,
            "feedback": "Solid structure; add measurable results (mock provider).",
            "strengths": ["Clear situation"],
            "improvements": ["Quantify the outcome"],
            "suggestedPoints": {"situation": [], "action": [], "result": []},
        }
    return {}


class MockLLMProvider(LLMProvider):
    """Deterministic offline provider keyed on the prompt's Task line."""

    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        return json.dumps(_mock_response(prompt))


class OpenAICompatibleLLMProvider(LLMProvider):
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("LLM_API_KEY is required when LLM_PROVIDER=openai")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt or DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(url, headers=headers, json=payload)

        if response.status_code >= 400:
            raise RuntimeError(
                f"LLM request failed ({response.status_code}): {response.text[:300]}"
            )

        data = response.json()
        content = (
            (data.get("choices") or [{}])[0]
            .get("message", {})
            .get("content", "")
        )
        if not content:
            raise RuntimeError("LLM response missing content")
        return str(content).strip()


def build_llm_provider(settings: Settings) -> LLMProvider:
    raw_provider = (settings.llm_provider or "mock").strip()
    provider = raw_provider.lower()

    if provider.startswith("sk-") or provider.startswith("gsk_"):
        raise ValueError(
            "LLM_PROVIDER appears to contain an API key. Set LLM_PROVIDER to 'openai' or 'groq' "
            "and move the key to LLM_API_KEY."
        )

    if provider == "mock":
        return MockLLMProvider()
    if provider in {"openai", "openai_compatible"}:
        return OpenAICompatibleLLMProvider(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            base_url=settings.llm_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    if provider == "groq":
        base_url = settings.llm_base_url
        if not base_url or base_url == "https://api.openai.com/v1":
            base_url = "https://api.groq.com/openai/v1"
        return OpenAICompatibleLLMProvider(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            base_url=base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    raise ValueError("Unsupported LLM_PROVIDER. Supported values: mock, openai, openai_compatible, groq.")


def parse_json_object(raw_text: str) -> dict[str, Any]:
    text = (raw_text or "").strip()
    fenced = CODE_FENCE_PATTERN.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Response is not valid JSON: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


class GenerationClient:
    """Single-call boundary over the generative model.

    ``call`` never retries; callers decide whether a failure is fatal.
    """

    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider

    async def call(
        self,
        prompt: str,
        *,
        required_keys: Iterable[str] = (),
        system_prompt: str | None = None,
    ) -> dict[str, Any]:
        task = prompt_task(prompt)
        logger.debug(
            "generation call",
            extra={"extra": {"task": task, "prompt_chars": len(prompt)}},
        )
        try:
            raw = await self.provider.generate(prompt, system_prompt=system_prompt)
        except Exception as exc:
            raise GenerationError(f"Generation call failed for {task}: {exc}") from exc

        parsed = parse_json_object(raw)
        missing = [key for key in required_keys if key not in parsed]
        if missing:
            raise MalformedResponseError(
                f"Response for {task} is missing required keys: {', '.join(missing)}",
                missing_keys=missing,
            )
        return parsed
