import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from interview_prep.core.config import Settings
from interview_prep.db import models  # noqa: F401  registers tables
from interview_prep.db.base import Base
from interview_prep.services.generation import GenerationClient, LLMProvider, _mock_response, prompt_task


class ScriptedProvider(LLMProvider):
    """Answers per prompt task; unscripted tasks get the mock provider's answer.

    A scripted value may be a dict, a callable taking the prompt, or an
    exception instance to raise.
    """

    def __init__(self, script: dict | None = None) -> None:
        self.script = script or {}
        self.calls: list[str] = []
        self.prompts: list[str] = []

    async def generate(self, prompt: str, *, system_prompt: str | None = None) -> str:
        task = prompt_task(prompt)
        self.calls.append(task)
        self.prompts.append(prompt)
        answer = self.script.get(task)
        if answer is None:
            return json.dumps(_mock_response(prompt))
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            answer = answer(prompt)
        return answer if isinstance(answer, str) else json.dumps(answer)


@pytest.fixture
def make_client():
    def _make(script: dict | None = None) -> GenerationClient:
        return GenerationClient(ScriptedProvider(script))

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_provider="mock",
        page_fetch_enabled=False,
        local_api_key="test-key",
        secret_key="test-secret",
        debug=False,
    )


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()
