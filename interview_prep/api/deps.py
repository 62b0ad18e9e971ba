from fastapi import Depends, Header, HTTPException, Request, status

from interview_prep.agents.runner import PipelineRunner
from interview_prep.core.config import Settings
from interview_prep.core.security import verify_session_token
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_runner(request: Request) -> PipelineRunner:
    return request.app.state.runner


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def require_current_user(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    token = authorization.split(" ", 1)[1]
    user_id = verify_session_token(token, settings=settings)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session token")
    return user_id
