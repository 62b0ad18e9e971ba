import asyncio

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile

from interview_prep.agents.runner import PipelineRunner
from interview_prep.api.deps import get_app_settings, get_job_store, get_runner, require_current_user
from interview_prep.api.schemas import GenerateResponse, HistoryResponse, StatusResponse
from interview_prep.core.config import Settings
from interview_prep.core.enums import JobStatus
from interview_prep.core.errors import PersistenceError, ValidationError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import JobInputs
from interview_prep.services.job_store import JobStore
from interview_prep.services.resume_text import extract_resume_text

logger = get_logger(__name__)

router = APIRouter(prefix="/interview", tags=["interview"])


def _sweep_expired_quietly(store: JobStore) -> None:
    try:
        store.sweep_expired()
    except PersistenceError as exc:
        logger.warning("background sweep failed", extra={"extra": {"error": str(exc)}})


@router.post("/generate", response_model=GenerateResponse, status_code=202)
async def generate(
    resume: UploadFile | None = File(default=None),
    job_url: str | None = Form(default=None, alias="jobUrl"),
    linkedin_url: str | None = Form(default=None, alias="linkedinUrl"),
    runner: PipelineRunner = Depends(get_runner),
    settings: Settings = Depends(get_app_settings),
    user_id: str = Depends(require_current_user),
) -> GenerateResponse:
    if resume is None:
        raise HTTPException(status_code=400, detail="Resume file is required")
    if not job_url or not job_url.strip():
        raise HTTPException(status_code=400, detail="Job posting URL is required")

    data = await resume.read()
    if len(data) > settings.max_resume_bytes:
        raise HTTPException(status_code=400, detail="Resume file is too large")
    try:
        resume_text = await asyncio.to_thread(
            extract_resume_text, data, filename=resume.filename, content_type=resume.content_type
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    handle = runner.submit(
        JobInputs(
            job_url=job_url.strip(),
            linkedin_url=(linkedin_url or "").strip() or None,
            resume_text=resume_text,
        ),
        user_id=user_id,
    )
    return GenerateResponse(id=handle.job_id, message="Interview preparation started")


@router.get("/status/{job_id}", response_model=StatusResponse)
def get_status(
    job_id: str,
    store: JobStore = Depends(get_job_store),
    user_id: str = Depends(require_current_user),
) -> StatusResponse:
    try:
        job = store.get(job_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if job is None or (job.user_id and job.user_id != user_id):
        raise HTTPException(status_code=404, detail="Interview preparation not found")

    completed = job.status == JobStatus.COMPLETED
    return StatusResponse(
        status=job.status,
        progress=job.state,
        result=job.result if completed else None,
        error=job.error,
        reasoning_log=job.reasoning_log,
        expires_at=job.expires_at if completed else None,
    )


@router.get("/history", response_model=HistoryResponse)
def get_history(
    background_tasks: BackgroundTasks,
    limit: int | None = Query(default=None, ge=1, le=100),
    store: JobStore = Depends(get_job_store),
    user_id: str = Depends(require_current_user),
) -> HistoryResponse:
    try:
        history = store.history(limit, user_id=user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    background_tasks.add_task(_sweep_expired_quietly, store)
    return HistoryResponse(history=history)
