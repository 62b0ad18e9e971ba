import asyncio

from fastapi import APIRouter, Depends, HTTPException

from interview_prep.api.deps import get_generation_client, get_job_store, require_current_user
from interview_prep.api.schemas import GradeRequest, ResponsesListResponse, SaveResponseRequest
from interview_prep.core.errors import NotFoundError, PersistenceError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import GradingResult, UserResponse
from interview_prep.services.generation import GenerationClient
from interview_prep.services.grading import grade_response
from interview_prep.services.job_store import JobStore
from interview_prep.services.responses import list_responses, save_response

logger = get_logger(__name__)

router = APIRouter(prefix="/interview", tags=["responses"])

FALLBACK_QUESTION = "Interview question"


@router.post("/response", response_model=UserResponse)
def save_user_response(
    payload: SaveResponseRequest,
    store: JobStore = Depends(get_job_store),
    user_id: str = Depends(require_current_user),
) -> UserResponse:
    try:
        return save_response(
            store,
            job_id=payload.job_id,
            question_id=payload.question_id,
            round_id=payload.round_id,
            situation=payload.situation,
            action=payload.action,
            result=payload.result,
            user_id=user_id,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/{job_id}/responses", response_model=ResponsesListResponse)
def get_user_responses(
    job_id: str,
    store: JobStore = Depends(get_job_store),
    user_id: str = Depends(require_current_user),
) -> ResponsesListResponse:
    try:
        return ResponsesListResponse(responses=list_responses(store, job_id, user_id=user_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.post("/response/grade", response_model=GradingResult)
async def grade_user_response(
    payload: GradeRequest,
    store: JobStore = Depends(get_job_store),
    client: GenerationClient = Depends(get_generation_client),
    user_id: str = Depends(require_current_user),
) -> GradingResult:
    question_text = payload.question
    highlights = None
    try:
        artifact = await asyncio.to_thread(store.get_artifact, payload.job_id)
    except PersistenceError as exc:
        logger.warning("grading without stored artifact", extra={"extra": {"error": str(exc)}})
        artifact = None

    if artifact is not None:
        highlights = artifact.candidate_highlights
        found = artifact.find_question(payload.question_id)
        if found is not None:
            question_text = found[1].question

    return await grade_response(question_text or FALLBACK_QUESTION, payload.response_text, highlights, client)
