from collections.abc import Awaitable, Callable
from typing import Any

from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.core.logging import get_logger
from interview_prep.core.outcome import StageFailure, StageOutcome
from interview_prep.services.job_store import JobStore

logger = get_logger(__name__)

STATUS_RUNNING = "RUNNING"
STATUS_FAILED = "FAILED"
STATUS_COMPLETED = "COMPLETED"

CANCELLED_MESSAGE = "Interview preparation was cancelled"


async def run_stage(
    store: JobStore,
    state: PrepPipelineState,
    stage: Stage,
    token,
    call: Callable[[], Awaitable[StageOutcome[Any]]],
    *,
    output_key: str,
) -> PrepPipelineState:
    """Advance the job to ``stage``, run it and fold its outcome into the state."""
    job_id = state["job_id"]
    if token is not None and token.cancelled:
        return {"status": STATUS_FAILED, "error": CANCELLED_MESSAGE}

    store.update(job_id, state=stage)
    logger.info("stage started", extra={"extra": {"job_id": job_id, "stage": stage.value}})

    try:
        outcome = await call()
    except StageFailure as exc:
        store.append_steps(job_id, exc.steps)
        logger.error(
            "stage failed",
            extra={"extra": {"job_id": job_id, "stage": stage.value, "error": exc.message}},
        )
        return {"status": STATUS_FAILED, "error": exc.message}

    store.append_steps(job_id, outcome.steps)
    update: PrepPipelineState = {output_key: outcome.data, "status": STATUS_RUNNING}
    if outcome.degraded:
        logger.warning("stage degraded", extra={"extra": {"job_id": job_id, "stage": stage.value}})
        update["degraded_stages"] = [*state.get("degraded_stages", []), stage.value]
    logger.info("stage finished", extra={"extra": {"job_id": job_id, "stage": stage.value}})
    return update
