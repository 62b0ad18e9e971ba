import asyncio
from typing import Callable

from interview_prep.agents.nodes.common import STATUS_COMPLETED, STATUS_FAILED
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import STAGE_LABELS, Stage
from interview_prep.core.errors import PersistenceError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import ReasoningStep
from interview_prep.services.job_store import JobStore

logger = get_logger(__name__)


def make_node(store: JobStore) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def finalizer_node(state: PrepPipelineState) -> PrepPipelineState:
        job_id = state["job_id"]
        job = store.get(job_id)
        completion_step = ReasoningStep(
            stage_name=STAGE_LABELS[Stage.COMPLETED],
            note="Interview preparation is complete.",
        )
        artifact = state["artifact"].model_copy(
            update={"reasoning_log": [*job.reasoning_log, completion_step]}
        )

        try:
            expires_at = await asyncio.to_thread(store.save_artifact, job, artifact)
        except PersistenceError as exc:
            logger.error("artifact save failed", extra={"extra": {"job_id": job_id, "error": str(exc)}})
            return {"status": STATUS_FAILED, "error": f"Failed to save interview preparation: {exc}"}

        # the log only says complete once the artifact is durable
        store.append_steps(job_id, [completion_step])
        store.update(job_id, state=Stage.COMPLETED, result=artifact, expires_at=expires_at, error=None)
        logger.info("preparation completed", extra={"extra": {"job_id": job_id}})
        return {"artifact": artifact, "status": STATUS_COMPLETED}

    return finalizer_node
