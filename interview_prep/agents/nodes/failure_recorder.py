from typing import Callable

from interview_prep.agents.nodes.common import STATUS_FAILED
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import STAGE_LABELS, Stage
from interview_prep.core.models import ReasoningStep
from interview_prep.services.job_store import JobStore


def make_node(store: JobStore) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def failure_recorder_node(state: PrepPipelineState) -> PrepPipelineState:
        job_id = state["job_id"]
        error = state.get("error") or "Interview preparation failed"
        store.append_steps(
            job_id,
            [ReasoningStep(stage_name=STAGE_LABELS[Stage.FAILED], note=f"Preparation stopped: {error}")],
        )
        # no partial artifact is exposed for a failed job
        store.update(job_id, state=Stage.FAILED, error=error, result=None)
        return {"status": STATUS_FAILED, "error": error}

    return failure_recorder_node
