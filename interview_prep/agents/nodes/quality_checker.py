from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.core.models import Artifact
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.quality import QualityThresholds, review_artifact


def make_node(
    store: JobStore,
    client: GenerationClient,
    token,
    thresholds: QualityThresholds | None = None,
) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def quality_checker_node(state: PrepPipelineState) -> PrepPipelineState:
        draft = Artifact(
            job_details=state["job_research"].details,
            company_info=state["company_info"],
            candidate_highlights=state["highlights"],
            interview_rounds=state.get("interview_rounds", []),
        )
        return await run_stage(
            store,
            state,
            Stage.QUALITY_CHECK,
            token,
            lambda: review_artifact(
                draft,
                client,
                thresholds,
                resume_text=state.get("resume_text", ""),
            ),
            output_key="artifact",
        )

    return quality_checker_node
