from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.profiling import analyze_profile


def make_node(store: JobStore, client: GenerationClient, token) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def profile_analyzer_node(state: PrepPipelineState) -> PrepPipelineState:
        details = state["job_research"].details
        return await run_stage(
            store,
            state,
            Stage.PROFILE_ANALYSIS,
            token,
            lambda: analyze_profile(
                state.get("resume_text", ""),
                state.get("linkedin_url"),
                details.required_skills,
                client,
            ),
            output_key="profile",
        )

    return profile_analyzer_node
