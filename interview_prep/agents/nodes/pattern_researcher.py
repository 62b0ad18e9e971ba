from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.research import research_interview_patterns


def make_node(store: JobStore, client: GenerationClient, token) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def pattern_researcher_node(state: PrepPipelineState) -> PrepPipelineState:
        research = state["job_research"]
        return await run_stage(
            store,
            state,
            Stage.INTERVIEW_PATTERN_RESEARCH,
            token,
            lambda: research_interview_patterns(
                research.details.company,
                research.details.title,
                client,
                hiring_process=research.insights.hiring_process,
            ),
            output_key="round_descriptors",
        )

    return pattern_researcher_node
