from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.profiling import generate_highlights


def make_node(store: JobStore, client: GenerationClient, token) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def highlighter_node(state: PrepPipelineState) -> PrepPipelineState:
        research = state["job_research"]
        return await run_stage(
            store,
            state,
            Stage.HIGHLIGHT_GENERATION,
            token,
            lambda: generate_highlights(
                state.get("resume_text", ""),
                research.details,
                research.insights,
                state["profile"],
                client,
            ),
            output_key="highlights",
        )

    return highlighter_node
