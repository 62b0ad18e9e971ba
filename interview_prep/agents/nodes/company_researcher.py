from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.research import research_company


def make_node(store: JobStore, client: GenerationClient, token) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def company_researcher_node(state: PrepPipelineState) -> PrepPipelineState:
        details = state["job_research"].details
        return await run_stage(
            store,
            state,
            Stage.COMPANY_RESEARCH,
            token,
            lambda: research_company(details.company, details.title, client),
            output_key="company_info",
        )

    return company_researcher_node
