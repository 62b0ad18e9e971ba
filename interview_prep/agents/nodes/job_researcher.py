from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.page_fetcher import PageFetcher
from interview_prep.services.research import research_job


def make_node(
    store: JobStore,
    client: GenerationClient,
    token,
    fetcher: PageFetcher | None = None,
) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def job_researcher_node(state: PrepPipelineState) -> PrepPipelineState:
        return await run_stage(
            store,
            state,
            Stage.JOB_RESEARCH,
            token,
            lambda: research_job(state["job_url"], state.get("linkedin_url"), client, fetcher=fetcher),
            output_key="job_research",
        )

    return job_researcher_node
