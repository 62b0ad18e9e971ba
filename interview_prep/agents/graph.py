from langgraph.graph import END, StateGraph

from interview_prep.agents.nodes import (
    company_researcher,
    failure_recorder,
    finalizer,
    highlighter,
    job_researcher,
    pattern_researcher,
    profile_analyzer,
    quality_checker,
    question_writer,
)
from interview_prep.agents.nodes.common import STATUS_FAILED, STATUS_RUNNING
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import PIPELINE_ORDER, Stage
from interview_prep.core.errors import NotFoundError
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.page_fetcher import PageFetcher
from interview_prep.services.quality import QualityThresholds

NODE_FOR_STAGE = {
    Stage.JOB_RESEARCH: "job_researcher",
    Stage.PROFILE_ANALYSIS: "profile_analyzer",
    Stage.HIGHLIGHT_GENERATION: "highlighter",
    Stage.COMPANY_RESEARCH: "company_researcher",
    Stage.INTERVIEW_PATTERN_RESEARCH: "pattern_researcher",
    Stage.QUESTION_GENERATION: "question_writer",
    Stage.QUALITY_CHECK: "quality_checker",
}

STAGE_SEQUENCE = (*(NODE_FOR_STAGE[stage] for stage in PIPELINE_ORDER), "finalizer")


def _route_after(next_node: str):
    def route(state: PrepPipelineState) -> str:
        if state.get("status") == STATUS_FAILED:
            return "failure_recorder"
        return next_node

    route.__name__ = f"route_to_{next_node}"
    return route


def _route_after_finalizer(state: PrepPipelineState) -> str:
    if state.get("status") == STATUS_FAILED:
        return "failure_recorder"
    return END


def build_pipeline(
    store: JobStore,
    client: GenerationClient,
    *,
    token=None,
    fetcher: PageFetcher | None = None,
    thresholds: QualityThresholds | None = None,
):
    thresholds = thresholds or QualityThresholds()
    graph = StateGraph(PrepPipelineState)

    graph.add_node("job_researcher", job_researcher.make_node(store, client, token, fetcher))
    graph.add_node("profile_analyzer", profile_analyzer.make_node(store, client, token))
    graph.add_node("highlighter", highlighter.make_node(store, client, token))
    graph.add_node("company_researcher", company_researcher.make_node(store, client, token))
    graph.add_node("pattern_researcher", pattern_researcher.make_node(store, client, token))
    graph.add_node(
        "question_writer",
        question_writer.make_node(store, client, token, thresholds.min_questions_per_round),
    )
    graph.add_node("quality_checker", quality_checker.make_node(store, client, token, thresholds))
    graph.add_node("finalizer", finalizer.make_node(store))
    graph.add_node("failure_recorder", failure_recorder.make_node(store))

    graph.set_entry_point("job_researcher")
    for current, following in zip(STAGE_SEQUENCE, STAGE_SEQUENCE[1:]):
        graph.add_conditional_edges(
            current,
            _route_after(following),
            {
                following: following,
                "failure_recorder": "failure_recorder",
            },
        )
    graph.add_conditional_edges(
        "finalizer",
        _route_after_finalizer,
        {
            END: END,
            "failure_recorder": "failure_recorder",
        },
    )
    graph.add_edge("failure_recorder", END)

    return graph.compile()


async def run_prep_pipeline(
    store: JobStore,
    client: GenerationClient,
    *,
    job_id: str,
    token=None,
    fetcher: PageFetcher | None = None,
    thresholds: QualityThresholds | None = None,
) -> PrepPipelineState:
    job = store.get(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")

    app = build_pipeline(store, client, token=token, fetcher=fetcher, thresholds=thresholds)
    initial_state: PrepPipelineState = {
        "job_id": job_id,
        "job_url": job.inputs.job_url,
        "linkedin_url": job.inputs.linkedin_url,
        "resume_text": job.inputs.resume_text,
        "degraded_stages": [],
        "status": STATUS_RUNNING,
    }
    return await app.ainvoke(initial_state)
