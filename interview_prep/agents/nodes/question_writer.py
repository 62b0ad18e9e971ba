from typing import Callable

from interview_prep.agents.nodes.common import run_stage
from interview_prep.agents.state import PrepPipelineState
from interview_prep.core.enums import Stage
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.questions import generate_questions


def make_node(
    store: JobStore,
    client: GenerationClient,
    token,
    min_questions: int = 5,
) -> Callable[[PrepPipelineState], PrepPipelineState]:
    async def question_writer_node(state: PrepPipelineState) -> PrepPipelineState:
        return await run_stage(
            store,
            state,
            Stage.QUESTION_GENERATION,
            token,
            lambda: generate_questions(
                state["round_descriptors"],
                state["job_research"].details,
                state["company_info"],
                state["highlights"],
                client,
                min_questions=min_questions,
            ),
            output_key="interview_rounds",
        )

    return question_writer_node
