from interview_prep.core.errors import GenerationError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import CandidateHighlights, GradingResult, SuggestedPoints
from interview_prep.services import prompts
from interview_prep.services.generation import GenerationClient
from interview_prep.services.normalize import clean_text, string_list

logger = get_logger(__name__)

DEFAULT_FEEDBACK = (
    "Your response has been recorded. Structure it with a clear Situation, the Actions you "
    "personally took and a measurable Result to make it stronger."
)


def default_grading_result() -> GradingResult:
    return GradingResult(
        score=5,
        feedback=DEFAULT_FEEDBACK,
        strengths=["You provided a response to the question"],
        improvements=[
            "Describe the situation with more specific context",
            "Explain the actions you took in more detail",
            "Quantify the result with concrete metrics",
        ],
        suggested_points=SuggestedPoints(),
    )


async def grade_response(
    question: str,
    response_text: str,
    highlights: CandidateHighlights | None,
    client: GenerationClient,
) -> GradingResult:
    """Grade a SAR answer. Never raises; failures return the default result."""
    try:
        payload = await client.call(
            prompts.grading_prompt(question, response_text, highlights),
            system_prompt=prompts.GRADING_SYSTEM_PROMPT,
        )
    except GenerationError as exc:
        logger.warning("grading failed, returning default", extra={"extra": {"error": str(exc)}})
        return default_grading_result()

    fallback = default_grading_result()
    suggested = payload.get("suggestedPoints")
    suggested = suggested if isinstance(suggested, dict) else {}
    return GradingResult(
        score=payload.get("score", fallback.score),
        feedback=clean_text(payload.get("feedback")) or fallback.feedback,
        strengths=string_list(payload.get("strengths")) or fallback.strengths,
        improvements=string_list(payload.get("improvements")) or fallback.improvements,
        suggested_points=SuggestedPoints(
            situation=string_list(suggested.get("situation")),
            action=string_list(suggested.get("action")),
            result=string_list(suggested.get("result")),
        ),
    )
