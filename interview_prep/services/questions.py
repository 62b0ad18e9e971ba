from typing import Any

from interview_prep.core.enums import Stage
from interview_prep.core.errors import GenerationError
from interview_prep.core.models import (
    CandidateHighlights,
    CompanyInfo,
    InterviewQuestion,
    InterviewRound,
    JobDetails,
    RoundDescriptor,
    TalkingPoint,
)
from interview_prep.core.outcome import StageOutcome, StepLog
from interview_prep.services import prompts
from interview_prep.services.generation import GenerationClient
from interview_prep.services.normalize import clean_text, string_list

MAX_TALKING_POINTS = 5


def parse_questions(raw: Any, *, existing: list[InterviewQuestion] | None = None) -> list[InterviewQuestion]:
    """Build questions with fresh ids, skipping blanks and repeats of ``existing``."""
    seen = {question.question.lower() for question in existing or []}
    questions = []
    for item in raw if isinstance(raw, list) else []:
        if isinstance(item, dict):
            text = clean_text(item.get("question"))
            points = string_list(item.get("talkingPoints") or item.get("talking_points"), max_items=MAX_TALKING_POINTS)
        else:
            text, points = clean_text(item), []
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        questions.append(
            InterviewQuestion(
                question=text,
                talking_points=[TalkingPoint(text=point) for point in points],
            )
        )
    return questions


async def generate_questions(
    rounds: list[RoundDescriptor],
    details: JobDetails,
    company_info: CompanyInfo,
    highlights: CandidateHighlights,
    client: GenerationClient,
    *,
    min_questions: int = 5,
) -> StageOutcome[list[InterviewRound]]:
    log = StepLog(Stage.QUESTION_GENERATION)
    log.note(f"Generating questions for {len(rounds)} interview rounds.")

    generated: list[InterviewRound] = []
    for descriptor in rounds:
        prompt = prompts.round_questions_prompt(
            descriptor, details, company_info, highlights, min_questions=min_questions
        )
        try:
            payload = await client.call(prompt, required_keys=("questions",))
        except GenerationError as exc:
            raise log.fail(f"Failed to generate questions for {descriptor.name}: {exc}") from exc

        questions = parse_questions(payload.get("questions"))
        generated.append(
            InterviewRound(
                name=descriptor.name,
                focus=descriptor.focus,
                format=descriptor.format,
                questions=questions,
            )
        )
        if questions:
            log.note(f"Generated {len(questions)} questions for {descriptor.name}.")
        else:
            log.note(f"No questions were generated for {descriptor.name}; keeping the round for review.")

    return log.ok(generated)
