"""Quality review of an assembled artifact.

Each deficient section gets at most one scoped repair call. Repairs only
append: existing items and their ids are never replaced. A structural guard
runs last so every round has a question and every question a talking point.
"""

from dataclasses import dataclass

from interview_prep.core.config import Settings
from interview_prep.core.enums import Stage
from interview_prep.core.errors import GenerationError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import Artifact, InterviewQuestion, InterviewRound, TalkingPoint
from interview_prep.core.outcome import StageOutcome, StepLog
from interview_prep.services import prompts
from interview_prep.services.generation import GenerationClient
from interview_prep.services.normalize import merge_unique, string_list
from interview_prep.services.questions import MAX_TALKING_POINTS, parse_questions

logger = get_logger(__name__)

COMPANY_LIST_FIELDS = {
    "culture": "culture",
    "business_focus": "businessFocus",
    "team_info": "teamInfo",
    "role_details": "roleDetails",
}

GENERIC_TALKING_POINTS = (
    "Describe the situation and your specific responsibility",
    "Explain the actions you took and why",
    "Quantify the result and what you learned",
)


@dataclass(frozen=True)
class QualityThresholds:
    min_relevant_points: int = 3
    min_gap_areas: int = 2
    min_questions_per_round: int = 5
    min_talking_points: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "QualityThresholds":
        return cls(
            min_relevant_points=settings.min_relevant_points,
            min_gap_areas=settings.min_gap_areas,
            min_questions_per_round=settings.min_questions_per_round,
            min_talking_points=settings.min_talking_points,
        )


class _Review:
    def __init__(self, artifact: Artifact, client: GenerationClient, thresholds: QualityThresholds, resume_text: str):
        self.artifact = artifact
        self.client = client
        self.thresholds = thresholds
        self.resume_text = resume_text
        self.log = StepLog(Stage.QUALITY_CHECK)
        self.failed_repairs = 0
        self.guarded = 0

    async def company_info(self) -> None:
        info = self.artifact.company_info
        missing = [alias for attr, alias in COMPANY_LIST_FIELDS.items() if not getattr(info, attr)]
        if not missing:
            return
        prompt = prompts.repair_company_info_prompt(self.artifact.job_details, info, missing)
        try:
            payload = await self.client.call(prompt)
        except GenerationError as exc:
            self._repair_failed(f"Could not fill missing company sections ({', '.join(missing)}): {exc}")
            return
        filled = []
        for attr, alias in COMPANY_LIST_FIELDS.items():
            if alias in missing:
                extra = string_list(payload.get(alias))
                if extra:
                    setattr(info, attr, merge_unique(getattr(info, attr), extra))
                    filled.append(alias)
        self.log.note(f"Filled company sections: {', '.join(filled) or 'none'}.")

    async def highlights(self) -> None:
        highlights = self.artifact.candidate_highlights
        needed_points = max(0, self.thresholds.min_relevant_points - len(highlights.relevant_points))
        needed_gaps = max(0, self.thresholds.min_gap_areas - len(highlights.gap_areas))
        if not needed_points and not needed_gaps:
            return
        prompt = prompts.repair_highlights_prompt(
            self.artifact.job_details,
            highlights,
            self.resume_text,
            needed_points=needed_points,
            needed_gaps=needed_gaps,
        )
        try:
            payload = await self.client.call(prompt)
        except GenerationError as exc:
            self._repair_failed(f"Could not add candidate highlights: {exc}")
            return
        before = (len(highlights.relevant_points), len(highlights.gap_areas))
        if needed_points:
            highlights.relevant_points = merge_unique(
                highlights.relevant_points, string_list(payload.get("relevantPoints"))
            )
        if needed_gaps:
            highlights.gap_areas = merge_unique(highlights.gap_areas, string_list(payload.get("gapAreas")))
        self.log.note(
            f"Added {len(highlights.relevant_points) - before[0]} relevant points and "
            f"{len(highlights.gap_areas) - before[1]} gap areas."
        )

    async def round_questions(self, round_: InterviewRound) -> None:
        needed = self.thresholds.min_questions_per_round - len(round_.questions)
        if needed <= 0:
            return
        prompt = prompts.repair_round_prompt(
            round_, self.artifact.job_details, self.artifact.candidate_highlights, needed=needed
        )
        try:
            payload = await self.client.call(prompt, required_keys=("questions",))
        except GenerationError as exc:
            self._repair_failed(f"Could not add questions to {round_.name}: {exc}")
            return
        added = parse_questions(payload.get("questions"), existing=round_.questions)
        round_.questions.extend(added)
        self.log.note(f"Added {len(added)} questions to {round_.name}.")

    async def talking_points(self, round_: InterviewRound, question: InterviewQuestion) -> None:
        needed = self.thresholds.min_talking_points - len(question.talking_points)
        if needed <= 0:
            return
        prompt = prompts.repair_talking_points_prompt(
            round_, question, self.artifact.candidate_highlights, needed=needed
        )
        try:
            payload = await self.client.call(prompt, required_keys=("talkingPoints",))
        except GenerationError as exc:
            self._repair_failed(f"Could not add talking points in {round_.name}: {exc}")
            return
        existing = [point.text for point in question.talking_points]
        room = max(0, MAX_TALKING_POINTS - len(existing))
        fresh = merge_unique(existing, string_list(payload.get("talkingPoints")))[len(existing):][:room]
        question.talking_points.extend(TalkingPoint(text=text) for text in fresh)
        if fresh:
            self.log.note(f"Added {len(fresh)} talking points to a {round_.name} question.")

    def structural_guard(self) -> None:
        evidence = self.artifact.candidate_highlights.relevant_points[:3] or list(GENERIC_TALKING_POINTS)
        for round_ in self.artifact.interview_rounds:
            if not round_.questions:
                round_.questions.append(
                    InterviewQuestion(
                        question=f"Walk us through the experience that best prepares you for the {round_.name}.",
                        talking_points=[TalkingPoint(text=text) for text in evidence],
                    )
                )
                self.guarded += 1
            for question in round_.questions:
                if not question.talking_points:
                    question.talking_points.extend(TalkingPoint(text=text) for text in evidence)
                    self.guarded += 1
        if self.guarded:
            self.log.note(f"Filled {self.guarded} empty sections with standard preparation content.")

    def _repair_failed(self, message: str) -> None:
        self.failed_repairs += 1
        logger.warning("quality repair failed", extra={"extra": {"message": message}})
        self.log.note(message)


async def review_artifact(
    artifact: Artifact,
    client: GenerationClient,
    thresholds: QualityThresholds | None = None,
    *,
    resume_text: str = "",
) -> StageOutcome[Artifact]:
    """Top up deficient sections of ``artifact``; the input is never mutated."""
    review = _Review(artifact.model_copy(deep=True), client, thresholds or QualityThresholds(), resume_text)
    review.log.note("Reviewing the assembled preparation for completeness.")

    await review.company_info()
    await review.highlights()
    for round_ in review.artifact.interview_rounds:
        await review.round_questions(round_)
    for round_ in review.artifact.interview_rounds:
        for question in round_.questions:
            await review.talking_points(round_, question)
    review.structural_guard()

    if review.failed_repairs or review.guarded:
        review.log.note("Quality check finished with some sections below target.")
        return review.log.degraded(review.artifact)
    review.log.note("Quality check passed.")
    return review.log.ok(review.artifact)
