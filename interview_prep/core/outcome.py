from dataclasses import dataclass, field
from typing import Generic, TypeVar

from interview_prep.core.enums import STAGE_LABELS, OutcomeStatus, Stage
from interview_prep.core.models import ReasoningStep

T = TypeVar("T")


@dataclass
class StageOutcome(Generic[T]):
    """Result of a stage that did not fail fatally.

    ``DEGRADED`` means ``data`` came from a fixed fallback rather than from a
    successful generation call.
    """

    status: OutcomeStatus
    data: T
    steps: list[ReasoningStep] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.status == OutcomeStatus.DEGRADED


class StageFailure(Exception):
    def __init__(self, stage: Stage, message: str, steps: list[ReasoningStep] | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.steps = steps or []


class StepLog:
    """Collects reasoning steps for one stage."""

    def __init__(self, stage: Stage) -> None:
        self.stage = stage
        self.steps: list[ReasoningStep] = []

    def note(self, note: str, *sources: str) -> None:
        self.steps.append(
            ReasoningStep(
                stage_name=STAGE_LABELS[self.stage],
                note=note,
                sources_consulted=[source for source in sources if source],
            )
        )

    def ok(self, data: T) -> StageOutcome[T]:
        return StageOutcome(status=OutcomeStatus.OK, data=data, steps=self.steps)

    def degraded(self, data: T) -> StageOutcome[T]:
        return StageOutcome(status=OutcomeStatus.DEGRADED, data=data, steps=self.steps)

    def fail(self, message: str) -> StageFailure:
        self.note(message)
        return StageFailure(self.stage, message, self.steps)
