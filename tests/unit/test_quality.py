import asyncio

from interview_prep.core.enums import OutcomeStatus
from interview_prep.core.models import (
    Artifact,
    CandidateHighlights,
    CompanyInfo,
    InterviewQuestion,
    InterviewRound,
    JobDetails,
    TalkingPoint,
)
from interview_prep.services.quality import QualityThresholds, review_artifact


def _question(n: int, points: int = 3) -> InterviewQuestion:
    return InterviewQuestion(
        question=f"Question {n}",
        talking_points=[TalkingPoint(text=f"Point {n}.{i}") for i in range(points)],
    )


def _complete_artifact() -> Artifact:
    return Artifact(
        job_details=JobDetails(company="Acme Corp", title="Senior Backend Engineer"),
        company_info=CompanyInfo(
            description="Acme Corp builds payments infrastructure.",
            culture=["Ownership"],
            business_focus=["Payments"],
            team_info=["Platform team"],
            role_details=["Owns the ledger"],
        ),
        candidate_highlights=CandidateHighlights(
            relevant_points=["Reduced latency by 40% at Acme Corp", "Kafka pipelines", "Led 5 engineers"],
            gap_areas=["Kubernetes", "Go"],
        ),
        interview_rounds=[
            InterviewRound(name=name, questions=[_question(i) for i in range(5)])
            for name in ("Initial Screen", "Technical Assessment")
        ],
    )


def _ids(artifact: Artifact) -> list[str]:
    ids = []
    for round_ in artifact.interview_rounds:
        ids.append(round_.id)
        for question in round_.questions:
            ids.append(question.id)
            ids.extend(point.id for point in question.talking_points)
    return ids


def test_review_is_idempotent_on_satisfying_artifact(make_client):
    client = make_client()
    artifact = _complete_artifact()

    first = asyncio.run(review_artifact(artifact, client))
    second = asyncio.run(review_artifact(first.data, client))

    assert client.provider.calls == []
    assert first.status == OutcomeStatus.OK
    assert _ids(first.data) == _ids(artifact)
    assert _ids(second.data) == _ids(artifact)
    assert second.data == first.data


def test_review_appends_questions_and_preserves_ids(make_client):
    client = make_client()
    artifact = _complete_artifact()
    short_round = artifact.interview_rounds[0]
    short_round.questions = short_round.questions[:2]
    original_ids = [q.id for q in short_round.questions]

    outcome = asyncio.run(review_artifact(artifact, client))

    repaired = outcome.data.interview_rounds[0]
    assert client.provider.calls == ["repair_round"]
    assert len(repaired.questions) == 5
    assert [q.id for q in repaired.questions[:2]] == original_ids
    assert len(artifact.interview_rounds[0].questions) == 2


def test_review_tops_up_talking_points_and_highlights(make_client):
    client = make_client()
    artifact = _complete_artifact()
    artifact.candidate_highlights.relevant_points = ["Reduced latency by 40% at Acme Corp"]
    question = artifact.interview_rounds[1].questions[0]
    question.talking_points = question.talking_points[:1]
    kept_point_id = question.talking_points[0].id

    outcome = asyncio.run(review_artifact(artifact, client))

    repaired = outcome.data.interview_rounds[1].questions[0]
    assert sorted(client.provider.calls) == ["repair_highlights", "repair_talking_points"]
    assert repaired.talking_points[0].id == kept_point_id
    assert len(repaired.talking_points) == 3
    points = outcome.data.candidate_highlights.relevant_points
    assert points[0] == "Reduced latency by 40% at Acme Corp"
    assert len(points) == 3


def test_review_fills_missing_company_sections(make_client):
    client = make_client()
    artifact = _complete_artifact()
    artifact.company_info.team_info = []

    outcome = asyncio.run(review_artifact(artifact, client))

    assert client.provider.calls == ["repair_company_info"]
    assert outcome.data.company_info.team_info == ["Cross-functional team"]
    assert outcome.data.company_info.culture == ["Ownership"]


def test_failed_repairs_fall_back_to_structural_guard(make_client):
    client = make_client(
        {
            "repair_round": RuntimeError("model down"),
            "repair_talking_points": RuntimeError("model down"),
        }
    )
    artifact = _complete_artifact()
    artifact.interview_rounds[0].questions = []
    artifact.interview_rounds[1].questions[0].talking_points = []

    outcome = asyncio.run(review_artifact(artifact, client))

    assert outcome.degraded
    for round_ in outcome.data.interview_rounds:
        assert round_.questions
        assert all(question.talking_points for question in round_.questions)
    guard_question = outcome.data.interview_rounds[0].questions[0]
    assert "Initial Screen" in guard_question.question
    assert guard_question.talking_points[0].text == "Reduced latency by 40% at Acme Corp"
    assert any("model down" in step.note for step in outcome.steps)


def test_thresholds_are_configurable(make_client):
    client = make_client()
    artifact = _complete_artifact()

    outcome = asyncio.run(
        review_artifact(artifact, client, QualityThresholds(min_questions_per_round=6))
    )

    assert client.provider.calls == ["repair_round", "repair_round"]
    assert all(len(r.questions) == 6 for r in outcome.data.interview_rounds)
