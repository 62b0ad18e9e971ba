from interview_prep.core.enums import Stage
from interview_prep.core.errors import GenerationError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import (
    CandidateHighlights,
    ExperienceEntry,
    JobDetails,
    JobInsights,
    ProfileAnalysis,
)
from interview_prep.core.outcome import StageOutcome, StepLog
from interview_prep.services import prompts
from interview_prep.services.generation import GenerationClient
from interview_prep.services.normalize import clean_text, merge_unique, string_list
from interview_prep.services.resume_text import METRIC_RE, lines_mentioning, metric_lines

logger = get_logger(__name__)

MAX_ANCHORED_METRICS = 3


def find_skill_evidence(resume_text: str, skills: list[str]) -> dict[str, list[str]]:
    """Map each skill to the résumé lines that mention it, verbatim."""
    evidence: dict[str, list[str]] = {}
    for skill in skills:
        hits = lines_mentioning(resume_text, skill)
        if hits:
            evidence[skill] = hits
    return evidence


def _experiences(raw) -> list[ExperienceEntry]:
    entries = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        entry = ExperienceEntry(
            title=clean_text(item.get("title"), max_len=200),
            company=clean_text(item.get("company"), max_len=200),
            period=clean_text(item.get("period") or item.get("duration"), max_len=100),
            achievements=string_list(item.get("achievements")),
            evidence=clean_text(item.get("evidence")),
        )
        if entry.title or entry.company:
            entries.append(entry)
    return entries


async def analyze_profile(
    resume_text: str,
    linkedin_url: str | None,
    required_skills: list[str],
    client: GenerationClient,
) -> StageOutcome[ProfileAnalysis]:
    log = StepLog(Stage.PROFILE_ANALYSIS)
    log.note("Analyzing the resume to build a structured candidate profile.")

    try:
        payload = await client.call(prompts.profile_analysis_prompt(resume_text), required_keys=("summary",))
    except GenerationError as exc:
        raise log.fail(f"Failed to analyze candidate profile: {exc}") from exc

    profile = ProfileAnalysis(
        summary=clean_text(payload.get("summary")),
        experiences=_experiences(payload.get("experiences")),
        skills=string_list(payload.get("skills")),
    )
    log.note(f"Identified {len(profile.experiences)} experiences and {len(profile.skills)} skills.")

    evidence = find_skill_evidence(resume_text, merge_unique(required_skills, profile.skills))
    profile = profile.model_copy(update={"skill_evidence": evidence})
    matched = [skill for skill in required_skills if skill in evidence]
    log.note(f"Found resume evidence for {len(matched)} of {len(required_skills)} required skills.")

    if linkedin_url:
        try:
            extra = await client.call(prompts.linkedin_profile_prompt(linkedin_url))
            profile = profile.model_copy(update={"linkedin_notes": clean_text(extra.get("notes")) or None})
            log.note("Added LinkedIn profile context.", linkedin_url)
        except GenerationError as exc:
            log.note(f"LinkedIn profile unavailable ({exc}); continuing with the resume only.", linkedin_url)

    return log.ok(profile)


def _uncovered_skills(details: JobDetails, profile: ProfileAnalysis) -> list[str]:
    return [skill for skill in details.required_skills if skill not in profile.skill_evidence]


def _anchor_metrics(points: list[str], metrics: list[str]) -> list[str]:
    """Append metric-bearing résumé lines whose figures no relevant point mentions yet."""
    anchored = list(points)
    added = 0
    for line in metrics:
        if added >= MAX_ANCHORED_METRICS:
            break
        figures = METRIC_RE.findall(line)
        if figures and not any(figure in point for figure in figures for point in anchored):
            anchored.append(line)
            added += 1
    return anchored


def fallback_highlights(resume_text: str, details: JobDetails, profile: ProfileAnalysis) -> CandidateHighlights:
    metrics = metric_lines(resume_text)
    gaps = [f"Limited resume evidence of {skill}" for skill in _uncovered_skills(details, profile)]
    return CandidateHighlights(
        relevant_points=metrics,
        gap_areas=gaps,
        specific_metrics=metrics,
        suggested_talking_points=[],
    )


async def generate_highlights(
    resume_text: str,
    details: JobDetails,
    insights: JobInsights,
    profile: ProfileAnalysis,
    client: GenerationClient,
) -> StageOutcome[CandidateHighlights]:
    log = StepLog(Stage.HIGHLIGHT_GENERATION)
    log.note(f"Matching the candidate profile against the {details.title or 'target'} role.")

    try:
        payload = await client.call(
            prompts.highlights_prompt(resume_text, details, insights, profile),
            required_keys=("relevantPoints", "gapAreas"),
        )
    except GenerationError as exc:
        logger.warning("highlight generation degraded", extra={"extra": {"error": str(exc)}})
        log.note(f"Highlight generation unavailable ({exc}); using resume metrics and skill coverage instead.")
        return log.degraded(fallback_highlights(resume_text, details, profile))

    metrics = metric_lines(resume_text)
    highlights = CandidateHighlights(
        relevant_points=_anchor_metrics(string_list(payload.get("relevantPoints")), metrics),
        gap_areas=string_list(payload.get("gapAreas")),
        specific_metrics=string_list(payload.get("specificMetrics")) or metrics,
        suggested_talking_points=string_list(payload.get("suggestedTalkingPoints")),
    )

    if not highlights.gap_areas:
        uncovered = _uncovered_skills(details, profile)
        highlights = highlights.model_copy(
            update={"gap_areas": [f"Limited resume evidence of {skill}" for skill in uncovered]}
        )

    log.note(
        f"Found {len(highlights.relevant_points)} relevant points and {len(highlights.gap_areas)} gap areas.",
    )
    if not highlights.relevant_points or not highlights.gap_areas:
        log.note("Highlights are thin; the quality check will top them up.")
        return log.degraded(highlights)
    return log.ok(highlights)
