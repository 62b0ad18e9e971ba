import argparse
import asyncio
import json
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from interview_prep.agents.runner import PipelineRunner
from interview_prep.core.config import get_settings
from interview_prep.core.logging import setup_logging
from interview_prep.core.models import JobInputs
from interview_prep.db.base import Base
from interview_prep.db.session import get_session_factory
from interview_prep.services.generation import GenerationClient, build_llm_provider
from interview_prep.services.job_store import JobStore
from interview_prep.services.resume_text import extract_resume_text


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one interview preparation end to end")
    parser.add_argument("--resume", required=True, help="Path to a .pdf, .docx or .txt resume")
    parser.add_argument("--job-url", required=True, help="Job posting URL")
    parser.add_argument("--linkedin-url", default=None, help="Optional LinkedIn URL")
    parser.add_argument(
        "--sqlite",
        default=None,
        help="Write to this SQLite file instead of DATABASE_URL (tables are created)",
    )
    return parser.parse_args()


async def run(args: argparse.Namespace) -> None:
    settings = get_settings()
    if args.sqlite:
        engine = create_engine(f"sqlite:///{args.sqlite}")
        Base.metadata.create_all(engine)
        session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    else:
        session_factory = get_session_factory()

    path = Path(args.resume)
    resume_text = extract_resume_text(path.read_bytes(), filename=path.name)

    store = JobStore(session_factory, settings)
    runner = PipelineRunner(store, GenerationClient(build_llm_provider(settings)), settings)
    handle = runner.submit(
        JobInputs(job_url=args.job_url, linkedin_url=args.linkedin_url, resume_text=resume_text)
    )
    await handle.task

    job = store.get(handle.job_id)
    print(f"Preparation {job.id}: {job.status.value}")
    for step in job.reasoning_log:
        print(f"  [{step.stage_name}] {step.note}")
    if job.error:
        print(f"Error: {job.error}")
    if job.result:
        print(json.dumps(job.result.model_dump(mode="json", by_alias=True, exclude={"reasoning_log"}), indent=2))


def main() -> None:
    setup_logging()
    asyncio.run(run(parse_args()))


if __name__ == "__main__":
    main()
