import asyncio
from dataclasses import dataclass, field

from interview_prep.agents.graph import run_prep_pipeline
from interview_prep.core.config import Settings, get_settings
from interview_prep.core.enums import Stage
from interview_prep.core.logging import get_logger
from interview_prep.core.models import JobInputs, PipelineJob, new_id
from interview_prep.services.generation import GenerationClient
from interview_prep.services.job_store import JobStore
from interview_prep.services.page_fetcher import PageFetcher
from interview_prep.services.quality import QualityThresholds

logger = get_logger(__name__)


class CancellationToken:
    """Checked by the pipeline between stages."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class PipelineHandle:
    job_id: str
    task: asyncio.Task
    token: CancellationToken = field(default_factory=CancellationToken)


class PipelineRunner:
    """Starts one background task per submitted job and keeps its handle."""

    def __init__(
        self,
        store: JobStore,
        client: GenerationClient,
        settings: Settings | None = None,
        *,
        fetcher: PageFetcher | None = None,
    ) -> None:
        self.store = store
        self.client = client
        self.settings = settings or get_settings()
        if fetcher is None and self.settings.page_fetch_enabled:
            fetcher = PageFetcher(
                timeout_seconds=self.settings.page_fetch_timeout_seconds,
                max_chars=self.settings.page_text_max_chars,
            )
        self.fetcher = fetcher
        self.thresholds = QualityThresholds.from_settings(self.settings)
        self._handles: dict[str, PipelineHandle] = {}

    def submit(self, inputs: JobInputs, *, user_id: str | None = None) -> PipelineHandle:
        """Register the job and schedule it; must be called inside a running loop."""
        job: PipelineJob = self.store.create(new_id(), inputs, user_id=user_id)
        token = CancellationToken()
        task = asyncio.create_task(self._run(job.id, token), name=f"interview-prep-{job.id}")
        handle = PipelineHandle(job_id=job.id, task=task, token=token)
        self._handles[job.id] = handle
        task.add_done_callback(lambda _: self._handles.pop(job.id, None))
        logger.info("preparation submitted", extra={"extra": {"job_id": job.id}})
        return handle

    def get_handle(self, job_id: str) -> PipelineHandle | None:
        return self._handles.get(job_id)

    async def _run(self, job_id: str, token: CancellationToken) -> None:
        try:
            await run_prep_pipeline(
                self.store,
                self.client,
                job_id=job_id,
                token=token,
                fetcher=self.fetcher,
                thresholds=self.thresholds,
            )
        except Exception as exc:
            logger.exception("preparation crashed", extra={"extra": {"job_id": job_id}})
            self.store.update(job_id, state=Stage.FAILED, error=f"Unexpected error: {exc}", result=None)

    async def shutdown(self) -> None:
        handles = list(self._handles.values())
        for handle in handles:
            handle.token.cancel()
            handle.task.cancel()
        if handles:
            await asyncio.gather(*(handle.task for handle in handles), return_exceptions=True)
