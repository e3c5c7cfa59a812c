from __future__ import annotations
import asyncio
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Union
from sdkgen.config import JOB_RETENTION_SECONDS, JOB_SWEEP_INTERVAL
from sdkgen.documents import SpecDocument, fetch_spec, normalize_text
from sdkgen.errors import GeneratorError, InvalidTransition, MalformedInput, SynthesisFailure
from sdkgen.models.schemas import (
    AnalysisResult,
    JobKind,
    JobProgress,
    JobRecord,
    JobStatus,
    ProgressEvent,
)
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.obs.metrics import inc_counter, set_gauge
from sdkgen.obs.prometheus_metrics import prometheus_metrics
from sdkgen.services.analysis_engine import AnalysisEngine
from sdkgen.services.progress_broadcaster import ProgressBroadcaster, progress_broadcaster
from sdkgen.services.sdk_generator import synthesize_sdk
from sdkgen.utils.pdf_extractor import pdf_extractor

logger = get_logger(__name__)

SpecFetcher = Callable[[str], Awaitable[SpecDocument]]

ALLOWED_TRANSITIONS: Dict[JobStatus, set] = {
    JobStatus.PENDING: {JobStatus.ANALYZING, JobStatus.FAILED},
    JobStatus.ANALYZING: {JobStatus.ANALYZING, JobStatus.GENERATING, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.GENERATING: {JobStatus.GENERATING, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


@dataclass
class DocumentSubmission:
    data: bytes
    provider_name: str
    filename: str = "document.pdf"


@dataclass
class RemoteSpecSubmission:
    url: str
    provider_name: str


Submission = Union[DocumentSubmission, RemoteSpecSubmission]


class JobManager:
    """In-memory job table plus the asyncio pipelines that drive each job.

    Every state change is committed under the table lock and then published
    as exactly one ProgressEvent. Readers only ever receive deep copies.
    """

    def __init__(
        self,
        engine: Optional[AnalysisEngine] = None,
        broadcaster: Optional[ProgressBroadcaster] = None,
        fetcher: Optional[SpecFetcher] = None,
        retention_seconds: float = JOB_RETENTION_SECONDS,
    ):
        self.engine = engine or AnalysisEngine()
        self.broadcaster = broadcaster or progress_broadcaster
        self.fetcher = fetcher or fetch_spec
        self.retention_seconds = retention_seconds
        self._jobs: Dict[str, JobRecord] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._lock = threading.RLock()

    # Public API

    def submit(self, submission: Submission) -> str:
        """Register a pending job and schedule its pipeline; must run inside the event loop."""
        loop = asyncio.get_running_loop()

        if isinstance(submission, DocumentSubmission):
            kind, source = JobKind.DOCUMENT, submission.filename
        elif isinstance(submission, RemoteSpecSubmission):
            kind, source = JobKind.REMOTE_SPEC, submission.url
        else:
            raise MalformedInput(f"Unsupported submission type: {type(submission).__name__}")

        now = time.time()
        job_id = uuid.uuid4().hex
        record = JobRecord(
            id=job_id,
            kind=kind,
            status=JobStatus.PENDING,
            progress=0,
            message="Job created",
            provider_name=submission.provider_name,
            source=source,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._jobs[job_id] = record
            active = self._active_count()

        task = loop.create_task(self._run(job_id, submission), name=f"sdk-job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))

        prometheus_metrics.update_active_jobs(active)
        inc_counter("jobs_submitted_total", {"kind": kind.value})
        logger.info("Job submitted",
                   job_id=job_id,
                   kind=kind.value,
                   provider_name=submission.provider_name,
                   source=source)
        return job_id

    def get_status(self, job_id: str) -> Optional[JobProgress]:
        with self._lock:
            record = self._jobs.get(job_id)
            if record is None:
                return None
            return JobProgress(
                job_id=record.id,
                status=record.status,
                progress=record.progress,
                message=record.message,
                error=record.error,
            )

    def get_result(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._jobs.get(job_id)
            return record.model_copy(deep=True) if record is not None else None

    async def wait_for(self, job_id: str, timeout: Optional[float] = None) -> Optional[JobRecord]:
        """Wait until the job's pipeline finishes (or ``timeout`` elapses) and return a snapshot."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait({task}, timeout=timeout)
        return self.get_result(job_id)

    def list_jobs(self, limit: int = 50) -> List[JobRecord]:
        with self._lock:
            records = sorted(self._jobs.values(), key=lambda r: r.created_at, reverse=True)
            return [record.model_copy(deep=True) for record in records[:limit]]

    def sweep_expired(self, now: Optional[float] = None) -> int:
        """Evict terminal jobs whose last update is older than the retention window."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                job_id for job_id, record in self._jobs.items()
                if record.status.is_terminal and now - record.updated_at >= self.retention_seconds
            ]
            for job_id in expired:
                del self._jobs[job_id]

        if expired:
            logger.info("Expired jobs evicted", count=len(expired))
        return len(expired)

    async def run_sweeper(self, interval: float = JOB_SWEEP_INTERVAL) -> None:
        while True:
            await asyncio.sleep(interval)
            self.sweep_expired()

    async def shutdown(self) -> None:
        in_flight = list(self._tasks.items())
        for _, task in in_flight:
            task.cancel()
        if in_flight:
            await asyncio.gather(*(task for _, task in in_flight), return_exceptions=True)
            # tasks cancelled before their first step never reach _run's handler
            for job_id, _ in in_flight:
                self._fail(job_id, "Job cancelled")
            logger.info("In-flight jobs cancelled", count=len(in_flight))

    # State machine

    def _active_count(self) -> int:
        return sum(1 for record in self._jobs.values() if not record.status.is_terminal)

    def _transition(self, job_id: str, status: JobStatus, progress: int, message: str,
                    error: Optional[str] = None, **fields) -> ProgressEvent:
        with self._lock:
            record = self._jobs.get(job_id)
            if record is None:
                raise InvalidTransition(f"Job {job_id} not found")
            if status not in ALLOWED_TRANSITIONS[record.status]:
                raise InvalidTransition(
                    f"Invalid transition {record.status.value} -> {status.value} for job {job_id}"
                )
            if status == JobStatus.FAILED:
                progress = 0
            elif progress < record.progress:
                raise InvalidTransition(
                    f"Progress cannot decrease ({record.progress} -> {progress}) for job {job_id}"
                )

            record.status = status
            record.progress = progress
            record.message = message
            record.error = error
            for key, value in fields.items():
                setattr(record, key, value)
            record.updated_at = time.time()

            event = ProgressEvent(
                job_id=job_id,
                status=status,
                progress=progress,
                message=message,
                error=error,
                timestamp=record.updated_at,
            )
            active = self._active_count()
            duration = record.updated_at - record.created_at
            kind = record.kind

        self.broadcaster.publish(event)
        prometheus_metrics.update_active_jobs(active)
        set_gauge("active_jobs", active)
        if status.is_terminal:
            prometheus_metrics.record_job(status.value, kind.value, duration)
        logger.debug("Job transition",
                     job_id=job_id,
                     status=status.value,
                     progress=progress,
                     job_message=message)
        return event

    def _fail(self, job_id: str, error: str) -> None:
        with self._lock:
            record = self._jobs.get(job_id)
            if record is None or record.status.is_terminal:
                return
        self._transition(job_id, JobStatus.FAILED, 0, f"Processing failed: {error}", error=error)

    # Pipelines

    async def _run(self, job_id: str, submission: Submission) -> None:
        try:
            if isinstance(submission, DocumentSubmission):
                await self._run_document(job_id, submission)
            else:
                await self._run_remote_spec(job_id, submission)
        except asyncio.CancelledError:
            logger.warning("Job cancelled", job_id=job_id)
            self._fail(job_id, "Job cancelled")
            raise
        except GeneratorError as e:
            logger.error("Job failed", job_id=job_id, error=e.message, error_code=e.code)
            self._fail(job_id, e.message)
        except Exception as e:
            logger.error("Job failed unexpectedly", exc_info=True, job_id=job_id, error=str(e))
            self._fail(job_id, str(e) or type(e).__name__)

    @traced("document_job")
    async def _run_document(self, job_id: str, submission: DocumentSubmission) -> None:
        self._transition(job_id, JobStatus.ANALYZING, 10, "Validating PDF file")
        if not pdf_extractor.has_pdf_signature(submission.data):
            raise MalformedInput("Invalid PDF file format", code="INVALID_PDF")

        self._transition(job_id, JobStatus.ANALYZING, 20, "Extracting and analyzing PDF content")
        document = await asyncio.to_thread(normalize_text, submission.data)

        self._transition(job_id, JobStatus.ANALYZING, 50, f"Performing AI analysis on {document.pages} pages")
        analysis = await self.engine.analyze(document, submission.provider_name)

        await self._finish(job_id, analysis, submission.provider_name)

    @traced("remote_spec_job")
    async def _run_remote_spec(self, job_id: str, submission: RemoteSpecSubmission) -> None:
        self._transition(job_id, JobStatus.ANALYZING, 10, "Fetching Swagger/OpenAPI documentation")
        document = await self.fetcher(submission.url)

        self._transition(job_id, JobStatus.ANALYZING, 40,
                         f"Found {document.version} spec with {len(document.endpoints)} endpoints")
        self._transition(job_id, JobStatus.ANALYZING, 50, "Performing AI analysis on API specification")
        analysis = await self.engine.analyze(document, submission.provider_name)

        await self._finish(job_id, analysis, submission.provider_name)

    async def _finish(self, job_id: str, analysis: AnalysisResult, provider_name: str) -> None:
        self._transition(
            job_id, JobStatus.ANALYZING, 70,
            f"Analysis completed: {analysis.confidence}% confidence, {analysis.provider_type.value} provider",
            analysis=analysis,
        )

        if not analysis.is_viable:
            issues = ", ".join(analysis.issues) or "none reported"
            self._transition(job_id, JobStatus.COMPLETED, 100,
                             f"Analysis completed - SDK generation not viable. Issues: {issues}")
            logger.info("Job completed without SDK", job_id=job_id, confidence=analysis.confidence)
            return

        self._transition(job_id, JobStatus.GENERATING, 80, "Generating TypeScript SDK")
        try:
            sdk = await asyncio.to_thread(synthesize_sdk, analysis, provider_name)
        except Exception as e:
            raise SynthesisFailure(f"SDK generation failed: {e}") from e

        self._transition(job_id, JobStatus.COMPLETED, 100,
                         f"SDK generated successfully for {provider_name}",
                         generated_sdk=sdk)
        logger.info("Job completed", job_id=job_id, files=len(sdk.files))


# Global job manager instance
job_manager = JobManager()
