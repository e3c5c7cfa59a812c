from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from sdkgen.config import HEARTBEAT_INTERVAL
from sdkgen.errors import JobNotFound, JobNotReady
from sdkgen.models.schemas import JobResultResponse, JobStatus, JobStatusResponse, ProgressEvent
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.services.job_manager import job_manager
from sdkgen.utils.sse import create_sse_close, create_sse_heartbeat, create_sse_message

logger = get_logger(__name__)
router = APIRouter(prefix="/api/analysis", tags=["analysis"])


def is_replayed_event(event: ProgressEvent, last_progress: int) -> bool:
    """True for events already covered by the snapshot sent on connect."""
    # Pipeline checkpoints carry strictly increasing progress
    return event.status != JobStatus.FAILED and event.progress <= last_progress


@router.get("/{job_id}", response_model=JobStatusResponse)
@traced("job_status_endpoint")
async def get_job_status(job_id: str) -> JobStatusResponse:
    status = job_manager.get_status(job_id)
    if status is None:
        raise JobNotFound("Job not found")

    return JobStatusResponse(
        job_id=status.job_id,
        status=status.status,
        progress=status.progress,
        message=status.message,
        error=status.error,
    )


@router.get("/{job_id}/result", response_model=JobResultResponse)
@traced("job_result_endpoint")
async def get_job_result(job_id: str) -> JobResultResponse:
    """Analysis and generated SDK of a completed job."""
    record = job_manager.get_result(job_id)
    if record is None:
        raise JobNotFound("Job not found")
    if record.status != JobStatus.COMPLETED:
        raise JobNotReady("Job not completed yet")

    return JobResultResponse(
        job_id=record.id,
        analysis=record.analysis,
        generated_sdk=record.generated_sdk,
    )


@router.get("/{job_id}/stream")
async def stream_job_progress(job_id: str, request: Request) -> StreamingResponse:
    """
    Stream job progress as Server-Sent Events.

    The current snapshot is sent first, followed by live events for this job.
    The stream closes after a terminal status; comment heartbeats keep idle
    connections open.
    """
    if job_manager.get_status(job_id) is None:
        raise JobNotFound("Job not found")

    logger.info("SSE stream requested", job_id=job_id)

    async def event_generator():
        subscription = job_manager.broadcaster.subscribe()
        try:
            snapshot = job_manager.get_status(job_id)
            if snapshot is None:
                yield create_sse_close()
                return

            yield create_sse_message(snapshot.model_dump(by_alias=True, mode="json"))
            if snapshot.status.is_terminal:
                yield create_sse_close()
                return

            last_progress = snapshot.progress
            while True:
                if await request.is_disconnected():
                    logger.info("SSE client disconnected", job_id=job_id)
                    break

                event = await subscription.next_event(timeout=HEARTBEAT_INTERVAL)
                if event is None:
                    yield create_sse_heartbeat()
                    continue
                if event.job_id != job_id:
                    continue
                if is_replayed_event(event, last_progress):
                    continue

                last_progress = event.progress
                yield create_sse_message(event.model_dump(by_alias=True, mode="json"))
                if event.status.is_terminal:
                    yield create_sse_close()
                    break
        finally:
            subscription.close()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
