import asyncio
from fastapi import APIRouter
from fastapi.responses import Response
from sdkgen.errors import JobNotFound, JobNotReady
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.services.job_manager import job_manager
from sdkgen.utils.zip_builder import archive_name, build_sdk_zip

logger = get_logger(__name__)
router = APIRouter(prefix="/api/download", tags=["download"])


@router.get("/{job_id}")
@traced("download_sdk_endpoint")
async def download_sdk(job_id: str) -> Response:
    """Generated SDK packaged as a ZIP archive."""
    record = job_manager.get_result(job_id)
    if record is None:
        raise JobNotFound("Job not found")
    if record.generated_sdk is None:
        raise JobNotReady("SDK not available for this job", code="SDK_NOT_AVAILABLE")

    data = await asyncio.to_thread(build_sdk_zip, record.generated_sdk)
    filename = archive_name(record.generated_sdk)

    logger.info("SDK download", job_id=job_id, filename=filename, size_bytes=len(data))
    return Response(
        content=data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )
