from fastapi import APIRouter, File, Form, UploadFile
from sdkgen.config import MAX_UPLOAD_BYTES
from sdkgen.errors import MalformedInput
from sdkgen.models.schemas import SubmissionResponse, UrlSubmissionRequest
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.services.job_manager import DocumentSubmission, RemoteSpecSubmission, job_manager

logger = get_logger(__name__)
router = APIRouter(prefix="/api/upload", tags=["upload"])

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def _require_provider_name(provider_name: str) -> str:
    provider_name = (provider_name or "").strip()
    if not provider_name:
        raise MalformedInput("Provider name is required", code="MISSING_PROVIDER_NAME")
    return provider_name


@router.post("/pdf", status_code=202, response_model=SubmissionResponse)
@traced("upload_pdf_endpoint")
async def upload_pdf(
    file: UploadFile = File(...),
    provider_name: str = Form("", alias="providerName"),
) -> SubmissionResponse:
    """Accept a PDF and start a document analysis job."""
    provider_name = _require_provider_name(provider_name)

    if file.content_type not in PDF_CONTENT_TYPES:
        raise MalformedInput("Only PDF files are allowed", code="INVALID_FILE_TYPE")

    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise MalformedInput(
            f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
        )
    if not data:
        raise MalformedInput("No file uploaded", code="NO_FILE")

    job_id = job_manager.submit(DocumentSubmission(
        data=data,
        provider_name=provider_name,
        filename=file.filename or "document.pdf",
    ))

    logger.info("PDF upload accepted",
               job_id=job_id,
               filename=file.filename,
               size_bytes=len(data),
               provider_name=provider_name)
    return SubmissionResponse(job_id=job_id, message="PDF uploaded successfully. Processing started.")


@router.post("/url", status_code=202, response_model=SubmissionResponse)
@traced("upload_url_endpoint")
async def upload_url(request: UrlSubmissionRequest) -> SubmissionResponse:
    """Start a remote Swagger/OpenAPI analysis job."""
    provider_name = _require_provider_name(request.provider_name)

    job_id = job_manager.submit(RemoteSpecSubmission(url=request.url, provider_name=provider_name))

    logger.info("Swagger URL accepted", job_id=job_id, url=request.url, provider_name=provider_name)
    return SubmissionResponse(job_id=job_id, message="Swagger URL submitted successfully. Processing started.")
