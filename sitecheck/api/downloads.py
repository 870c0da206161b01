"""
Report download endpoints.
"""
import io
import logging

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from sitecheck.core.exceptions import BadRequestError, ReportGenerationError
from sitecheck.schemas.audit import DownloadRequest
from sitecheck.schemas.common import ErrorResponse
from sitecheck.services.report_generator import ExcelReportGenerator, PDFReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/download", tags=["Downloads"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _attachment(content: bytes, media_type: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _require_data(payload: DownloadRequest):
    if payload.results is None or not payload.url:
        raise BadRequestError("Missing required data")


@router.post("/excel", responses=ERROR_RESPONSES)
async def download_excel(payload: DownloadRequest):
    """Download audit results as an Excel workbook."""
    _require_data(payload)

    generator = ExcelReportGenerator()
    try:
        content = await run_in_threadpool(generator.generate, payload.results, payload.url)
    except Exception as e:
        logger.error(f"Error generating Excel file: {e}")
        raise ReportGenerationError("Failed to generate Excel file") from e

    return _attachment(content, generator.media_type, generator.filename)


@router.post("/pdf", responses=ERROR_RESPONSES)
async def download_pdf(payload: DownloadRequest):
    """Download audit results as a PDF."""
    _require_data(payload)
    if not payload.has_category():
        raise BadRequestError("Invalid results structure")

    generator = PDFReportGenerator()
    try:
        content = await run_in_threadpool(generator.generate, payload.results, payload.url)
    except Exception as e:
        logger.error(f"Error generating PDF: {e}")
        raise ReportGenerationError("Failed to generate PDF file") from e

    return _attachment(content, generator.media_type, generator.filename)
