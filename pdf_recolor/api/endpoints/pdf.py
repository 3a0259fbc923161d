import base64
import logging
from typing import Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from ...core.config import settings
from ...core.errors import FormatError, MalformedStream, OutOfRangeColor, RecolorError
from ...core.jobs import InvalidTransition, RecolorJob, job_store
from ...core.pdf_recolorer import PDFRecolorer
from ...core.preview import first_page_pdf, first_page_png
from ...models.schemas import (
    ErrorResponse, InvertMode, JobState, JobStatusResponse, ModeName,
    RecolorResponse, RemapMode, RGBColor
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pdf", tags=["pdf"])


def _build_mode(
    mode: str,
    content_color: Optional[str],
    background_color: Optional[str],
) -> Union[InvertMode, RemapMode]:
    """Turn form fields into a transform mode; raises HTTP 400 on bad input."""
    try:
        mode_name = ModeName(str(mode).strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid mode; use 'invert' or 'remap'")

    if mode_name is ModeName.invert:
        return InvertMode()

    try:
        return RemapMode(
            content_color=RGBColor.from_hex(content_color or settings.default_content_color),
            background_color=RGBColor.from_hex(background_color or settings.default_background_color),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid color: {str(e)}")


async def _read_upload(pdf_file: UploadFile) -> bytes:
    # Validate file type
    if not pdf_file.filename or not any(
        pdf_file.filename.lower().endswith(ext.lower()) for ext in settings.allowed_file_types
    ):
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")
    # Check file size
    if pdf_file.size and pdf_file.size > settings.max_file_size:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds maximum allowed size of {settings.max_file_size} bytes"
        )
    data = await pdf_file.read()
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds maximum allowed size of {settings.max_file_size} bytes"
        )
    return data


def _output_filename(filename: str, mode: Union[InvertMode, RemapMode]) -> str:
    prefix = "inverted" if isinstance(mode, InvertMode) else "recolored"
    return f"{prefix}-{filename}"


def _content_disposition(filename: str) -> str:
    # Same encoding as starlette FileResponse: RFC 5987 form for non-ASCII names
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _error_response(status_code: int, error: RecolorError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=type(error).__name__,
            detail=str(error),
            page_number=error.page_number,
        ).model_dump()
    )


def _get_job(job_id: str) -> RecolorJob:
    job = job_store.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job_id}")
    return job


@router.post("/recolor")
async def recolor_pdf(
    pdf_file: UploadFile = File(...),
    mode: str = Form(settings.default_mode),
    content_color: Optional[str] = Form(None),
    background_color: Optional[str] = Form(None),
    return_json: bool = Query(
        False,
        description="Return a JSON payload (with base64 PDF) instead of a file download"
    ),
):
    """
    Recolor a PDF and return it in the same request

    Args:
        pdf_file: The PDF file to process
        mode: 'invert' or 'remap'
        content_color: Remap content color as #rrggbb
        background_color: Remap background color as #rrggbb
    """
    transform_mode = _build_mode(mode, content_color, background_color)
    source = await _read_upload(pdf_file)

    recolorer = PDFRecolorer(transform_mode)
    try:
        result = recolorer.transform(source)
    except FormatError as e:
        return _error_response(400, e)
    except (MalformedStream, OutOfRangeColor) as e:
        return _error_response(422, e)

    output_filename = _output_filename(pdf_file.filename, transform_mode)
    details = recolorer.processing_details()

    if return_json:
        payload = RecolorResponse(
            success=True,
            message=f"Successfully recolored PDF in {transform_mode.kind} mode",
            filename=output_filename,
            mode=transform_mode.kind,
            processing_details=details,
            processed_pdf_base64=base64.b64encode(result).decode('ascii'),
        )
        return JSONResponse(content=payload.model_dump(mode="json"))

    headers = {
        'Content-Disposition': _content_disposition(output_filename),
        'X-Recolor-Mode': transform_mode.kind,
        'X-Recolor-Pages': str(recolorer.stats.pages_rewritten),
        'X-Recolor-Instructions': str(recolorer.stats.color_instructions),
    }
    return Response(content=result, media_type='application/pdf', headers=headers)


@router.post("/jobs", response_model=JobStatusResponse, status_code=202)
async def create_job(
    background_tasks: BackgroundTasks,
    pdf_file: UploadFile = File(...),
    mode: str = Form(settings.default_mode),
    content_color: Optional[str] = Form(None),
    background_color: Optional[str] = Form(None),
):
    """
    Queue a PDF for recoloring; poll /jobs/{job_id} for progress
    """
    transform_mode = _build_mode(mode, content_color, background_color)
    source = await _read_upload(pdf_file)

    job = job_store.create(pdf_file.filename, source, transform_mode)
    background_tasks.add_task(job_store.run, job.id)
    return job.to_status()


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job(job_id: str):
    """Return state and progress of a job"""
    return _get_job(job_id).to_status()


@router.get("/jobs/{job_id}/result")
async def get_job_result(job_id: str):
    """Download the recolored PDF of a finished job"""
    job = _get_job(job_id)
    if job.state is not JobState.done or job.result is None:
        raise HTTPException(status_code=409, detail=f"Job is {job.state.value}, no result available")

    return Response(
        content=job.result,
        media_type='application/pdf',
        headers={'Content-Disposition': _content_disposition(job.output_filename)},
    )


@router.get("/jobs/{job_id}/preview")
async def get_job_preview(
    job_id: str,
    format: str = Query("pdf", description="Preview format: pdf or png"),
):
    """Return the first page of a finished job's result"""
    job = _get_job(job_id)
    if job.state is not JobState.done or job.result is None:
        raise HTTPException(status_code=409, detail=f"Job is {job.state.value}, no preview available")

    try:
        if format == "png":
            return Response(content=first_page_png(job.result), media_type='image/png')
        if format == "pdf":
            return Response(content=first_page_pdf(job.result), media_type='application/pdf')
    except FormatError as e:
        raise HTTPException(status_code=409, detail=str(e))
    raise HTTPException(status_code=400, detail="Invalid preview format; use 'pdf' or 'png'")


@router.delete("/jobs/{job_id}", status_code=204)
async def delete_job(job_id: str):
    """Discard a job and its stored PDFs"""
    try:
        deleted = job_store.delete(job_id)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job_id}")
    return Response(status_code=204)
