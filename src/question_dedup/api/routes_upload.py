"""Spreadsheet upload and cleaned-file download endpoints."""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from starlette.background import BackgroundTask

from question_dedup.api.dependencies import get_ingestor, get_settings
from question_dedup.config.constants import ALLOWED_UPLOAD_SUFFIXES
from question_dedup.config.settings import Settings
from question_dedup.exceptions import IngestionError
from question_dedup.ingestion.spreadsheet import SpreadsheetIngestor
from question_dedup.models.schemas import BatchStats, QuestionResultSchema, UploadResponse

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/upload", response_model=UploadResponse)
async def upload(
    file: UploadFile,
    ingestor: SpreadsheetIngestor = Depends(get_ingestor),
    settings: Settings = Depends(get_settings),
):
    start = time.monotonic()
    original_name = file.filename or "upload.xlsx"
    suffix = Path(original_name).suffix.lower()
    if suffix not in ALLOWED_UPLOAD_SUFFIXES:
        raise HTTPException(status_code=400, detail="Only Excel files are allowed (.xlsx)")

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")

    # Save uploaded file to temp location
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=settings.uploads_dir) as tmp:
        tmp.write(content)
        tmp_path = tmp.name

    try:
        outcome = await ingestor.ingest_file(tmp_path, original_name)
    except IngestionError as e:
        raise HTTPException(status_code=400, detail=f"Error processing Excel file: {e}")
    finally:
        Path(tmp_path).unlink(missing_ok=True)

    processing_time = f"{time.monotonic() - start:.3f} seconds"
    body = UploadResponse(
        success=outcome.persisted,
        persisted=outcome.persisted,
        error=outcome.persistence_error,
        results=[QuestionResultSchema.from_result(r) for r in outcome.results],
        cleaned_file_path=outcome.cleaned_filename,
        stats=BatchStats.from_results(outcome.results, processing_time=processing_time),
    )
    if not outcome.persisted:
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", by_alias=True))
    return body


@router.get("/download/{filename}")
async def download(filename: str, settings: Settings = Depends(get_settings)):
    if Path(filename).name != filename or not filename.startswith("cleaned_"):
        raise HTTPException(status_code=404, detail="File not found")

    file_path = Path(settings.uploads_dir) / filename
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    # Cleaned files are single-use
    return FileResponse(
        file_path,
        media_type=XLSX_MEDIA_TYPE,
        filename=filename,
        background=BackgroundTask(file_path.unlink, missing_ok=True),
    )
