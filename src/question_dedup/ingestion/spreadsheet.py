"""Spreadsheet ingestion: pull questions out of a workbook and write back the unique rows."""

from __future__ import annotations

import asyncio
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from question_dedup.config.constants import CLEANED_SHEET_TITLE, QUESTION_COLUMN_NAMES
from question_dedup.exceptions import IngestionError, PersistenceFailure
from question_dedup.models.domain import BatchResult
from question_dedup.observability.logger import get_logger
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator

logger = get_logger("spreadsheet")


@dataclass
class SheetQuestions:
    header: tuple[Any, ...]
    questions: list[str]
    rows: list[tuple[Any, ...]]  # rows[i] is the source row of questions[i]
    column_index: int


@dataclass
class IngestionOutcome:
    results: list[BatchResult]
    cleaned_filename: str
    persistence_error: str | None = None

    @property
    def persisted(self) -> bool:
        return self.persistence_error is None


def find_question_column(header: tuple[Any, ...]) -> int | None:
    for index, value in enumerate(header):
        if value is not None and str(value).strip().lower() in QUESTION_COLUMN_NAMES:
            return index
    return None


def read_questions(path: str | Path) -> SheetQuestions:
    """Read the first worksheet; the first row must hold a question header."""
    try:
        workbook = openpyxl.load_workbook(filename=str(path), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise IngestionError(f"Could not open workbook: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        all_rows = [tuple(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not any(any(value is not None for value in row) for row in all_rows):
        raise IngestionError("Excel file is empty")

    header = all_rows[0]
    column = find_question_column(header)
    if column is None:
        raise IngestionError(
            "No 'Question' column found in the Excel file. Ensure the file has a "
            "column labeled 'Question', 'Question Text', or similar."
        )

    questions: list[str] = []
    rows: list[tuple[Any, ...]] = []
    for row in all_rows[1:]:
        value = row[column] if column < len(row) else None
        if isinstance(value, str) and value.strip():
            questions.append(value.strip())
            rows.append(row)

    if not questions:
        raise IngestionError("No valid questions found in the Excel file")

    logger.info("spreadsheet_read", rows=len(all_rows) - 1, questions=len(questions), column=column)
    return SheetQuestions(header=header, questions=questions, rows=rows, column_index=column)


def write_cleaned_workbook(
    header: tuple[Any, ...], results: list[BatchResult], output_path: str | Path
) -> Path:
    """Write the header plus the source row of every non-duplicate result."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = CLEANED_SHEET_TITLE
    sheet.append(list(header))
    for result in results:
        if not result.is_duplicate:
            sheet.append(list(result.source_ref))
    output = Path(output_path)
    workbook.save(str(output))
    return output


def cleaned_filename(original_name: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S-%f")
    return f"cleaned_{stamp}_{Path(original_name).name}"


class SpreadsheetIngestor:
    def __init__(self, orchestrator: BatchOrchestrator, output_dir: str) -> None:
        self._orchestrator = orchestrator
        self._output_dir = Path(output_dir)

    async def ingest_file(self, path: str | Path, original_name: str) -> IngestionOutcome:
        sheet = await asyncio.to_thread(read_questions, path)

        persistence_error = None
        try:
            results = await self._orchestrator.process_chunked(sheet.questions, source_refs=sheet.rows)
        except PersistenceFailure as e:
            results = e.results
            persistence_error = str(e)

        self._output_dir.mkdir(parents=True, exist_ok=True)
        name = cleaned_filename(original_name)
        await asyncio.to_thread(write_cleaned_workbook, sheet.header, results, self._output_dir / name)

        duplicates = sum(1 for r in results if r.is_duplicate)
        logger.info(
            "spreadsheet_processed",
            questions=len(results),
            duplicates=duplicates,
            cleaned_file=name,
            persisted=persistence_error is None,
        )
        return IngestionOutcome(
            results=results,
            cleaned_filename=name,
            persistence_error=persistence_error,
        )
