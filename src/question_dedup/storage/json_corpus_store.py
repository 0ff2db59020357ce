"""Question corpus stored as a single JSON document: ``{"questions": [...]}``."""

from __future__ import annotations

import asyncio
import json
import os
from datetime import datetime, timezone
from pathlib import Path

from question_dedup.exceptions import PersistenceFailure
from question_dedup.models.domain import QuestionRecord
from question_dedup.observability.logger import get_logger

logger = get_logger("json_corpus_store")


class JSONCorpusStore:
    """Each save rewrites the whole file through a temp file and ``os.replace``."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    async def initialize(self) -> None:
        if not self._path.exists():
            await self.reset()

    async def load(self) -> list[QuestionRecord]:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, records: list[QuestionRecord]) -> None:
        await asyncio.to_thread(self._write_sync, records)

    async def reset(self) -> None:
        await asyncio.to_thread(self._write_sync, [])

    def _load_sync(self) -> list[QuestionRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceFailure(f"Failed to read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceFailure(f"{self._path} does not contain a questions object")
        questions = data.get("questions", [])
        if not isinstance(questions, list):
            raise PersistenceFailure(f"{self._path}: \"questions\" must be a list")

        records: list[QuestionRecord] = []
        for item in questions:
            if not isinstance(item, dict) or not isinstance(item.get("text"), str):
                logger.warning("corpus_entry_skipped", path=str(self._path))
                continue
            records.append(
                QuestionRecord(
                    id=str(item.get("id", "")),
                    text=item["text"],
                    created_at=_parse_timestamp(item.get("createdAt")),
                )
            )
        return records

    def _write_sync(self, records: list[QuestionRecord]) -> None:
        payload = {
            "questions": [
                {"id": r.id, "text": r.text, "createdAt": r.created_at.isoformat()}
                for r in records
            ]
        }
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceFailure(f"Failed to write {self._path}: {e}") from e


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            pass
    # Files written by older versions carry no timestamp
    return datetime.fromtimestamp(0, tz=timezone.utc)
