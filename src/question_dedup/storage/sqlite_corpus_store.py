"""SQLite-backed question corpus."""

from __future__ import annotations

from datetime import datetime, timezone

import aiosqlite

from question_dedup.exceptions import PersistenceFailure
from question_dedup.models.domain import QuestionRecord
from question_dedup.storage.migrations import initialize_corpus_db


class SQLiteCorpusStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_corpus_db(self._db_path)

    async def load(self) -> list[QuestionRecord]:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute("SELECT * FROM questions ORDER BY position") as cursor:
                    rows = await cursor.fetchall()
                    return [self._row_to_record(row) for row in rows]
        except aiosqlite.Error as e:
            raise PersistenceFailure(f"Failed to load questions: {e}") from e

    async def save(self, records: list[QuestionRecord]) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("DELETE FROM questions")
                await db.executemany(
                    "INSERT INTO questions (id, position, text, created_at) VALUES (?, ?, ?, ?)",
                    [
                        (r.id, position, r.text, r.created_at.isoformat())
                        for position, r in enumerate(records)
                    ],
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceFailure(f"Failed to save {len(records)} questions: {e}") from e

    async def reset(self) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("DELETE FROM questions")
                await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceFailure(f"Failed to reset questions: {e}") from e

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> QuestionRecord:
        created_at = datetime.fromisoformat(row["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return QuestionRecord(id=row["id"], text=row["text"], created_at=created_at)
