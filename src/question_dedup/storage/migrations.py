"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

QUESTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    text TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

QUESTIONS_POSITION_INDEX = """
CREATE INDEX IF NOT EXISTS idx_questions_position ON questions(position)
"""


async def initialize_corpus_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(QUESTIONS_TABLE)
        await db.execute(QUESTIONS_POSITION_INDEX)
        await db.commit()
