"""Seed the question corpus with sample questions for development."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from question_dedup.api.app import create_store
from question_dedup.config.settings import Settings
from question_dedup.models.domain import QuestionRecord

SAMPLE_QUESTIONS = [
    "What is the capital of France?",
    "How many bones are in the adult human body?",
    "What is the boiling point of water at sea level?",
    "Who wrote the play Romeo and Juliet?",
    "What is the chemical symbol for gold?",
    "How many continents are there on Earth?",
    "What is the largest planet in our solar system?",
    "In which year did the Second World War end?",
]


async def main():
    settings = Settings()
    store = await create_store(settings)

    existing = await store.load()
    known = {r.text.lower() for r in existing}
    added = [QuestionRecord.accept(q) for q in SAMPLE_QUESTIONS if q.lower() not in known]
    await store.save(existing + added)

    print(f"Added {len(added)} questions ({settings.corpus_backend} backend)")
    print(f"Total questions: {len(existing) + len(added)}")


if __name__ == "__main__":
    asyncio.run(main())
