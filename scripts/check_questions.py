"""Check a file of questions (one per line) against the stored corpus.

Usage:
    python scripts/check_questions.py questions.txt [--dry-run]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from question_dedup.api.app import create_judge, create_store
from question_dedup.config.settings import Settings
from question_dedup.detection.detector import DuplicateDetector
from question_dedup.exceptions import BatchValidationError, PersistenceFailure
from question_dedup.observability.logger import setup_logging
from question_dedup.observability.metrics import InMemoryMetrics
from question_dedup.oracle.client import OracleClient
from question_dedup.oracle.rate_budget import RateBudget
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator
from question_dedup.similarity.cache import SimilarityCache


class DryRunStore:
    """Loads from the real store but never writes."""

    def __init__(self, delegate) -> None:
        self._delegate = delegate

    async def load(self):
        return await self._delegate.load()

    async def save(self, records) -> None:
        return None

    async def reset(self) -> None:
        return None


async def run(path: Path, dry_run: bool) -> int:
    settings = Settings()
    setup_logging(settings.log_level, settings.json_logs)

    store = await create_store(settings)
    if dry_run:
        store = DryRunStore(store)

    metrics = InMemoryMetrics()
    cache = SimilarityCache()
    budget = RateBudget(
        capacity=settings.oracle_requests_per_window,
        window_seconds=settings.oracle_window_seconds,
        max_concurrency=settings.oracle_max_concurrency,
    )
    oracle = OracleClient(create_judge(settings), cache, budget, metrics, settings)
    orchestrator = BatchOrchestrator(DuplicateDetector(oracle, settings), store, cache, settings)

    questions = path.read_text(encoding="utf-8").splitlines()
    exit_code = 0
    try:
        results = await orchestrator.process_chunked(questions)
    except BatchValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except PersistenceFailure as e:
        print(f"WARNING: {e}", file=sys.stderr)
        results = e.results
        exit_code = 2

    for r in results:
        marker = "DUP " if r.is_duplicate else "NEW "
        similar = f"  ~ {r.most_similar_question} ({r.similarity_score:.2f})" if r.most_similar_question else ""
        print(f"{marker}{r.question}{similar}")

    snapshot = metrics.snapshot()
    print(
        f"\n{sum(r.is_duplicate for r in results)} duplicates / {len(results)} questions; "
        f"oracle calls={snapshot['oracle_calls']:.0f} fallbacks={snapshot['fallback_invocations']:.0f}"
    )
    return exit_code


def main() -> None:
    parser = argparse.ArgumentParser(description="Check questions for duplicates")
    parser.add_argument("path", type=Path, help="Text file with one question per line")
    parser.add_argument("--dry-run", action="store_true", help="Do not save accepted questions")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.path, args.dry_run)))


if __name__ == "__main__":
    main()
