"""Tests for API serialization."""

from question_dedup.models.domain import BatchResult
from question_dedup.models.schemas import BatchStats, CheckBatchResponse, QuestionResultSchema

RESULTS = [
    BatchResult("What is X?", False, None, 0.0, "No lexically similar questions found"),
    BatchResult("what is x?", True, "What is X?", 1.0, "Same question", source_ref={"Question": "what is x?"}),
]


def test_result_dumps_with_camel_case_aliases():
    dumped = QuestionResultSchema.from_result(RESULTS[1]).model_dump(by_alias=True)
    assert dumped == {
        "question": "what is x?",
        "isDuplicate": True,
        "mostSimilarQuestion": "What is X?",
        "similarityScore": 1.0,
        "similarityExplanation": "Same question",
        "rowData": {"Question": "what is x?"},
    }


def test_stats_counts():
    stats = BatchStats.from_results(RESULTS, processing_time="12ms")
    assert stats.model_dump(by_alias=True) == {
        "totalQuestions": 2,
        "duplicatesFound": 1,
        "uniqueQuestions": 1,
        "processingTime": "12ms",
    }


def test_response_envelope():
    response = CheckBatchResponse(
        results=[QuestionResultSchema.from_result(r) for r in RESULTS],
        stats=BatchStats.from_results(RESULTS),
    )
    dumped = response.model_dump(by_alias=True)
    assert dumped["success"] is True
    assert dumped["persisted"] is True
    assert dumped["error"] is None
    assert dumped["results"][0]["mostSimilarQuestion"] is None
