"""Integration tests for the JSON and SQLite corpus stores."""

from __future__ import annotations

import json
import os

import pytest

from question_dedup.exceptions import PersistenceFailure
from question_dedup.models.domain import QuestionRecord
from question_dedup.storage.json_corpus_store import JSONCorpusStore
from question_dedup.storage.sqlite_corpus_store import SQLiteCorpusStore

TEXTS = ["What is X?", "How do magnets work?", "Who wrote Hamlet?"]


@pytest.fixture
async def json_store(tmp_dir):
    store = JSONCorpusStore(os.path.join(tmp_dir, "nested", "questions.json"))
    await store.initialize()
    return store


@pytest.fixture
async def sqlite_store(tmp_dir):
    store = SQLiteCorpusStore(os.path.join(tmp_dir, "questions.db"))
    await store.initialize()
    return store


@pytest.fixture(params=["json", "sqlite"])
def store(request, json_store, sqlite_store):
    return json_store if request.param == "json" else sqlite_store


async def test_initialized_store_is_empty(store):
    assert await store.load() == []


async def test_save_and_load_preserves_order_and_fields(store):
    records = [QuestionRecord.accept(text) for text in TEXTS]
    await store.save(records)

    loaded = await store.load()
    assert [r.text for r in loaded] == TEXTS
    assert [r.id for r in loaded] == [r.id for r in records]
    assert [r.created_at for r in loaded] == [r.created_at for r in records]


async def test_save_replaces_previous_contents(store):
    await store.save([QuestionRecord.accept(text) for text in TEXTS])
    await store.save([QuestionRecord.accept("Only one?")])
    assert [r.text for r in await store.load()] == ["Only one?"]


async def test_reset_empties_corpus(store):
    await store.save([QuestionRecord.accept(text) for text in TEXTS])
    await store.reset()
    assert await store.load() == []


async def test_json_file_format(tmp_dir):
    path = os.path.join(tmp_dir, "questions.json")
    store = JSONCorpusStore(path)
    record = QuestionRecord.accept("What is X?")
    await store.save([record])

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data == {
        "questions": [{"id": record.id, "text": "What is X?", "createdAt": record.created_at.isoformat()}]
    }
    assert not os.path.exists(path + ".tmp")


async def test_json_missing_file_loads_empty(tmp_dir):
    store = JSONCorpusStore(os.path.join(tmp_dir, "absent.json"))
    assert await store.load() == []


async def test_json_legacy_entries_without_timestamp(tmp_dir):
    path = os.path.join(tmp_dir, "questions.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"questions": [{"id": "q1", "text": "What is X?"}, {"id": "q2"}]}, f)

    loaded = await JSONCorpusStore(path).load()
    assert [r.text for r in loaded] == ["What is X?"]
    assert loaded[0].created_at.year == 1970


@pytest.mark.parametrize(
    "content",
    [b"{not json", b"[1, 2, 3]", b'{"questions": null}', b'{"questions": "What is X?"}', b"\xff\xfe"],
)
async def test_json_corrupt_file_raises(tmp_dir, content):
    path = os.path.join(tmp_dir, "questions.json")
    with open(path, "wb") as f:
        f.write(content)

    with pytest.raises(PersistenceFailure):
        await JSONCorpusStore(path).load()


async def test_json_unwritable_path_raises(tmp_dir):
    blocker = os.path.join(tmp_dir, "blocker")
    with open(blocker, "w") as f:
        f.write("")
    store = JSONCorpusStore(os.path.join(blocker, "questions.json"))

    with pytest.raises(PersistenceFailure):
        await store.save([QuestionRecord.accept("What is X?")])


async def test_sqlite_uninitialized_raises(tmp_dir):
    store = SQLiteCorpusStore(os.path.join(tmp_dir, "fresh.db"))
    with pytest.raises(PersistenceFailure):
        await store.load()
