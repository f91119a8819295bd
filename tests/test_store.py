from __future__ import annotations

import json

import pytest

from quiz_trainer.errors import NotFoundError, QuizValidationError, RepositoryError
from quiz_trainer.store import (
    DEFAULT_QUIZZES,
    InMemoryQuizStore,
    JsonQuizStore,
    QuizRecord,
    seed_defaults,
)


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryQuizStore()
    return JsonQuizStore(tmp_path / "data" / "quizzes.json")


def test_create_assigns_increasing_ids_and_strips_text(any_store):
    first = any_store.create("  2+2?  ", " 4 ")
    second = any_store.create("Capital of France?", "Paris")

    assert first == QuizRecord(1, "2+2?", "4")
    assert second.id == 2
    assert [record.id for record in any_store.list()] == [1, 2]


def test_create_rejects_empty_fields_in_order(any_store):
    with pytest.raises(QuizValidationError) as excinfo:
        any_store.create("   ", "")
    failure = excinfo.value.failure
    assert failure.kind == "validation"
    assert failure.details == (
        "The question must not be empty.",
        "The answer must not be empty.",
    )
    assert any_store.list() == []


def test_update_preserves_id(any_store):
    record = any_store.create("Old question", "Old answer")
    updated = any_store.update(record.with_text("New question", "New answer"))

    assert updated.id == record.id
    assert any_store.get_by_id(record.id) == QuizRecord(
        record.id, "New question", "New answer"
    )


def test_update_validates_and_requires_existing_record(any_store):
    record = any_store.create("Question", "Answer")
    with pytest.raises(QuizValidationError):
        any_store.update(record.with_text("Question", "  "))
    assert any_store.get_by_id(record.id).answer == "Answer"

    with pytest.raises(NotFoundError):
        any_store.update(QuizRecord(99, "q", "a"))


def test_delete_removes_and_never_reuses_ids(any_store):
    any_store.create("a", "1")
    second = any_store.create("b", "2")
    any_store.delete(second.id)

    assert any_store.get_by_id(second.id) is None
    assert any_store.create("c", "3").id == 3


def test_delete_unknown_id_raises_not_found(any_store):
    with pytest.raises(NotFoundError) as excinfo:
        any_store.delete(5)
    assert "id=5" in excinfo.value.failure.message


def test_json_store_persists_between_instances(tmp_path):
    path = tmp_path / "quizzes.json"
    JsonQuizStore(path).create("Question", "Answer")

    reopened = JsonQuizStore(path)
    assert reopened.list() == [QuizRecord(1, "Question", "Answer")]
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["next_id"] == 2


def test_json_store_wraps_decode_errors(tmp_path):
    path = tmp_path / "quizzes.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RepositoryError) as excinfo:
        JsonQuizStore(path).list()
    assert excinfo.value.failure.kind == "repository"


def test_json_store_wraps_invalid_utf8(tmp_path):
    path = tmp_path / "quizzes.json"
    path.write_bytes(b'{"quizzes": [\xff]}')

    with pytest.raises(RepositoryError) as excinfo:
        JsonQuizStore(path).list()
    assert excinfo.value.failure.kind == "repository"


def test_json_store_rejects_malformed_entries(tmp_path):
    path = tmp_path / "quizzes.json"
    path.write_text(json.dumps({"quizzes": [{"id": 1}]}), encoding="utf-8")

    with pytest.raises(RepositoryError):
        JsonQuizStore(path).list()


@pytest.mark.parametrize("quizzes", [None, 5, "text", {"id": 1}])
def test_json_store_rejects_non_list_quizzes(tmp_path, quizzes):
    path = tmp_path / "quizzes.json"
    path.write_text(json.dumps({"quizzes": quizzes}), encoding="utf-8")
    store = JsonQuizStore(path)

    with pytest.raises(RepositoryError):
        store.list()
    with pytest.raises(RepositoryError):
        store.get_by_id(1)


def test_seed_defaults_only_fills_empty_store():
    store = InMemoryQuizStore()
    assert seed_defaults(store) == len(DEFAULT_QUIZZES)
    assert seed_defaults(store) == 0
    assert [record.question for record in store.list()] == [
        question for question, _ in DEFAULT_QUIZZES
    ]
