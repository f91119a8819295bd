"""Quiz record storage used by every shell session.

Two stores implement :class:`QuizRepository`: :class:`InMemoryQuizStore` for
tests and throwaway sessions, and :class:`JsonQuizStore`, which persists the
whole collection as a single JSON document. Both are safe to share between
socket sessions running on separate threads.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Mapping, MutableMapping, Protocol

from .errors import NotFoundError, QuizValidationError, RepositoryError

__all__ = [
    "QuizRecord",
    "QuizRepository",
    "InMemoryQuizStore",
    "JsonQuizStore",
    "DEFAULT_QUIZZES",
    "seed_defaults",
]


DEFAULT_QUIZZES: tuple[tuple[str, str], ...] = (
    ("Capital of Italy", "Rome"),
    ("Capital of France", "Paris"),
    ("Capital of Spain", "Madrid"),
    ("Capital of Portugal", "Lisbon"),
)


@dataclass(frozen=True)
class QuizRecord:
    """A stored question/answer pair."""

    id: int
    question: str
    answer: str

    def with_text(self, question: str, answer: str) -> "QuizRecord":
        return replace(self, question=question, answer=answer)

    def to_dict(self) -> MutableMapping[str, Any]:
        return {"id": self.id, "question": self.question, "answer": self.answer}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuizRecord":
        try:
            return cls(
                id=int(payload["id"]),
                question=str(payload["question"]),
                answer=str(payload["answer"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Malformed quiz entry: {exc}") from exc


class QuizRepository(Protocol):
    """Operations the command handlers need from a quiz store."""

    def create(self, question: str, answer: str) -> QuizRecord:
        """Persist a new quiz and return it with its assigned id."""

    def list(self) -> list[QuizRecord]:
        """Return every quiz in store order."""

    def get_by_id(self, quiz_id: int) -> QuizRecord | None:
        """Return the quiz for ``quiz_id`` or ``None``."""

    def update(self, record: QuizRecord) -> QuizRecord:
        """Replace the question/answer of an existing quiz."""

    def delete(self, quiz_id: int) -> None:
        """Remove the quiz for ``quiz_id``."""


def _clean_fields(question: str, answer: str) -> tuple[str, str]:
    question = (question or "").strip()
    answer = (answer or "").strip()
    errors: list[str] = []
    if not question:
        errors.append("The question must not be empty.")
    if not answer:
        errors.append("The answer must not be empty.")
    if errors:
        raise QuizValidationError(errors)
    return question, answer


class InMemoryQuizStore:
    """Dictionary-backed store; ids start at 1 and are never reused."""

    def __init__(self, records: Iterable[QuizRecord] = ()) -> None:
        self._lock = threading.RLock()
        self._records: dict[int, QuizRecord] = {}
        for record in records:
            self._records[record.id] = record
        self._next_id = max(self._records, default=0) + 1

    def create(self, question: str, answer: str) -> QuizRecord:
        question, answer = _clean_fields(question, answer)
        with self._lock:
            record = QuizRecord(self._next_id, question, answer)
            self._records[record.id] = record
            self._next_id += 1
            return record

    def list(self) -> list[QuizRecord]:
        with self._lock:
            return [self._records[key] for key in sorted(self._records)]

    def get_by_id(self, quiz_id: int) -> QuizRecord | None:
        with self._lock:
            return self._records.get(quiz_id)

    def update(self, record: QuizRecord) -> QuizRecord:
        question, answer = _clean_fields(record.question, record.answer)
        with self._lock:
            if record.id not in self._records:
                raise NotFoundError(record.id)
            updated = record.with_text(question, answer)
            self._records[record.id] = updated
            return updated

    def delete(self, quiz_id: int) -> None:
        with self._lock:
            if self._records.pop(quiz_id, None) is None:
                raise NotFoundError(quiz_id)


class JsonQuizStore:
    """Store quizzes in a JSON document rewritten atomically on change."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def create(self, question: str, answer: str) -> QuizRecord:
        question, answer = _clean_fields(question, answer)
        with self._lock:
            next_id, records = self._read()
            record = QuizRecord(next_id, question, answer)
            records.append(record)
            self._write(next_id + 1, records)
            return record

    def list(self) -> list[QuizRecord]:
        with self._lock:
            _, records = self._read()
        return sorted(records, key=lambda record: record.id)

    def get_by_id(self, quiz_id: int) -> QuizRecord | None:
        with self._lock:
            _, records = self._read()
        for record in records:
            if record.id == quiz_id:
                return record
        return None

    def update(self, record: QuizRecord) -> QuizRecord:
        question, answer = _clean_fields(record.question, record.answer)
        updated = record.with_text(question, answer)
        with self._lock:
            next_id, records = self._read()
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    records[index] = updated
                    break
            else:
                raise NotFoundError(record.id)
            self._write(next_id, records)
        return updated

    def delete(self, quiz_id: int) -> None:
        with self._lock:
            next_id, records = self._read()
            remaining = [record for record in records if record.id != quiz_id]
            if len(remaining) == len(records):
                raise NotFoundError(quiz_id)
            self._write(next_id, remaining)

    def _read(self) -> tuple[int, list[QuizRecord]]:
        if not self._path.exists():
            return 1, []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RepositoryError(
                f"Failed to read quiz store: {self._path}"
            ) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RepositoryError(
                f"Failed to parse quiz store: {self._path}"
            ) from exc
        if not isinstance(payload, Mapping):
            raise RepositoryError("Quiz store must contain a JSON object.")
        entries = payload.get("quizzes", [])
        if not isinstance(entries, list):
            raise RepositoryError("Quiz store 'quizzes' must be a list.")
        records = [QuizRecord.from_dict(item) for item in entries]
        highest = max((record.id for record in records), default=0)
        try:
            next_id = int(payload.get("next_id", highest + 1))
        except (TypeError, ValueError) as exc:
            raise RepositoryError("Quiz store has an invalid next_id.") from exc
        return max(next_id, highest + 1), records

    def _write(self, next_id: int, records: list[QuizRecord]) -> None:
        payload = {
            "next_id": next_id,
            "quizzes": [record.to_dict() for record in records],
        }
        try:
            _atomic_write_json(self._path, payload)
        except OSError as exc:
            raise RepositoryError(
                f"Failed to write quiz store: {self._path}"
            ) from exc


def seed_defaults(store: QuizRepository) -> int:
    """Insert the starter quizzes into an empty store; return how many."""

    if store.list():
        return 0
    for question, answer in DEFAULT_QUIZZES:
        store.create(question, answer)
    return len(DEFAULT_QUIZZES)


def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
    )
    try:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    finally:
        handle.close()
    os.replace(handle.name, path)
