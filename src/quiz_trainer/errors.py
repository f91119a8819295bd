"""Failure taxonomy shared by the command handlers and quiz stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

__all__ = [
    "FailureKind",
    "Failure",
    "QuizError",
    "MissingParameterError",
    "NotANumberError",
    "NotFoundError",
    "QuizValidationError",
    "RepositoryError",
]

FailureKind = Literal[
    "missing_parameter",
    "not_a_number",
    "not_found",
    "validation",
    "repository",
]


@dataclass(frozen=True)
class Failure:
    """Reportable description of why a command step failed."""

    kind: FailureKind
    message: str
    details: tuple[str, ...] = ()


class QuizError(RuntimeError):
    """Base class for failures a command handler reports to the user."""

    kind: FailureKind = "repository"

    def __init__(self, message: str, *, details: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.details = tuple(details)

    @property
    def failure(self) -> Failure:
        return Failure(self.kind, self.message, self.details)


class MissingParameterError(QuizError):
    """Raised when a command requiring ``<id>`` is given no argument."""

    kind = "missing_parameter"


class NotANumberError(QuizError):
    """Raised when the ``<id>`` argument has no leading integer."""

    kind = "not_a_number"


class NotFoundError(QuizError):
    """Raised when no quiz exists for the requested id."""

    kind = "not_found"

    def __init__(self, quiz_id: int) -> None:
        super().__init__(f"There is no quiz with id={quiz_id}.")
        self.quiz_id = quiz_id


class QuizValidationError(QuizError):
    """Raised by a store when a question or answer fails validation."""

    kind = "validation"

    def __init__(self, errors: Sequence[str]) -> None:
        super().__init__("The quiz is invalid:", details=errors)


class RepositoryError(QuizError):
    """Raised when the quiz store cannot complete an operation."""

    kind = "repository"
