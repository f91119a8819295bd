"""Randomized exam over every stored quiz.

An exam run snapshots the store, then repeatedly draws one remaining quiz
uniformly at random (without replacement) and asks it. The run ends at the
first wrong answer or once every quiz has been answered correctly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Optional, Sequence

from .errors import QuizError
from .store import QuizRecord

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .commands import CommandContext

__all__ = [
    "ExamState",
    "ExamOutcome",
    "ExamRun",
    "ExamResult",
    "answers_match",
    "question_prompt",
    "play_exam",
]

ExamState = Literal["init", "ask", "correct", "incorrect", "exhausted", "finished"]
ExamOutcome = Literal["exhausted", "incorrect", "failed"]


def answers_match(given: str, expected: str) -> bool:
    """Compare answers ignoring case and surrounding whitespace."""

    return given.strip().casefold() == expected.strip().casefold()


def question_prompt(question: str) -> str:
    text = question.strip()
    if not text.endswith("?"):
        text += "?"
    return text + " "


@dataclass
class ExamRun:
    """State for a single exam: the score and the quizzes not yet asked."""

    pool: list[QuizRecord]
    rng: random.Random = field(default_factory=random.Random)
    score: int = 0
    asked: list[int] = field(default_factory=list)
    state: ExamState = "init"

    @classmethod
    def start(
        cls, records: Sequence[QuizRecord], rng: Optional[random.Random] = None
    ) -> "ExamRun":
        run = cls(pool=list(records), rng=rng or random.Random())
        run.state = "ask"
        return run

    @property
    def remaining(self) -> int:
        return len(self.pool)

    @property
    def finished(self) -> bool:
        return self.state in ("incorrect", "exhausted", "finished")

    def draw(self) -> QuizRecord | None:
        """Remove and return a random pending quiz, or ``None`` when empty."""

        if not self.pool:
            self.state = "exhausted"
            return None
        position = self.rng.randrange(len(self.pool))
        record = self.pool.pop(position)
        self.asked.append(record.id)
        return record

    def submit(self, record: QuizRecord, answer: str) -> bool:
        if answers_match(answer, record.answer):
            self.score += 1
            self.state = "correct"
            return True
        self.state = "incorrect"
        return False


@dataclass(frozen=True)
class ExamResult:
    """Summary of a finished exam run."""

    outcome: ExamOutcome
    score: int
    asked: tuple[int, ...]
    remaining: int


def play_exam(
    context: "CommandContext", rng: Optional[random.Random] = None
) -> ExamResult:
    """Run one exam against ``context`` and return its summary."""

    sink = context.sink
    try:
        records = context.repository.list()
    except QuizError as exc:
        context.report_failure(exc)
        sink.write_banner("0", "magenta")
        return ExamResult("failed", 0, (), 0)

    run = ExamRun.start(records, rng or context.rng)
    while not run.finished:
        record = run.draw()
        if record is None:
            break
        answer = context.prompt.ask(question_prompt(record.question))
        if run.submit(record, answer):
            sink.write_line(f"CORRECT - {run.score} correct so far", "green")
            run.state = "ask"
            continue
        sink.write_line("INCORRECT", "red")
        sink.write_line(f"End of exam. Score: {run.score}")

    outcome: ExamOutcome = "incorrect" if run.state == "incorrect" else "exhausted"
    if outcome == "exhausted":
        sink.write_line("Nothing left to ask.")
        sink.write_line(f"End of exam. Score: {run.score}")
    run.state = "finished"
    sink.write_banner(str(run.score), "magenta")

    result = ExamResult(
        outcome=outcome,
        score=run.score,
        asked=tuple(run.asked),
        remaining=run.remaining,
    )
    context.logger.info(
        "Exam finished",
        extra={
            "event": "exam_finished",
            "outcome": result.outcome,
            "score": result.score,
            "asked": len(result.asked),
            "remaining": result.remaining,
        },
    )
    return result
