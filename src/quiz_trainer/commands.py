"""Shell command handlers and the command catalogue.

Handlers are plain functions taking a :class:`CommandContext` and the raw
argument token. Each one reports its own failures through the context's
output sink and returns ``"continue"``, except ``quit`` which returns
``"quit"``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Literal, Mapping, Optional, Protocol, Sequence

from rich.text import Text

from .errors import NotFoundError, QuizError
from .exam import answers_match, play_exam, question_prompt
from .store import QuizRecord, QuizRepository
from .validation import validate_id
from .view import OutputSink, format_pair, format_record

__all__ = [
    "CommandOutcome",
    "PromptAdapter",
    "CommandContext",
    "CommandSpec",
    "COMMANDS",
    "command_for",
    "format_command_table",
]

CommandOutcome = Literal["continue", "quit"]


class PromptAdapter(Protocol):
    """Reads one line of user input per call.

    Implementations return the line with surrounding whitespace removed and
    raise ``EOFError`` once the underlying transport is closed.
    """

    def ask(self, text: str, *, default: Optional[str] = None) -> str:
        """Show ``text`` and return the user's reply."""

    def close(self) -> None:
        """Release the transport; later ``ask`` calls raise ``EOFError``."""


@dataclass
class CommandContext:
    """Everything a handler may touch for one session."""

    repository: QuizRepository
    prompt: PromptAdapter
    sink: OutputSink
    logger: logging.Logger | logging.LoggerAdapter = field(
        default_factory=lambda: logging.getLogger("quiz_trainer.session")
    )
    rng: random.Random = field(default_factory=random.Random)
    authors: Sequence[str] = ("Marta",)

    def report_failure(self, exc: QuizError) -> None:
        failure = exc.failure
        self.sink.write_error(failure.message)
        for detail in failure.details:
            self.sink.write_error(detail)
        self.logger.info(
            "Command failed",
            extra={"event": "command_failed", "kind": failure.kind},
        )

    def find(self, raw_id: Optional[str]) -> QuizRecord:
        quiz_id = validate_id(raw_id)
        record = self.repository.get_by_id(quiz_id)
        if record is None:
            raise NotFoundError(quiz_id)
        return record


CommandHandler = Callable[[CommandContext, Optional[str]], CommandOutcome]


@dataclass(frozen=True)
class CommandSpec:
    """Represents one shell verb."""

    name: str
    summary: str
    handler: CommandHandler
    aliases: tuple[str, ...] = ()
    argument: Optional[str] = None

    @property
    def usage(self) -> str:
        names = "|".join((*self.aliases, self.name))
        return f"{names} {self.argument}" if self.argument else names


def _cmd_help(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    context.sink.write_line(format_command_table())
    return "continue"


def _cmd_list(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    try:
        for record in context.repository.list():
            context.sink.write_line(format_record(record.id, record.question))
    except QuizError as exc:
        context.report_failure(exc)
    return "continue"


def _cmd_show(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    try:
        record = context.find(argument)
    except QuizError as exc:
        context.report_failure(exc)
        return "continue"
    context.sink.write_line(
        format_record(record.id, record.question, record.answer)
    )
    return "continue"


def _cmd_add(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    question = context.prompt.ask("Enter a question: ")
    answer = context.prompt.ask("Enter the answer: ")
    try:
        record = context.repository.create(question, answer)
    except QuizError as exc:
        context.report_failure(exc)
        return "continue"
    context.sink.write_line(_confirmation("Added: ", record))
    return "continue"


def _cmd_delete(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    try:
        context.repository.delete(validate_id(argument))
    except QuizError as exc:
        context.report_failure(exc)
    return "continue"


def _cmd_edit(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    try:
        record = context.find(argument)
    except QuizError as exc:
        context.report_failure(exc)
        return "continue"
    question = context.prompt.ask("Enter the question: ", default=record.question)
    answer = context.prompt.ask("Enter the answer: ", default=record.answer)
    try:
        updated = context.repository.update(record.with_text(question, answer))
    except QuizError as exc:
        context.report_failure(exc)
        return "continue"
    prefix = Text.assemble(
        "Quiz ", (str(updated.id), "magenta"), " changed to: "
    )
    context.sink.write_line(_confirmation(prefix, updated))
    return "continue"


def _cmd_test(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    try:
        record = context.find(argument)
    except QuizError as exc:
        context.report_failure(exc)
        return "continue"
    answer = context.prompt.ask(question_prompt(record.question))
    if answers_match(answer, record.answer):
        context.sink.write_line("Your answer is correct.")
        context.sink.write_banner("Correct", "green")
    else:
        context.sink.write_line("Your answer is incorrect.")
        context.sink.write_banner("Incorrect", "red")
    return "continue"


def _cmd_play(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    play_exam(context)
    return "continue"


def _cmd_credits(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    context.sink.write_line("Authors:")
    for author in context.authors:
        context.sink.write_line(author, "green")
    return "continue"


def _cmd_quit(context: CommandContext, argument: Optional[str]) -> CommandOutcome:
    context.prompt.close()
    return "quit"


def _confirmation(prefix: str | Text, record: QuizRecord) -> Text:
    line = Text(prefix, style="magenta") if isinstance(prefix, str) else prefix
    return line + format_pair(record.question, record.answer)


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec("help", "Show this help.", _cmd_help, aliases=("h",)),
    CommandSpec("list", "List the existing quizzes.", _cmd_list),
    CommandSpec(
        "show",
        "Show the question and answer of the given quiz.",
        _cmd_show,
        argument="<id>",
    ),
    CommandSpec("add", "Add a new quiz interactively.", _cmd_add),
    CommandSpec("delete", "Delete the given quiz.", _cmd_delete, argument="<id>"),
    CommandSpec("edit", "Edit the given quiz.", _cmd_edit, argument="<id>"),
    CommandSpec("test", "Try the given quiz.", _cmd_test, argument="<id>"),
    CommandSpec(
        "play",
        "Answer every quiz in random order until a mistake.",
        _cmd_play,
        aliases=("p",),
    ),
    CommandSpec("credits", "Show the authors.", _cmd_credits),
    CommandSpec("quit", "Leave the program.", _cmd_quit, aliases=("q",)),
)

COMMANDS: Mapping[str, CommandSpec] = {
    name: entry
    for entry in _COMMAND_SPECS
    for name in (entry.name, *entry.aliases)
}


def command_for(verb: str) -> CommandSpec | None:
    return COMMANDS.get(verb.lower())


def format_command_table() -> str:
    """Return the command catalogue printed by ``help``."""

    width = max(len(entry.usage) for entry in _COMMAND_SPECS)
    lines = ["Commands:"]
    for entry in _COMMAND_SPECS:
        lines.append(f"  {entry.usage.ljust(width)}  {entry.summary}")
    return "\n".join(lines)
