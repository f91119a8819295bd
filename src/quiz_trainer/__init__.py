from ._main import build_arg_parser
from .commands import COMMANDS, CommandContext, CommandSpec, format_command_table
from .errors import (
    Failure,
    MissingParameterError,
    NotANumberError,
    NotFoundError,
    QuizError,
    QuizValidationError,
    RepositoryError,
)
from .exam import ExamResult, ExamRun, play_exam
from .session import ShellCommand, ShellSession, parse_command_line, run_shell
from .store import InMemoryQuizStore, JsonQuizStore, QuizRecord, seed_defaults
from .validation import validate_id
from .view import RichOutputSink

__all__ = [
    "build_arg_parser",
    "COMMANDS",
    "CommandContext",
    "CommandSpec",
    "format_command_table",
    "Failure",
    "MissingParameterError",
    "NotANumberError",
    "NotFoundError",
    "QuizError",
    "QuizValidationError",
    "RepositoryError",
    "ExamResult",
    "ExamRun",
    "play_exam",
    "ShellCommand",
    "ShellSession",
    "parse_command_line",
    "run_shell",
    "InMemoryQuizStore",
    "JsonQuizStore",
    "QuizRecord",
    "seed_defaults",
    "validate_id",
    "RichOutputSink",
]
