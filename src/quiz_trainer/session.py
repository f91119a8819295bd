"""Command shell loop shared by the terminal and socket transports.

A session reads one command line at a time from its prompt adapter, splits it
into a verb and an optional argument, and runs the matching handler to
completion before reading the next line. The loop ends when ``quit`` runs or
when the transport closes (``EOFError``).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal, Optional

from .commands import CommandContext, command_for

__all__ = [
    "ShellCommand",
    "ShellExit",
    "ShellSession",
    "parse_command_line",
    "run_shell",
]

ShellExit = Literal["quit", "closed"]


@dataclass(frozen=True)
class ShellCommand:
    """Verb plus optional first argument parsed from one input line."""

    verb: str
    argument: Optional[str] = None


def parse_command_line(raw: str | None) -> ShellCommand | None:
    """Split ``raw`` into a lowercase verb and its first argument."""

    if raw is None:
        return None
    words = raw.split()
    if not words:
        return None
    argument = words[1] if len(words) > 1 else None
    return ShellCommand(words[0].lower(), argument)


@dataclass
class ShellSession:
    """One interactive shell bound to a single user."""

    context: CommandContext
    prompt_text: str = "quiz > "
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    commands_run: int = 0
    exit_reason: ShellExit | None = None

    @property
    def active(self) -> bool:
        return self.exit_reason is None

    def dispatch(self, command: ShellCommand) -> ShellExit | None:
        """Run one command; return the exit reason when it ends the session."""

        entry = command_for(command.verb)
        sink = self.context.sink
        if entry is None:
            sink.write_error(f"Unknown command: '{command.verb}'")
            sink.write_line("Use 'help' to see every available command.")
            return None
        self.commands_run += 1
        self.context.logger.debug(
            "Dispatching command",
            extra={"event": "command", "verb": entry.name},
        )
        if entry.handler(self.context, command.argument) == "quit":
            return "quit"
        return None

    def run(self) -> ShellExit:
        logger = self.context.logger
        logger.info("Session started", extra={"event": "session_started"})
        while self.active:
            try:
                raw = self.context.prompt.ask(self.prompt_text)
                command = parse_command_line(raw)
                if command is None:
                    continue
                self.exit_reason = self.dispatch(command)
            except (EOFError, KeyboardInterrupt):
                self.exit_reason = "closed"
                self.context.prompt.close()
        logger.info(
            "Session ended",
            extra={
                "event": "session_ended",
                "reason": self.exit_reason,
                "commands_run": self.commands_run,
            },
        )
        return self.exit_reason or "closed"


def run_shell(context: CommandContext, *, prompt_text: str = "quiz > ") -> ShellExit:
    """Run a shell over ``context`` until the user quits or disconnects."""

    return ShellSession(context, prompt_text=prompt_text).run()
