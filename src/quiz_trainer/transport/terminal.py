"""Local terminal transport built on a Rich console."""

from __future__ import annotations

import sys
from typing import Optional

from rich.console import Console
from rich.text import Text

try:  # readline is unavailable on some platforms (e.g. Windows).
    import readline
except ImportError:  # pragma: no cover - platform dependent
    readline = None  # type: ignore[assignment]

__all__ = ["TerminalPrompt"]


class TerminalPrompt:
    """Prompt adapter reading from the local terminal.

    When stdin is a TTY and readline is available, ``default`` is inserted
    into the input line so the user can edit the existing text.
    """

    def __init__(self, console: Console, *, stdin=None) -> None:
        self._console = console
        self._stdin = stdin if stdin is not None else sys.stdin
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def ask(self, text: str, *, default: Optional[str] = None) -> str:
        if self._closed:
            raise EOFError("terminal session closed")
        prefill = default if default and self._can_prefill() else None
        if prefill is not None:
            readline.set_startup_hook(lambda: readline.insert_text(prefill))
        try:
            return self._console.input(Text(text, style="red")).strip()
        finally:
            if prefill is not None:
                readline.set_startup_hook(None)

    def close(self) -> None:
        self._closed = True

    def _can_prefill(self) -> bool:
        isatty = getattr(self._stdin, "isatty", None)
        return readline is not None and bool(isatty and isatty())
