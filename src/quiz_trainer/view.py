"""Rich rendering for shell output: plain lines, error lines and banners."""

from __future__ import annotations

from typing import Optional, Protocol

from rich import box
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

__all__ = [
    "OutputSink",
    "RichOutputSink",
    "format_pair",
    "format_record",
]


class OutputSink(Protocol):
    """Where a session writes its output."""

    def write_line(self, text: str | Text, style: Optional[str] = None) -> None:
        """Write one line of output."""

    def write_error(self, text: str) -> None:
        """Write one error line."""

    def write_banner(self, text: str, style: Optional[str] = None) -> None:
        """Render ``text`` in large format."""


class RichOutputSink:
    """Output sink backed by a Rich console (terminal or socket file)."""

    def __init__(self, console: Console) -> None:
        self._console = console

    @property
    def console(self) -> Console:
        return self._console

    def write_line(self, text: str | Text, style: Optional[str] = None) -> None:
        if isinstance(text, Text):
            line = text
        else:
            line = Text(text, style=style or "")
        self._console.print(line, soft_wrap=True)

    def write_error(self, text: str) -> None:
        line = Text("Error: ", style="bold red")
        line.append(text, style="red")
        self._console.print(line, soft_wrap=True)

    def write_banner(self, text: str, style: Optional[str] = None) -> None:
        color = style or "magenta"
        body = Text(" ".join(str(text).upper()), style=f"bold {color}")
        self._console.print(
            Panel(
                Align.center(body),
                box=box.HEAVY,
                border_style=color,
                padding=(1, 4),
                expand=False,
            )
        )


def format_pair(question: str, answer: str) -> Text:
    return Text.assemble(question, " ", ("=>", "magenta"), " ", answer)


def format_record(record_id: int, question: str, answer: str | None = None) -> Text:
    """Return ``[id]: question`` (plus ``=> answer`` when given)."""

    line = Text.assemble("[", (str(record_id), "magenta"), "]: ")
    if answer is None:
        line.append(question)
    else:
        line.append_text(format_pair(question, answer))
    return line
