"""Scripted prompt adapter that replays queued answers."""

from __future__ import annotations

import random
from typing import Iterable, Optional

from rich.console import Console

from quiz_trainer.commands import CommandContext
from quiz_trainer.view import RichOutputSink


class ScriptedPrompt:
    """Return queued replies in order; raise ``EOFError`` when exhausted."""

    def __init__(self, replies: Iterable[str]) -> None:
        self._replies = list(replies)
        self.asked: list[str] = []
        self.defaults: list[Optional[str]] = []
        self.closed = False

    def queue(self, *replies: str) -> "ScriptedPrompt":
        self._replies.extend(replies)
        return self

    @property
    def pending(self) -> int:
        return len(self._replies)

    def ask(self, text: str, *, default: Optional[str] = None) -> str:
        if self.closed or not self._replies:
            raise EOFError("no more scripted input")
        self.asked.append(text)
        self.defaults.append(default)
        return self._replies.pop(0).strip()

    def close(self) -> None:
        self.closed = True


def make_context(
    store,
    prompt: ScriptedPrompt,
    console: Console,
    *,
    rng: Optional[random.Random] = None,
) -> CommandContext:
    return CommandContext(
        repository=store,
        prompt=prompt,
        sink=RichOutputSink(console),
        rng=rng or random.Random(0),
    )
