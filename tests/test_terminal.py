from __future__ import annotations

import io

import pytest
from rich.console import Console

from quiz_trainer.transport import terminal
from quiz_trainer.transport.terminal import TerminalPrompt


class _FakeTTY(io.StringIO):
    def isatty(self) -> bool:
        return True


class _FakeReadline:
    def __init__(self) -> None:
        self.hooks = []
        self.inserted = []

    def set_startup_hook(self, hook) -> None:
        self.hooks.append(hook)
        if hook is not None:
            hook()

    def insert_text(self, text: str) -> None:
        self.inserted.append(text)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), color_system=None)


def test_ask_strips_input(monkeypatch, console):
    monkeypatch.setattr("builtins.input", lambda *args: "  show 1  ")
    prompt = TerminalPrompt(console, stdin=io.StringIO())

    assert prompt.ask("quiz > ") == "show 1"
    assert "quiz > " in console.file.getvalue()


def test_prefill_uses_readline_on_a_tty(monkeypatch, console):
    fake = _FakeReadline()
    monkeypatch.setattr(terminal, "readline", fake)
    monkeypatch.setattr("builtins.input", lambda *args: "edited")
    prompt = TerminalPrompt(console, stdin=_FakeTTY())

    assert prompt.ask("Enter the question: ", default="old text") == "edited"
    assert fake.inserted == ["old text"]
    assert fake.hooks[-1] is None


def test_no_prefill_without_tty(monkeypatch, console):
    fake = _FakeReadline()
    monkeypatch.setattr(terminal, "readline", fake)
    monkeypatch.setattr("builtins.input", lambda *args: "typed")
    prompt = TerminalPrompt(console, stdin=io.StringIO())

    assert prompt.ask("Enter the answer: ", default="old") == "typed"
    assert fake.hooks == []


def test_eof_and_close(monkeypatch, console):
    def _eof(*args):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    prompt = TerminalPrompt(console, stdin=io.StringIO())
    with pytest.raises(EOFError):
        prompt.ask("quiz > ")

    prompt.close()
    assert prompt.closed
    with pytest.raises(EOFError):
        prompt.ask("quiz > ")
