from __future__ import annotations

import io
import random
import sys
from pathlib import Path

import pytest
from rich.console import Console

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
for extra in (ROOT, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import ScriptedPrompt, make_context  # noqa: E402

from quiz_trainer.commands import CommandContext  # noqa: E402
from quiz_trainer.store import InMemoryQuizStore, QuizRecord  # noqa: E402


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=100, color_system=None, file=io.StringIO())


@pytest.fixture
def store() -> InMemoryQuizStore:
    return InMemoryQuizStore(
        [
            QuizRecord(1, "2+2?", "4"),
            QuizRecord(2, "Capital of France?", "Paris"),
        ]
    )


@pytest.fixture
def prompt() -> ScriptedPrompt:
    return ScriptedPrompt([])


@pytest.fixture
def context(store, prompt, console) -> CommandContext:
    return make_context(store, prompt, console, rng=random.Random(7))
