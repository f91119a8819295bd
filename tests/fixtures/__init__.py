"""Shared test doubles for the quiz_trainer test suite."""

from .prompts import ScriptedPrompt, make_context  # noqa: F401
from .randoms import ScriptedRandom  # noqa: F401
from .stores import BrokenStore  # noqa: F401

__all__ = [
    "BrokenStore",
    "ScriptedPrompt",
    "ScriptedRandom",
    "make_context",
]
