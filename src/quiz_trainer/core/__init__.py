"""Shared helpers for the quiz-trainer commands."""

from __future__ import annotations

from .logging import (
    JsonLogFormatter,
    SessionLogAdapter,
    configure_logger,
    session_logger,
)
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "JsonLogFormatter",
    "SessionLogAdapter",
    "configure_logger",
    "session_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
