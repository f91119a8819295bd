"""Transports that connect a shell session to a user."""

from .server import QuizServer, SocketPrompt, start_server
from .terminal import TerminalPrompt

__all__ = [
    "QuizServer",
    "SocketPrompt",
    "TerminalPrompt",
    "start_server",
]
