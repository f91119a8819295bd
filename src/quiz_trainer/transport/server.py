"""TCP transport: every accepted connection runs its own shell session."""

from __future__ import annotations

import io
import logging
import random
import socketserver
import threading
from typing import BinaryIO, Optional, Sequence

from rich.console import Console
from rich.text import Text

from ..commands import CommandContext
from ..core.logging import session_logger
from ..session import ShellSession
from ..store import QuizRepository
from ..view import RichOutputSink

__all__ = [
    "SocketPrompt",
    "QuizRequestHandler",
    "QuizServer",
    "start_server",
]

_log = logging.getLogger("quiz_trainer.server")

MAX_LINE_BYTES = 65536


class SocketPrompt:
    """Prompt adapter reading newline-terminated input from a socket.

    Editable defaults only make sense on a real terminal, so ``default`` is
    ignored here.
    """

    def __init__(self, rfile: BinaryIO, console: Console) -> None:
        self._rfile = rfile
        self._console = console
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def ask(self, text: str, *, default: Optional[str] = None) -> str:
        while True:
            if self._closed:
                raise EOFError("connection closed")
            self._console.print(Text(text, style="red"), end="")
            self._console.file.flush()
            raw = self._readline()
            if raw is not None:
                return raw.decode("utf-8", errors="replace").strip()
            RichOutputSink(self._console).write_error(
                f"Input lines are limited to {MAX_LINE_BYTES} bytes."
            )

    def _readline(self) -> Optional[bytes]:
        """Read one line; ``None`` when it was too long and got discarded."""

        raw = self._read_chunk()
        if len(raw) <= MAX_LINE_BYTES or raw.endswith(b"\n"):
            return raw
        while not raw.endswith(b"\n"):
            raw = self._read_chunk()
        return None

    def _read_chunk(self) -> bytes:
        try:
            raw = self._rfile.readline(MAX_LINE_BYTES + 1)
        except (ConnectionError, OSError) as exc:
            self._closed = True
            raise EOFError("connection lost") from exc
        if not raw:
            self._closed = True
            raise EOFError("connection closed by peer")
        return raw

    def close(self) -> None:
        self._closed = True


class QuizRequestHandler(socketserver.StreamRequestHandler):
    """Runs one shell session over the accepted connection."""

    server: "QuizServer"

    def handle(self) -> None:
        peer = "%s:%s" % self.client_address[:2]
        writer = io.TextIOWrapper(
            self.wfile, encoding="utf-8", errors="replace", write_through=True
        )
        console = Console(
            file=writer,
            force_terminal=self.server.color,
            color_system="standard" if self.server.color else None,
            width=80,
            soft_wrap=True,
        )
        prompt = SocketPrompt(self.rfile, console)
        session = ShellSession(
            CommandContext(
                repository=self.server.repository,
                prompt=prompt,
                sink=RichOutputSink(console),
                rng=random.Random(),
                authors=self.server.authors,
            ),
            prompt_text=self.server.prompt_text,
        )
        session.context.logger = session_logger(
            session.session_id, "socket", peer=peer
        )
        _log.info(
            "Connection accepted",
            extra={"event": "connection_accepted", "peer": peer},
        )
        try:
            session.run()
        finally:
            try:
                writer.flush()
                writer.detach()
            except (ValueError, OSError):
                pass
            _log.info(
                "Connection closed",
                extra={"event": "connection_closed", "peer": peer},
            )


class QuizServer(socketserver.ThreadingTCPServer):
    """Threaded TCP server sharing one quiz store across sessions."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        repository: QuizRepository,
        *,
        authors: Sequence[str] = ("Marta",),
        prompt_text: str = "quiz > ",
        color: bool = True,
    ) -> None:
        self.repository = repository
        self.authors = tuple(authors)
        self.prompt_text = prompt_text
        self.color = color
        super().__init__(address, QuizRequestHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]


def start_server(server: QuizServer) -> threading.Thread:
    """Serve ``server`` from a daemon thread and return that thread."""

    thread = threading.Thread(
        target=server.serve_forever,
        name="quiz-trainer-server",
        daemon=True,
    )
    thread.start()
    _log.info(
        "Server listening",
        extra={"event": "server_listening", "port": server.port},
    )
    return thread
