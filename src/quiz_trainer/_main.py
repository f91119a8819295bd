import argparse
import logging
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console

from .commands import CommandContext
from .config import ConfigError, TrainerConfig, load_config, write_template
from .errors import QuizError
from .core import (
    WorkspaceError,
    WorkspaceLayout,
    configure_logger,
    ensure_workspace,
    session_logger,
)
from .session import ShellSession
from .store import JsonQuizStore, seed_defaults
from .transport import QuizServer, TerminalPrompt, start_server
from .view import RichOutputSink

_LOGGER_NAME = "quiz_trainer"


@dataclass(frozen=True)
class _Runtime:
    layout: WorkspaceLayout
    config: TrainerConfig
    store: JsonQuizStore
    logger: logging.Logger


def _prepare(args: argparse.Namespace) -> _Runtime:
    load_dotenv()
    layout = ensure_workspace(path=args.home)
    config = load_config(layout, explicit_path=args.config)
    if config.paths.data_home is not None and args.home is None:
        layout = ensure_workspace(path=config.paths.data_home)
    logger, _ = configure_logger(
        _LOGGER_NAME,
        log_dir=layout.logs_dir,
        level=config.logging.level,
        verbose=bool(args.verbose) or config.logging.verbose,
        filename="quiz-trainer.log",
    )
    store_path = args.store or config.store_path(layout)
    store = JsonQuizStore(store_path)
    if config.shell.seed_defaults:
        seeded = seed_defaults(store)
        if seeded:
            logger.info(
                "Seeded starter quizzes",
                extra={"event": "store_seeded", "count": seeded},
            )
    return _Runtime(layout, config, store, logger)


def _build_server(runtime: _Runtime, args: argparse.Namespace) -> QuizServer:
    host = args.host or runtime.config.server.host
    port = args.port if args.port is not None else runtime.config.server.port
    return QuizServer(
        (host, port),
        runtime.store,
        authors=runtime.config.shell.authors,
        prompt_text=runtime.config.shell.prompt,
        color=runtime.config.shell.color,
    )


def _run_terminal(runtime: _Runtime, console: Console) -> int:
    session = ShellSession(
        CommandContext(
            repository=runtime.store,
            prompt=TerminalPrompt(console),
            sink=RichOutputSink(console),
            rng=random.Random(),
            authors=runtime.config.shell.authors,
        ),
        prompt_text=runtime.config.shell.prompt,
    )
    session.context.logger = session_logger(session.session_id, "terminal")
    session.run()
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    layout = ensure_workspace(path=args.home)
    target = args.config or layout.config_path
    write_template(target, overwrite=bool(args.force))
    print(f"Workspace ready at {layout.home}")
    print(f"Created config template {target}")
    return 0


def _cmd_shell(args: argparse.Namespace) -> int:
    runtime = _prepare(args)
    return _run_terminal(runtime, Console())


def _cmd_serve(args: argparse.Namespace) -> int:
    runtime = _prepare(args)
    server = _build_server(runtime, args)
    host, port = server.server_address[:2]
    print(f"Quiz server listening on {host}:{port} (Ctrl+C to stop)")
    runtime.logger.info(
        "Server listening",
        extra={"event": "server_listening", "port": port},
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nStopping server.")
    finally:
        server.server_close()
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    runtime = _prepare(args)
    server = _build_server(runtime, args)
    console = Console()
    thread = start_server(server)
    host, port = server.server_address[:2]
    console.print(f"Quiz server listening on {host}:{port}", style="dim")
    try:
        return _run_terminal(runtime, console)
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def _add_runtime_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", type=Path, help="JSON quiz store path")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr",
    )


def _add_server_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", help="Listen address (default from config)")
    parser.add_argument(
        "--port", type=int, help="Listen port (default from config)"
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quiz-trainer",
        description="Interactive question/answer trainer",
    )
    p.add_argument(
        "--home",
        type=Path,
        help="Data directory (defaults to $QUIZ_TRAINER_HOME or ~/.quiz-trainer)",
    )
    p.add_argument("--config", type=Path, help="Path to quiz-trainer.toml")
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Create the workspace and config")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing config"
    )

    sp_shell = sub.add_parser("shell", help="Start the local quiz shell")
    _add_runtime_options(sp_shell)

    sp_serve = sub.add_parser("serve", help="Serve quiz shells over TCP")
    _add_runtime_options(sp_serve)
    _add_server_options(sp_serve)

    sp_run = sub.add_parser(
        "run", help="Serve over TCP and start the local shell"
    )
    _add_runtime_options(sp_run)
    _add_server_options(sp_run)
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    handlers = {
        "init": _cmd_init,
        "shell": _cmd_shell,
        "serve": _cmd_serve,
        "run": _cmd_run,
    }
    try:
        code = handlers[args.command](args)
    except (ConfigError, WorkspaceError, QuizError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        code = 2
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    main()
