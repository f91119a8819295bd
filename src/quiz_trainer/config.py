"""TOML configuration for quiz-trainer.

The config file is optional: when the default location has no file the
built-in defaults apply. Every table maps to a frozen dataclass and unknown
keys are rejected so typos surface early.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - should never happen
    raise RuntimeError("Python 3.11+ required for tomllib support") from exc

from .core.workspace import WorkspaceLayout

__all__ = [
    "CONFIG_PATH_ENV",
    "ConfigError",
    "PathsConfig",
    "ServerConfig",
    "ShellConfig",
    "LoggingConfig",
    "TrainerConfig",
    "resolve_config_path",
    "load_config",
    "default_config",
    "config_template",
    "write_template",
]

CONFIG_PATH_ENV = "QUIZ_TRAINER_CONFIG"


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class PathsConfig:
    data_home: Optional[Path]
    store: Optional[Path]


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int


@dataclass(frozen=True)
class ShellConfig:
    prompt: str
    authors: tuple[str, ...]
    seed_defaults: bool
    color: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class TrainerConfig:
    paths: PathsConfig
    server: ServerConfig
    shell: ShellConfig
    logging: LoggingConfig

    def store_path(self, layout: WorkspaceLayout) -> Path:
        """Return the JSON store location, honouring ``paths.store``."""

        if self.paths.store is not None:
            return self.paths.store
        return layout.store_path


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        if isinstance(base[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_string(value: Any, *, field: str, strip: bool = True) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip() if strip else value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_port(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{field}' must be an integer.")
    if not 0 <= value <= 65535:
        raise ConfigError(f"'{field}' must be between 0 and 65535.")
    return value


def _coerce_optional_path(value: Any, *, field: str) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string when set.")
    return Path(value).expanduser().resolve()


def _build_paths(section: Mapping[str, Any]) -> PathsConfig:
    return PathsConfig(
        data_home=_coerce_optional_path(
            section.get("data_home"), field="paths.data_home"
        ),
        store=_coerce_optional_path(section.get("store"), field="paths.store"),
    )


def _build_server(section: Mapping[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=_require_string(section.get("host"), field="server.host"),
        port=_require_port(section.get("port"), field="server.port"),
    )


def _build_shell(section: Mapping[str, Any]) -> ShellConfig:
    authors = section.get("authors")
    if not isinstance(authors, list) or not all(
        isinstance(name, str) and name.strip() for name in authors
    ):
        raise ConfigError("'shell.authors' must be a list of names.")
    return ShellConfig(
        prompt=_require_string(
            section.get("prompt"), field="shell.prompt", strip=False
        ),
        authors=tuple(name.strip() for name in authors),
        seed_defaults=_require_bool(
            section.get("seed_defaults"), field="shell.seed_defaults"
        ),
        color=_require_bool(section.get("color"), field="shell.color"),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if level not in allowed:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(tree: Mapping[str, Any]) -> TrainerConfig:
    return TrainerConfig(
        paths=_build_paths(tree["paths"]),
        server=_build_server(tree["server"]),
        shell=_build_shell(tree["shell"]),
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    layout: WorkspaceLayout,
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Path, bool]:
    """Return the config path and whether the user asked for it explicitly."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve(), True
    env_override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if env_override:
        return Path(env_override).expanduser().resolve(), True
    return layout.config_path, False


def load_config(
    layout: WorkspaceLayout,
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> TrainerConfig:
    """Load the TOML config, applying defaults and validation."""

    path, explicit = resolve_config_path(
        layout, explicit_path=explicit_path, env=env
    )
    tree = copy.deepcopy(_DEFAULTS)
    if explicit or path.exists():
        toml_data = _load_toml(path)
        _merge_dict(tree, toml_data)
    return _build_config(tree)


def default_config() -> TrainerConfig:
    return _build_config(copy.deepcopy(_DEFAULTS))


def config_template() -> str:
    """Return the TOML template written by ``quiz-trainer init``."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as fh:
        fh.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_DEFAULTS: Dict[str, Any] = {
    "paths": {
        "data_home": None,
        "store": None,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3030,
    },
    "shell": {
        "prompt": "quiz > ",
        "authors": ["Marta"],
        "seed_defaults": True,
        "color": True,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# quiz-trainer configuration

[paths]
# Override the data directory (defaults to $QUIZ_TRAINER_HOME or ~/.quiz-trainer)
# data_home = "~/quizzes"
# JSON file holding the quizzes (defaults to <data_home>/data/quizzes.json)
# store = "~/quizzes/quizzes.json"

[server]
# Address the socket server listens on
host = "127.0.0.1"
port = 3030

[shell]
prompt = "quiz > "
# Names printed by the credits command
authors = ["Marta"]
# Fill an empty store with the starter quizzes
seed_defaults = true
# Send ANSI colors to socket clients
color = true

[logging]
level = "INFO"
verbose = false
"""
