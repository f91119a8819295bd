"""Data-home layout for quiz-trainer (config, logs and the quiz store)."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping

__all__ = [
    "WORKSPACE_ENV",
    "DEFAULT_WORKSPACE",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]

WORKSPACE_ENV = "QUIZ_TRAINER_HOME"
DEFAULT_WORKSPACE = Path.home() / ".quiz-trainer"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
    "data": "data",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace paths and whether each was newly created."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise WorkspaceError(f"Unknown workspace directory '{key}'.") from exc

    @property
    def config_path(self) -> Path:
        return self.path_for("config") / "quiz-trainer.toml"

    @property
    def store_path(self) -> Path:
        return self.path_for("data") / "quizzes.json"

    @property
    def logs_dir(self) -> Path:
        return self.path_for("logs")


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve the workspace and, when ``create`` is set, make its folders.

    ``path`` wins over ``$QUIZ_TRAINER_HOME``, which wins over
    ``~/.quiz-trainer``. When the default location is not writable a folder
    under the system temp dir is used instead.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_base(env_map, override=path)
    candidates = [base]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "quiz-trainer")

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return _materialize(candidate, create=create)
        except PermissionError as exc:
            last_error = exc
    raise WorkspaceError(f"Unable to prepare workspace at {base}") from last_error


def _resolve_base(
    env: Mapping[str, str], *, override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().absolute(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def _materialize(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )
    created: MutableMapping[str, bool] = {"home": create and _ensure_dir(base)}
    directories: MutableMapping[str, Path] = {}
    for key, relative in _SUBDIRS.items():
        candidate = base / relative
        if candidate.exists() and not candidate.is_dir():
            raise WorkspaceError(
                f"Expected workspace directory for '{key}' but found a file: "
                f"{candidate}"
            )
        created[key] = create and _ensure_dir(candidate)
        directories[key] = candidate
    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _ensure_dir(path: Path) -> bool:
    existed = path.exists()
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed
