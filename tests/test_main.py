from __future__ import annotations

import json

import pytest

from quiz_trainer import _main
from quiz_trainer.store import DEFAULT_QUIZZES


def run_main(argv) -> int:
    with pytest.raises(SystemExit) as excinfo:
        _main.main(argv)
    return excinfo.value.code


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    monkeypatch.delenv("QUIZ_TRAINER_HOME", raising=False)
    monkeypatch.delenv("QUIZ_TRAINER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        _main.build_arg_parser().parse_args([])


def test_parser_server_options():
    args = _main.build_arg_parser().parse_args(
        ["--home", "data", "serve", "--port", "4000", "--verbose"]
    )
    assert args.command == "serve"
    assert args.port == 4000
    assert args.host is None
    assert args.verbose is True


def test_init_writes_template_once(tmp_path, capsys):
    home = tmp_path / "home"

    assert run_main(["--home", str(home), "init"]) == 0
    config_path = home / "config" / "quiz-trainer.toml"
    assert config_path.is_file()
    assert "Created config template" in capsys.readouterr().out

    assert run_main(["--home", str(home), "init"]) == 2
    captured = capsys.readouterr()
    assert captured.err.startswith("Error: Config already exists")
    assert captured.out == ""
    assert run_main(["--home", str(home), "init", "--force"]) == 0


def test_shell_seeds_store_and_quits(tmp_path, monkeypatch, capsys):
    home = tmp_path / "home"
    replies = iter(["list", "quit"])
    monkeypatch.setattr("builtins.input", lambda *args: next(replies))

    assert run_main(["--home", str(home), "shell"]) == 0

    out = capsys.readouterr().out
    for question, _ in DEFAULT_QUIZZES:
        assert question in out
    store = json.loads(
        (home / "data" / "quizzes.json").read_text(encoding="utf-8")
    )
    assert len(store["quizzes"]) == len(DEFAULT_QUIZZES)
    assert (home / "logs" / "quiz-trainer.log").is_file()


def test_shell_ends_on_eof(tmp_path, monkeypatch):
    def _eof(*args):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    store_path = tmp_path / "custom.json"

    code = run_main(
        ["--home", str(tmp_path / "home"), "shell", "--store", str(store_path)]
    )

    assert code == 0
    assert store_path.is_file()


def test_bad_config_reports_error(tmp_path, capsys):
    bad = tmp_path / "bad.toml"
    bad.write_text("[server]\nport = \"x\"\n", encoding="utf-8")

    code = run_main(
        ["--home", str(tmp_path / "home"), "--config", str(bad), "shell"]
    )

    assert code == 2
    assert "server.port" in capsys.readouterr().err


@pytest.mark.parametrize(
    "content", [b"[]", b'{"quizzes": null}', b"\xff\xfe"]
)
def test_corrupt_store_reports_error(tmp_path, capsys, content):
    store_path = tmp_path / "broken.json"
    store_path.write_bytes(content)

    code = run_main(
        ["--home", str(tmp_path / "home"), "shell", "--store", str(store_path)]
    )

    assert code == 2
    assert "Error:" in capsys.readouterr().err
