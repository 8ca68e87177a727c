from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from uvassist import cli
from uvassist.config import AppConfig
from uvassist.translator import INTENTS


def _fake_config(log_dir: Path | str = "logs") -> AppConfig:
    return AppConfig(
        tool="uv",
        tool_runner=None,
        descriptor="pyproject.toml",
        lock_file="uv.lock",
        env_dir=".venv",
        shell="bash",
        working_directory=None,
        log_dir=str(log_dir),
        log_level=None,
        timeout=None,
        confirm_destructive=True,
    )


@pytest.fixture
def fake_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    config = _fake_config(tmp_path / "logs")
    monkeypatch.setattr(
        cli,
        "AppConfig",
        type("FakeConfig", (), {"from_env": staticmethod(lambda: config)}),
    )
    return config


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


def _write_descriptor(root: Path) -> None:
    (root / "pyproject.toml").write_text("[project]\nname = 'demo'\n", encoding="utf-8")
    lock = root / "uv.lock"
    lock.write_text("version = 1\n", encoding="utf-8")
    os.utime(root / "pyproject.toml", (1_000, 1_000))
    os.utime(lock, (2_000, 2_000))


def test_parser_defaults() -> None:
    args = cli.build_parser().parse_args(["intents"])
    assert args.working_directory is None
    assert args.output_format == "lines"
    assert args.execute is False
    assert args.dry_run is False


def test_parser_keeps_tool_arguments_verbatim() -> None:
    args = cli.build_parser().parse_args(
        ["--cwd", "./sandbox", "translate", "run-tool-once", "ruff", "check", "--fix"]
    )

    assert args.working_directory == "./sandbox"
    assert args.intent == "run-tool-once"
    assert args.arguments == ["ruff", "check", "--fix"]


def test_translate_without_descriptor_prepends_init(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["--cwd", str(project), "translate", "install-dependency", "requests"])

    assert code == 0
    assert capsys.readouterr().out.splitlines() == ["uv init", "uv add requests"]


def test_translate_with_descriptor(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_descriptor(project)

    code = cli.main(["--cwd", str(project), "translate", "install-dependency", "requests"])

    assert code == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["uv add requests"]
    assert captured.err == ""


def test_stale_lock_note_goes_to_stderr(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (project / "pyproject.toml").write_text("[project]\nname = 'demo'\n", encoding="utf-8")

    cli.main(["--cwd", str(project), "translate", "sync-dependencies"])

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["uv sync"]
    assert "note: lock file is missing or older" in captured.err


def test_chain_format_uses_shell(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        [
            "--cwd",
            str(project),
            "--shell",
            "bash",
            "--format",
            "chain",
            "translate",
            "run-test-suite",
        ]
    )

    assert code == 0
    assert capsys.readouterr().out.strip() == "uv init && uv run pytest"


def test_json_format(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        ["--cwd", str(project), "--format", "json", "translate", "start-notebook-server"]
    )

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["intent"] == "start-notebook-server"
    assert payload["prerequisites"] == ["uv init", "uv add --dev jupyterlab"]
    assert payload["command"] == "uv run jupyter lab"
    assert payload["shell"] == "bash"


def test_tool_flag_overrides_config(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["--cwd", str(project), "--tool", "uv2", "translate", "run-tool-once", "ruff"])

    assert capsys.readouterr().out.strip() == "uv2x ruff"


def test_unknown_intent_is_rejected(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--cwd", str(project), "translate", "compile"]) == 1
    assert "Unsupported intent: compile" in capsys.readouterr().out


def test_unsupported_shell_is_rejected(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--cwd", str(project), "--shell", "zsh", "translate", "run-test-suite"]) == 1
    assert "Unsupported shell adapter" in capsys.readouterr().out


def test_convert_conventional_command(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_descriptor(project)

    code = cli.main(["--cwd", str(project), "convert", "pip", "install", "-U", "requests"])

    assert code == 0
    assert capsys.readouterr().out.splitlines() == ["uv add requests"]


def test_convert_unrecognized_command(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--cwd", str(project), "convert", "ls", "-la"]) == 1
    assert "Unrecognized conventional command: ls -la" in capsys.readouterr().out


def test_main_rejects_invalid_cwd_from_config(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_config_with_missing_cwd() -> AppConfig:
        config = _fake_config()
        config.working_directory = "./definitely-missing-dir"
        return config

    monkeypatch.setattr(
        cli,
        "AppConfig",
        type("FakeConfig", (), {"from_env": staticmethod(fake_config_with_missing_cwd)}),
    )

    assert cli.main(["translate", "sync-dependencies"]) == 1
    assert "Invalid configured cwd directory" in capsys.readouterr().out


def test_inspect_json(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_descriptor(project)

    assert cli.main(["--cwd", str(project), "--format", "json", "inspect"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["descriptor_present"] is True
    assert payload["lock_present"] is True
    assert payload["lock_stale"] is False
    assert payload["environment_present"] is False


def test_intents_lists_every_intent(
    fake_config: AppConfig, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["intents"]) == 0

    out = capsys.readouterr().out
    for intent in INTENTS:
        assert intent in out
    assert "-> uvx" in out


def test_execute_runs_steps_and_returns_failure_code(
    fake_config: AppConfig,
    project: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    executed: list[str] = []

    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        command = args[0][-1]  # type: ignore[index]
        executed.append(command)
        assert kwargs["cwd"] == str(project.resolve())
        returncode = 3 if command.startswith("uv add") else 0
        return SimpleNamespace(returncode=returncode, stdout=b"", stderr=b"resolution failed")

    monkeypatch.setattr(subprocess, "run", fake_run)

    code = cli.main(
        [
            "--cwd",
            str(project),
            "--shell",
            "bash",
            "--execute",
            "translate",
            "install-dependency",
            "x",
        ]
    )

    assert code == 3
    assert executed == ["uv init", "uv add x"]
    out = capsys.readouterr().out
    assert "=== Step 2 (exit 3) ===" in out
    assert "resolution failed" in out
    assert list((tmp_path / "logs").glob("run-*.log"))


def test_dry_run_does_not_spawn(
    fake_config: AppConfig,
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        raise AssertionError("dry run must not execute")

    monkeypatch.setattr(subprocess, "run", fake_run)

    code = cli.main(
        ["--cwd", str(project), "--execute", "--dry-run", "translate", "sync-dependencies"]
    )

    assert code == 0
    assert "=== Step 1 (skipped) ===" in capsys.readouterr().out


def test_execute_quotes_version_specifiers(
    fake_config: AppConfig,
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write_descriptor(project)
    executed: list[str] = []

    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        executed.append(args[0][-1])  # type: ignore[index]
        return SimpleNamespace(returncode=0, stdout=b"", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)

    code = cli.main(
        [
            "--cwd",
            str(project),
            "--shell",
            "bash",
            "--execute",
            "translate",
            "install-dependency",
            "requests>=2",
        ]
    )

    assert code == 0
    assert executed == ["uv add 'requests>=2'"]
    assert capsys.readouterr().out.splitlines()[0] == "uv add requests>=2"
    assert sorted(path.name for path in project.iterdir()) == ["pyproject.toml", "uv.lock"]


@pytest.mark.parametrize(
    ("shell", "expected"),
    [
        ("bash", "uv init && uv add 'httpx>=0.27'"),
        ("powershell", "uv init; if ($LASTEXITCODE -eq 0) { uv add 'httpx>=0.27' }"),
        ("cmd", 'uv init && uv add "httpx>=0.27"'),
    ],
)
def test_chain_format_quotes_arguments(
    fake_config: AppConfig,
    project: Path,
    capsys: pytest.CaptureFixture[str],
    shell: str,
    expected: str,
) -> None:
    code = cli.main(
        [
            "--cwd",
            str(project),
            "--shell",
            shell,
            "--format",
            "chain",
            "convert",
            "pip",
            "install",
            "httpx>=0.27",
        ]
    )

    assert code == 0
    assert capsys.readouterr().out.strip() == expected


def test_dry_run_without_execute_only_prints(
    fake_config: AppConfig,
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        raise AssertionError("nothing should run")

    monkeypatch.setattr(subprocess, "run", fake_run)

    code = cli.main(["--cwd", str(project), "--dry-run", "translate", "sync-dependencies"])

    assert code == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["uv init", "uv sync"]
    assert "=== Step" not in out


def test_unknown_shell_from_config_is_rejected(
    fake_config: AppConfig, project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_config.shell = "zsh"

    assert cli.main(["--cwd", str(project), "translate", "run-test-suite"]) == 1
    assert "Unsupported shell adapter: zsh" in capsys.readouterr().out


def test_structured_formatter_appends_extra_fields() -> None:
    formatter = cli.StructuredFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("uvassist", logging.INFO, __file__, 1, "command_result", None, None)
    record.shell = "bash"
    record.returncode = 0

    assert formatter.format(record) == "INFO command_result shell='bash' returncode=0"


def test_structured_formatter_without_extra_fields() -> None:
    formatter = cli.StructuredFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("uvassist", logging.INFO, __file__, 1, "step_failed", None, None)

    assert formatter.format(record) == "INFO step_failed"
