"""Command-line interface for uvassist."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import cast

from .config import AppConfig
from .runner import CommandRunner
from .shell import CommandResult, ShellAdapter, create_shell_adapter
from .translator import (
    COMMAND_TABLE,
    CommandTranslator,
    OperationRequest,
    TranslationResult,
    recognize,
)

LOGGER = logging.getLogger(__name__)

OUTPUT_FORMATS = ("lines", "chain", "json")

_RESERVED_RECORD_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Append the ``extra=`` fields of a record as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = [
            f"{key}={value!r}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_FIELDS
        ]
        if not fields:
            return line
        return f"{line} {' '.join(fields)}"


class CLIArgs(argparse.Namespace):
    command: str
    working_directory: str | None
    shell: str | None
    tool: str | None
    output_format: str
    execute: bool
    dry_run: bool
    timeout: float | None
    verbose: bool
    intent: str
    arguments: list[str]
    command_line: list[str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uvassist",
        description="Translate Python project workflows into uv invocations",
    )
    parser.add_argument(
        "--cwd",
        dest="working_directory",
        help=(
            "Project directory to inspect and run commands in. "
            "Takes precedence over config/env cwd values."
        ),
    )
    parser.add_argument("--shell", help="Shell used to chain and execute commands")
    parser.add_argument("--tool", help="Package manager executable (default: uv)")
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="lines",
        help="lines: one command per line; chain: one shell line; json: structured",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Run the translated commands through the selected shell",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --execute, report each step without running it",
    )
    parser.add_argument("--timeout", type=float, help="Per-command timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate an intent and its arguments")
    translate.add_argument("intent", help="Intent name, e.g. install-dependency")
    translate.add_argument(
        "arguments",
        nargs=argparse.REMAINDER,
        help="Arguments substituted verbatim into the preferred invocation",
    )

    convert = subparsers.add_parser(
        "convert", help="Translate a conventional command line such as 'pip install requests'"
    )
    convert.add_argument("command_line", nargs=argparse.REMAINDER)

    subparsers.add_parser("inspect", help="Show descriptor, lock and environment state")
    subparsers.add_parser("intents", help="List supported intents and their templates")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = cast(CLIArgs, parser.parse_args(argv))
    config = AppConfig.from_env()
    _configure_logging(verbose=args.verbose, level_name=config.log_level)

    translator = CommandTranslator(
        tool=args.tool or config.tool,
        runner=None if args.tool else config.tool_runner,
        descriptor=config.descriptor,
        lock_file=config.lock_file,
        env_dir=config.env_dir,
    )

    if args.command == "intents":
        print(_render_intents(translator))
        return 0

    configured_working_directory = (
        args.working_directory if args.working_directory is not None else config.working_directory
    )
    working_directory = Path.cwd()
    if configured_working_directory is not None:
        resolved_working_directory = Path(configured_working_directory).expanduser().resolve()
        if not resolved_working_directory.exists() or not resolved_working_directory.is_dir():
            print(f"Invalid configured cwd directory: {configured_working_directory}")
            return 1
        working_directory = resolved_working_directory

    if args.command == "inspect":
        state = translator.inspect(working_directory)
        if args.output_format == "json":
            print(json.dumps({"directory": str(working_directory), **asdict(state)}, indent=2))
        else:
            print(f"directory: {working_directory}")
            for key, value in asdict(state).items():
                print(f"{key}: {str(value).lower()}")
        return 0

    request = _build_request(args)
    if request is None:
        return 1

    try:
        adapter = create_shell_adapter(
            args.shell or config.shell,
            confirmation_mode=config.confirm_destructive,
        )
    except ValueError as exc:
        print(str(exc))
        return 1

    translation = translator.translate_in(request, working_directory)
    for note in translation.notes:
        print(f"note: {note}", file=sys.stderr)
    print(_render_translation(request, translation, adapter, args.output_format))

    if not args.execute:
        return 0

    runner = CommandRunner(
        shell=adapter,
        log_dir=config.log_dir,
        working_directory=str(working_directory),
        timeout=args.timeout if args.timeout is not None else config.timeout,
        dry_run=args.dry_run,
        confirm_command_execution=_confirm_command_execution,
    )
    report = runner.run(request, translation)
    for idx, result in enumerate(report.results, start=1):
        print(_render_result(result, idx))
    LOGGER.debug("shell_adapter_selected", extra={"shell": adapter.name})
    return report.returncode


def _build_request(args: CLIArgs) -> OperationRequest | None:
    if args.command == "translate":
        try:
            return OperationRequest.create(args.intent, args.arguments)
        except ValueError as exc:
            print(str(exc))
            return None

    command_line = " ".join(args.command_line).strip()
    if not command_line:
        print("No command provided.")
        return None
    request = recognize(command_line)
    if request is None:
        print(f"Unrecognized conventional command: {command_line}")
    return request


def _configure_logging(*, verbose: bool, level_name: str | None) -> None:
    if verbose:
        level = logging.DEBUG
    elif level_name:
        level = logging.getLevelName(level_name.strip().upper())
        if not isinstance(level, int):
            return
    else:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.basicConfig(level=level, handlers=[handler])


def _chain(adapter: ShellAdapter, translation: TranslationResult) -> str:
    return adapter.chain([adapter.render(step) for step in translation.steps])


def _render_intents(translator: CommandTranslator) -> str:
    lines = []
    for intent, template in COMMAND_TABLE.items():
        preferred = template.prefix.format(tool=translator.tool, runner=translator.runner)
        lines.append(f"{intent:<24} {template.conventional:<38} -> {preferred}")
    return "\n".join(lines)


def _render_translation(
    request: OperationRequest,
    translation: TranslationResult,
    adapter: ShellAdapter,
    output_format: str,
) -> str:
    if output_format == "chain":
        return _chain(adapter, translation)
    if output_format == "json":
        return json.dumps(
            {
                "intent": request.intent,
                "arguments": list(request.arguments),
                "prerequisites": list(translation.prerequisites),
                "command": translation.command,
                "commands": list(translation.commands),
                "chained": _chain(adapter, translation),
                "shell": adapter.name,
                "notes": list(translation.notes),
            },
            indent=2,
        )
    return "\n".join(translation.commands)


def _render_result(result: CommandResult, idx: int) -> str:
    if result.blocked:
        status = "blocked"
    elif result.timed_out:
        status = "timed out"
    elif not result.executed:
        status = "skipped"
    else:
        status = f"exit {result.returncode}"
    lines = [f"=== Step {idx} ({status}) ===", result.command]

    output = result.stdout.rstrip()
    if output:
        lines.append("[output]")
        lines.append(output)
    errors = result.stderr.rstrip()
    if errors:
        lines.append("[stderr]")
        lines.append(errors)
    return "\n".join(lines)


def _confirm_command_execution(command: str) -> bool:
    print("\n=== DESTRUCTIVE COMMAND CONFIRMATION ===")
    print(f"Command: {command}")
    print("=======================================")
    choice = input("Run this destructive command and continue? [y/N]: ").strip().lower()
    return choice in {"y", "yes"}


if __name__ == "__main__":
    raise SystemExit(main())
