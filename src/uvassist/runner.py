"""Execute a translated command sequence through a shell adapter."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from uvassist.shell import CommandResult, ShellAdapter
from uvassist.shell.base import sanitize_command
from uvassist.translator import OperationRequest, TranslationResult

LOGGER = logging.getLogger(__name__)

LOG_VERSION = 1

ConfirmCommandExecution = Callable[[str], bool]


@dataclass(slots=True)
class RunReport:
    """Results of each step that ran, in order."""

    results: list[CommandResult] = field(default_factory=list)

    @property
    def returncode(self) -> int:
        for result in self.results:
            if result.returncode != 0:
                return result.returncode
        return 0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs prerequisites then the main command, stopping at the first failure.

    Each step is quoted for the adapter's shell before it is executed.
    """

    def __init__(
        self,
        *,
        shell: ShellAdapter,
        log_dir: str | Path,
        working_directory: str | None = None,
        timeout: float | None = None,
        dry_run: bool = False,
        confirm_command_execution: ConfirmCommandExecution | None = None,
    ) -> None:
        self.shell = shell
        self.log_dir = Path(log_dir)
        self.working_directory = working_directory
        self.timeout = timeout
        self.dry_run = dry_run
        self.confirm_command_execution = confirm_command_execution

    def run(self, request: OperationRequest, translation: TranslationResult) -> RunReport:
        report = RunReport()
        steps = translation.steps
        for step_index, argv in enumerate(steps, start=1):
            command = self.shell.render(argv)
            result = self.shell.execute(
                command,
                cwd=self.working_directory,
                timeout=self.timeout,
                dry_run=self.dry_run,
                confirmed=self._resolve_command_confirmation(command),
            )
            report.results.append(result)
            self._append_log(request, result, step_index=step_index, step_count=len(steps))
            if result.returncode != 0:
                LOGGER.warning(
                    "step_failed",
                    extra={
                        "intent": request.intent,
                        "step_index": step_index,
                        "returncode": result.returncode,
                    },
                )
                break
        return report

    def _resolve_command_confirmation(self, command: str) -> bool:
        if self.dry_run or not self.shell.is_destructive_command(command):
            return False
        if self.confirm_command_execution is None:
            return False
        return self.confirm_command_execution(command)

    def _append_log(
        self,
        request: OperationRequest,
        result: CommandResult,
        *,
        step_index: int,
        step_count: int,
    ) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        day_file = self.log_dir / f"run-{datetime.now(timezone.utc).date().isoformat()}.log"
        entry = {
            "log_version": LOG_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "intent": request.intent,
            "arguments": sanitize_command(" ".join(request.arguments)),
            "shell": result.shell,
            "working_directory": self.working_directory,
            "step_index": step_index,
            "step_count": step_count,
            "command": sanitize_command(result.command),
            "returncode": result.returncode,
            "duration": round(result.duration_seconds, 4),
            "timed_out": result.timed_out,
            "executed": result.executed,
            "blocked": result.blocked,
            "block_reason": result.block_reason,
        }
        with day_file.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry) + "\n")
