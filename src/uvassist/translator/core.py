"""Translate conventional operations into preferred package-manager commands."""

from __future__ import annotations

import logging
from pathlib import Path

from .models import Intent, OperationRequest, ProjectState, TranslationResult
from .project import DEFAULT_DESCRIPTOR, DEFAULT_ENV_DIR, DEFAULT_LOCK_FILE, inspect_project
from .table import COMMAND_TABLE, NOTEBOOK_PACKAGE

LOGGER = logging.getLogger(__name__)

STALE_LOCK_NOTE = "lock file is missing or older than the project descriptor"


class CommandTranslator:
    """Maps an operation request onto the preferred invocation sequence.

    ``translate`` is a pure function of the request and the project state.
    ``translate_in`` inspects a directory first and is the only entry point
    that touches the filesystem.
    """

    def __init__(
        self,
        *,
        tool: str = "uv",
        runner: str | None = None,
        descriptor: str = DEFAULT_DESCRIPTOR,
        lock_file: str = DEFAULT_LOCK_FILE,
        env_dir: str = DEFAULT_ENV_DIR,
    ) -> None:
        self.tool = tool
        self.runner = runner or f"{tool}x"
        self.descriptor = descriptor
        self.lock_file = lock_file
        self.env_dir = env_dir

    def translate(self, request: OperationRequest, state: ProjectState) -> TranslationResult:
        template = COMMAND_TABLE[request.intent]
        steps: list[tuple[str, ...]] = []
        notes: list[str] = []

        if template.project_scoped and not state.descriptor_present:
            steps.append(self._argv("initialize-project"))
        if request.intent == "start-notebook-server" and not state.notebook_installed:
            steps.append(self._argv("install-dev-dependency", (NOTEBOOK_PACKAGE,)))
        if template.project_scoped and state.descriptor_present and state.lock_stale:
            notes.append(STALE_LOCK_NOTE)

        steps.append(self._argv(request.intent, request.arguments))
        result = TranslationResult(steps=tuple(steps), notes=tuple(notes))
        LOGGER.debug(
            "translation_built",
            extra={
                "intent": request.intent,
                "argument_count": len(request.arguments),
                "prerequisite_count": len(result.prerequisites),
                "descriptor_present": state.descriptor_present,
            },
        )
        return result

    def translate_in(self, request: OperationRequest, directory: str | Path) -> TranslationResult:
        return self.translate(request, self.inspect(directory))

    def inspect(self, directory: str | Path) -> ProjectState:
        return inspect_project(
            directory,
            descriptor=self.descriptor,
            lock_file=self.lock_file,
            env_dir=self.env_dir,
        )

    def verb_for(self, request: OperationRequest) -> str:
        return COMMAND_TABLE[request.intent].verb.format(tool=self.tool, runner=self.runner)

    def _argv(self, intent: Intent, arguments: tuple[str, ...] = ()) -> tuple[str, ...]:
        return COMMAND_TABLE[intent].argv(arguments, tool=self.tool, runner=self.runner)
