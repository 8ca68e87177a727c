"""Static table of preferred invocation templates, keyed by intent."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .models import Intent


@dataclass(frozen=True, slots=True)
class CommandTemplate:
    """Preferred invocation for one intent.

    ``prefix`` may reference ``{tool}`` (the package manager executable) and
    ``{runner}`` (its one-off tool runner). Request arguments are appended
    verbatim after the prefix.
    """

    intent: Intent
    prefix: str
    verb: str
    conventional: str
    project_scoped: bool = True

    def argv(self, arguments: Sequence[str], *, tool: str, runner: str) -> tuple[str, ...]:
        head = self.prefix.format(tool=tool, runner=runner)
        return (*head.split(), *arguments)


COMMAND_TABLE: dict[Intent, CommandTemplate] = {
    "run-script": CommandTemplate(
        intent="run-script",
        prefix="{tool} run python",
        verb="run",
        conventional="python <script> [args...]",
    ),
    "run-module": CommandTemplate(
        intent="run-module",
        prefix="{tool} run python -m",
        verb="run",
        conventional="python -m <module> [args...]",
    ),
    "run-test-suite": CommandTemplate(
        intent="run-test-suite",
        prefix="{tool} run pytest",
        verb="run",
        conventional="pytest [args...]",
    ),
    "start-notebook-server": CommandTemplate(
        intent="start-notebook-server",
        prefix="{tool} run jupyter lab",
        verb="run",
        conventional="jupyter lab",
    ),
    "install-dependency": CommandTemplate(
        intent="install-dependency",
        prefix="{tool} add",
        verb="add",
        conventional="pip install <package...>",
    ),
    "install-dev-dependency": CommandTemplate(
        intent="install-dev-dependency",
        prefix="{tool} add --dev",
        verb="add",
        conventional="pip install -r requirements-dev.txt",
    ),
    "remove-dependency": CommandTemplate(
        intent="remove-dependency",
        prefix="{tool} remove",
        verb="remove",
        conventional="pip uninstall <package...>",
    ),
    "run-tool-once": CommandTemplate(
        intent="run-tool-once",
        prefix="{runner}",
        verb="{runner}",
        conventional="pipx run <tool-name> [args...]",
        project_scoped=False,
    ),
    "sync-dependencies": CommandTemplate(
        intent="sync-dependencies",
        prefix="{tool} sync",
        verb="sync",
        conventional="pip install -e .",
    ),
    "initialize-project": CommandTemplate(
        intent="initialize-project",
        prefix="{tool} init",
        verb="init",
        conventional="(create pyproject.toml by hand)",
        project_scoped=False,
    ),
}

NOTEBOOK_PACKAGE = "jupyterlab"
