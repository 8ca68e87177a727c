"""Recognize conventional command lines and map them to operation requests."""

from __future__ import annotations

import re
import shlex
from pathlib import PurePath

from .models import Intent, OperationRequest

_PYTHON_PATTERN = re.compile(r"^(python(\d+(\.\d+)*)?|py)(\.exe)?$", re.IGNORECASE)
_PIP_PATTERN = re.compile(r"^pip(\d+(\.\d+)*)?(\.exe)?$", re.IGNORECASE)
_DEV_REQUIREMENTS_PATTERN = re.compile(
    r"(^|[-_.])(dev|test|tests|lint|docs)([-_.]|$)", re.IGNORECASE
)

_REQUIREMENT_FLAGS = {"-r", "--requirement"}
_EDITABLE_FLAGS = {"-e", "--editable"}
_YES_FLAGS = {"-y", "--yes"}
_INSTALL_VALUE_FLAGS = {
    "-c",
    "--constraint",
    "-i",
    "--index-url",
    "--extra-index-url",
    "-f",
    "--find-links",
    "-t",
    "--target",
    "--root",
    "--prefix",
    "--src",
    "--platform",
    "--python-version",
    "--implementation",
    "--abi",
    "--upgrade-strategy",
    "--progress-bar",
    "--no-binary",
    "--only-binary",
    "-C",
    "--config-settings",
    "--global-option",
    "--report",
    "--root-user-action",
    "--trusted-host",
    "--proxy",
    "--retries",
    "--timeout",
    "--exists-action",
    "--cert",
    "--client-cert",
    "--cache-dir",
    "--log",
    "--use-feature",
}
_UNINSTALL_VALUE_FLAGS = {"--root-user-action", "--log", "--proxy", "--cache-dir"}
_NOTEBOOK_SUBCOMMANDS = {"lab", "notebook"}


def recognize(command_line: str) -> OperationRequest | None:
    """Return the request a conventional command line expresses, if any."""
    try:
        tokens = shlex.split(command_line)
    except ValueError:
        return None
    if not tokens:
        return None

    program = _program_name(tokens[0])
    rest = tokens[1:]

    if _PYTHON_PATTERN.match(program):
        return _recognize_python(rest)
    if _PIP_PATTERN.match(program):
        return _recognize_pip(rest)
    if program in {"pytest", "py.test"}:
        return _request("run-test-suite", rest)
    if program == "jupyter" and rest and rest[0] in _NOTEBOOK_SUBCOMMANDS:
        return _request("start-notebook-server", rest[1:])
    if program == "jupyter-lab":
        return _request("start-notebook-server", rest)
    if program == "pipx" and len(rest) > 1 and rest[0] == "run":
        return _request("run-tool-once", rest[1:])
    if program == "pip-sync":
        return _request("sync-dependencies", ())
    return None


def _program_name(token: str) -> str:
    return PurePath(token.replace("\\", "/")).name.lower()


def _recognize_python(args: list[str]) -> OperationRequest | None:
    if len(args) >= 2 and args[0] == "-m":
        module, module_args = args[1], args[2:]
        if module == "pytest":
            return _request("run-test-suite", module_args)
        if module == "pip":
            return _recognize_pip(module_args)
        if module == "jupyter" and module_args and module_args[0] in _NOTEBOOK_SUBCOMMANDS:
            return _request("start-notebook-server", module_args[1:])
        return _request("run-module", args[1:])
    if args and not args[0].startswith("-"):
        return _request("run-script", args)
    return None


def _recognize_pip(args: list[str]) -> OperationRequest | None:
    if not args:
        return None
    subcommand, options = args[0], args[1:]
    if subcommand == "install":
        return _recognize_pip_install(options)
    if subcommand == "uninstall":
        return _recognize_pip_uninstall(options)
    return None


def _split_option(option: str) -> tuple[str, str | None]:
    """Split ``--flag=value`` into its flag and inline value."""
    if option.startswith("--") and "=" in option:
        flag, value = option.split("=", 1)
        return flag, value
    return option, None


def _recognize_pip_install(options: list[str]) -> OperationRequest | None:
    packages: list[str] = []
    requirement_files: list[str] = []
    editable_paths: list[str] = []
    local_project = False

    index = 0
    while index < len(options):
        flag, inline_value = _split_option(options[index])
        takes_value = flag in _REQUIREMENT_FLAGS | _EDITABLE_FLAGS | _INSTALL_VALUE_FLAGS
        if takes_value and inline_value is None:
            if index + 1 >= len(options):
                return None
            value = options[index + 1]
            index += 2
        else:
            value = inline_value
            index += 1

        if flag in _REQUIREMENT_FLAGS:
            requirement_files.append(value or "")
        elif flag in _EDITABLE_FLAGS:
            if value == ".":
                local_project = True
            else:
                editable_paths.append(value or "")
        elif takes_value or flag.startswith("-"):
            continue
        elif flag == ".":
            local_project = True
        else:
            packages.append(flag)

    arguments = [part for path in requirement_files for part in ("-r", path)]
    arguments += [part for path in editable_paths for part in ("--editable", path)]
    arguments += packages
    if requirement_files and all(_is_dev_requirements(path) for path in requirement_files):
        return _request("install-dev-dependency", arguments)
    if arguments:
        return _request("install-dependency", arguments)
    if local_project:
        return _request("sync-dependencies", ())
    return None


def _recognize_pip_uninstall(options: list[str]) -> OperationRequest | None:
    packages: list[str] = []
    index = 0
    while index < len(options):
        flag, inline_value = _split_option(options[index])
        if flag in _REQUIREMENT_FLAGS:
            # uv remove takes package names only.
            return None
        if flag in _UNINSTALL_VALUE_FLAGS and inline_value is None:
            index += 2
            continue
        if not flag.startswith("-"):
            packages.append(flag)
        index += 1
    if not packages:
        return None
    return _request("remove-dependency", packages)


def _is_dev_requirements(path: str) -> bool:
    return bool(_DEV_REQUIREMENTS_PATTERN.search(PurePath(path).stem))


def _request(intent: Intent, arguments: list[str] | tuple[str, ...]) -> OperationRequest:
    return OperationRequest(intent=intent, arguments=tuple(arguments))
