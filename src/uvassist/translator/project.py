"""Filesystem checks for the files the package manager owns.

Only existence and modification times are consulted; descriptor and lock
contents are never read.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import ProjectState

LOGGER = logging.getLogger(__name__)

DEFAULT_DESCRIPTOR = "pyproject.toml"
DEFAULT_LOCK_FILE = "uv.lock"
DEFAULT_ENV_DIR = ".venv"

_NOTEBOOK_EXECUTABLE = "jupyter-lab"


def descriptor_present(directory: str | Path, descriptor: str = DEFAULT_DESCRIPTOR) -> bool:
    return (Path(directory) / descriptor).is_file()


def lock_is_stale(
    directory: str | Path,
    *,
    descriptor: str = DEFAULT_DESCRIPTOR,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> bool:
    """Return true when a descriptor exists and its lock is missing or older."""
    descriptor_path = Path(directory) / descriptor
    lock_path = Path(directory) / lock_file
    if not descriptor_path.is_file():
        return False
    if not lock_path.is_file():
        return True
    return lock_path.stat().st_mtime < descriptor_path.stat().st_mtime


def notebook_installed(environment: str | Path, *, os_name: str | None = None) -> bool:
    platform_name = os.name if os_name is None else os_name
    if platform_name == "nt":
        candidate = Path(environment) / "Scripts" / f"{_NOTEBOOK_EXECUTABLE}.exe"
    else:
        candidate = Path(environment) / "bin" / _NOTEBOOK_EXECUTABLE
    return candidate.is_file()


def inspect_project(
    directory: str | Path,
    *,
    descriptor: str = DEFAULT_DESCRIPTOR,
    lock_file: str = DEFAULT_LOCK_FILE,
    env_dir: str = DEFAULT_ENV_DIR,
    os_name: str | None = None,
) -> ProjectState:
    """Snapshot the project files under ``directory``."""
    root = Path(directory)
    environment = root / env_dir
    environment_present = environment.is_dir()
    state = ProjectState(
        descriptor_present=descriptor_present(root, descriptor),
        lock_present=(root / lock_file).is_file(),
        lock_stale=lock_is_stale(root, descriptor=descriptor, lock_file=lock_file),
        environment_present=environment_present,
        notebook_installed=environment_present and notebook_installed(environment, os_name=os_name),
    )
    LOGGER.debug(
        "project_inspected",
        extra={
            "directory": str(root),
            "descriptor_present": state.descriptor_present,
            "lock_present": state.lock_present,
            "lock_stale": state.lock_stale,
            "environment_present": state.environment_present,
        },
    )
    return state
