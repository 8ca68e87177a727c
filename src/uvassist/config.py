"""Environment-backed application configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .shell import SHELL_ALIASES
from .translator.project import DEFAULT_DESCRIPTOR, DEFAULT_ENV_DIR, DEFAULT_LOCK_FILE


def _to_bool(value: str | None, default: bool = False) -> bool:
    """Convert common env var truthy/falsy values into booleans."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


@dataclass(slots=True)
class AppConfig:
    """Runtime settings loaded from config files and environment variables."""

    tool: str
    tool_runner: str | None
    descriptor: str
    lock_file: str
    env_dir: str
    shell: str
    working_directory: str | None
    log_dir: str
    log_level: str | None
    timeout: float | None
    confirm_destructive: bool

    @classmethod
    def from_env(cls) -> AppConfig:
        file_config = _load_preferred_file_config()
        project_from_file = file_config.get("project")
        project_config = project_from_file if isinstance(project_from_file, dict) else {}

        return cls(
            tool=(
                os.getenv("UVASSIST_TOOL")
                or _to_optional_string(file_config.get("tool"))
                or "uv"
            ),
            tool_runner=(
                os.getenv("UVASSIST_TOOL_RUNNER")
                or _to_optional_string(file_config.get("tool_runner"))
            ),
            descriptor=(
                os.getenv("UVASSIST_DESCRIPTOR")
                or _to_optional_string(project_config.get("descriptor"))
                or DEFAULT_DESCRIPTOR
            ),
            lock_file=(
                os.getenv("UVASSIST_LOCK_FILE")
                or _to_optional_string(project_config.get("lock_file"))
                or DEFAULT_LOCK_FILE
            ),
            env_dir=(
                os.getenv("UVASSIST_ENV_DIR")
                or _to_optional_string(project_config.get("env_dir"))
                or DEFAULT_ENV_DIR
            ),
            shell=_resolve_shell(
                os.getenv("UVASSIST_SHELL")
                or _to_optional_string(file_config.get("shell"))
            ),
            working_directory=(
                os.getenv("UVASSIST_CWD")
                or _to_optional_string(file_config.get("cwd"))
            ),
            log_dir=(
                os.getenv("UVASSIST_LOG_DIR")
                or _to_optional_string(file_config.get("log_dir"))
                or "logs"
            ),
            log_level=(
                os.getenv("UVASSIST_LOG_LEVEL")
                or _to_optional_string(file_config.get("log_level"))
            ),
            timeout=_to_positive_float(
                os.getenv("UVASSIST_TIMEOUT") or file_config.get("timeout"),
            ),
            confirm_destructive=_to_bool(
                os.getenv("UVASSIST_CONFIRM_DESTRUCTIVE"),
                default=bool(file_config.get("confirm_destructive", True)),
            ),
        )


def _to_optional_string(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _load_file_config(path_value: str) -> dict[str, object]:
    path = Path(path_value)
    if not path.exists() or not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            parsed = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(parsed, dict):
        return parsed
    return {}


def _load_preferred_file_config() -> dict[str, object]:
    explicit_path = os.getenv("UVASSIST_CONFIG_FILE")
    if explicit_path:
        return _load_file_config(explicit_path)

    shared_config = _load_file_config("uvassist.config.json")
    local_override = _load_file_config("uvassist.config.local.json")
    return _merge_dicts(shared_config, local_override)


def _merge_dicts(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    merged: dict[str, object] = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _merge_dicts(base_value, value)
        else:
            merged[key] = value
    return merged


def _default_shell_for_platform(os_name: str | None = None) -> str:
    platform_name = os.name if os_name is None else os_name
    return "powershell" if platform_name == "nt" else "bash"


def _resolve_shell(value: str | None) -> str:
    if value is None:
        return _default_shell_for_platform()
    normalized = value.strip().lower()
    return SHELL_ALIASES.get(normalized, normalized)


def _to_positive_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None
