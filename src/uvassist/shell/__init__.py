"""Shell adapter implementations."""

from .base import CommandResult, ShellAdapter
from .bash_adapter import BashAdapter
from .cmd_adapter import CmdAdapter
from .powershell_adapter import PowerShellAdapter

SHELL_ALIASES = {
    "cmd": "cmd",
    "powershell": "powershell",
    "pwsh": "powershell",
    "bash": "bash",
    "sh": "bash",
    "shell": "bash",
}


def create_shell_adapter(shell_name: str, *, confirmation_mode: bool = True) -> ShellAdapter:
    normalized = shell_name.strip().lower()
    if normalized == "cmd":
        return CmdAdapter(confirmation_mode=confirmation_mode)
    if normalized in {"bash", "sh", "shell"}:
        return BashAdapter(
            executable="sh" if normalized == "sh" else None,
            confirmation_mode=confirmation_mode,
        )
    if normalized in {"powershell", "pwsh"}:
        return PowerShellAdapter(
            executable="pwsh" if normalized == "pwsh" else None,
            confirmation_mode=confirmation_mode,
        )
    msg = f"Unsupported shell adapter: {shell_name}"
    raise ValueError(msg)


__all__ = [
    "SHELL_ALIASES",
    "BashAdapter",
    "CmdAdapter",
    "CommandResult",
    "PowerShellAdapter",
    "ShellAdapter",
    "create_shell_adapter",
]
