"""PowerShell adapter implementation."""

from __future__ import annotations

import re
import shutil
from collections.abc import Sequence

from .base import PolicyHook, ShellAdapter

_SAFE_TOKEN = re.compile(r"^[\w%+=:./\\-]+$")


class PowerShellAdapter(ShellAdapter):
    """Adapter for command execution via PowerShell."""

    def __init__(
        self,
        executable: str | None = None,
        *,
        allowlist_hook: PolicyHook | None = None,
        denylist_hook: PolicyHook | None = None,
        confirmation_mode: bool = True,
    ) -> None:
        super().__init__(
            allowlist_hook=allowlist_hook,
            denylist_hook=denylist_hook,
            confirmation_mode=confirmation_mode,
        )
        self.executable = executable or _default_executable()

    @property
    def name(self) -> str:
        return "powershell"

    def build_argv(self, command: str) -> list[str]:
        return [self.executable, "-NoProfile", "-NonInteractive", "-Command", command]

    def quote(self, token: str) -> str:
        if _SAFE_TOKEN.match(token):
            return token
        return "'" + token.replace("'", "''") + "'"

    def chain(self, commands: Sequence[str]) -> str:
        """Chain with ``$LASTEXITCODE`` checks; Windows PowerShell 5 has no ``&&``."""
        if not commands:
            return ""
        head, *rest = commands
        if not rest:
            return head
        return f"{head}; if ($LASTEXITCODE -eq 0) {{ {self.chain(rest)} }}"


def _default_executable() -> str:
    if shutil.which("pwsh"):
        return "pwsh"
    return "powershell.exe"
