"""Windows Command Prompt adapter."""

from __future__ import annotations

import re
from collections.abc import Sequence

from .base import PolicyHook, ShellAdapter

_SAFE_TOKEN = re.compile(r"^[\w@+:./\\-]+$")


class CmdAdapter(ShellAdapter):
    """Adapter for command execution via ``cmd.exe``."""

    def __init__(
        self,
        executable: str = "cmd.exe",
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
        self.executable = executable

    @property
    def name(self) -> str:
        return "cmd"

    def build_argv(self, command: str) -> list[str]:
        return [self.executable, "/d", "/s", "/c", command]

    def quote(self, token: str) -> str:
        if _SAFE_TOKEN.match(token):
            return token
        return '"' + token.replace('"', '""') + '"'

    def chain(self, commands: Sequence[str]) -> str:
        return " && ".join(commands)
