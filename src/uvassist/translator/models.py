"""Data models shared by the translator, inspector and recognizer."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal

Intent = Literal[
    "run-script",
    "run-module",
    "run-test-suite",
    "start-notebook-server",
    "install-dependency",
    "install-dev-dependency",
    "remove-dependency",
    "run-tool-once",
    "sync-dependencies",
    "initialize-project",
]

INTENTS: tuple[Intent, ...] = (
    "run-script",
    "run-module",
    "run-test-suite",
    "start-notebook-server",
    "install-dependency",
    "install-dev-dependency",
    "remove-dependency",
    "run-tool-once",
    "sync-dependencies",
    "initialize-project",
)


def parse_intent(value: str) -> Intent:
    """Normalize an intent name, accepting underscores and any case."""
    normalized = value.strip().lower().replace("_", "-")
    for intent in INTENTS:
        if intent == normalized:
            return intent
    msg = f"Unsupported intent: {value}"
    raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class OperationRequest:
    """A single conventional operation the caller wants performed."""

    intent: Intent
    arguments: tuple[str, ...] = ()

    @classmethod
    def create(cls, intent: str, arguments: Sequence[str] = ()) -> OperationRequest:
        return cls(intent=parse_intent(intent), arguments=tuple(arguments))


@dataclass(frozen=True, slots=True)
class ProjectState:
    """Presence and freshness of the files the package manager owns."""

    descriptor_present: bool
    lock_present: bool = False
    lock_stale: bool = False
    environment_present: bool = False
    notebook_installed: bool = False


@dataclass(frozen=True, slots=True)
class TranslationResult:
    """Preferred invocation plus the commands that must run before it.

    ``steps`` holds one argv tuple per command, prerequisites first. The
    string views join tokens with single spaces and leave arguments verbatim;
    shell adapters quote the tokens when a line is executed or chained.
    """

    steps: tuple[tuple[str, ...], ...]
    notes: tuple[str, ...] = ()

    @property
    def command(self) -> str:
        return " ".join(self.steps[-1])

    @property
    def prerequisites(self) -> tuple[str, ...]:
        return tuple(" ".join(step) for step in self.steps[:-1])

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(" ".join(step) for step in self.steps)

    def __iter__(self) -> Iterator[str]:
        return iter(self.commands)
