"""Command translation from conventional invocations to the preferred tool."""

from .conventional import recognize
from .core import CommandTranslator
from .models import INTENTS, Intent, OperationRequest, ProjectState, TranslationResult, parse_intent
from .project import inspect_project
from .table import COMMAND_TABLE, CommandTemplate

__all__ = [
    "COMMAND_TABLE",
    "INTENTS",
    "CommandTemplate",
    "CommandTranslator",
    "Intent",
    "OperationRequest",
    "ProjectState",
    "TranslationResult",
    "inspect_project",
    "parse_intent",
    "recognize",
]
