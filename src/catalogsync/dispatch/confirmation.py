"""Confirmation gates consulted before each mutating call of a live run.

Dry runs never reach a confirmation gate: nothing is issued, so there is
nothing to confirm.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import loguru
from loguru import logger
import typer


@runtime_checkable
class Confirmation(Protocol):
    """Decides whether a mutating call may be issued."""

    def confirm(self, action: str, target: str) -> bool:
        """Return True to issue the call, False to leave the target untouched.

        Args:
            action: Short verb phrase, e.g. "submit for classification".
            target: Human-readable identity of the record or service affected.
        """
        ...


class AcceptAll:
    """Issues every call without asking. Used for scheduled runs."""

    def confirm(self, action: str, target: str) -> bool:
        return True


class LogOnly:
    """Logs each intended call and declines it."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def confirm(self, action: str, target: str) -> bool:
        self._logger.bind(action=action, target=target).info(
            "Would {}: {}", action, target
        )
        return False


class PromptConfirmation:
    """Asks the operator on the terminal before each call.

    Answering "a" accepts the current call and every later one; "q" declines
    the current call and every later one.
    """

    def __init__(self) -> None:
        self._answer_all: bool | None = None

    def confirm(self, action: str, target: str) -> bool:
        if self._answer_all is not None:
            return self._answer_all

        reply = typer.prompt(
            f"{action.capitalize()} {target}? [y]es/[n]o/[a]ll/[q]uit",
            default="y",
        )
        choice = reply.strip().lower()[:1]
        if choice == "a":
            self._answer_all = True
            return True
        if choice == "q":
            self._answer_all = False
            return False
        return choice == "y"
