"""Host command table.

An embedding shell (menu bar, keyboard shortcuts, scripting) drives the
editor through named commands. The host injects the callbacks it supports
into a ``CommandTable``; nothing is registered globally.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from .serialization import render_export

if TYPE_CHECKING:
    from .models import Diagram

logger = logging.getLogger(__name__)

# Commands a desktop shell's menu is expected to offer
HOST_COMMANDS = (
    "undo",
    "redo",
    "clear-diagram",
    "import-diagram",
    "export-diagram",
    "select-all",
    "zoom-in",
    "zoom-out",
    "reset-zoom",
    "center-diagram",
)

Command = Callable[..., Any]


class UnknownCommandError(KeyError):
    """Raised when invoking a command that was never registered."""


class CommandTable:
    """Named callbacks supplied by the host."""

    def __init__(self, commands: dict[str, Command] | None = None):
        self._commands: dict[str, Command] = {}
        for name, callback in (commands or {}).items():
            self.register(name, callback)

    def register(self, name: str, callback: Command) -> None:
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        self._commands[name] = callback

    def unregister(self, name: str) -> None:
        if name not in self._commands:
            raise UnknownCommandError(name)
        del self._commands[name]

    def invoke(self, name: str, *args, **kwargs) -> Any:
        try:
            callback = self._commands[name]
        except KeyError:
            raise UnknownCommandError(name) from None
        logger.debug("Invoking command %s", name)
        return callback(*args, **kwargs)

    def names(self) -> list[str]:
        return sorted(self._commands)

    def missing(self, expected: tuple[str, ...] = HOST_COMMANDS) -> list[str]:
        """Expected commands the host has not provided."""
        return [name for name in expected if name not in self._commands]

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)


def export_commands(get_diagram: Callable[[], Diagram]) -> dict[str, Command]:
    """``export-json``/``export-svg``/``export-latex`` commands on the current diagram.

    Each returns the rendered document; writing it somewhere is up to the host.
    """
    return {
        "export-json": lambda: render_export(get_diagram(), "json"),
        "export-svg": lambda: render_export(get_diagram(), "svg"),
        "export-latex": lambda standalone=False: render_export(get_diagram(), "tex", standalone),
    }
