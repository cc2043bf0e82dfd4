"""Formatter capability abstractions."""

from __future__ import annotations

import shlex
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Callable, Sequence

from .errors import (
    FormatterConfigurationError,
    FormatterError,
    FormatterSyntaxError,
)

DEFAULT_COMMAND = "google-java-format -"


class Formatter(ABC):
    """Abstract adapter for the primary formatter.

    ``format`` receives complete source text and returns it pretty-printed.
    Text that cannot be parsed standalone raises ``FormatterSyntaxError``;
    any other ``FormatterError`` is a failure of the formatter itself.
    """

    debug: bool = False

    @abstractmethod
    def format(self, source: str) -> str:
        """Format ``source`` and return the result."""

    def _log_debug(self, label: str, payload: str) -> None:
        """Emit request and response text when enabled."""

        if not self.debug:
            return
        print(f"[rewrap][formatter-debug] {label}:\n{payload}", file=sys.stderr)


class IdentityFormatter(Formatter):
    """A formatter that returns its input unchanged (useful for dry runs)."""

    def format(self, source: str) -> str:
        return source


class CallableFormatter(Formatter):
    """Adapts a plain ``str -> str`` function."""

    def __init__(self, func: Callable[[str], str], *, debug: bool = False) -> None:
        self.func = func
        self.debug = debug

    def format(self, source: str) -> str:
        self._log_debug("formatter.request", source)
        result = self.func(source)
        self._log_debug("formatter.response", result)
        return result


class CommandFormatter(Formatter):
    """Pipes source text through an external formatting command."""

    def __init__(
        self,
        command: Sequence[str] | str = DEFAULT_COMMAND,
        *,
        timeout: float | None = 30.0,
        debug: bool = False,
    ) -> None:
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise FormatterConfigurationError("Formatter command must not be empty.")
        self.timeout = timeout
        self.debug = debug

    def format(self, source: str) -> str:
        self._log_debug("formatter.request", source)
        try:
            completed = subprocess.run(
                self.command,
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise FormatterConfigurationError(
                f"Formatter executable not found: {self.command[0]}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise FormatterError(
                f"Formatter did not finish within {self.timeout} seconds."
            ) from exc

        if completed.returncode != 0:
            message = completed.stderr.strip() or f"exit status {completed.returncode}"
            self._log_debug("formatter.error", message)
            raise FormatterSyntaxError(message)
        self._log_debug("formatter.response", completed.stdout)
        return completed.stdout


def build_formatter(
    name: str | None,
    *,
    command: Sequence[str] | str | None = None,
    timeout: float | None = 30.0,
    debug: bool = False,
) -> Formatter:
    """Factory to create formatters by name."""

    normalized = (name or "command").strip().lower()
    if normalized in {"command", "external", "default"}:
        return CommandFormatter(command or DEFAULT_COMMAND, timeout=timeout, debug=debug)
    if normalized in {"identity", "noop", "echo"}:
        return IdentityFormatter()
    raise FormatterConfigurationError(f"Unknown formatter '{name}'.")
