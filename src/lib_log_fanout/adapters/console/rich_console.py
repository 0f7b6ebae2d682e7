"""Rich-powered console sink writing serialized records to standard error.

Purpose
-------
Deliver the already-serialized JSON line to ``stderr`` unchanged, optionally
tinted per severity for interactive terminals.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping used when colouring.
* :class:`ConsoleSink` - :class:`LogStream` implementation registered as
  ``"console"``.

System Role
-----------
Primary human-facing sink. Uses :meth:`rich.console.Console.out`, the low-level
path that applies neither markup nor wrapping, so the bytes on the wire match
the serialized record.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from rich.console import Console

from lib_log_fanout.application.ports.sink import ErrorChannel, ErrorListener, LogStream
from lib_log_fanout.domain.errors import AsyncTransportError, ConfigurationError, TransportError
from lib_log_fanout.domain.levels import LogLevel
from lib_log_fanout.domain.records import LogRecord

LOGGER = logging.getLogger(__name__)

#: Default Rich styles keyed by :class:`LogLevel` severity.
_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.EMERGENCY: "bold white on red",
    LogLevel.ALERT: "bold red",
    LogLevel.CRITICAL: "bold red",
    LogLevel.ERROR: "red",
    LogLevel.WARN: "yellow",
    LogLevel.NOTICE: "green",
    LogLevel.INFO: "cyan",
    LogLevel.DEBUG: "dim",
}


class _StderrConsole(Console):
    """Rich console that reports a closed pipe instead of exiting the process."""

    def on_broken_pipe(self) -> None:
        raise BrokenPipeError("standard error pipe is closed")


class ConsoleSink(LogStream):
    """Write serialized records verbatim to the process's standard error."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        colorize: bool = False,
        styles: MutableMapping[LogLevel | str, str] | None = None,
    ) -> None:
        """Configure the sink with an optional console and colour overrides.

        Parameters
        ----------
        console:
            Pre-built Rich console; defaults to one bound to ``sys.stderr``.
        colorize:
            Tint each line with the style of its severity. Off by default so
            the record is written byte-for-byte.
        styles:
            Overrides merged into :data:`_STYLE_MAP`, keyed by level or name.
        """
        self._console = console if console is not None else _StderrConsole(stderr=True, soft_wrap=True)
        self._colorize = colorize
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged
        self._errors = ErrorChannel()

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "ConsoleSink":
        """Build the sink from a ``{"type": "console", ...}`` configuration entry."""

        colorize = options.get("colorize", False)
        if not isinstance(colorize, bool):
            raise ConfigurationError("console option 'colorize' must be a boolean")
        styles = options.get("styles")
        try:
            return cls(colorize=colorize, styles=dict(styles) if styles else None)
        except ValueError as exc:
            raise ConfigurationError(f"invalid console styles: {exc}") from exc

    @property
    def type(self) -> str:
        return "console"

    @property
    def console(self) -> Console:
        return self._console

    async def write(self, data: bytes) -> None:
        """Write ``data`` to standard error.

        Examples
        --------
        >>> import asyncio
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), width=40)
        >>> asyncio.run(ConsoleSink(console=console).write(b'{"level":"info"}\\n'))
        >>> console.file.getvalue()
        '{"level":"info"}\\n'
        """
        self._emit(data, style=None)

    async def log(self, record: LogRecord, line: bytes) -> None:
        if not self._colorize:
            await self.write(line)
            return
        self._emit(line, style=self._style_map.get(record.level))

    def _emit(self, data: bytes, *, style: str | None) -> None:
        try:
            self._console.out(data.decode("utf-8", errors="replace"), end="", style=style, highlight=False)
        except (OSError, ValueError) as exc:
            self._errors.notify(AsyncTransportError(self.type, f"standard error stream failed: {exc}"))
            raise TransportError(f"console write failed: {exc}") from exc

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._errors.add_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        self._errors.remove_listener(listener)

    def close(self) -> None:
        # The process owns stderr; only flush what Rich may still buffer.
        try:
            self._console.file.flush()
        except (OSError, ValueError):
            LOGGER.debug("console flush on close failed", exc_info=True)


__all__ = ["ConsoleSink"]
