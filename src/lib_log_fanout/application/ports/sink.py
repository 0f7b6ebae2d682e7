"""Sink port: the contract every log backend implements.

Purpose
-------
Describe what the logger needs from a backend: accept a structured record plus
its serialized line, hand the bytes to a transport, and report out-of-band
transport failures.

Contents
--------
* :class:`LogStream` - runtime-checkable protocol with default ``log``.
* :class:`ErrorChannel` - listener registry for asynchronous transport errors.

System Role
-----------
The only boundary between :class:`lib_log_fanout.logger.Logger` and concrete
adapters (console, syslog, test doubles). Adapters subclass the protocol to
inherit the default :meth:`LogStream.log` behaviour.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from lib_log_fanout.domain.errors import AsyncTransportError
from lib_log_fanout.domain.records import LogRecord

LOGGER = logging.getLogger(__name__)

ErrorListener = Callable[[AsyncTransportError], None]


class ErrorChannel:
    """Fan asynchronous transport errors out to registered listeners.

    A failing listener is logged and skipped so error reporting can never
    crash the host process. Without listeners the error is logged instead.

    Examples
    --------
    >>> seen = []
    >>> channel = ErrorChannel()
    >>> channel.add_listener(seen.append)
    >>> channel.notify(AsyncTransportError("syslog", "unreachable"))
    >>> seen[0].sink_type
    'syslog'
    """

    def __init__(self) -> None:
        self._listeners: list[ErrorListener] = []

    def add_listener(self, listener: ErrorListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ErrorListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify(self, error: AsyncTransportError) -> None:
        if not self._listeners:
            LOGGER.warning("Unhandled %s transport error: %s", error.sink_type, error)
            return
        for listener in tuple(self._listeners):
            try:
                listener(error)
            except Exception:  # noqa: BLE001 - listener failures must not escape
                LOGGER.exception("Error listener %r failed", listener)


@runtime_checkable
class LogStream(Protocol):
    """Accept framed bytes and a structured record, asynchronously.

    Implementations must provide :meth:`write`; :meth:`log` defaults to writing
    the serialized line verbatim and may be overridden to build
    backend-specific framing from ``record``.
    """

    @property
    def type(self) -> str:
        """Backend identifier used for diagnostics and registry lookups."""
        ...

    async def write(self, data: bytes) -> None:
        """Hand ``data`` to the transport; raise ``TransportError`` on failure."""
        raise NotImplementedError(f"{self.type} log stream must implement write()")

    async def log(self, record: LogRecord, line: bytes) -> None:
        """Deliver ``record``; completes once the transport accepted ``line``."""
        await self.write(line)

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Subscribe ``listener`` to out-of-band transport errors."""
        ...

    def remove_error_listener(self, listener: ErrorListener) -> None:
        """Unsubscribe ``listener``."""
        ...

    def close(self) -> None:
        """Release transport resources owned by the sink."""
        ...


__all__ = ["ErrorChannel", "ErrorListener", "LogStream"]
