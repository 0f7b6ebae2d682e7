"""Syslog sink sending framed records over UDP.

Purpose
-------
Encode each record as an RFC 3164-style datagram and send it through a
non-blocking UDP socket owned by the sink. Delivery is best effort: a completed
``log`` call only confirms the local hand-off to the socket.

Contents
--------
* :class:`SyslogSink` - :class:`LogStream` implementation registered as
  ``"syslog"``.

System Role
-----------
Network-facing sink. A send the kernel refuses (oversized datagram, no route)
fails the call in flight. Errors that surface later (ICMP port unreachable and
similar) are reported through the sink's error channel rather than failing an
unrelated logging call.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from collections.abc import Mapping
from typing import Any

from lib_log_fanout.application.ports.sink import ErrorChannel, ErrorListener, LogStream
from lib_log_fanout.domain.errors import AsyncTransportError, TransportError
from lib_log_fanout.domain.records import LogRecord

from .framing import SyslogSettings, frame

LOGGER = logging.getLogger(__name__)

_RECV_SIZE = 65535


class SyslogSink(LogStream):
    """Deliver records to a syslog server as UDP datagrams.

    The socket is connected to the server on first use inside the running event
    loop and reopened when a different loop starts sending. Connecting a UDP
    socket sends nothing; it lets the kernel report ICMP errors back to it.
    """

    def __init__(self, settings: SyslogSettings | None = None) -> None:
        self._settings = settings if settings is not None else SyslogSettings()
        self._errors = ErrorChannel()
        self._socket: socket.socket | None = None
        self._socket_loop: asyncio.AbstractEventLoop | None = None
        self._watched = False
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SyslogSink":
        """Build the sink from a ``{"type": "syslog", ...}`` configuration entry."""

        return cls(SyslogSettings.from_options(options))

    @property
    def type(self) -> str:
        return "syslog"

    @property
    def settings(self) -> SyslogSettings:
        return self._settings

    @property
    def host(self) -> str:
        return self._settings.host

    @property
    def port(self) -> int:
        return self._settings.port

    @property
    def hostname(self) -> str:
        return self._settings.hostname

    async def log(self, record: LogRecord, line: bytes) -> None:
        await self.write(frame(record, line, self._settings))

    async def write(self, data: bytes) -> None:
        loop = asyncio.get_running_loop()
        sock = await self._ensure_socket(loop)
        try:
            await loop.sock_sendall(sock, data)
        except OSError as exc:
            raise TransportError(f"syslog send to {self.host}:{self.port} failed: {exc}") from exc

    async def _ensure_socket(self, loop: asyncio.AbstractEventLoop) -> socket.socket:
        if self._usable(loop):
            return self._socket  # type: ignore[return-value]
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        async with self._lock:
            if self._usable(loop):
                return self._socket  # type: ignore[return-value]
            self._close_socket()
            sock = await self._open_socket(loop)
            self._socket = sock
            self._socket_loop = loop
            self._watched = self._watch(loop, sock)
            return sock

    async def _open_socket(self, loop: asyncio.AbstractEventLoop) -> socket.socket:
        sock: socket.socket | None = None
        try:
            infos = await loop.getaddrinfo(self.host, self.port, type=socket.SOCK_DGRAM)
            family, sock_type, proto, _canonname, address = infos[0]
            sock = socket.socket(family, sock_type, proto)
            sock.setblocking(False)
            sock.connect(address)
        except OSError as exc:
            if sock is not None:
                sock.close()
            message = f"cannot open syslog socket to {self.host}:{self.port}: {exc}"
            self._errors.notify(AsyncTransportError(self.type, message))
            raise TransportError(message) from exc
        LOGGER.debug("Opened syslog socket to %s:%s", self.host, self.port)
        return sock

    def _watch(self, loop: asyncio.AbstractEventLoop, sock: socket.socket) -> bool:
        try:
            loop.add_reader(sock, self._read_ready, sock)
        except NotImplementedError:
            # Proactor loops have no readers; late errors then fail the next send.
            LOGGER.debug("event loop cannot watch the syslog socket for late errors")
            return False
        return True

    def _read_ready(self, sock: socket.socket) -> None:
        try:
            sock.recv(_RECV_SIZE)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            self._errors.notify(AsyncTransportError(self.type, f"syslog socket error: {exc}"))

    def _usable(self, loop: asyncio.AbstractEventLoop) -> bool:
        return self._socket is not None and self._socket_loop is loop

    def _close_socket(self) -> None:
        if self._socket is None:
            return
        sock, loop, watched = self._socket, self._socket_loop, self._watched
        self._socket = None
        self._socket_loop = None
        self._watched = False
        if watched and loop is not None and not loop.is_closed():
            loop.remove_reader(sock)
        sock.close()

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._errors.add_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        self._errors.remove_listener(listener)

    def close(self) -> None:
        self._close_socket()


__all__ = ["SyslogSink"]
