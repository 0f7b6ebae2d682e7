from __future__ import annotations

import socket
from collections.abc import Iterator
from datetime import datetime, timezone
from io import StringIO

import pytest
from rich.console import Console

from lib_log_fanout.application.ports.sink import ErrorChannel, ErrorListener, LogStream
from lib_log_fanout.application.ports.time import ClockPort
from lib_log_fanout.domain.errors import TransportError
from lib_log_fanout.domain.records import LogRecord

FIXED_NOW = datetime(2025, 9, 23, 12, 0, 0, 123000, tzinfo=timezone.utc)
FIXED_MILLIS = 1_758_628_800_123


class FixedClock(ClockPort):
    def __init__(self, moment: datetime = FIXED_NOW) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


class MemorySink(LogStream):
    """Recording sink used to observe fan-out without real transports."""

    def __init__(self, sink_type: str = "memory", *, fail: bool = False) -> None:
        self._type = sink_type
        self.fail = fail
        self.records: list[LogRecord] = []
        self.lines: list[bytes] = []
        self.closed = False
        self.errors = ErrorChannel()

    @property
    def type(self) -> str:
        return self._type

    async def log(self, record: LogRecord, line: bytes) -> None:
        self.records.append(record)
        await self.write(line)

    async def write(self, data: bytes) -> None:
        if self.fail:
            raise TransportError(f"{self._type} is down")
        self.lines.append(data)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self.errors.add_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        self.errors.remove_listener(listener)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def memory_sink_factory():
    def _factory(sink_type: str = "memory", *, fail: bool = False) -> MemorySink:
        return MemorySink(sink_type, fail=fail)

    return _factory


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), width=80, record=True)


@pytest.fixture
def udp_listener() -> Iterator[socket.socket]:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    try:
        yield sock
    finally:
        sock.close()


@pytest.fixture
def fixed_millis() -> int:
    return FIXED_MILLIS
