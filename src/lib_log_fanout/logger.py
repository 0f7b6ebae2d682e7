"""Logger façade coalescing call arguments and fanning records out to sinks.

Purpose
-------
Give host code one coroutine per severity. Each call builds a single record
from the logger's static properties and the call arguments, serializes it once
and delivers it to every configured sink concurrently.

Contents
--------
* :class:`Logger` - severity methods, child creation, error subscription.

System Role
-----------
Outer façade of the library. Built directly from sinks or, more commonly,
through :func:`lib_log_fanout.registry.create_logger` from configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any

from lib_log_fanout.application.ports.sink import ErrorListener, LogStream
from lib_log_fanout.application.ports.time import ClockPort, SystemClock
from lib_log_fanout.application.use_cases.fan_out import deliver
from lib_log_fanout.domain.errors import ConfigurationError
from lib_log_fanout.domain.levels import LogLevel
from lib_log_fanout.domain.records import LogRecord, coalesce

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _epoch_millis(moment: datetime) -> int:
    """Return whole milliseconds between the Unix epoch and ``moment``."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


class Logger:
    """Structured logger delivering every record to all of its sinks.

    Parameters
    ----------
    name:
        Identifies the emitting process; used as PROCESS in syslog headers.
    sinks:
        Sink instances shared with every child logger.
    props:
        Fields merged into every record before the call arguments.
    clock:
        Source of record timestamps; defaults to the system clock.

    Examples
    --------
    >>> import asyncio
    >>> class Memory(LogStream):
    ...     type = "memory"
    ...     def __init__(self):
    ...         self.records = []
    ...     async def log(self, record, line):
    ...         self.records.append(record)
    >>> sink = Memory()
    >>> logger = Logger("svc-a", [sink], props={"env": "test"})
    >>> asyncio.run(logger.error("boom", {"code": 42}))
    >>> record = sink.records[0]
    >>> record.level.severity, record.message, record.fields["code"], record.fields["env"]
    ('error', 'boom', 42, 'test')
    """

    def __init__(
        self,
        name: str,
        sinks: Iterable[LogStream] = (),
        props: Mapping[str, Any] | None = None,
        *,
        clock: ClockPort | None = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("must specify a name for the logger")
        resolved = tuple(sinks)
        for sink in resolved:
            if not isinstance(sink, LogStream):
                raise ConfigurationError(f"{sink!r} does not implement the LogStream contract")
        self._name = name
        self._sinks = resolved
        self._props = MappingProxyType(dict(props or {}))
        self._clock: ClockPort = clock if clock is not None else SystemClock()

    def __repr__(self) -> str:
        types = ", ".join(sink.type for sink in self._sinks)
        return f"Logger(name={self._name!r}, sinks=[{types}])"

    @property
    def name(self) -> str:
        return self._name

    @property
    def sinks(self) -> tuple[LogStream, ...]:
        return self._sinks

    @property
    def props(self) -> Mapping[str, Any]:
        return self._props

    async def log(self, level: LogLevel | str, *args: Any) -> None:
        """Coalesce ``args`` into one record at ``level`` and deliver it.

        Raises
        ------
        DeliveryError
            When one or more sinks failed; the others have already written.
        ExceptionGroup
            When a sink raised an unexpected exception alongside other failures.
        TypeError
            For an argument that is neither a string, an exception nor a
            mapping.
        """
        resolved = level if isinstance(level, LogLevel) else LogLevel.from_name(level)
        record = self.build_record(resolved, *args)
        await deliver(self._sinks, record, record.to_line())

    def build_record(self, level: LogLevel, *args: Any) -> LogRecord:
        """Return the record a call at ``level`` with ``args`` would deliver."""

        return coalesce(
            logger_name=self._name,
            level=level,
            timestamp=_epoch_millis(self._clock.now()),
            props=self._props,
            args=args,
        )

    async def emergency(self, *args: Any) -> None:
        await self.log(LogLevel.EMERGENCY, *args)

    async def alert(self, *args: Any) -> None:
        await self.log(LogLevel.ALERT, *args)

    async def critical(self, *args: Any) -> None:
        await self.log(LogLevel.CRITICAL, *args)

    async def error(self, *args: Any) -> None:
        await self.log(LogLevel.ERROR, *args)

    async def warn(self, *args: Any) -> None:
        await self.log(LogLevel.WARN, *args)

    async def notice(self, *args: Any) -> None:
        await self.log(LogLevel.NOTICE, *args)

    async def info(self, *args: Any) -> None:
        await self.log(LogLevel.INFO, *args)

    async def debug(self, *args: Any) -> None:
        await self.log(LogLevel.DEBUG, *args)

    def create_child(self, props: Mapping[str, Any] | None = None, *, name: str | None = None) -> "Logger":
        """Return a logger sharing this logger's sinks with extended ``props``.

        ``props`` override the parent's keys; ``name`` replaces the inherited
        name when given.

        Examples
        --------
        >>> parent = Logger("svc", props={"env": "prod", "region": "eu"})
        >>> child = parent.create_child({"region": "us", "job": 7})
        >>> dict(child.props), child.name
        ({'env': 'prod', 'region': 'us', 'job': 7}, 'svc')
        """
        merged = {**self._props, **(props or {})}
        return type(self)(name if name is not None else self._name, self._sinks, merged, clock=self._clock)

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Subscribe ``listener`` to asynchronous errors of every sink."""

        for sink in self._sinks:
            sink.add_error_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        for sink in self._sinks:
            sink.remove_error_listener(listener)

    async def aclose(self) -> None:
        """Release sink resources. Call on the root logger only."""

        for sink in self._sinks:
            sink.close()


__all__ = ["Logger"]
