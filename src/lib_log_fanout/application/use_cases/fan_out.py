"""Use case delivering one record to every configured sink concurrently.

Purpose
-------
Launch one ``log`` operation per sink, wait until every operation settled and
aggregate failures, so a slow or broken sink never hides the outcome of the
others.

Contents
--------
* :func:`deliver` - concurrent join over all sinks.

System Role
-----------
Called by every severity method of :class:`lib_log_fanout.logger.Logger`; the
only suspension point of a logging call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from lib_log_fanout.application.ports.sink import LogStream
from lib_log_fanout.domain.errors import DeliveryError, SinkFailure, TransportError
from lib_log_fanout.domain.records import LogRecord


async def deliver(sinks: Sequence[LogStream], record: LogRecord, line: bytes) -> None:
    """Send ``record`` and its serialized ``line`` to every sink in parallel.

    Raises
    ------
    DeliveryError
        When at least one sink raised :class:`TransportError`. Sinks that
        succeeded have already written the record.
    Exception
        Any other exception (for example ``NotImplementedError`` from a sink
        missing ``write``) is re-raised unchanged once all sinks settled.
    ExceptionGroup
        When failures of both kinds occurred, or several sinks raised
        unexpected exceptions. The group holds every unexpected exception and,
        when transport failures occurred, one :class:`DeliveryError`.

    Examples
    --------
    >>> import asyncio
    >>> from lib_log_fanout.domain.records import LogRecord
    >>> class Memory(LogStream):
    ...     type = "memory"
    ...     def __init__(self):
    ...         self.lines = []
    ...     async def write(self, data):
    ...         self.lines.append(data)
    >>> sink = Memory()
    >>> record = LogRecord("svc", {"timestamp": 0, "level": "info"})
    >>> asyncio.run(deliver([sink], record, record.to_line()))
    >>> sink.lines
    [b'{"timestamp":0,"level":"info"}\\n']
    """
    if not sinks:
        return
    results = await asyncio.gather(*(sink.log(record, line) for sink in sinks), return_exceptions=True)

    failures: list[SinkFailure] = []
    unexpected: list[Exception] = []
    for sink, result in zip(sinks, results):
        if not isinstance(result, BaseException):
            continue
        if isinstance(result, TransportError):
            failures.append(SinkFailure(sink_type=sink.type, error=result))
        elif not isinstance(result, Exception):
            # CancelledError, KeyboardInterrupt and friends propagate first.
            raise result
        else:
            unexpected.append(result)

    errors: list[Exception] = [*unexpected]
    if failures:
        errors.append(DeliveryError(failures))
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise ExceptionGroup(f"{len(errors)} error(s) while delivering the record", errors)


__all__ = ["deliver"]
