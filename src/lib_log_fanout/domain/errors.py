"""Error taxonomy raised by the logging façade and its sinks."""

from __future__ import annotations

from dataclasses import dataclass


class LogFanoutError(Exception):
    """Base class for every error raised by :mod:`lib_log_fanout`."""


class ConfigurationError(LogFanoutError):
    """Raised synchronously when a logger or sink cannot be constructed."""


class TransportError(LogFanoutError):
    """A sink failed to hand a record to its underlying transport."""


class AsyncTransportError(LogFanoutError):
    """Out-of-band transport failure reported through a sink's error channel.

    Attributes
    ----------
    sink_type:
        ``type`` of the sink whose transport failed.
    """

    def __init__(self, sink_type: str, message: str) -> None:
        super().__init__(message)
        self.sink_type = sink_type


@dataclass(frozen=True, slots=True)
class SinkFailure:
    """A single sink's failure inside a fan-out."""

    sink_type: str
    error: BaseException


class DeliveryError(TransportError):
    """One or more sinks failed while delivering the same record.

    Sinks that are not listed in :attr:`failures` have already written the
    record; nothing is rolled back.
    """

    def __init__(self, failures: list[SinkFailure] | tuple[SinkFailure, ...]) -> None:
        self.failures = tuple(failures)
        summary = ", ".join(f"{failure.sink_type}: {failure.error}" for failure in self.failures)
        super().__init__(f"{len(self.failures)} sink(s) failed to deliver the record ({summary})")


__all__ = [
    "AsyncTransportError",
    "ConfigurationError",
    "DeliveryError",
    "LogFanoutError",
    "SinkFailure",
    "TransportError",
]
