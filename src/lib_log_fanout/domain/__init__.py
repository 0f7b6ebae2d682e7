"""Domain entities and value objects used by the logging façade."""

from __future__ import annotations

from .errors import (
    AsyncTransportError,
    ConfigurationError,
    DeliveryError,
    LogFanoutError,
    SinkFailure,
    TransportError,
)
from .levels import Facility, LogLevel, priority
from .records import ErrorInfo, LogRecord, coalesce

__all__ = [
    "AsyncTransportError",
    "ConfigurationError",
    "DeliveryError",
    "ErrorInfo",
    "Facility",
    "LogFanoutError",
    "LogLevel",
    "LogRecord",
    "SinkFailure",
    "TransportError",
    "coalesce",
    "priority",
]
