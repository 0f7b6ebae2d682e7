"""Public package surface of the structured logging façade.

``create_logger`` builds a :class:`Logger` from configuration; the logger
coalesces call arguments into one record and delivers it to every configured
sink concurrently.
"""

from __future__ import annotations

from .adapters import ConsoleSink, SyslogSettings, SyslogSink
from .application.ports import ClockPort, ErrorChannel, LogStream
from .config import LoggerConfig, SinkConfig, load_config
from .domain import (
    AsyncTransportError,
    ConfigurationError,
    DeliveryError,
    ErrorInfo,
    Facility,
    LogFanoutError,
    LogLevel,
    LogRecord,
    SinkFailure,
    TransportError,
)
from .logger import Logger
from .registry import SINK_FACTORIES, create_logger, is_supported

__all__ = [
    "AsyncTransportError",
    "ClockPort",
    "ConfigurationError",
    "ConsoleSink",
    "DeliveryError",
    "ErrorChannel",
    "ErrorInfo",
    "Facility",
    "LogFanoutError",
    "LogLevel",
    "LogRecord",
    "LogStream",
    "Logger",
    "LoggerConfig",
    "SINK_FACTORIES",
    "SinkConfig",
    "SinkFailure",
    "SyslogSettings",
    "SyslogSink",
    "TransportError",
    "create_logger",
    "is_supported",
    "load_config",
]
