"""Explicit registry mapping sink types to their factories.

Purpose
-------
Translate :class:`~lib_log_fanout.config.LoggerConfig` into a live
:class:`~lib_log_fanout.logger.Logger` without any dynamic discovery.

Contents
--------
* :data:`SINK_FACTORIES` - ``type`` name to factory, populated at import.
* :func:`is_supported`, :func:`create_sink`, :func:`create_logger`.

System Role
-----------
Composition root for configured loggers. Construction is atomic: the name and
every sink type are validated before any sink is built, and sinks built before
a failing factory are closed again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from lib_log_fanout.adapters import ConsoleSink, SyslogSink
from lib_log_fanout.application.ports.sink import LogStream
from lib_log_fanout.application.ports.time import ClockPort
from lib_log_fanout.config import LoggerConfig, SinkConfig
from lib_log_fanout.domain.errors import ConfigurationError
from lib_log_fanout.logger import Logger

LOGGER = logging.getLogger(__name__)

SinkFactory = Callable[[Mapping[str, Any]], LogStream]

SINK_FACTORIES: Mapping[str, SinkFactory] = MappingProxyType(
    {
        "console": ConsoleSink.from_options,
        "syslog": SyslogSink.from_options,
    }
)
"""Supported sink types keyed by their configuration ``type`` value."""


def is_supported(sink_type: str) -> bool:
    """Return ``True`` when ``sink_type`` names a registered sink.

    Examples
    --------
    >>> is_supported("syslog"), is_supported("carrier-pigeon")
    (True, False)
    """

    return sink_type in SINK_FACTORIES


def create_sink(config: SinkConfig) -> LogStream:
    """Instantiate the sink described by ``config``."""

    try:
        factory = SINK_FACTORIES[config.type]
    except KeyError as exc:
        raise ConfigurationError(f'unsupported logger "{config.type}"') from exc
    return factory(config.options)


def create_logger(config: LoggerConfig | Mapping[str, Any], *, clock: ClockPort | None = None) -> Logger:
    """Build a :class:`Logger` and all of its sinks from configuration.

    Raises
    ------
    ConfigurationError
        When the name is missing, a sink type is unknown or a sink rejects
        its options. No sink stays open in that case.

    Examples
    --------
    >>> logger = create_logger({"name": "svc-a", "props": {"env": "test"}, "loggers": [{"type": "console"}]})
    >>> logger
    Logger(name='svc-a', sinks=[console])
    >>> create_logger({"name": "svc-a", "loggers": [{"type": "console"}, {"type": "carrier-pigeon"}]})
    Traceback (most recent call last):
    ...
    lib_log_fanout.domain.errors.ConfigurationError: unsupported logger "carrier-pigeon"
    """
    resolved = config if isinstance(config, LoggerConfig) else LoggerConfig.from_mapping(config)
    if not resolved.name or not resolved.name.strip():
        raise ConfigurationError("must specify a name for the logger")
    for sink_config in resolved.sinks:
        if not is_supported(sink_config.type):
            raise ConfigurationError(f'unsupported logger "{sink_config.type}"')

    sinks: list[LogStream] = []
    try:
        for sink_config in resolved.sinks:
            sinks.append(create_sink(sink_config))
    except Exception as exc:
        for sink in sinks:
            sink.close()
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(f"cannot construct sink: {exc}") from exc

    LOGGER.debug("Created logger %s with sinks %s", resolved.name, [sink.type for sink in sinks])
    return Logger(resolved.name, sinks, resolved.props, clock=clock)


__all__ = ["SINK_FACTORIES", "SinkFactory", "create_logger", "create_sink", "is_supported"]
