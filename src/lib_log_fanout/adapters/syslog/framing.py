"""RFC 3164-style framing for syslog datagrams.

Purpose
-------
Turn a :class:`LogRecord` and its serialized line into the UDP payload
``<PRI>TIMESTAMP HOSTNAME PROCESS MESSAGE``.

Contents
--------
* :class:`SyslogSettings` - immutable sink configuration with defaults.
* :func:`default_hostname` - local host name with the domain suffix stripped.
* :func:`format_timestamp`, :func:`build_header`, :func:`frame`.

System Role
-----------
Pure helpers used by :class:`lib_log_fanout.adapters.syslog.udp.SyslogSink`;
kept separate from the socket code so the wire format is testable without
I/O.
"""

from __future__ import annotations

import socket
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from lib_log_fanout.domain.errors import ConfigurationError
from lib_log_fanout.domain.levels import Facility, priority
from lib_log_fanout.domain.records import LogRecord

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_KNOWN_OPTIONS = frozenset({"type", "host", "port", "facility", "hostname"})


def default_hostname() -> str:
    """Return the local host name without its domain suffix."""

    hostname_value = socket.gethostname() or ""
    return hostname_value.split(".", 1)[0] or "localhost"


@dataclass(frozen=True, slots=True)
class SyslogSettings:
    """Destination and header fields of a syslog sink.

    Attributes
    ----------
    host, port:
        UDP endpoint of the syslog server.
    facility:
        :class:`Facility` combined with each record's severity.
    hostname:
        Value of the HOSTNAME header field.
    """

    host: str = "127.0.0.1"
    port: int = 514
    facility: Facility = Facility.LOCAL0
    hostname: str = field(default_factory=default_hostname)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SyslogSettings":
        """Validate a ``{"type": "syslog", ...}`` configuration entry.

        Missing or empty values fall back to the defaults.

        Examples
        --------
        >>> settings = SyslogSettings.from_options({"port": "5514", "facility": "local3", "hostname": "web1"})
        >>> settings.host, settings.port, settings.facility.name, settings.hostname
        ('127.0.0.1', 5514, 'LOCAL3', 'web1')
        >>> SyslogSettings.from_options({"port": 70000})
        Traceback (most recent call last):
        ...
        lib_log_fanout.domain.errors.ConfigurationError: syslog port must be between 1 and 65535, got 70000
        """
        unknown = sorted(set(options) - _KNOWN_OPTIONS)
        if unknown:
            raise ConfigurationError(f"unknown syslog option(s): {', '.join(unknown)}")

        values: dict[str, Any] = {}
        host = options.get("host")
        if host:
            values["host"] = str(host)

        port = options.get("port")
        if port not in (None, ""):
            try:
                port_number = int(port)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"syslog port must be an integer, got {port!r}") from exc
            if not 0 < port_number < 65536:
                raise ConfigurationError(f"syslog port must be between 1 and 65535, got {port_number}")
            values["port"] = port_number

        facility = options.get("facility")
        if facility:
            if isinstance(facility, Facility):
                values["facility"] = facility
            else:
                try:
                    values["facility"] = Facility.from_name(facility)
                except ValueError as exc:
                    raise ConfigurationError(str(exc)) from exc

        hostname = options.get("hostname")
        if hostname:
            values["hostname"] = str(hostname)
        return cls(**values)


def format_timestamp(timestamp_ms: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string.

    Examples
    --------
    >>> format_timestamp(1_700_000_000_123)
    '2023-11-14T22:13:20.123Z'
    """

    moment = _EPOCH + timedelta(milliseconds=timestamp_ms)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_header(record: LogRecord, settings: SyslogSettings) -> str:
    """Return ``<PRI>TIMESTAMP HOSTNAME PROCESS`` for ``record``."""

    pri = priority(settings.facility, record.level)
    return f"<{pri}>{format_timestamp(record.timestamp)} {settings.hostname} {record.logger_name}"


def frame(record: LogRecord, line: bytes, settings: SyslogSettings) -> bytes:
    """Concatenate the header and the serialized line into one datagram.

    Examples
    --------
    >>> record = LogRecord("svc-a", {"timestamp": 0, "level": "error", "msg": "boom"})
    >>> frame(record, record.to_line(), SyslogSettings(hostname="web1"))
    b'<131>1970-01-01T00:00:00.000Z web1 svc-a {"timestamp":0,"level":"error","msg":"boom"}\\n'
    """

    return f"{build_header(record, settings)} ".encode("utf-8") + line


__all__ = ["SyslogSettings", "build_header", "default_hostname", "format_timestamp", "frame"]
