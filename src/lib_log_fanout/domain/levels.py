"""Severity and facility tables shared by the logger and the syslog sink.

Purpose
-------
Pin the eight API severities to their syslog severity codes and expose the
syslog facility codes used to build ``<PRI>`` header values.

Contents
--------
* :class:`LogLevel` enum with name/code helpers.
* :class:`Facility` enum with the left-shifted facility value.
* :func:`priority` combining both into a syslog priority.

System Role
-----------
Domain vocabulary consulted by :class:`lib_log_fanout.logger.Logger` when it
stamps records and by the syslog adapter when it frames datagrams.
"""

from __future__ import annotations

from enum import Enum


class LogLevel(Enum):
    """Record severities ordered from most (0) to least (7) severe.

    The numeric values are the syslog severity codes and must not change.
    """

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARN = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @property
    def severity(self) -> str:
        """Return the name used at the API surface and in serialized records."""

        return self.name.lower()

    @property
    def code(self) -> int:
        """Return the syslog severity code."""

        return self.value

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve an API severity name such as ``"warn"``.

        Names are case-sensitive.

        Examples
        --------
        >>> LogLevel.from_name("notice").code
        5
        >>> LogLevel.from_name("WARN")
        Traceback (most recent call last):
        ...
        ValueError: Unknown log level: 'WARN'
        """
        try:
            return _BY_SEVERITY[name]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc


_BY_SEVERITY = {level.severity: level for level in LogLevel}


class Facility(Enum):
    """Syslog facility codes (RFC 3164 numbering)."""

    KERN = 0
    USER = 1
    MAIL = 2
    DAEMON = 3
    AUTH = 4
    SYSLOG = 5
    LPR = 6
    NEWS = 7
    UUCP = 8
    AUDIT = 13
    CRON = 15
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22

    @property
    def shifted(self) -> int:
        """Return the facility code shifted into the priority position."""

        return self.value << 3

    @classmethod
    def from_name(cls, name: str) -> "Facility":
        """Resolve a facility name, ignoring case.

        Examples
        --------
        >>> Facility.from_name("local0").shifted
        128
        """
        normalized = name.strip().upper() if isinstance(name, str) else name
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown syslog facility: {name!r}") from exc


def priority(facility: Facility, level: LogLevel) -> int:
    """Return the syslog ``PRI`` value for ``facility`` and ``level``.

    Examples
    --------
    >>> priority(Facility.LOCAL0, LogLevel.ERROR)
    131
    >>> priority(Facility.KERN, LogLevel.EMERGENCY)
    0
    """

    return facility.shifted + level.code


__all__ = ["Facility", "LogLevel", "priority"]
