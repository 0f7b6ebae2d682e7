"""Structured log records and the argument-coalescing rule.

Purpose
-------
Turn the heterogeneous arguments of a logging call (strings, exceptions, field
maps) into one flat, immutable record and serialize it exactly once.

Contents
--------
* :class:`ErrorInfo` - structured error value (kind, message, optional stack).
* :class:`LogRecord` - immutable record with JSON line serialization.
* :func:`coalesce` - the left-to-right merge applied by every severity method.

System Role
-----------
Pure domain logic: the logger builds records here and every sink receives the
same :class:`LogRecord` together with its serialized line.
"""

from __future__ import annotations

import json
import traceback
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from .levels import LogLevel


@dataclass(slots=True, frozen=True)
class ErrorInfo:
    """Structured representation of an exception attached to a record.

    Attributes
    ----------
    kind:
        Exception class name (``"ValueError"``).
    message:
        ``str(exc)`` at capture time.
    stack:
        Formatted traceback when the exception was raised, else ``None``.
    """

    kind: str
    message: str
    stack: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        """Capture ``exc`` without keeping a reference to its frames.

        Examples
        --------
        >>> ErrorInfo.from_exception(KeyError("missing"))
        ErrorInfo(kind='KeyError', message="'missing'", stack=None)
        """
        stack = None
        if exc.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
        return cls(kind=type(exc).__name__, message=str(exc), stack=stack)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.stack is not None:
            data["stack"] = self.stack
        return data


def _json_default(value: Any) -> Any:
    """Fallback encoder for values :mod:`json` cannot serialize natively."""
    if isinstance(value, ErrorInfo):
        return value.to_dict()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    return str(value)


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Immutable, flat record produced by one logging call.

    ``fields`` always starts with ``timestamp`` (milliseconds since the Unix
    epoch, UTC) and ``level`` (the severity name); later keys keep the order
    in which they were first merged.
    """

    logger_name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if "timestamp" not in self.fields or "level" not in self.fields:
            raise ValueError("record must carry 'timestamp' and 'level' fields")
        LogLevel.from_name(self.fields["level"])
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def timestamp(self) -> int:
        return self.fields["timestamp"]

    @property
    def level(self) -> LogLevel:
        return LogLevel.from_name(self.fields["level"])

    @property
    def message(self) -> str | None:
        return self.fields.get("msg")

    @property
    def error(self) -> ErrorInfo | None:
        return self.fields.get("error")

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the fields with errors rendered as dicts."""

        return {key: value.to_dict() if isinstance(value, ErrorInfo) else value for key, value in self.fields.items()}

    def to_json(self) -> str:
        """Serialize the record to one line of JSON, keeping field order.

        Examples
        --------
        >>> record = LogRecord("svc", {"timestamp": 0, "level": "info", "msg": "hi"})
        >>> record.to_json()
        '{"timestamp":0,"level":"info","msg":"hi"}'
        """
        return json.dumps(dict(self.fields), default=_json_default, ensure_ascii=False, separators=(",", ":"))

    def to_line(self) -> bytes:
        """Return the UTF-8 encoded JSON line including its trailing newline.

        Lone surrogates, such as undecodable file names, become JSON
        ``\\uXXXX`` escapes instead of failing the call.

        Examples
        --------
        >>> LogRecord("svc", {"timestamp": 0, "level": "info", "msg": "bad \\udcff"}).to_line()
        b'{"timestamp":0,"level":"info","msg":"bad \\\\udcff"}\\n'
        """
        return f"{self.to_json()}\n".encode("utf-8", errors="backslashreplace")


def coalesce(
    *,
    logger_name: str,
    level: LogLevel,
    timestamp: int,
    props: Mapping[str, Any] | None,
    args: Iterable[Any],
) -> LogRecord:
    """Merge logging-call arguments into a single :class:`LogRecord`.

    The record starts from ``timestamp`` and ``level``, then ``props`` are
    merged, then each argument left to right: a mapping merges its keys, a
    string replaces ``msg`` and an exception (or :class:`ErrorInfo`)
    replaces ``error``. ``None`` arguments are skipped. ``timestamp`` and
    ``level`` always keep the values stamped by the caller of this function.

    Raises
    ------
    TypeError
        For an argument of any other type.

    Examples
    --------
    >>> record = coalesce(
    ...     logger_name="svc",
    ...     level=LogLevel.ERROR,
    ...     timestamp=1,
    ...     props={"env": "test", "code": 1},
    ...     args=["first", {"code": 42}, "boom"],
    ... )
    >>> dict(record.fields)
    {'timestamp': 1, 'level': 'error', 'env': 'test', 'code': 42, 'msg': 'boom'}
    """
    fields: dict[str, Any] = {"timestamp": timestamp, "level": level.severity}
    if props:
        fields.update(props)
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, str):
            fields["msg"] = arg
        elif isinstance(arg, BaseException):
            fields["error"] = ErrorInfo.from_exception(arg)
        elif isinstance(arg, ErrorInfo):
            fields["error"] = arg
        elif isinstance(arg, Mapping):
            fields.update(arg)
        else:
            raise TypeError(f"cannot log argument of type {type(arg).__name__}; expected str, exception or mapping")
    # timestamp and level are stamped by the logger, never by caller fields.
    fields["timestamp"] = timestamp
    fields["level"] = level.severity
    return LogRecord(logger_name=logger_name, fields=fields)


__all__ = ["ErrorInfo", "LogRecord", "coalesce"]
