"""Ports describing the boundaries between the logger and its adapters."""

from __future__ import annotations

from .sink import ErrorChannel, ErrorListener, LogStream
from .time import ClockPort, SystemClock

__all__ = ["ClockPort", "ErrorChannel", "ErrorListener", "LogStream", "SystemClock"]
