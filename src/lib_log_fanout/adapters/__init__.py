"""Concrete sink adapters for the logging façade."""

from __future__ import annotations

from .console import ConsoleSink
from .syslog import SyslogSettings, SyslogSink

__all__ = ["ConsoleSink", "SyslogSettings", "SyslogSink"]
