"""Syslog adapters."""

from __future__ import annotations

from .framing import SyslogSettings, build_header, default_hostname, format_timestamp, frame
from .udp import SyslogSink

__all__ = ["SyslogSettings", "SyslogSink", "build_header", "default_hostname", "format_timestamp", "frame"]
