from __future__ import annotations

import asyncio
import json
import re
import socket
import sys
import time

import pytest

from lib_log_fanout.adapters.syslog import framing
from lib_log_fanout.adapters.syslog.framing import SyslogSettings, build_header, format_timestamp, frame
from lib_log_fanout.adapters.syslog.udp import SyslogSink
from lib_log_fanout.domain.errors import AsyncTransportError, ConfigurationError, TransportError
from lib_log_fanout.domain.levels import Facility, LogLevel
from lib_log_fanout.domain.records import LogRecord, coalesce

DATAGRAM_RE = re.compile(rb"^<(\d+)>(\S+) (\S+) (\S+) (.*)\n$", re.DOTALL)


def _record(level: LogLevel = LogLevel.ERROR, name: str = "svc-a") -> LogRecord:
    return coalesce(logger_name=name, level=level, timestamp=1_758_628_800_123, props={"env": "test"}, args=["boom"])


def test_defaults_follow_syslog_conventions(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(framing.socket, "gethostname", lambda: "web1.example.com")
    settings = SyslogSettings()
    assert settings.host == "127.0.0.1"
    assert settings.port == 514
    assert settings.facility is Facility.LOCAL0
    assert settings.hostname == "web1"


def test_from_options_ignores_empty_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(framing.socket, "gethostname", lambda: "box")
    settings = SyslogSettings.from_options({"type": "syslog", "host": "", "port": None, "facility": None})
    assert settings == SyslogSettings(hostname="box")


def test_from_options_accepts_facility_members() -> None:
    settings = SyslogSettings.from_options({"facility": Facility.DAEMON, "hostname": "h"})
    assert settings.facility is Facility.DAEMON


@pytest.mark.parametrize(
    "options, match",
    [
        ({"port": "syslog"}, "must be an integer"),
        ({"port": 0}, "between 1 and 65535"),
        ({"facility": "LOCAL9"}, "Unknown syslog facility"),
        ({"protocol": "tcp"}, "unknown syslog option"),
    ],
)
def test_from_options_rejects_invalid_values(options: dict, match: str) -> None:
    with pytest.raises(ConfigurationError, match=match):
        SyslogSettings.from_options(options)


def test_timestamp_is_iso8601_utc_with_milliseconds() -> None:
    assert format_timestamp(1_758_628_800_123) == "2025-09-23T12:00:00.123Z"
    assert format_timestamp(0) == "1970-01-01T00:00:00.000Z"


@pytest.mark.parametrize("level", list(LogLevel))
def test_header_priority_adds_severity_to_facility(level: LogLevel) -> None:
    settings = SyslogSettings(facility=Facility.LOCAL3, hostname="web1")
    header = build_header(_record(level), settings)
    assert header.startswith(f"<{19 * 8 + level.code}>")


def test_frame_layout() -> None:
    record = _record()
    payload = frame(record, record.to_line(), SyslogSettings(hostname="web1"))
    assert payload == b"<131>2025-09-23T12:00:00.123Z web1 svc-a " + record.to_line()


def test_sink_sends_one_datagram_per_record(udp_listener: socket.socket) -> None:
    port = udp_listener.getsockname()[1]
    sink = SyslogSink(SyslogSettings(port=port, hostname="testhost"))
    record = _record(LogLevel.WARN)

    async def _send() -> None:
        await sink.log(record, record.to_line())
        sink.close()

    asyncio.run(_send())
    data, _ = udp_listener.recvfrom(65535)

    match = DATAGRAM_RE.match(data)
    assert match is not None
    assert int(match.group(1)) == Facility.LOCAL0.shifted + LogLevel.WARN.code
    assert match.group(2) == b"2025-09-23T12:00:00.123Z"
    assert match.group(3) == b"testhost"
    assert match.group(4) == b"svc-a"
    body = json.loads(match.group(5))
    assert body["level"] == "warn"
    assert body["msg"] == "boom"
    assert body["env"] == "test"


def test_sink_reopens_transport_for_new_event_loop(udp_listener: socket.socket) -> None:
    port = udp_listener.getsockname()[1]
    sink = SyslogSink(SyslogSettings(port=port, hostname="testhost"))

    async def _send(name: str) -> None:
        record = _record(name=name)
        await sink.log(record, record.to_line())
        await sink.log(record, record.to_line())
        sink.close()

    asyncio.run(_send("first"))
    asyncio.run(_send("second"))

    names = [DATAGRAM_RE.match(udp_listener.recvfrom(65535)[0]).group(4) for _ in range(4)]
    assert sorted(names) == [b"first", b"first", b"second", b"second"]


def test_sink_reports_socket_open_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _refuse(self, *_args, **_kwargs):
        raise OSError("no route to host")

    monkeypatch.setattr(asyncio.BaseEventLoop, "getaddrinfo", _refuse)
    sink = SyslogSink(SyslogSettings(port=5514, hostname="h"))
    notified: list[AsyncTransportError] = []
    sink.add_error_listener(notified.append)
    record = _record()

    with pytest.raises(TransportError, match="no route to host"):
        asyncio.run(sink.log(record, record.to_line()))

    assert [error.sink_type for error in notified] == ["syslog"]


def test_oversized_datagram_fails_the_call(udp_listener: socket.socket) -> None:
    port = udp_listener.getsockname()[1]
    sink = SyslogSink(SyslogSettings(port=port, hostname="testhost"))
    record = coalesce(logger_name="svc-a", level=LogLevel.ERROR, timestamp=0, props=None, args=["x" * 70_000])

    async def _send() -> None:
        try:
            await sink.log(record, record.to_line())
        finally:
            sink.close()

    with pytest.raises(TransportError, match="syslog send to 127.0.0.1"):
        asyncio.run(_send())


def _closed_udp_port() -> int:
    placeholder = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    placeholder.bind(("127.0.0.1", 0))
    port = placeholder.getsockname()[1]
    placeholder.close()
    return port


@pytest.mark.skipif(sys.platform != "linux", reason="relies on loopback ICMP port-unreachable reporting")
def test_late_socket_errors_reach_error_listeners() -> None:
    sink = SyslogSink(SyslogSettings(port=_closed_udp_port(), hostname="testhost"))
    notified: list[AsyncTransportError] = []
    sink.add_error_listener(notified.append)
    record = _record()

    async def _send_then_wait() -> None:
        try:
            await sink.log(record, record.to_line())
            deadline = time.monotonic() + 2.0
            while not notified and time.monotonic() < deadline:
                await asyncio.sleep(0.01)
        finally:
            sink.close()

    asyncio.run(_send_then_wait())

    assert [error.sink_type for error in notified] == ["syslog"]
    assert "syslog socket error" in str(notified[0])


def test_removed_listener_is_not_notified() -> None:
    sink = SyslogSink(SyslogSettings(hostname="h"))
    seen: list[AsyncTransportError] = []
    sink.add_error_listener(seen.append)
    sink.remove_error_listener(seen.append)
    sink.add_error_listener(lambda _error: None)

    sink._errors.notify(AsyncTransportError("syslog", "late failure"))

    assert seen == []


def test_sink_exposes_settings() -> None:
    sink = SyslogSink.from_options({"host": "10.0.0.5", "port": 1514, "facility": "user", "hostname": "edge"})
    assert sink.type == "syslog"
    assert (sink.host, sink.port, sink.hostname) == ("10.0.0.5", 1514, "edge")
    assert sink.settings.facility is Facility.USER


def test_close_without_transport_is_safe() -> None:
    SyslogSink(SyslogSettings(hostname="h")).close()
