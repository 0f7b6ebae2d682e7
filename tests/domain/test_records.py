from __future__ import annotations

import json

import pytest

from lib_log_fanout.domain.levels import LogLevel
from lib_log_fanout.domain.records import ErrorInfo, LogRecord, coalesce


def _coalesce(*args, props=None, level: LogLevel = LogLevel.INFO) -> LogRecord:
    return coalesce(logger_name="svc", level=level, timestamp=1000, props=props, args=args)


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:  # noqa: BLE001 - capturing for the test
        return caught


def test_record_starts_with_timestamp_and_level() -> None:
    record = _coalesce()
    assert list(record.fields) == ["timestamp", "level"]
    assert record.timestamp == 1000
    assert record.level is LogLevel.INFO
    assert record.message is None
    assert record.error is None


def test_last_string_argument_wins() -> None:
    record = _coalesce("first", {"a": 1}, "second")
    assert record.message == "second"


def test_last_error_argument_wins() -> None:
    record = _coalesce(ValueError("one"), "msg", KeyError("two"))
    assert record.error == ErrorInfo(kind="KeyError", message="'two'")


def test_field_maps_merge_left_to_right_over_props() -> None:
    record = _coalesce({"a": 1, "b": 1}, {"b": 2}, props={"a": 0, "env": "test"})
    assert record.fields["a"] == 1
    assert record.fields["b"] == 2
    assert record.fields["env"] == "test"


def test_props_survive_when_not_overridden() -> None:
    record = _coalesce("msg", props={"env": "test", "region": "eu"})
    assert record.fields["env"] == "test"
    assert record.fields["region"] == "eu"


def test_field_map_can_override_msg_key() -> None:
    record = _coalesce("from string", {"msg": "from map"})
    assert record.message == "from map"


def test_level_and_timestamp_cannot_be_overridden_by_fields() -> None:
    record = _coalesce({"level": "debug", "timestamp": "yesterday"}, props={"level": "alert"}, level=LogLevel.ERROR)
    assert record.level is LogLevel.ERROR
    assert record.fields["level"] == "error"
    assert record.timestamp == 1000


def test_none_arguments_are_ignored() -> None:
    record = _coalesce(None, "msg", None)
    assert record.message == "msg"


@pytest.mark.parametrize("bad", [42, 3.5, object(), ["list"]])
def test_unsupported_argument_types_raise(bad) -> None:
    with pytest.raises(TypeError, match="cannot log argument"):
        _coalesce(bad)


def test_error_info_captures_stack_for_raised_exceptions() -> None:
    info = ErrorInfo.from_exception(_raised(RuntimeError("kaput")))
    assert info.kind == "RuntimeError"
    assert info.message == "kaput"
    assert info.stack is not None
    assert "RuntimeError: kaput" in info.stack


def test_error_info_without_traceback_has_no_stack() -> None:
    assert ErrorInfo.from_exception(ValueError("x")).to_dict() == {"kind": "ValueError", "message": "x"}


def test_to_json_is_one_line_in_field_order() -> None:
    record = _coalesce("boom", {"code": 42}, ValueError("bad"), props={"env": "test"}, level=LogLevel.ERROR)
    text = record.to_json()
    assert "\n" not in text
    payload = json.loads(text)
    assert list(payload) == ["timestamp", "level", "env", "msg", "code", "error"]
    assert payload["error"] == {"kind": "ValueError", "message": "bad"}


def test_to_line_appends_newline_and_encodes_utf8() -> None:
    record = _coalesce("grüße")
    line = record.to_line()
    assert line.endswith(b"\n")
    assert json.loads(line.decode("utf-8"))["msg"] == "grüße"


def test_to_json_falls_back_for_foreign_values() -> None:
    from datetime import datetime, timezone

    record = _coalesce({"when": datetime(2025, 1, 1, tzinfo=timezone.utc), "tags": {"a"}, "level_enum": LogLevel.DEBUG, "obj": object})
    payload = json.loads(record.to_json())
    assert payload["when"] == "2025-01-01T00:00:00+00:00"
    assert payload["tags"] == ["a"]
    assert payload["level_enum"] == 7
    assert payload["obj"] == str(object)


def test_record_fields_are_read_only() -> None:
    record = _coalesce("msg")
    with pytest.raises(TypeError):
        record.fields["msg"] = "changed"  # type: ignore[index]


def test_record_requires_a_known_level() -> None:
    with pytest.raises(ValueError):
        LogRecord("svc", {"timestamp": 0, "level": "verbose"})
    with pytest.raises(ValueError):
        LogRecord("svc", {"level": "info"})


def test_to_line_escapes_lone_surrogates() -> None:
    record = _coalesce("bad \udcff name", {"path": "/tmp/\udc80.log"})
    line = record.to_line()
    payload = json.loads(line.decode("utf-8"))
    assert payload["msg"] == "bad \udcff name"
    assert payload["path"] == "/tmp/\udc80.log"
