"""Tests for the in-memory error capture sink."""

from __future__ import annotations

import datetime as dt

from sanitized_logging.metrics import get_metrics
from sanitized_logging.sinks.errors import EXCLUDED_FIELDS, ErrorStream


def test_transport_metadata_is_stripped():
    stream = ErrorStream()
    record = {
        "level": 50,
        "msg": "x",
        "pid": 123,
        "time": dt.datetime.now(tz=dt.timezone.utc),
        "hostname": "h",
        "v": 0,
    }

    assert stream.write(record) is True
    assert stream.get_errors() == [{"level": 50, "msg": "x"}]


def test_written_record_is_not_mutated():
    stream = ErrorStream()
    record = {"level": 50, "msg": "x", "pid": 1}

    stream.write(record)

    assert record == {"level": 50, "msg": "x", "pid": 1}


def test_errors_are_kept_in_write_order():
    stream = ErrorStream()

    for index in range(3):
        stream.write({"level": 50, "msg": f"m{index}"})

    assert [err["msg"] for err in stream.get_errors()] == ["m0", "m1", "m2"]


def test_returned_list_is_a_snapshot():
    stream = ErrorStream()
    stream.write({"msg": "first"})

    errors = stream.get_errors()
    errors.clear()

    assert stream.get_errors() == [{"msg": "first"}]


def test_callback_is_acknowledged():
    stream = ErrorStream()
    acknowledged = []

    stream.write({"msg": "x"}, None, acknowledged.append)

    assert acknowledged == [None]


def test_stream_flags_and_metrics():
    stream = ErrorStream()

    stream.write({"msg": "x"})
    stream.write({"msg": "y"})

    assert stream.writable is True
    assert stream.readable is False
    assert get_metrics().errors_captured == 2
    assert EXCLUDED_FIELDS == ("pid", "time", "v", "hostname")
