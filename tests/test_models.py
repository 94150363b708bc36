from datetime import datetime, timedelta

import pytest

from timeclock_core.models import (
    BreakRecord, DailyRecord, Duration, Notification, elapsed_ms, parse_timestamp,
)


class TestDuration:
    @pytest.mark.parametrize("ms, expected", [
        (0, Duration(0, 0, 0)),
        (999, Duration(0, 0, 0)),
        (61_500, Duration(0, 1, 1)),
        (3_600_000 * 7 + 45 * 60_000, Duration(7, 45, 0)),
        (-5_000, Duration(0, 0, 0)),
    ])
    def test_from_ms(self, ms, expected):
        assert Duration.from_ms(ms) == expected

    def test_str_is_zero_padded(self):
        assert str(Duration(7, 5, 3)) == "07:05:03"
        assert str(Duration(123, 0, 0)) == "123:00:00"

    def test_total_minutes_ignores_seconds(self):
        assert Duration(2, 15, 59).total_minutes == 135

    def test_from_dict_tolerates_garbage(self):
        assert Duration.from_dict(None) == Duration()
        assert Duration.from_dict({"hours": "x", "minutes": -4, "seconds": 12}) == Duration(0, 0, 12)


def test_elapsed_ms_floors_and_may_be_negative():
    start = datetime(2026, 10, 19, 9, 0, 0)
    assert elapsed_ms(start, start + timedelta(microseconds=1500)) == 1
    assert elapsed_ms(start + timedelta(seconds=2), start) == -2000


def test_parse_timestamp_accepts_utc_suffix():
    ts = parse_timestamp("2026-10-19T09:00:00.000Z")
    assert ts.utcoffset() == timedelta(0)
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None


class TestBreakRecord:
    def test_close_sets_duration(self):
        rec = BreakRecord(datetime(2026, 10, 19, 11, 0))
        assert rec.is_open
        rec.close(datetime(2026, 10, 19, 11, 15, 30))
        assert not rec.is_open
        assert rec.duration == Duration(0, 15, 30)

    def test_open_record_omits_end_time(self):
        data = BreakRecord(datetime(2026, 10, 19, 11, 0)).to_dict()
        assert "endTime" not in data
        assert data["duration"] == {"hours": 0, "minutes": 0, "seconds": 0}

    def test_from_dict_without_start_is_dropped(self):
        assert BreakRecord.from_dict({"endTime": "2026-10-19T11:00:00"}) is None
        assert BreakRecord.from_dict("nope") is None


def test_daily_record_uses_camel_case_keys():
    record = DailyRecord(
        date="2026-10-19",
        check_in_time="09:00 AM",
        check_out_time="05:00 PM",
        total_work_time=Duration(7, 45, 0),
        total_break_time=Duration(0, 15, 0),
        efficiency=97,
    )
    data = record.to_dict()
    assert set(data) == {
        "date", "checkInTime", "checkOutTime", "totalWorkTime",
        "totalBreakTime", "breaks", "efficiency",
    }
    assert DailyRecord.from_dict(data) == record


def test_daily_record_from_dict_requires_date():
    assert DailyRecord.from_dict({"checkInTime": "09:00 AM"}) is None


def test_notification_to_dict():
    n = Notification("welcome", "success", "hi", datetime(2026, 10, 19, 9, 0))
    assert n.to_dict() == {
        "id": "welcome",
        "kind": "success",
        "message": "hi",
        "timestamp": "2026-10-19T09:00:00",
    }
