import io
from datetime import date

import pytest

from timeclock_core import reports
from timeclock_core.models import DailyRecord, Duration


def day(d, work, brk, eff, check_out="05:00 PM"):
    return DailyRecord(
        date=d,
        check_in_time="09:00 AM",
        check_out_time=check_out,
        total_work_time=work,
        total_break_time=brk,
        efficiency=eff,
    )


class TestEfficiency:
    def test_empty_day_is_fully_efficient(self):
        assert reports.efficiency(0, 0) == 100

    @pytest.mark.parametrize("work, brk, expected", [
        (80, 20, 80),
        (465, 15, 97),
        (0, 30, 0),
        (1, 1, 50),
        (1, 7, 13),      # 12.5 rounds up
        (7, 1, 88),      # 87.5 rounds up
    ])
    def test_rounding(self, work, brk, expected):
        assert reports.efficiency(work, brk) == expected

    def test_efficiency_of_uses_whole_minutes(self):
        assert reports.efficiency_of(Duration(7, 45, 59), Duration(0, 15, 30)) == 97


@pytest.mark.parametrize("value, label", [
    (100, "Excellent"), (80, "Excellent"), (79, "Good"),
    (60, "Good"), (59, "Fair"), (40, "Fair"), (39, "Needs Improvement"),
])
def test_work_status(value, label):
    assert reports.work_status(value) == label


def test_break_status_and_average():
    assert reports.average_break_minutes(Duration(0, 45, 0), 2) == 23
    assert reports.average_break_minutes(Duration(0, 45, 0), 0) == 0
    assert reports.break_status(15) == "Short Breaks"
    assert reports.break_status(30) == "Moderate Breaks"
    assert reports.break_status(31) == "Long Breaks"


def test_break_duration_validation():
    assert reports.is_valid_break_duration(60)
    assert not reports.is_valid_break_duration(61)


class TestWeeklyReport:
    records = [
        day("2026-10-18", Duration(8, 0, 0), Duration(0, 30, 0), 94),   # previous week
        day("2026-10-19", Duration(7, 45, 0), Duration(0, 15, 0), 97),
        day("2026-10-20", Duration(6, 30, 0), Duration(1, 0, 0), 87),
        day("2026-10-21", Duration(8, 0, 0), Duration(0, 10, 0), 98),
        day("2026-10-26", Duration(8, 0, 0), Duration(0, 0, 0), 100),   # next week
    ]

    def test_summarises_only_the_week(self):
        report = reports.weekly_report(self.records, date(2026, 10, 19))
        assert report.week_start_date == "2026-10-19"
        assert report.total_work_hours == 22.25
        assert report.average_efficiency == 94
        assert report.total_break_minutes == 85
        assert report.most_productive_day == "2026-10-21"

    def test_empty_week(self):
        report = reports.weekly_report(self.records, date(2026, 11, 2))
        assert report == reports.WeeklyReport("2026-11-02", 0, 0, 0, "-")

    def test_bad_dates_are_skipped(self):
        report = reports.weekly_report([day("soon", Duration(1, 0, 0), Duration(), 100)],
                                       date(2026, 10, 19))
        assert report.most_productive_day == "-"


class TestSortAndFilter:
    records = [
        day("2026-10-19", Duration(7, 45, 0), Duration(0, 15, 0), 97),
        day("2026-10-20", Duration(3, 0, 0), Duration(2, 0, 0), 60),
        day("2026-10-21", Duration(2, 0, 0), Duration(0, 0, 0), 100),
        day("2026-10-22", Duration(1, 0, 0), Duration(2, 0, 0), 33),
    ]

    def test_sort_by_date_descending_by_default(self):
        assert [r.date for r in reports.sort_records(self.records)] == [
            "2026-10-22", "2026-10-21", "2026-10-20", "2026-10-19",
        ]

    def test_sort_by_work_time_ascending(self):
        result = reports.sort_records(self.records, key="workTime", descending=False)
        assert [r.total_work_time.hours for r in result] == [1, 2, 3, 7]

    def test_unknown_sort_key_keeps_order(self):
        assert reports.sort_records(self.records, key="mood") == self.records

    def test_filter_by_band(self):
        result = reports.filter_records(self.records, bands={"excellent"})
        assert [r.efficiency for r in result] == [97, 100]
        result = reports.filter_records(self.records, bands={"good", "poor"})
        assert [r.efficiency for r in result] == [60, 33]

    def test_filter_by_breaks(self):
        assert len(reports.filter_records(self.records, has_breaks="with")) == 3
        assert [r.date for r in reports.filter_records(self.records, has_breaks="without")] == [
            "2026-10-21",
        ]


def test_export_csv_to_stream():
    out = io.StringIO()
    count = reports.export_csv([
        day("2026-10-19", Duration(7, 45, 0), Duration(0, 15, 0), 97),
        day("2026-10-20", Duration(1, 0, 0), Duration(), 100, check_out=""),
    ], out)

    assert count == 2
    assert out.getvalue().splitlines() == [
        "Date,Check In,Check Out,Work Time,Break Time,Efficiency",
        "2026-10-19,09:00 AM,05:00 PM,07:45:00,00:15:00,97%",
        "2026-10-20,09:00 AM,-,01:00:00,00:00:00,100%",
    ]


def test_export_csv_to_path(tmp_path):
    path = tmp_path / "history.csv"
    assert reports.export_csv([], path) == 0
    assert path.read_text(encoding="utf-8") == ",".join(reports.CSV_HEADERS) + "\n"
