"""
Unit tests for record dict conversion and the JSON record store.
"""

import pytest
import json
from datetime import date, time
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import AttendanceRecord, BonusEntry, LeaveType, OvertimeType
from infrastructure.record_mapper import (
    record_from_dict, record_to_dict, records_from_dicts, to_bool, to_float
)
from infrastructure.record_store import RecordStore


class TestCoercion:
    """Tests for the scalar coercion helpers."""

    @pytest.mark.parametrize("value,expected", [
        (None, 0.0), ("", 0.0), ("abc", 0.0), (" 2.5 ", 2.5), (3, 3.0), (True, 0.0), ("nan", 0.0),
        ("inf", 0.0), ("Infinity", 0.0), ("-inf", 0.0), (float("inf"), 0.0),
    ])
    def test_to_float(self, value, expected):
        assert to_float(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (None, None), (True, True), (0, False), ("TRUE", True), ("是", True),
        ("false", False), ("否", False), ("", None), ("maybe", None),
    ])
    def test_to_bool(self, value, expected):
        assert to_bool(value) is expected


class TestRecordFromDict:
    """Tests for record_from_dict."""

    def test_full_record(self):
        record = record_from_dict({
            "date": "2024-06-03T00:00:00.000Z",
            "endTime": "20:15",
            "otHours": "1.5",
            "otType": "internal",
            "isHoliday": "false",
            "isLeave": False,
            "leaveType": "補休",
            "leaveDuration": 4,
            "travelCountry": " Japan ",
            "bonus": 100,
            "unknownKey": "ignored",
        })

        assert record.date == date(2024, 6, 3)
        assert record.end_time == time(20, 15)
        assert record.ot_hours == 1.5
        assert record.ot_type == OvertimeType.INTERNAL
        assert record.is_holiday is False
        assert record.leave_type == LeaveType.COMP
        assert record.leave_duration == 4.0
        assert record.travel_country == "Japan"
        assert record.bonus == 100.0

    def test_defaults(self):
        record = record_from_dict({"date": "2024-06-03"})

        assert record.end_time is None
        assert record.ot_hours == 0.0
        assert record.ot_type == OvertimeType.PAID
        assert record.is_holiday is None
        assert record.is_leave is False
        assert record.leave_type == LeaveType.ANNUAL
        assert record.leave_duration == 8.0
        assert record.travel_country == ""

    def test_unparseable_values(self):
        record = record_from_dict({
            "date": "2024-06-03", "otHours": "lots", "leaveDuration": "all day",
            "otType": "weird", "leaveType": "vacation?",
        })
        assert record.ot_hours == 0.0
        assert record.leave_duration == 0.0
        assert record.ot_type == OvertimeType.PAID
        assert record.leave_type == LeaveType.ANNUAL

    def test_infinite_hours_become_zero(self):
        record = record_from_dict({"date": "2024-06-03", "otHours": "Infinity", "otType": "internal"})
        assert record.ot_hours == 0.0

    def test_legacy_country_key(self):
        record = record_from_dict({"date": "2024-06-03", "country": "Vietnam"})
        assert record.travel_country == "Vietnam"

    def test_bonus_entries_override_scalar(self):
        record = record_from_dict({
            "date": "2024-06-03",
            "bonus": 999,
            "bonusEntries": [{"amount": 300, "category": "績效"}, {"amount": "200"}, "junk"],
        })
        assert len(record.bonus_entries) == 2
        assert record.bonus == 500.0

    @pytest.mark.parametrize("value", [None, "", "someday", "2024-02-30"])
    def test_bad_date(self, value):
        assert record_from_dict({"date": value}) is None

    def test_records_from_dicts_drops_invalid(self):
        records = records_from_dicts([
            {"date": "2024-06-03"}, {"date": "bad"}, "not a dict", {"date": "2024-06-04"},
        ])
        assert [r.date for r in records] == [date(2024, 6, 3), date(2024, 6, 4)]


class TestRecordToDict:
    """Tests for record_to_dict."""

    def test_round_trip_keeps_fields(self):
        record = AttendanceRecord(
            date=date(2024, 6, 3),
            end_time=time(19, 45),
            ot_type=OvertimeType.INTERNAL,
            is_leave=True,
            leave_type=LeaveType.SICK,
            leave_duration=2.0,
            travel_country="Japan",
            bonus_entries=[BonusEntry(amount=150.0, note="專案")],
        )
        data = record_to_dict(record)

        assert data["date"] == "2024-06-03"
        assert data["endTime"] == "19:45"
        assert data["otType"] == "internal"
        assert data["leaveType"] == "sick"
        assert data["bonus"] == 150.0
        assert record_from_dict(data) == AttendanceRecord(
            date=date(2024, 6, 3),
            end_time=time(19, 45),
            ot_type=OvertimeType.INTERNAL,
            is_leave=True,
            leave_type=LeaveType.SICK,
            leave_duration=2.0,
            travel_country="Japan",
            bonus=150.0,
            bonus_entries=[BonusEntry(amount=150.0, note="專案")],
        )

    def test_holiday_written_only_when_set(self):
        assert "isHoliday" not in record_to_dict(AttendanceRecord(date=date(2024, 6, 3)))
        data = record_to_dict(AttendanceRecord(date=date(2024, 6, 3), is_holiday=True))
        assert data["isHoliday"] is True


class TestRecordStore:
    """Tests for RecordStore."""

    def test_missing_file_is_empty(self, tmp_path):
        assert RecordStore(tmp_path / "records.json").load() == []

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text("{broken", encoding='utf-8')
        assert RecordStore(path).load() == []

    def test_non_list_file_is_empty(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text('{"date": "2024-06-03"}', encoding='utf-8')
        assert RecordStore(path).load() == []

    def test_save_sorts_by_date(self, tmp_path):
        path = tmp_path / "records.json"
        store = RecordStore(path)
        store.save([
            AttendanceRecord(date=date(2024, 6, 5)),
            AttendanceRecord(date=date(2024, 6, 3)),
        ])

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert [item["date"] for item in data] == ["2024-06-03", "2024-06-05"]

    def test_add_or_update_merges_by_date(self, tmp_path):
        store = RecordStore(tmp_path / "records.json")
        store.add_or_update(AttendanceRecord(date=date(2024, 6, 3), ot_hours=1.0))
        store.add_or_update(AttendanceRecord(date=date(2024, 6, 4), ot_hours=2.0))
        records = store.add_or_update(AttendanceRecord(date=date(2024, 6, 3), ot_hours=3.0))

        assert [(r.date, r.ot_hours) for r in records] == [
            (date(2024, 6, 3), 3.0), (date(2024, 6, 4), 2.0)
        ]
        assert len(store.load()) == 2

    def test_delete(self, tmp_path):
        store = RecordStore(tmp_path / "records.json")
        store.save([AttendanceRecord(date=date(2024, 6, 3)), AttendanceRecord(date=date(2024, 6, 4))])

        remaining = store.delete("2024-06-03")

        assert [r.date for r in remaining] == [date(2024, 6, 4)]
        assert [r.date for r in store.load()] == [date(2024, 6, 4)]

    def test_delete_missing_date_is_noop(self, tmp_path):
        store = RecordStore(tmp_path / "records.json")
        store.save([AttendanceRecord(date=date(2024, 6, 3))])
        assert len(store.delete(date(2024, 1, 1))) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
