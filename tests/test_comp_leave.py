"""
Unit tests for comp-leave accrual and usage.
"""

import pytest
from datetime import date, time
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import OvertimeRules
from domain.comp_leave import comp_leave_balance, comp_leave_units_earned, comp_leave_units_used
from domain.entities import AttendanceRecord, LeaveType, OvertimeType


def internal(hours=0.0, end_time=None, day=date(2024, 6, 3)):
    return AttendanceRecord(date=day, ot_hours=hours, end_time=end_time, ot_type=OvertimeType.INTERNAL)


class TestUnitsEarned:
    """Tests for comp_leave_units_earned."""

    def test_derived_hours(self):
        """19:00 against 17:30 is 1.5h, i.e. 3 units."""
        assert comp_leave_units_earned(internal(end_time=time(19, 0)), OvertimeRules()) == 3

    @pytest.mark.parametrize("hours,units", [
        (0.0, 0), (0.25, 0), (0.5, 1), (0.75, 1), (1.0, 2), (2.9, 5), (4.0, 8),
    ])
    def test_partial_units_truncated(self, hours, units):
        assert comp_leave_units_earned(internal(hours)) == units

    def test_minutes_short_of_a_unit(self):
        record = internal(end_time=time(17, 59))
        assert comp_leave_units_earned(record, OvertimeRules()) == 0

    def test_paid_overtime_earns_nothing(self):
        record = AttendanceRecord(date=date(2024, 6, 3), ot_hours=3.0)
        assert comp_leave_units_earned(record) == 0

    def test_leave_offset_overtime_earns_nothing(self):
        record = AttendanceRecord(date=date(2024, 6, 3), ot_hours=3.0, ot_type=OvertimeType.LEAVE)
        assert comp_leave_units_earned(record) == 0

    def test_returns_int(self):
        assert isinstance(comp_leave_units_earned(internal(1.5)), int)


class TestUnitsUsed:
    """Tests for comp_leave_units_used."""

    def test_full_day_comp_leave(self):
        record = AttendanceRecord(
            date=date(2024, 6, 3), is_leave=True, leave_type=LeaveType.COMP, leave_duration=8
        )
        assert comp_leave_units_used(record) == 16

    def test_partial_comp_leave(self):
        record = AttendanceRecord(
            date=date(2024, 6, 3), is_leave=True, leave_type=LeaveType.COMP, leave_duration=1.5
        )
        assert comp_leave_units_used(record) == 3

    def test_annual_leave_uses_no_units(self):
        record = AttendanceRecord(date=date(2024, 6, 3), is_leave=True, leave_type=LeaveType.ANNUAL)
        assert comp_leave_units_used(record) == 0

    def test_not_on_leave(self):
        record = AttendanceRecord(date=date(2024, 6, 3), leave_type=LeaveType.COMP)
        assert comp_leave_units_used(record) == 0


class TestBalance:
    """Tests for comp_leave_balance."""

    def test_earned_minus_used(self):
        records = [
            internal(2.0, day=date(2024, 6, 3)),
            internal(1.5, day=date(2024, 6, 4)),
            AttendanceRecord(date=date(2024, 6, 5), is_leave=True,
                             leave_type=LeaveType.COMP, leave_duration=2),
        ]
        balance = comp_leave_balance(records)
        assert balance.earned == 7
        assert balance.used == 4
        assert balance.balance == 3

    def test_overdraft_is_reported(self):
        records = [
            internal(1.0, day=date(2024, 6, 3)),
            AttendanceRecord(date=date(2024, 6, 5), is_leave=True,
                             leave_type=LeaveType.COMP, leave_duration=8),
        ]
        assert comp_leave_balance(records).balance == -14

    def test_empty_history(self):
        balance = comp_leave_balance([])
        assert balance.earned == 0
        assert balance.balance == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
