"""
Comp-Leave Module

Converts internal overtime into comp-leave units (one unit per 30 minutes)
and tracks units consumed by department comp-leave.
"""

import math
from typing import Iterable, Optional

from .entities import AttendanceRecord, CompLeaveBalance, LeaveType, OvertimeType
from .overtime import resolve_overtime_hours
from config.config_manager import OvertimeRules

UNITS_PER_HOUR = 2


def comp_leave_units_earned(
    record: AttendanceRecord,
    rules: Optional[OvertimeRules] = None
) -> int:
    """
    Units earned by a record's internal overtime.

    Partial units below 30 minutes are dropped. Leave days and non-internal
    overtime earn nothing.
    """
    if record.is_leave or record.ot_type != OvertimeType.INTERNAL:
        return 0
    hours = resolve_overtime_hours(record, rules)
    return math.floor(hours * UNITS_PER_HOUR)


def comp_leave_units_used(record: AttendanceRecord) -> float:
    """Units consumed by a department comp-leave day."""
    if not record.is_leave or record.leave_type != LeaveType.COMP:
        return 0.0
    return max(record.leave_duration or 0.0, 0.0) * UNITS_PER_HOUR


def comp_leave_balance(
    records: Iterable[AttendanceRecord],
    rules: Optional[OvertimeRules] = None
) -> CompLeaveBalance:
    """
    Recompute the comp-leave balance from a record history.

    The balance is reported as-is, including overdraft.
    """
    earned = 0
    used = 0.0
    for record in records:
        earned += comp_leave_units_earned(record, rules)
        used += comp_leave_units_used(record)
    return CompLeaveBalance(earned=earned, used=used)
