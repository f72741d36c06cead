"""
Overtime Hours Module

Derives overtime hours from a clock-out time and splits them into the
pay tiers used by the salary engine.
"""

import math
from datetime import datetime, time
from typing import Optional, Tuple

from .entities import AttendanceRecord
from config.config_manager import DEFAULT_STANDARD_END_TIME, OvertimeRules

# Tier band widths in hours: first 2h at ot1, next 2h at ot2, rest at ot3
TIER_1_HOURS = 2.0
TIER_2_HOURS = 2.0


def parse_time(value) -> Optional[time]:
    """Parse a wall-clock time ("HH:MM", "HH:MM:SS", time, datetime)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value

    text = str(value).strip()
    if not text:
        return None
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def derive_overtime_hours(end_time, standard_end_time=None) -> float:
    """
    Calculate overtime hours between the standard end time and clock-out.

    Args:
        end_time: Clock-out time
        standard_end_time: Nominal end of the workday (default 17:30)

    Returns:
        Hours at minute precision, never negative
    """
    end = parse_time(end_time)
    if end is None:
        return 0.0

    standard = parse_time(standard_end_time) or parse_time(DEFAULT_STANDARD_END_TIME)
    diff = _minutes(end) - _minutes(standard)
    if diff <= 0:
        return 0.0
    return diff / 60


def resolve_overtime_hours(
    record: AttendanceRecord,
    rules: Optional[OvertimeRules] = None
) -> float:
    """
    Overtime hours for a record.

    An explicit positive ot_hours wins; otherwise hours are derived from
    end_time; with neither the result is 0. Non-finite hours count as unset.
    """
    explicit = record.ot_hours or 0.0
    if explicit > 0 and math.isfinite(explicit):
        return explicit
    if record.end_time is None:
        return 0.0
    standard = rules.standard_end_time if rules else DEFAULT_STANDARD_END_TIME
    return derive_overtime_hours(record.end_time, standard)


def split_overtime_tiers(hours: float) -> Tuple[float, float, float]:
    """Split overtime hours into (tier1, tier2, tier3) bands."""
    hours = max(0.0, hours)
    tier1 = min(hours, TIER_1_HOURS)
    tier2 = min(max(hours - TIER_1_HOURS, 0.0), TIER_2_HOURS)
    tier3 = max(hours - TIER_1_HOURS - TIER_2_HOURS, 0.0)
    return tier1, tier2, tier3
