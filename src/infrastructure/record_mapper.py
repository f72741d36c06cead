"""
Record Mapper Module

Converts loosely-typed record dicts (JSON cache, spreadsheet rows) into
AttendanceRecord entities and back. Unknown keys are ignored; missing or
unparseable values take the documented defaults.
"""

import math
from datetime import time
from typing import Any, Dict, List, Optional

from domain.dates import normalize_date
from domain.entities import AttendanceRecord, BonusEntry, LeaveType, OvertimeType
from domain.overtime import parse_time
from infrastructure.logger import get_logger

logger = get_logger("RecordMapper")

# Column order used when writing records out
RECORD_FIELDS = [
    "date", "endTime", "otHours", "otType", "isHoliday", "isLeave",
    "leaveType", "leaveDuration", "travelCountry", "bonus", "bonusEntries",
]

_TRUE_STRINGS = {"true", "1", "yes", "y", "是", "v"}
_FALSE_STRINGS = {"false", "0", "no", "n", "否"}


def to_float(value, default: float = 0.0) -> float:
    """Coerce a numeric field; unparseable values become the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def to_bool(value) -> Optional[bool]:
    """Coerce a flag; None when absent or not recognisable."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def _parse_bonus_entries(value) -> List[BonusEntry]:
    entries = []
    if not isinstance(value, list):
        return entries
    for item in value:
        if not isinstance(item, dict):
            continue
        entries.append(BonusEntry(
            amount=to_float(item.get("amount")),
            category=str(item.get("category") or ""),
            note=str(item.get("note") or "")
        ))
    return entries


def record_from_dict(data: Dict[str, Any]) -> Optional[AttendanceRecord]:
    """
    Build an AttendanceRecord from a dict.

    Args:
        data: Record dict in the stored camelCase shape

    Returns:
        AttendanceRecord, or None when the date is missing or malformed
    """
    day = normalize_date(data.get("date"))
    if day is None:
        logger.warning(f"紀錄日期無效，已略過: {data.get('date')!r}")
        return None

    # Older records stored the trip destination under "country"
    country = data.get("travelCountry")
    if country is None:
        country = data.get("country")

    leave_duration = data.get("leaveDuration")
    is_holiday = to_bool(data.get("isHoliday"))

    record = AttendanceRecord(
        date=day,
        end_time=parse_time(data.get("endTime")),
        ot_hours=max(to_float(data.get("otHours")), 0.0),
        ot_type=OvertimeType.parse(data.get("otType")),
        is_holiday=is_holiday,
        is_leave=bool(to_bool(data.get("isLeave"))),
        leave_type=LeaveType.parse(data.get("leaveType")),
        leave_duration=8.0 if leave_duration in (None, "") else max(to_float(leave_duration), 0.0),
        travel_country=str(country or "").strip(),
        bonus=to_float(data.get("bonus")),
        bonus_entries=_parse_bonus_entries(data.get("bonusEntries"))
    )
    record.sync_bonus()
    return record


def _format_time(value: Optional[time]) -> str:
    return value.strftime('%H:%M') if value else ""


def record_to_dict(record: AttendanceRecord) -> Dict[str, Any]:
    """Convert an AttendanceRecord to the stored camelCase dict."""
    data: Dict[str, Any] = {
        "date": record.date.isoformat(),
        "endTime": _format_time(record.end_time),
        "otHours": record.ot_hours,
        "otType": record.ot_type.value,
        "isLeave": record.is_leave,
        "leaveType": record.leave_type.value,
        "leaveDuration": record.leave_duration,
        "travelCountry": record.travel_country,
        "bonus": record.total_bonus,
        "bonusEntries": [
            {"amount": e.amount, "category": e.category, "note": e.note}
            for e in record.bonus_entries
        ],
    }
    # Only a manual override is stored; absence defers to the holiday oracle
    if record.is_holiday is not None:
        data["isHoliday"] = record.is_holiday
    return data


def records_from_dicts(items: List[Dict[str, Any]]) -> List[AttendanceRecord]:
    """Convert a list of dicts, dropping entries that are not valid records."""
    records = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"略過非物件紀錄: {item!r}")
            continue
        record = record_from_dict(item)
        if record is not None:
            records.append(record)
    return records
