"""
Domain Entities Module

Core domain entities using dataclasses for the overtime/salary tracker.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Dict, List, Optional, Tuple


class OvertimeType(Enum):
    """How overtime hours on a record are compensated."""
    PAID = "paid"          # 加班費
    INTERNAL = "internal"  # 換補休
    LEAVE = "leave"        # 抵請假

    @classmethod
    def parse(cls, value) -> "OvertimeType":
        """Parse a stored tag, defaulting to PAID."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.PAID


class LeaveType(Enum):
    """Leave category, deciding which bank a leave day debits."""
    ANNUAL = "annual"      # 特休
    COMP = "comp"          # 部門補休
    PERSONAL = "personal"  # 事假
    SICK = "sick"          # 病假
    UNPAID = "unpaid"      # 無薪假

    @classmethod
    def parse(cls, value) -> "LeaveType":
        """Parse a stored tag or label, defaulting to ANNUAL."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        return LEAVE_TYPE_ALIASES.get(text, cls.ANNUAL)

    @property
    def is_paid(self) -> bool:
        """Paid leave is already covered by the base monthly salary."""
        return self in (LeaveType.ANNUAL, LeaveType.COMP)


LEAVE_TYPE_ALIASES: Dict[str, LeaveType] = {
    "annual": LeaveType.ANNUAL,
    "特休": LeaveType.ANNUAL,
    "comp": LeaveType.COMP,
    "comp_leave": LeaveType.COMP,
    "department": LeaveType.COMP,
    "補休": LeaveType.COMP,
    "部門補休": LeaveType.COMP,
    "personal": LeaveType.PERSONAL,
    "事假": LeaveType.PERSONAL,
    "sick": LeaveType.SICK,
    "病假": LeaveType.SICK,
    "unpaid": LeaveType.UNPAID,
    "無薪假": LeaveType.UNPAID,
}


@dataclass
class BonusEntry:
    """A single bonus line for a day."""
    amount: float
    category: str = ""
    note: str = ""


@dataclass
class AttendanceRecord:
    """
    Represents one calendar day's work/leave data.

    Attributes:
        date: The calendar date (unique key within a collection)
        end_time: Clock-out time, used to derive overtime hours
        ot_hours: Explicit overtime hours; 0 means derive from end_time
        ot_type: Paid, internal (comp-leave) or leave-offset overtime
        is_holiday: Manual holiday override; None defers to the holiday oracle
        is_leave: True when the day is a leave/absence day
        leave_type: Leave category when is_leave is set
        leave_duration: Hours of leave taken
        travel_country: Country of a business trip on this day
        bonus: Scalar bonus, kept equal to the entry sum when entries exist
        bonus_entries: Itemised bonuses
    """
    date: date
    end_time: Optional[time] = None
    ot_hours: float = 0.0
    ot_type: OvertimeType = OvertimeType.PAID
    is_holiday: Optional[bool] = None
    is_leave: bool = False
    leave_type: LeaveType = LeaveType.ANNUAL
    leave_duration: float = 8.0
    travel_country: str = ""
    bonus: float = 0.0
    bonus_entries: List[BonusEntry] = field(default_factory=list)

    @property
    def total_bonus(self) -> float:
        """Sum of bonus entries, or the scalar bonus when there are none."""
        if self.bonus_entries:
            return sum(entry.amount for entry in self.bonus_entries)
        return self.bonus

    def sync_bonus(self) -> None:
        """Keep the scalar bonus equal to the sum of the entries."""
        if self.bonus_entries:
            self.bonus = self.total_bonus


@dataclass(frozen=True)
class PayBreakdown:
    """
    Pay components computed for one record.

    base is the day's base contribution (base_daily x holiday_multiplier);
    extra is everything added on top of base.
    """
    base: float = 0.0
    ot_pay: float = 0.0
    travel_allowance: float = 0.0
    bonus: float = 0.0
    leave_deduction: float = 0.0
    extra: float = 0.0
    total: float = 0.0
    base_daily: float = 0.0
    ot_hours: float = 0.0
    holiday_multiplier: int = 1


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class MonthlyBucket:
    """Per-month totals for trend reporting."""
    year: int
    month: int
    base: float = 0.0
    ot_pay: float = 0.0
    travel_allowance: float = 0.0
    bonus: float = 0.0
    leave_deduction: float = 0.0
    total: float = 0.0
    ot_hours: float = 0.0
    record_count: int = 0

    @property
    def label(self) -> str:
        return f"{self.year}-{self.month:02d}"


@dataclass
class PaySummary:
    """
    Aggregated pay statistics over a date range.

    Attributes:
        date_range: The inclusive range that was aggregated
        record_count: Records inside the range
        skipped_count: Records excluded because their date was malformed
        comp_units_balance: earned - used within the range (may be negative)
        monthly: One bucket per calendar month in the range
        destinations: (country, days) pairs, most frequent first
    """
    date_range: DateRange
    record_count: int = 0
    skipped_count: int = 0
    base: float = 0.0
    ot_pay: float = 0.0
    travel_allowance: float = 0.0
    bonus: float = 0.0
    leave_deduction: float = 0.0
    extra: float = 0.0
    total: float = 0.0
    ot_hours: float = 0.0
    comp_units_earned: int = 0
    comp_units_used: float = 0.0
    leave_days: int = 0
    leave_hours: float = 0.0
    travel_days: int = 0
    monthly: List[MonthlyBucket] = field(default_factory=list)
    destinations: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def comp_units_balance(self) -> float:
        return self.comp_units_earned - self.comp_units_used


@dataclass(frozen=True)
class CompLeaveBalance:
    """Comp-leave units derived from a record history."""
    earned: int = 0
    used: float = 0.0

    @property
    def balance(self) -> float:
        return self.earned - self.used


@dataclass
class LifetimeStats:
    """Long-run averages over the full record history."""
    avg_annual_salary: float = 0.0
    avg_annual_ot_hours: float = 0.0
    avg_monthly_salary: float = 0.0
    avg_daily_salary: float = 0.0
    last_year_salary: float = 0.0
    last_year_ot_hours: float = 0.0
    last_year_ot_pay: float = 0.0
    this_month_ot_pay: float = 0.0
    months_span: int = 1
    years_span: float = 1.0
