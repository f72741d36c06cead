"""
Salary Calculator Module

Computes the daily pay breakdown for an attendance record: base pro-ration,
tiered overtime pay, holiday multiplier, travel allowance, bonus and leave
deduction.
"""

from datetime import date
from typing import Optional

from .country import standardize_country
from .dates import month_start, normalize_date
from .entities import AttendanceRecord, OvertimeType, PayBreakdown
from .holidays import HolidayOracle, NoHolidayOracle
from .overtime import resolve_overtime_hours, split_overtime_tiers
from config.config_manager import SettingsSnapshot
from infrastructure.logger import get_logger

logger = get_logger("SalaryCalculator")

# Fixed 30-day month and 8-hour day convention
DAYS_PER_MONTH = 30
HOURS_PER_DAY = 8
HOLIDAY_MULTIPLIER = 2


class SalaryCalculator:
    """
    Calculates per-record pay.

    Provides:
    - Effective base salary lookup against the salary history
    - Holiday resolution (manual override, else holiday oracle)
    - Daily pay breakdown for working and leave days

    The calculator keeps no per-call state and never mutates its inputs.
    """

    def __init__(self, holiday_oracle: HolidayOracle = None):
        """
        Initialize calculator.

        Args:
            holiday_oracle: Lookup used when a record has no manual holiday flag
        """
        self.holiday_oracle = holiday_oracle or NoHolidayOracle()

    def resolve_base_monthly(self, settings: SettingsSnapshot, day: Optional[date]) -> float:
        """
        Find the base monthly salary in effect for a date's month.

        Args:
            settings: Settings snapshot
            day: Record date (None falls back to the current base)

        Returns:
            Amount of the latest history entry effective on or before the
            first day of the month, else settings.salary.base_monthly
        """
        if day is None:
            return settings.salary.base_monthly

        first = month_start(day)
        applicable = None
        for entry in settings.sorted_history:
            if entry.effective_date <= first:
                applicable = entry
            else:
                break
        if applicable is None:
            return settings.salary.base_monthly
        return applicable.amount

    def resolve_is_holiday(self, record: AttendanceRecord) -> bool:
        """Manual flag wins; otherwise ask the oracle, treating failures as False."""
        if record.is_holiday is not None:
            return bool(record.is_holiday)

        day = normalize_date(record.date)
        if day is None:
            return False
        try:
            return bool(self.holiday_oracle.is_holiday(day))
        except Exception as e:
            logger.warning(f"假日查詢失敗 {day}，視為非假日: {e}")
            return False

    def calculate_ot_pay(
        self,
        hours: float,
        base_daily: float,
        settings: SettingsSnapshot
    ) -> float:
        """
        Tiered overtime pay for a number of hours.

        Args:
            hours: Overtime hours
            base_daily: Daily base salary
            settings: Settings snapshot with tier multipliers

        Returns:
            Sum of each band's hours x hourly rate x multiplier
        """
        hourly = base_daily / HOURS_PER_DAY
        tier1, tier2, tier3 = split_overtime_tiers(hours)
        rules = settings.rules
        return (
            tier1 * hourly * rules.ot1
            + tier2 * hourly * rules.ot2
            + tier3 * hourly * rules.ot3
        )

    def calculate_leave_deduction(self, record: AttendanceRecord, base_daily: float) -> float:
        """Pro-rated deduction for unpaid leave types, capped at base_daily."""
        if record.leave_type.is_paid:
            return 0.0
        duration = max(record.leave_duration or 0.0, 0.0)
        return min(base_daily * duration / HOURS_PER_DAY, base_daily)

    def compute_daily_pay(
        self,
        record: AttendanceRecord,
        settings: SettingsSnapshot
    ) -> PayBreakdown:
        """
        Compute the pay breakdown for one record.

        Args:
            record: The attendance record
            settings: Settings snapshot in effect for the record

        Returns:
            PayBreakdown with unrounded components
        """
        day = normalize_date(record.date)
        base_monthly = self.resolve_base_monthly(settings, day)
        base_daily = base_monthly / DAYS_PER_MONTH
        bonus = record.total_bonus or 0.0

        if record.is_leave:
            # 請假日: 不計加班與出差津貼
            leave_deduction = self.calculate_leave_deduction(record, base_daily)
            extra = bonus
            return PayBreakdown(
                base=base_daily,
                bonus=bonus,
                leave_deduction=leave_deduction,
                extra=extra,
                total=base_daily + extra - leave_deduction,
                base_daily=base_daily,
            )

        ot_hours = resolve_overtime_hours(record, settings.rules)
        multiplier = HOLIDAY_MULTIPLIER if self.resolve_is_holiday(record) else 1

        ot_pay = 0.0
        if record.ot_type == OvertimeType.PAID:
            ot_pay = self.calculate_ot_pay(ot_hours, base_daily, settings)

        travel_allowance = 0.0
        if standardize_country(record.travel_country):
            travel_allowance = settings.allowance.trip_daily * settings.effective_exchange_rate

        base = base_daily * multiplier
        extra = ot_pay + travel_allowance + bonus
        return PayBreakdown(
            base=base,
            ot_pay=ot_pay,
            travel_allowance=travel_allowance,
            bonus=bonus,
            extra=extra,
            total=base + extra,
            base_daily=base_daily,
            ot_hours=ot_hours,
            holiday_multiplier=multiplier,
        )


def compute_daily_pay(
    record: AttendanceRecord,
    settings: SettingsSnapshot,
    holiday_oracle: HolidayOracle = None
) -> PayBreakdown:
    """Compute a record's pay breakdown with a one-off calculator."""
    return SalaryCalculator(holiday_oracle).compute_daily_pay(record, settings)
