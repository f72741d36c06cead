"""
Aggregation Module

Folds per-record pay breakdowns over a date range into summary statistics:
component totals, a month-by-month series, travel destinations and
long-run averages.
"""

from collections import Counter
from datetime import date
from typing import Dict, Iterable, Optional, Tuple

from .comp_leave import comp_leave_units_earned, comp_leave_units_used
from .country import standardize_country
from .dates import (
    calendar_months_between, iter_months, month_range, normalize_date, rolling_year
)
from .entities import (
    AttendanceRecord, DateRange, LifetimeStats, MonthlyBucket, PaySummary
)
from .holidays import HolidayOracle
from .salary_calculator import SalaryCalculator
from config.config_manager import SettingsSnapshot
from infrastructure.logger import get_logger

logger = get_logger("Aggregation")


def index_records_by_date(
    records: Iterable[AttendanceRecord],
    date_range: Optional[DateRange] = None
) -> Tuple[Dict[date, AttendanceRecord], int]:
    """
    Key records by normalised date, optionally restricted to a range.

    Records with a malformed date are skipped and counted. When two records
    share a date the later one wins.

    Returns:
        Tuple of (records by date, skipped count)
    """
    indexed: Dict[date, AttendanceRecord] = {}
    skipped = 0
    for record in records:
        day = normalize_date(record.date)
        if day is None:
            skipped += 1
            logger.warning(f"略過日期無效的紀錄: {record.date!r}")
            continue
        if date_range is not None and day not in date_range:
            continue
        if day in indexed:
            logger.warning(f"日期 {day} 有重複紀錄，以最後一筆為準")
        indexed[day] = record
    return indexed, skipped


def aggregate(
    records: Iterable[AttendanceRecord],
    settings: SettingsSnapshot,
    date_range: DateRange,
    holiday_oracle: HolidayOracle = None,
    country_aliases: Optional[Dict[str, str]] = None
) -> PaySummary:
    """
    Aggregate pay over an inclusive date range.

    Args:
        records: Attendance records (any order)
        settings: Settings snapshot
        date_range: Inclusive range to aggregate
        holiday_oracle: Holiday lookup for records without a manual flag
        country_aliases: Extra country aliases for destination statistics

    Returns:
        PaySummary with totals, monthly buckets and destinations
    """
    calculator = SalaryCalculator(holiday_oracle)
    indexed, skipped = index_records_by_date(records, date_range)

    summary = PaySummary(date_range=date_range, skipped_count=skipped)
    buckets = {
        (year, month): MonthlyBucket(year=year, month=month)
        for year, month in iter_months(date_range)
    }
    countries: Counter = Counter()

    for day in sorted(indexed):
        record = indexed[day]
        pay = calculator.compute_daily_pay(record, settings)

        summary.record_count += 1
        summary.base += pay.base
        summary.ot_pay += pay.ot_pay
        summary.travel_allowance += pay.travel_allowance
        summary.bonus += pay.bonus
        summary.leave_deduction += pay.leave_deduction
        summary.extra += pay.extra
        summary.total += pay.total
        summary.ot_hours += pay.ot_hours
        summary.comp_units_earned += comp_leave_units_earned(record, settings.rules)
        summary.comp_units_used += comp_leave_units_used(record)

        if record.is_leave:
            summary.leave_days += 1
            summary.leave_hours += max(record.leave_duration or 0.0, 0.0)
        bucket = buckets[(day.year, day.month)]
        bucket.record_count += 1
        bucket.base += pay.base
        bucket.ot_pay += pay.ot_pay
        bucket.travel_allowance += pay.travel_allowance
        bucket.bonus += pay.bonus
        bucket.leave_deduction += pay.leave_deduction
        bucket.total += pay.total
        bucket.ot_hours += pay.ot_hours

        country = standardize_country(record.travel_country, country_aliases)
        if country:
            countries[country] += 1
            if not record.is_leave:
                summary.travel_days += 1

    summary.monthly = [buckets[key] for key in sorted(buckets)]
    summary.destinations = sorted(countries.items(), key=lambda item: (-item[1], item[0]))

    logger.debug(
        f"彙總 {date_range.start} ~ {date_range.end}: "
        f"{summary.record_count} 筆, 略過 {skipped} 筆"
    )
    return summary


def estimate_monthly_salary(
    records: Iterable[AttendanceRecord],
    settings: SettingsSnapshot,
    year: int,
    month: int,
    holiday_oracle: HolidayOracle = None
) -> float:
    """
    Estimated salary for a month: full base monthly plus the extras.

    Base comes from the salary history rather than the per-day base
    contributions, so it is counted exactly once.
    """
    date_range = month_range(year, month)
    summary = aggregate(records, settings, date_range, holiday_oracle)
    base_monthly = SalaryCalculator(holiday_oracle).resolve_base_monthly(
        settings, date_range.start
    )
    return (
        base_monthly
        + summary.ot_pay
        + summary.travel_allowance
        + summary.bonus
        - summary.leave_deduction
    )


def lifetime_stats(
    records: Iterable[AttendanceRecord],
    settings: SettingsSnapshot,
    today: date,
    holiday_oracle: HolidayOracle = None
) -> LifetimeStats:
    """
    Long-run averages over the whole history.

    Spans are measured from the first record to today and floored at one
    month / one year.
    """
    indexed, _ = index_records_by_date(records)
    if not indexed:
        return LifetimeStats()

    first_day = min(indexed)
    history = DateRange(first_day, max(max(indexed), today))
    everything = aggregate(indexed.values(), settings, history, holiday_oracle)

    months_span = max(1, calendar_months_between(first_day, today) + 1)
    years_span = max(1.0, months_span / 12)

    last_year = aggregate(indexed.values(), settings, rolling_year(today), holiday_oracle)
    this_month = aggregate(
        indexed.values(), settings, month_range(today.year, today.month), holiday_oracle
    )

    return LifetimeStats(
        avg_annual_salary=everything.total / years_span,
        avg_annual_ot_hours=everything.ot_hours / years_span,
        avg_monthly_salary=everything.total / months_span,
        avg_daily_salary=everything.total / everything.record_count,
        last_year_salary=last_year.total,
        last_year_ot_hours=last_year.ot_hours,
        last_year_ot_pay=last_year.ot_pay,
        this_month_ot_pay=this_month.ot_pay,
        months_span=months_span,
        years_span=years_span,
    )
