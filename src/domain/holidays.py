"""
Holiday Oracle Module

Answers whether a calendar date is a public holiday. The salary engine
only consumes the HolidayOracle interface; the calendar implementation
is fed from the configured holiday list.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Optional

from .dates import normalize_date
from config.config_manager import Holidays
from infrastructure.logger import get_logger

logger = get_logger("HolidayOracle")


class HolidayOracle(ABC):
    """Abstract holiday lookup keyed by calendar date."""

    @abstractmethod
    def is_holiday(self, day: date) -> bool:
        """Return True if the date is a public holiday."""
        pass

    def holiday_name(self, day: date) -> Optional[str]:
        """Return the holiday name, or None."""
        return None


class NoHolidayOracle(HolidayOracle):
    """Oracle that knows no holidays."""

    def is_holiday(self, day: date) -> bool:
        return False


class CalendarHolidayOracle(HolidayOracle):
    """
    Holiday oracle backed by an explicit date -> name mapping.
    """

    def __init__(self, dates: Dict[date, str] = None):
        self._dates: Dict[date, str] = dict(dates or {})

    @classmethod
    def from_config(cls, holidays: Holidays) -> "CalendarHolidayOracle":
        """
        Build the oracle from configured holiday dates.

        Args:
            holidays: Holidays config section ("YYYY-MM-DD" strings + names)

        Returns:
            CalendarHolidayOracle with every parseable date
        """
        dates: Dict[date, str] = {}
        for date_str in holidays.custom_dates:
            day = normalize_date(date_str)
            if day is None:
                logger.warning(f"略過無效的假日日期: {date_str!r}")
                continue
            dates[day] = holidays.names.get(str(date_str), "")
        return cls(dates)

    def is_holiday(self, day: date) -> bool:
        return day in self._dates

    def holiday_name(self, day: date) -> Optional[str]:
        name = self._dates.get(day)
        return name or None

    def __len__(self) -> int:
        return len(self._dates)
