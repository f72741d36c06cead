"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between the settings sections and JSON
persistence, and composes the immutable SettingsSnapshot consumed by the
salary engine.
"""

import copy
import json
import math
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


# ==============================================================================
# Default Table
# ==============================================================================
DEFAULT_BASE_MONTHLY = 50000.0
DEFAULT_STANDARD_END_TIME = "17:30"
DEFAULT_OT1 = 1.34
DEFAULT_OT2 = 1.67
DEFAULT_OT3 = 2.0
DEFAULT_TRIP_DAILY = 50.0       # USD
DEFAULT_EXCHANGE_RATE = 32.5    # USD -> TWD


def _to_float(value, default: float) -> float:
    """Coerce a config value to float, falling back to the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


@dataclass(frozen=True)
class SalaryHistoryEntry:
    """A base monthly salary that applies from effective_date onwards."""
    effective_date: date
    amount: float


@dataclass
class SalarySettings:
    """Base salary settings with optional historical versions."""
    base_monthly: float = DEFAULT_BASE_MONTHLY
    history: List[SalaryHistoryEntry] = field(default_factory=list)


@dataclass
class OvertimeRules:
    """Overtime tier multipliers and the nominal end of the workday."""
    ot1: float = DEFAULT_OT1   # 前 2 小時
    ot2: float = DEFAULT_OT2   # 再 2 小時
    ot3: float = DEFAULT_OT3   # 其餘時數
    standard_end_time: str = DEFAULT_STANDARD_END_TIME


@dataclass
class AllowanceSettings:
    """Foreign travel allowance settings."""
    trip_daily: float = DEFAULT_TRIP_DAILY
    exchange_rate: float = DEFAULT_EXCHANGE_RATE


@dataclass
class Holidays:
    """Holiday settings.

    custom_dates holds "YYYY-MM-DD" strings; names optionally maps the same
    strings to a display name.
    """
    custom_dates: list = field(default_factory=list)
    names: dict = field(default_factory=dict)


@dataclass
class Paths:
    """File paths configuration."""
    records_json: str = ""
    records_workbook: str = ""
    custom_font_path: str = ""  # Custom font path for PDF generation


@dataclass
class OutputSettings:
    """Output settings for generated reports."""
    output_dir: str = ""  # Default empty = project root
    filename_pattern: str = "Salary_{year}_{month}.xlsx"
    generate_pdf: bool = True
    pdf_filename_pattern: str = "薪資報表_{year}_{month}.pdf"
    top_destinations: int = 5


@dataclass
class AppConfig:
    """Main application configuration container."""
    salary: SalarySettings = field(default_factory=SalarySettings)
    rules: OvertimeRules = field(default_factory=OvertimeRules)
    allowance: AllowanceSettings = field(default_factory=AllowanceSettings)
    holidays: Holidays = field(default_factory=Holidays)
    paths: Paths = field(default_factory=Paths)
    output_settings: OutputSettings = field(default_factory=OutputSettings)
    country_aliases: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SettingsSnapshot:
    """
    The configuration in effect for computing a record.

    Attributes:
        salary: Base salary and its history
        rules: Overtime tier rules
        allowance: Travel allowance settings
        live_rate: Live exchange rate; wins over allowance.exchange_rate
    """
    salary: SalarySettings = field(default_factory=SalarySettings)
    rules: OvertimeRules = field(default_factory=OvertimeRules)
    allowance: AllowanceSettings = field(default_factory=AllowanceSettings)
    live_rate: Optional[float] = None

    @property
    def effective_exchange_rate(self) -> float:
        """Live rate when supplied, else the configured static rate."""
        if self.live_rate is not None and self.live_rate > 0:
            return self.live_rate
        return self.allowance.exchange_rate

    @property
    def sorted_history(self) -> Tuple[SalaryHistoryEntry, ...]:
        return tuple(sorted(self.salary.history, key=lambda e: e.effective_date))


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    - Compose SettingsSnapshot values for the salary engine
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, AttributeError) as e:
                logger.warning(f"設定檔讀取失敗，改用預設值: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration values."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def snapshot(self, live_rate: Optional[float] = None) -> SettingsSnapshot:
        """
        Compose an immutable settings snapshot from the current config.

        Args:
            live_rate: Optional live USD exchange rate fetched by the caller

        Returns:
            SettingsSnapshot detached from the mutable config
        """
        return build_snapshot(self._config, live_rate)

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "salary": {
                "base_monthly": config.salary.base_monthly,
                "history": [
                    {
                        "effective_date": entry.effective_date.isoformat(),
                        "amount": entry.amount
                    }
                    for entry in config.salary.history
                ]
            },
            "rules": {
                "ot1": config.rules.ot1,
                "ot2": config.rules.ot2,
                "ot3": config.rules.ot3,
                "standard_end_time": config.rules.standard_end_time
            },
            "allowance": {
                "trip_daily": config.allowance.trip_daily,
                "exchange_rate": config.allowance.exchange_rate
            },
            "holidays": {
                "custom_dates": config.holidays.custom_dates,
                "names": config.holidays.names
            },
            "paths": {
                "records_json": config.paths.records_json,
                "records_workbook": config.paths.records_workbook,
                "custom_font_path": config.paths.custom_font_path
            },
            "output_settings": {
                "output_dir": config.output_settings.output_dir,
                "filename_pattern": config.output_settings.filename_pattern,
                "generate_pdf": config.output_settings.generate_pdf,
                "pdf_filename_pattern": config.output_settings.pdf_filename_pattern,
                "top_destinations": config.output_settings.top_destinations
            },
            "country_aliases": config.country_aliases
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        salary_data = data.get("salary", {})
        rules_data = data.get("rules", {})
        allowance_data = data.get("allowance", {})
        holidays_data = data.get("holidays", {})
        paths_data = data.get("paths", {})
        output_settings_data = data.get("output_settings", {})

        # Build SalarySettings
        salary = SalarySettings(
            base_monthly=_to_float(salary_data.get("base_monthly"), DEFAULT_BASE_MONTHLY),
            history=self._parse_history(salary_data.get("history", []))
        )

        # Build OvertimeRules
        rules = OvertimeRules(
            ot1=_to_float(rules_data.get("ot1"), DEFAULT_OT1),
            ot2=_to_float(rules_data.get("ot2"), DEFAULT_OT2),
            ot3=_to_float(rules_data.get("ot3"), DEFAULT_OT3),
            standard_end_time=rules_data.get("standard_end_time") or DEFAULT_STANDARD_END_TIME
        )

        # Build AllowanceSettings
        allowance = AllowanceSettings(
            trip_daily=_to_float(allowance_data.get("trip_daily"), DEFAULT_TRIP_DAILY),
            exchange_rate=_to_float(allowance_data.get("exchange_rate"), DEFAULT_EXCHANGE_RATE)
        )

        holidays = Holidays(
            custom_dates=holidays_data.get("custom_dates", []),
            names=holidays_data.get("names", {})
        )

        paths = Paths(
            records_json=paths_data.get("records_json", ""),
            records_workbook=paths_data.get("records_workbook", ""),
            custom_font_path=paths_data.get("custom_font_path", "")
        )

        output_settings = OutputSettings(
            output_dir=output_settings_data.get("output_dir", ""),
            filename_pattern=output_settings_data.get("filename_pattern", "Salary_{year}_{month}.xlsx"),
            generate_pdf=output_settings_data.get("generate_pdf", True),
            pdf_filename_pattern=output_settings_data.get("pdf_filename_pattern", "薪資報表_{year}_{month}.pdf"),
            top_destinations=int(_to_float(output_settings_data.get("top_destinations"), 5))
        )

        return AppConfig(
            salary=salary,
            rules=rules,
            allowance=allowance,
            holidays=holidays,
            paths=paths,
            output_settings=output_settings,
            country_aliases=dict(data.get("country_aliases", {}))
        )

    @staticmethod
    def _parse_history(items: list) -> List[SalaryHistoryEntry]:
        """Parse salary history entries, skipping malformed ones."""
        history = []
        for item in items or []:
            try:
                effective = date.fromisoformat(str(item["effective_date"])[:10])
                amount = float(item["amount"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"略過無效的薪資歷史紀錄 {item!r}: {e}")
                continue
            history.append(SalaryHistoryEntry(effective_date=effective, amount=amount))
        return sorted(history, key=lambda e: e.effective_date)


def build_snapshot(config: AppConfig, live_rate: Optional[float] = None) -> SettingsSnapshot:
    """Build a SettingsSnapshot holding copies of the config sections."""
    return SettingsSnapshot(
        salary=copy.deepcopy(config.salary),
        rules=copy.deepcopy(config.rules),
        allowance=copy.deepcopy(config.allowance),
        live_rate=live_rate
    )
