"""
Tests for SalaryReportService, the holiday oracle and the command line entry point.
"""

import pytest
from datetime import date, time
from pathlib import Path

from openpyxl import load_workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from application.report_service import (
    ReportGenerationParams, SalaryReportService, report_range
)
from config.config_manager import AppConfig, ConfigManager, Holidays, SettingsSnapshot
from domain.dates import month_range, rolling_year
from domain.entities import AttendanceRecord, DateRange, LeaveType, OvertimeType
from domain.holidays import CalendarHolidayOracle, NoHolidayOracle
from infrastructure.record_store import RecordStore
from infrastructure.records_workbook import RecordsWorkbook


@pytest.fixture
def records():
    return [
        AttendanceRecord(date=date(2024, 5, 20), ot_hours=3.0, ot_type=OvertimeType.INTERNAL),
        AttendanceRecord(date=date(2024, 6, 3), end_time=time(20, 0)),
        AttendanceRecord(date=date(2024, 6, 10), travel_country="JP"),
        AttendanceRecord(date=date(2024, 6, 11), is_leave=True,
                         leave_type=LeaveType.COMP, leave_duration=2),
    ]


class TestHolidayOracle:
    """Tests for the holiday oracles."""

    def test_no_holiday_oracle(self):
        assert NoHolidayOracle().is_holiday(date(2024, 1, 1)) is False

    def test_from_config(self):
        holidays = Holidays(
            custom_dates=["2024-10-10", "bogus", "2024-01-01"],
            names={"2024-10-10": "國慶日"},
        )
        oracle = CalendarHolidayOracle.from_config(holidays)

        assert len(oracle) == 2
        assert oracle.is_holiday(date(2024, 10, 10))
        assert not oracle.is_holiday(date(2024, 10, 11))
        assert oracle.holiday_name(date(2024, 10, 10)) == "國慶日"
        assert oracle.holiday_name(date(2024, 1, 1)) is None


class TestReportRange:
    def test_month(self):
        assert report_range(2024, 2, date(2024, 6, 30)) == month_range(2024, 2)

    def test_rolling_year_default(self):
        assert report_range(None, None, date(2024, 6, 30)) == rolling_year(date(2024, 6, 30))


class TestSalaryReportService:
    """Tests for SalaryReportService."""

    def make_params(self, tmp_path, date_range, **kwargs):
        return ReportGenerationParams(
            output_path=tmp_path / "report.xlsx",
            date_range=date_range,
            settings=SettingsSnapshot(),
            generate_pdf=False,
            **kwargs
        )

    def test_generate_month_report(self, tmp_path, records):
        params = self.make_params(tmp_path, month_range(2024, 6))

        result = SalaryReportService().generate_report(params, records)

        assert result.success
        assert result.output_path.exists()
        assert result.pdf_path is None
        assert result.summary.record_count == 3
        # Balance covers the whole history, not just June
        assert result.comp_balance.earned == 6
        assert result.comp_balance.used == 4
        assert result.estimated_salary == pytest.approx(
            50000.0 + result.summary.ot_pay + result.summary.travel_allowance
        )

    def test_comp_balance_counts_each_date_once(self, tmp_path):
        records = [
            AttendanceRecord(date=date(2024, 6, 3), ot_hours=2.0, ot_type=OvertimeType.INTERNAL),
            AttendanceRecord(date="2024-06-03", ot_hours=2.0, ot_type=OvertimeType.INTERNAL),
        ]
        params = self.make_params(tmp_path, month_range(2024, 6))

        result = SalaryReportService().generate_report(params, records)

        assert result.summary.comp_units_earned == 4
        assert result.comp_balance.earned == 4

    def test_no_estimate_for_multi_month_range(self, tmp_path, records):
        params = self.make_params(tmp_path, DateRange(date(2024, 5, 1), date(2024, 6, 30)))

        result = SalaryReportService().generate_report(params, records)

        assert result.summary.record_count == 4
        assert result.estimated_salary is None

    def test_empty_range_raises(self, tmp_path, records):
        params = self.make_params(tmp_path, month_range(2023, 1))

        with pytest.raises(ValueError):
            SalaryReportService().generate_report(params, records)
        assert not params.output_path.exists()

    def test_loads_from_workbook_before_json(self, tmp_path, records):
        workbook_path = tmp_path / "records.xlsx"
        json_path = tmp_path / "records.json"
        RecordsWorkbook().save(workbook_path, records)
        RecordStore(json_path).save(records[:1])

        params = self.make_params(
            tmp_path, month_range(2024, 6),
            records_workbook=workbook_path, records_json=json_path
        )
        result = SalaryReportService().generate_report(params)

        assert result.summary.record_count == 3

    def test_loads_from_json_store(self, tmp_path, records):
        json_path = tmp_path / "records.json"
        RecordStore(json_path).save(records)

        params = self.make_params(tmp_path, month_range(2024, 6), records_json=json_path)
        result = SalaryReportService().generate_report(params)

        assert result.summary.record_count == 3

    def test_holiday_oracle_applies(self, tmp_path, records):
        oracle = CalendarHolidayOracle({date(2024, 6, 10): "測試假日"})
        params = self.make_params(tmp_path, month_range(2024, 6), holiday_oracle=oracle)

        daily = SalaryReportService().daily_breakdown(records, params)

        multipliers = {record.date: pay.holiday_multiplier for record, pay in daily}
        assert multipliers[date(2024, 6, 10)] == 2
        assert multipliers[date(2024, 6, 3)] == 1
        assert date(2024, 5, 20) not in multipliers

    def test_pdf_defaults_next_to_excel(self, tmp_path, records):
        params = self.make_params(tmp_path, month_range(2024, 6))
        params.generate_pdf = True

        result = SalaryReportService().generate_report(params, records)

        assert result.pdf_path == tmp_path / "report.pdf"
        assert result.pdf_path.exists()

    def test_build_params_from_config(self, tmp_path):
        config = AppConfig()
        config.holidays.custom_dates = ["2024-06-10"]
        config.paths.records_json = str(tmp_path / "records.json")
        config.output_settings.generate_pdf = True

        params = SalaryReportService.build_params_from_config(
            config, tmp_path / "r.xlsx", month_range(2024, 6),
            live_rate=31.0, generate_pdf=False
        )

        assert params.settings.effective_exchange_rate == 31.0
        assert params.records_workbook is None
        assert params.records_json == tmp_path / "records.json"
        assert params.holiday_oracle.is_holiday(date(2024, 6, 10))
        assert params.generate_pdf is False


class TestMain:
    """Tests for the command line entry point."""

    def test_month_report_from_json(self, tmp_path, records):
        from main import main

        json_path = tmp_path / "records.json"
        RecordStore(json_path).save(records)
        config_path = tmp_path / "config.json"
        manager = ConfigManager(config_path)
        manager.load()
        manager.save()
        output = tmp_path / "out.xlsx"

        code = main([
            str(json_path), "--config", str(config_path),
            "--year", "2024", "--month", "6", "--output", str(output), "--no-pdf",
        ])

        assert code == 0
        wb = load_workbook(output)
        assert wb["摘要"].cell(1, 1).value == "2024/06 薪資報表"
        wb.close()

    def test_empty_month_returns_error_code(self, tmp_path, records):
        from main import main

        json_path = tmp_path / "records.json"
        RecordStore(json_path).save(records)

        code = main([
            str(json_path), "--config", str(tmp_path / "missing.json"),
            "--year", "2020", "--month", "1", "--output", str(tmp_path / "x.xlsx"), "--no-pdf",
        ])

        assert code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
