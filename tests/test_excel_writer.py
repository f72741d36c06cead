"""
Unit tests for SummaryExcelWriter report layout.
"""

import pytest
from datetime import date, time
from pathlib import Path

from openpyxl import load_workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import AllowanceSettings, SalarySettings, SettingsSnapshot
from domain.aggregation import aggregate
from domain.entities import AttendanceRecord, DateRange, LeaveType, OvertimeType
from domain.salary_calculator import compute_daily_pay
from infrastructure.excel_writer import SummaryExcelWriter


@pytest.fixture
def settings():
    return SettingsSnapshot(
        salary=SalarySettings(base_monthly=60000.0),
        allowance=AllowanceSettings(trip_daily=50.0, exchange_rate=32.0),
    )


@pytest.fixture
def records():
    return [
        AttendanceRecord(date=date(2024, 5, 31), end_time=time(20, 0), is_holiday=True),
        AttendanceRecord(date=date(2024, 6, 3), ot_hours=2.0, ot_type=OvertimeType.INTERNAL),
        AttendanceRecord(date=date(2024, 6, 4), travel_country="JP"),
        AttendanceRecord(date=date(2024, 6, 5), travel_country="Japan"),
        AttendanceRecord(date=date(2024, 6, 6), travel_country="Korea"),
        AttendanceRecord(date=date(2024, 6, 7), is_leave=True,
                         leave_type=LeaveType.COMP, leave_duration=8),
        AttendanceRecord(date=date(2024, 6, 10), is_leave=True,
                         leave_type=LeaveType.SICK, leave_duration=4),
    ]


@pytest.fixture
def report(tmp_path, settings, records):
    date_range = DateRange(date(2024, 5, 1), date(2024, 6, 30))
    summary = aggregate(records, settings, date_range)
    daily = [(r, compute_daily_pay(r, settings)) for r in records]
    output_path = tmp_path / "out" / "report.xlsx"

    result = SummaryExcelWriter().create_report(
        summary, daily, output_path, title="測試報表", top_destinations=1
    )
    assert result == output_path

    wb = load_workbook(output_path)
    yield summary, wb
    wb.close()


def summary_values(ws):
    return {ws.cell(row, 1).value: ws.cell(row, 2).value for row in range(3, ws.max_row + 1)}


class TestSummaryExcelWriter:
    """Tests for the generated report workbook."""

    def test_sheet_names(self, report):
        _, wb = report
        assert wb.sheetnames == ["摘要", "月份統計", "每日明細", "出差統計"]

    def test_summary_sheet(self, report):
        summary, wb = report
        ws = wb["摘要"]
        values = summary_values(ws)

        assert ws.cell(1, 1).value == "測試報表"
        assert values["合計"] == round(summary.total)
        assert values["加班費"] == round(summary.ot_pay)
        assert values["紀錄筆數"] == 7
        assert values["補休單位 (獲得)"] == 4
        assert values["補休單位 (使用)"] == 16
        assert values["補休單位 (餘額)"] == -12

    def test_negative_balance_highlighted(self, report):
        _, wb = report
        ws = wb["摘要"]
        for row in range(3, ws.max_row + 1):
            if ws.cell(row, 1).value == "補休單位 (餘額)":
                assert ws.cell(row, 2).fill.start_color.rgb.endswith("FF6B6B")
                break
        else:
            pytest.fail("balance row not written")

    def test_money_is_whole_units(self, report):
        _, wb = report
        ws = wb["摘要"]
        cell = ws.cell(4, 2)  # 加班費
        assert isinstance(cell.value, int)
        assert cell.number_format == '#,##0'

    def test_monthly_sheet(self, report):
        summary, wb = report
        ws = wb["月份統計"]

        assert ws.cell(2, 1).value == "2024-05"
        assert ws.cell(3, 1).value == "2024-06"
        assert ws.cell(4, 1).value == "合計"
        assert ws.cell(4, 7).value == round(summary.total)
        assert ws.cell(4, 9).value == 7

    def test_daily_sheet(self, report):
        _, wb = report
        ws = wb["每日明細"]

        assert ws.max_row == 8
        assert ws.cell(2, 1).value == "2024-05-31"
        assert ws.cell(2, 2).value == "20:00"
        assert ws.cell(2, 5).value == "Y"
        assert ws.cell(2, 8).value == 4000
        assert ws.cell(7, 6).value == "comp"
        assert ws.cell(8, 12).value == 1000

    def test_destinations_limited(self, report):
        _, wb = report
        ws = wb["出差統計"]

        assert ws.max_row == 2
        assert ws.cell(2, 1).value == "Japan"
        assert ws.cell(2, 2).value == 2

    def test_default_title_is_range(self, tmp_path, settings):
        summary = aggregate([], settings, DateRange(date(2024, 6, 1), date(2024, 6, 30)))
        path = SummaryExcelWriter().create_report(summary, [], tmp_path / "empty.xlsx")

        wb = load_workbook(path)
        assert wb["摘要"].cell(1, 1).value == "2024-06-01 ~ 2024-06-30"
        wb.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
