"""
Excel Writer Module

Generates formatted Excel salary reports with styling.
Amounts are rounded to whole currency units only here, at display time.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from domain.entities import AttendanceRecord, PayBreakdown, PaySummary


class SummaryExcelWriter:
    """
    Generates formatted Excel salary reports.

    Output sheets:
    - 摘要: totals for the reported range
    - 月份統計: one row per calendar month
    - 每日明細: one row per record with its pay breakdown
    - 出差統計: travel destinations by number of days

    Styling:
    - Blue header rows with white bold text
    - Thin borders on every written cell
    - Red fill on negative comp-leave balances and leave deductions
    """

    COLORS = {
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
        'holiday': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'leave': PatternFill(start_color='DDA0DD', end_color='DDA0DD', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'total': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    MONEY_FORMAT = '#,##0'

    SUMMARY_SHEET = "摘要"
    MONTHLY_SHEET = "月份統計"
    DAILY_SHEET = "每日明細"
    DESTINATION_SHEET = "出差統計"

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(
        self,
        summary: PaySummary,
        daily: List[Tuple[AttendanceRecord, PayBreakdown]],
        output_path: Path,
        title: str = "",
        top_destinations: int = 5
    ) -> Path:
        """
        Create a complete salary report workbook.

        Args:
            summary: Aggregated totals for the range
            daily: (record, breakdown) pairs in date order
            output_path: Path to save the Excel file
            title: Title written above the summary table
            top_destinations: Number of destinations to list (0 = all)

        Returns:
            Path to the created file
        """
        self.wb = Workbook()
        self.wb.remove(self.wb.active)

        self._write_summary_sheet(self.wb.create_sheet(self.SUMMARY_SHEET), summary, title)
        self._write_monthly_sheet(self.wb.create_sheet(self.MONTHLY_SHEET), summary)
        self._write_daily_sheet(self.wb.create_sheet(self.DAILY_SHEET), daily)
        destinations = summary.destinations[:top_destinations] if top_destinations else summary.destinations
        self._write_destination_sheet(self.wb.create_sheet(self.DESTINATION_SHEET), destinations)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        return output_path

    def _write_header(self, ws, row: int, labels: List[str]) -> None:
        for col, label in enumerate(labels, start=1):
            cell = ws.cell(row, col, label)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.COLORS['header']
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER

    def _write_cell(self, ws, row: int, col: int, value, money: bool = False):
        if money:
            value = round(value)
        cell = ws.cell(row, col, value)
        cell.border = self.BORDER
        if money:
            cell.number_format = self.MONEY_FORMAT
            cell.alignment = Alignment(horizontal='right')
        else:
            cell.alignment = Alignment(horizontal='center')
        return cell

    def _write_summary_sheet(self, ws, summary: PaySummary, title: str) -> None:
        """Write the totals table."""
        ws.cell(1, 1, title or f"{summary.date_range.start} ~ {summary.date_range.end}").font = Font(bold=True, size=14)
        self._write_header(ws, 2, ["項目", "數值"])

        rows = [
            ("底薪", summary.base, True),
            ("加班費", summary.ot_pay, True),
            ("出差津貼", summary.travel_allowance, True),
            ("獎金", summary.bonus, True),
            ("請假扣款", summary.leave_deduction, True),
            ("合計", summary.total, True),
            ("加班時數", round(summary.ot_hours, 2), False),
            ("補休單位 (獲得)", summary.comp_units_earned, False),
            ("補休單位 (使用)", summary.comp_units_used, False),
            ("補休單位 (餘額)", summary.comp_units_balance, False),
            ("請假天數", summary.leave_days, False),
            ("出差天數", summary.travel_days, False),
            ("紀錄筆數", summary.record_count, False),
        ]
        for offset, (label, value, money) in enumerate(rows):
            row = 3 + offset
            self._write_cell(ws, row, 1, label)
            cell = self._write_cell(ws, row, 2, value, money=money)
            if label == "合計":
                cell.font = Font(bold=True)
                cell.fill = self.COLORS['total']
            if label == "補休單位 (餘額)" and value < 0:
                cell.fill = self.COLORS['red']

        ws.column_dimensions['A'].width = 18
        ws.column_dimensions['B'].width = 16

    def _write_monthly_sheet(self, ws, summary: PaySummary) -> None:
        """Write one row per calendar month plus a totals row."""
        labels = ["月份", "底薪", "加班費", "出差津貼", "獎金", "請假扣款", "合計", "加班時數", "筆數"]
        self._write_header(ws, 1, labels)

        row = 2
        for bucket in summary.monthly:
            self._write_cell(ws, row, 1, bucket.label)
            self._write_cell(ws, row, 2, bucket.base, money=True)
            self._write_cell(ws, row, 3, bucket.ot_pay, money=True)
            self._write_cell(ws, row, 4, bucket.travel_allowance, money=True)
            self._write_cell(ws, row, 5, bucket.bonus, money=True)
            self._write_cell(ws, row, 6, bucket.leave_deduction, money=True)
            self._write_cell(ws, row, 7, bucket.total, money=True)
            self._write_cell(ws, row, 8, round(bucket.ot_hours, 2))
            self._write_cell(ws, row, 9, bucket.record_count)
            row += 1

        totals = [
            "合計", summary.base, summary.ot_pay, summary.travel_allowance,
            summary.bonus, summary.leave_deduction, summary.total,
        ]
        for col, value in enumerate(totals, start=1):
            cell = self._write_cell(ws, row, col, value, money=col > 1)
            cell.font = Font(bold=True)
            cell.fill = self.COLORS['total']
        self._write_cell(ws, row, 8, round(summary.ot_hours, 2)).fill = self.COLORS['total']
        self._write_cell(ws, row, 9, summary.record_count).fill = self.COLORS['total']

        ws.column_dimensions['A'].width = 10
        for col in range(2, len(labels) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 12

    def _write_daily_sheet(self, ws, daily: List[Tuple[AttendanceRecord, PayBreakdown]]) -> None:
        """Write one row per record."""
        labels = [
            "日期", "下班時間", "加班時數", "加班類型", "假日", "請假",
            "出差國家", "底薪", "加班費", "出差津貼", "獎金", "請假扣款", "合計",
        ]
        self._write_header(ws, 1, labels)

        for row, (record, pay) in enumerate(daily, start=2):
            self._write_cell(ws, row, 1, record.date.isoformat())
            self._write_cell(ws, row, 2, record.end_time.strftime('%H:%M') if record.end_time else "")
            self._write_cell(ws, row, 3, round(pay.ot_hours, 2))
            self._write_cell(ws, row, 4, record.ot_type.value)
            holiday_cell = self._write_cell(ws, row, 5, "Y" if pay.holiday_multiplier > 1 else "")
            leave_cell = self._write_cell(ws, row, 6, record.leave_type.value if record.is_leave else "")
            self._write_cell(ws, row, 7, record.travel_country)
            self._write_cell(ws, row, 8, pay.base, money=True)
            self._write_cell(ws, row, 9, pay.ot_pay, money=True)
            self._write_cell(ws, row, 10, pay.travel_allowance, money=True)
            self._write_cell(ws, row, 11, pay.bonus, money=True)
            deduction_cell = self._write_cell(ws, row, 12, pay.leave_deduction, money=True)
            self._write_cell(ws, row, 13, pay.total, money=True)

            if pay.holiday_multiplier > 1:
                holiday_cell.fill = self.COLORS['holiday']
            if record.is_leave:
                leave_cell.fill = self.COLORS['leave']
            if pay.leave_deduction > 0:
                deduction_cell.fill = self.COLORS['red']

        ws.column_dimensions['A'].width = 12
        ws.column_dimensions['G'].width = 14
        for col in range(8, len(labels) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 11
        ws.freeze_panes = 'B2'

    def _write_destination_sheet(self, ws, destinations: List[Tuple[str, int]]) -> None:
        """Write travel destinations ordered by days."""
        self._write_header(ws, 1, ["國家", "天數"])
        for row, (country, days) in enumerate(destinations, start=2):
            self._write_cell(ws, row, 1, country)
            self._write_cell(ws, row, 2, days)
        ws.column_dimensions['A'].width = 18
        ws.column_dimensions['B'].width = 8
