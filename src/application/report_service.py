"""
Report Service Module

Application layer service that orchestrates salary report generation:
load records, compute per-day pay, aggregate, and write Excel/PDF output.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from config.config_manager import AppConfig, SettingsSnapshot, build_snapshot
from domain.aggregation import aggregate, estimate_monthly_salary, index_records_by_date
from domain.comp_leave import comp_leave_balance
from domain.dates import month_range, rolling_year
from domain.entities import (
    AttendanceRecord, CompLeaveBalance, DateRange, PayBreakdown, PaySummary
)
from domain.holidays import CalendarHolidayOracle, HolidayOracle
from domain.salary_calculator import SalaryCalculator
from infrastructure.logger import get_logger

logger = get_logger("ReportService")


@dataclass
class ReportGenerationParams:
    """
    Parameters for report generation.

    This dataclass encapsulates all parameters needed for report generation,
    decoupling the service from the persisted AppConfig.
    """
    output_path: Path
    date_range: DateRange
    settings: SettingsSnapshot

    # Record sources: workbook wins over the JSON store when both are set
    records_workbook: Optional[Path] = None
    records_json: Optional[Path] = None

    holiday_oracle: Optional[HolidayOracle] = None
    country_aliases: Dict[str, str] = field(default_factory=dict)
    title: str = ""
    top_destinations: int = 5

    # PDF generation
    generate_pdf: bool = True
    pdf_output_path: Optional[Path] = None
    custom_font_path: Optional[str] = None


@dataclass
class ReportResult:
    """Result of report generation."""
    success: bool
    output_path: Path
    summary: Optional[PaySummary] = None
    comp_balance: CompLeaveBalance = field(default_factory=CompLeaveBalance)
    estimated_salary: Optional[float] = None
    pdf_path: Optional[Path] = None
    error_message: str = ""


class SalaryReportService:
    """
    Application service for generating salary reports.

    This service:
    - Orchestrates the report generation workflow
    - Depends only on domain entities and infrastructure
    - Provides logging for key operations
    """

    def load_records(self, params: ReportGenerationParams) -> List[AttendanceRecord]:
        """Load records from the configured source."""
        from infrastructure.record_store import RecordStore
        from infrastructure.records_workbook import RecordsWorkbook

        if params.records_workbook:
            logger.info(f"讀取紀錄試算表: {params.records_workbook}")
            return RecordsWorkbook().parse_file(params.records_workbook)
        if params.records_json:
            logger.info(f"讀取本機紀錄: {params.records_json}")
            return RecordStore(params.records_json).load()
        return []

    def daily_breakdown(
        self,
        records: List[AttendanceRecord],
        params: ReportGenerationParams
    ) -> List[Tuple[AttendanceRecord, PayBreakdown]]:
        """Per-record breakdowns within the range, in date order."""
        calculator = SalaryCalculator(params.holiday_oracle)
        indexed, _ = index_records_by_date(records, params.date_range)
        return [
            (indexed[day], calculator.compute_daily_pay(indexed[day], params.settings))
            for day in sorted(indexed)
        ]

    def generate_report(
        self,
        params: ReportGenerationParams,
        records: Optional[List[AttendanceRecord]] = None
    ) -> ReportResult:
        """
        Generate the salary report.

        Args:
            params: ReportGenerationParams containing all necessary configuration
            records: Records to report on; loaded from params when None

        Returns:
            ReportResult with the outcome of report generation

        Raises:
            ValueError: If no records fall inside the requested range
        """
        from infrastructure.excel_writer import SummaryExcelWriter

        if records is None:
            records = self.load_records(params)

        summary = aggregate(
            records, params.settings, params.date_range,
            params.holiday_oracle, params.country_aliases
        )
        if summary.record_count == 0:
            raise ValueError(
                f"{params.date_range.start} ~ {params.date_range.end} 之間沒有任何紀錄"
            )

        # Comp-leave balance always covers the full history, one record per date
        history, _ = index_records_by_date(records)
        balance = comp_leave_balance(history.values(), params.settings.rules)
        if balance.balance < 0:
            logger.warning(f"補休餘額為負: {balance.balance:g} 單位")

        estimated = None
        start = params.date_range.start
        if params.date_range == month_range(start.year, start.month):
            estimated = estimate_monthly_salary(
                records, params.settings, start.year, start.month, params.holiday_oracle
            )

        logger.info(
            f"資料處理完成: {summary.record_count} 筆紀錄, "
            f"合計 {round(summary.total):,}, 略過 {summary.skipped_count} 筆"
        )

        logger.info(f"開始寫入 Excel: {params.output_path}")
        SummaryExcelWriter().create_report(
            summary,
            self.daily_breakdown(records, params),
            params.output_path,
            title=params.title,
            top_destinations=params.top_destinations
        )
        logger.info("Excel 寫入完成")

        pdf_path = None
        if params.generate_pdf:
            try:
                pdf_path = self._generate_pdf_report(params, summary)
            except Exception as e:
                # PDF 失敗不影響 Excel 報表
                logger.error(f"PDF 生成失敗: {e}")

        return ReportResult(
            success=True,
            output_path=params.output_path,
            summary=summary,
            comp_balance=balance,
            estimated_salary=estimated,
            pdf_path=pdf_path
        )

    def _generate_pdf_report(
        self,
        params: ReportGenerationParams,
        summary: PaySummary
    ) -> Optional[Path]:
        """Generate the PDF statement next to the Excel file unless a path is given."""
        from infrastructure.pdf_writer import PdfWriter

        pdf_path = params.pdf_output_path or params.output_path.with_suffix(".pdf")
        logger.info(f"開始寫入 PDF: {pdf_path}")
        return PdfWriter(custom_font_path=params.custom_font_path).create_report(
            summary, pdf_path, title=params.title, top_destinations=params.top_destinations
        )

    @staticmethod
    def build_params_from_config(
        config: AppConfig,
        output_path: Path,
        date_range: DateRange,
        live_rate: Optional[float] = None,
        generate_pdf: Optional[bool] = None,
        title: str = ""
    ) -> ReportGenerationParams:
        """
        Build ReportGenerationParams from AppConfig.

        Args:
            config: Application configuration
            output_path: Path for the output Excel file
            date_range: Range to report on
            live_rate: Live exchange rate, overriding the configured one
            generate_pdf: Override of config.output_settings.generate_pdf
            title: Report title

        Returns:
            ReportGenerationParams ready for generate_report()
        """
        return ReportGenerationParams(
            output_path=output_path,
            date_range=date_range,
            settings=build_snapshot(config, live_rate),
            records_workbook=Path(config.paths.records_workbook) if config.paths.records_workbook else None,
            records_json=Path(config.paths.records_json) if config.paths.records_json else None,
            holiday_oracle=CalendarHolidayOracle.from_config(config.holidays),
            country_aliases=dict(config.country_aliases),
            title=title,
            top_destinations=config.output_settings.top_destinations,
            generate_pdf=(
                config.output_settings.generate_pdf if generate_pdf is None else generate_pdf
            ),
            custom_font_path=config.paths.custom_font_path or None,
        )


def report_range(year: Optional[int], month: Optional[int], today: date) -> DateRange:
    """Month range when year/month are given, else the rolling year ending today."""
    if year and month:
        return month_range(year, month)
    return rolling_year(today)
