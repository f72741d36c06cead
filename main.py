"""
Overtime Salary Tracker

Command line entry point: computes overtime pay, allowances and comp-leave
from attendance records and writes a monthly or rolling-year salary report.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.report_service import SalaryReportService, report_range
from config.config_manager import ConfigManager
from infrastructure.pdf_writer import format_filename


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="加班薪資試算報表")
    parser.add_argument("source", nargs="?", help="紀錄來源 (.xlsx 試算表或 .json 本機紀錄)")
    parser.add_argument("--config", help="設定檔路徑 (config.json)")
    parser.add_argument("--year", type=int, help="報表年份")
    parser.add_argument("--month", type=int, help="報表月份 (1-12)")
    parser.add_argument("--live-rate", type=float, help="即時美元匯率，優先於設定值")
    parser.add_argument("--output", help="輸出 Excel 路徑")
    parser.add_argument("--no-pdf", action="store_true", help="不產生 PDF")
    return parser


def main(argv=None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    manager = ConfigManager(Path(args.config) if args.config else None)
    config = manager.load()

    today = date.today()
    date_range = report_range(args.year, args.month, today)
    if args.year and args.month:
        default_name = format_filename(config.output_settings.filename_pattern, args.year, args.month)
        title = f"{args.year}/{args.month:02d} 薪資報表"
    else:
        default_name = f"Salary_rolling_{today.isoformat()}.xlsx"
        title = f"{date_range.start} ~ {date_range.end} 薪資報表"

    output_dir = Path(config.output_settings.output_dir) if config.output_settings.output_dir else Path.cwd()
    output_path = Path(args.output) if args.output else output_dir / default_name

    service = SalaryReportService()
    params = service.build_params_from_config(
        config, output_path, date_range,
        live_rate=args.live_rate,
        generate_pdf=False if args.no_pdf else None,
        title=title
    )
    if args.source:
        source = Path(args.source)
        if source.suffix.lower() == ".json":
            params.records_workbook, params.records_json = None, source
        else:
            params.records_workbook, params.records_json = source, None

    try:
        result = service.generate_report(params)
    except ValueError as e:
        print(f"無法產生報表: {e}", file=sys.stderr)
        return 1

    summary = result.summary
    print(f"報表已輸出: {result.output_path}")
    print(f"合計: {round(summary.total):,}  加班費: {round(summary.ot_pay):,}  "
          f"加班時數: {summary.ot_hours:.1f}")
    print(f"補休餘額: {result.comp_balance.balance:g} 單位")
    if result.estimated_salary is not None:
        print(f"本月預估薪資: {round(result.estimated_salary):,}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
