"""
Records Workbook Module

Reads and writes attendance records in spreadsheet form: the first row
holds the field names, every following row is one record. Rows without a
date are skipped.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from domain.entities import AttendanceRecord
from infrastructure.logger import get_logger
from infrastructure.record_mapper import RECORD_FIELDS, record_from_dict, record_to_dict

logger = get_logger("RecordsWorkbook")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AttendanceError(Exception):
    """Base exception for attendance data errors."""
    pass


class WorkbookFormatError(AttendanceError):
    """Raised when a worksheet has no recognisable header row."""
    pass


# ==============================================================================
# RecordsWorkbook Class
# ==============================================================================
class RecordsWorkbook:
    """
    Spreadsheet import/export of attendance records.

    Handles:
    - Header detection (case-insensitive, surrounding spaces ignored)
    - JSON-encoded bonusEntries cells
    - Skipping rows without a date or that fail to convert
    """

    SHEET_TITLE = "OT"
    HEADER_FILL = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')

    def parse_file(self, file_path: Path) -> List[AttendanceRecord]:
        """
        Parse the first worksheet of a workbook into records.

        Args:
            file_path: Path to the .xlsx file

        Returns:
            List of AttendanceRecord objects (empty if the file is missing)

        Raises:
            WorkbookFormatError: If the header row has no 'date' column
        """
        if not file_path.exists():
            logger.warning(f"紀錄檔案不存在: {file_path}")
            return []

        logger.info(f"開始解析紀錄檔案: {file_path.name}")
        wb = load_workbook(file_path, data_only=True)
        try:
            records = self._parse_worksheet(wb.worksheets[0])
        finally:
            wb.close()

        logger.info(f"解析完成: 共 {len(records)} 筆紀錄")
        return records

    def _parse_worksheet(self, ws: Worksheet) -> List[AttendanceRecord]:
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if not header_row or all(value in (None, "") for value in header_row):
            return []

        headers = self._normalize_headers(header_row)
        if "date" not in headers:
            raise WorkbookFormatError(
                f"工作表 '{ws.title}' 第一列找不到 'date' 欄位，無法讀取紀錄。"
            )

        records = []
        skipped_rows = 0
        for row_idx, values in enumerate(rows, start=2):
            if not values or values[headers["date"]] in (None, ""):
                continue
            data = self._row_to_dict(headers, values)
            try:
                record = record_from_dict(data)
            except (TypeError, ValueError) as e:
                skipped_rows += 1
                logger.warning(f"工作表 '{ws.title}' 第 {row_idx} 列解析失敗，已跳過: {e}")
                continue
            if record is None:
                skipped_rows += 1
                continue
            records.append(record)

        if skipped_rows > 0:
            logger.info(f"工作表 '{ws.title}': 共跳過 {skipped_rows} 列有問題的資料")
        return records

    @staticmethod
    def _normalize_headers(header_row) -> Dict[str, int]:
        """Map canonical field names to column indexes."""
        canonical = {name.lower(): name for name in RECORD_FIELDS}
        canonical["country"] = "country"
        headers: Dict[str, int] = {}
        for idx, value in enumerate(header_row):
            key = str(value or "").strip().lower()
            if key in canonical and canonical[key] not in headers:
                headers[canonical[key]] = idx
        return headers

    @staticmethod
    def _row_to_dict(headers: Dict[str, int], values) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name, idx in headers.items():
            if idx < len(values):
                data[name] = values[idx]

        raw_entries = data.get("bonusEntries")
        if isinstance(raw_entries, str) and raw_entries.strip():
            try:
                data["bonusEntries"] = json.loads(raw_entries)
            except json.JSONDecodeError:
                logger.debug(f"無法解析 bonusEntries: {raw_entries!r}")
                data["bonusEntries"] = []
        return data

    def save(self, file_path: Path, records: List[AttendanceRecord]) -> Path:
        """
        Write records to a new workbook, replacing any existing file.

        Args:
            file_path: Destination .xlsx path
            records: Records to write (sorted by date on output)

        Returns:
            Path to the written file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.SHEET_TITLE

        for col, name in enumerate(RECORD_FIELDS, start=1):
            cell = ws.cell(1, col, name)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.HEADER_FILL
            cell.alignment = Alignment(horizontal='center')

        for row, record in enumerate(sorted(records, key=lambda r: r.date), start=2):
            data = record_to_dict(record)
            for col, name in enumerate(RECORD_FIELDS, start=1):
                value = data.get(name)
                if name == "bonusEntries":
                    value = json.dumps(value, ensure_ascii=False) if value else ""
                ws.cell(row, col, value)

        file_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(file_path)
        logger.info(f"已寫入 {len(records)} 筆紀錄至 {file_path}")
        return file_path
