"""
Record Store Module

Local JSON cache of attendance records, keyed by date.
"""

import json
from datetime import date
from pathlib import Path
from typing import List, Optional

from domain.dates import normalize_date
from domain.entities import AttendanceRecord
from infrastructure.logger import get_logger
from infrastructure.record_mapper import record_to_dict, records_from_dicts

logger = get_logger("RecordStore")


class RecordStore:
    """
    Persists attendance records to a JSON file.

    Responsibilities:
    - Load and save the record list
    - Keep exactly one record per date (add_or_update merges by date)
    - Delete a record by date
    """

    DEFAULT_STORE_PATH = Path(__file__).parent.parent / "records.json"

    def __init__(self, store_path: Optional[Path] = None):
        self.store_path = store_path or self.DEFAULT_STORE_PATH

    def load(self) -> List[AttendanceRecord]:
        """Load records; a missing or corrupt file yields an empty list."""
        if not self.store_path.exists():
            return []
        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"紀錄檔格式錯誤，視為空白: {e}")
            return []
        if not isinstance(data, list):
            logger.warning("紀錄檔內容不是清單，視為空白")
            return []
        return records_from_dicts(data)

    def save(self, records: List[AttendanceRecord]) -> None:
        """Save records sorted by date."""
        ordered = sorted(records, key=lambda r: r.date)
        data = [record_to_dict(r) for r in ordered]
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"已儲存 {len(data)} 筆紀錄至 {self.store_path}")

    def add_or_update(self, record: AttendanceRecord) -> List[AttendanceRecord]:
        """
        Insert a record or replace the one with the same date.

        Returns:
            The updated record list
        """
        records = [r for r in self.load() if r.date != record.date]
        records.append(record)
        self.save(records)
        return sorted(records, key=lambda r: r.date)

    def delete(self, day) -> List[AttendanceRecord]:
        """
        Delete the record for a date.

        Args:
            day: date or date string

        Returns:
            The remaining record list
        """
        target: Optional[date] = normalize_date(day)
        records = self.load()
        remaining = [r for r in records if r.date != target]
        if len(remaining) != len(records):
            self.save(remaining)
        return remaining
