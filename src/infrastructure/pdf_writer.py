"""
PDF Writer Module

Generates a salary statement PDF using fpdf2: a totals table, a monthly
series table and the top travel destinations.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF

from domain.entities import PaySummary
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")


# ==============================================================================
# Font Configuration
# ==============================================================================
WINDOWS_FONT_PATHS: List[Path] = [
    Path("C:/Windows/Fonts/msjh.ttc"),       # 微軟正黑體 (Microsoft JhengHei)
    Path("C:/Windows/Fonts/msyh.ttc"),       # 微軟雅黑 (Microsoft YaHei)
    Path("C:/Windows/Fonts/mingliu.ttc"),    # 細明體 (MingLiU)
]

MACOS_FONT_PATHS: List[Path] = [
    Path("/System/Library/Fonts/PingFang.ttc"),
    Path("/System/Library/Fonts/STHeiti Light.ttc"),
    Path("/Library/Fonts/Arial Unicode.ttf"),
]

LINUX_FONT_PATHS: List[Path] = [
    Path("/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/truetype/wqy/wqy-microhei.ttc"),
    Path("/usr/share/fonts/truetype/droid/DroidSansFallback.ttf"),
]

FALLBACK_FONT = "Helvetica"

# Labels per language; English is used when no CJK font is available
LABELS: Dict[str, Dict[str, str]] = {
    "zh": {
        "base": "底薪", "ot_pay": "加班費", "travel": "出差津貼", "bonus": "獎金",
        "deduction": "請假扣款", "total": "合計", "ot_hours": "加班時數",
        "comp_balance": "補休餘額 (單位)", "month": "月份", "item": "項目",
        "amount": "金額", "country": "國家", "days": "天數",
        "destinations": "出差統計", "monthly": "月份統計", "page": "第 {page}/{{nb}} 頁",
    },
    "en": {
        "base": "Base", "ot_pay": "Overtime", "travel": "Travel", "bonus": "Bonus",
        "deduction": "Leave deduction", "total": "Total", "ot_hours": "OT hours",
        "comp_balance": "Comp-leave balance (units)", "month": "Month", "item": "Item",
        "amount": "Amount", "country": "Country", "days": "Days",
        "destinations": "Destinations", "monthly": "Monthly", "page": "Page {page}/{{nb}}",
    },
}


def find_chinese_font(custom_font_path: Optional[str] = None) -> Optional[Path]:
    """
    Search for an available Chinese font with cross-platform support.
    """
    if custom_font_path:
        custom_path = Path(custom_font_path)
        if custom_path.exists():
            logger.info(f"使用自訂字型: {custom_path}")
            return custom_path
        logger.warning(f"自訂字型路徑不存在: {custom_path}")

    for font_path in _get_platform_fonts():
        if font_path.exists():
            logger.debug(f"找到系統字型: {font_path}")
            return font_path
    return None


def _get_platform_fonts() -> List[Path]:
    """Get the font search list for the current platform."""
    if sys.platform == 'win32':
        return WINDOWS_FONT_PATHS
    elif sys.platform == 'darwin':
        return MACOS_FONT_PATHS
    else:
        return LINUX_FONT_PATHS


def format_filename(pattern: str, year: int, month: int) -> str:
    """Fill {year} and zero-padded {month} placeholders."""
    return pattern.format(year=year, month=f"{month:02d}")


def format_money(value: float) -> str:
    return f"{round(value):,}"


# ==============================================================================
# SalaryPdf Class (A4 Portrait)
# ==============================================================================
class SalaryPdf(FPDF):
    """
    Custom FPDF class with Chinese font support for salary statements.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        super().__init__(orientation='P', unit='mm', format='A4')
        self.title_text = title
        self._setup_chinese_font(custom_font_path)

    def _setup_chinese_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load Chinese font if available."""
        font_path = find_chinese_font(custom_font_path)

        if font_path:
            try:
                self.add_font("ChineseFont", "", str(font_path))
                self._font_family = "ChineseFont"
                self._font_loaded = True
                logger.info(f"成功載入中文字型: {font_path.name}")
                return
            except Exception as e:
                logger.warning(f"無法載入中文字型 {font_path}: {e}")
        else:
            logger.warning("無法找到中文字型，PDF 將改用英文標籤。")
        self._font_family = FALLBACK_FONT
        self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    @property
    def labels(self) -> Dict[str, str]:
        return LABELS["zh"] if self._font_loaded else LABELS["en"]

    def safe_text(self, text: str) -> str:
        """Replace characters the fallback core font cannot encode."""
        if self._font_loaded:
            return text
        return text.encode('latin-1', 'replace').decode('latin-1')

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.cell(0, 10, self.safe_text(self.title_text), align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(3)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.cell(0, 10, self.labels["page"].format(page=self.page_no()), align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates a salary statement PDF from a PaySummary.
    """

    HEADER_RGB: Tuple[int, int, int] = (68, 114, 196)
    TOTAL_RGB: Tuple[int, int, int] = (211, 211, 211)
    ROW_HEIGHT = 7

    def __init__(self, custom_font_path: Optional[str] = None):
        self.custom_font_path = custom_font_path

    def create_report(
        self,
        summary: PaySummary,
        output_path: Path,
        title: str = "",
        top_destinations: int = 5
    ) -> Optional[Path]:
        """
        Create the salary statement.

        Args:
            summary: Aggregated totals
            output_path: Path to save the PDF
            title: Page title
            top_destinations: Number of destinations to list (0 = all)

        Returns:
            Path to the created file, or None if there is nothing to report
        """
        if summary.record_count == 0:
            logger.info("沒有紀錄，略過 PDF 產生")
            return None

        pdf = SalaryPdf(title=title, custom_font_path=self.custom_font_path)
        pdf.add_page()
        labels = pdf.labels

        self._draw_totals(pdf, summary, labels)
        pdf.ln(6)
        self._draw_monthly(pdf, summary, labels)

        destinations = summary.destinations[:top_destinations] if top_destinations else summary.destinations
        if destinations:
            pdf.ln(6)
            self._draw_destinations(pdf, destinations, labels)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF 已產生: {output_path}")
        return output_path

    def _header_cells(self, pdf: SalaryPdf, labels: List[str], widths: List[int]) -> None:
        pdf.set_fill_color(*self.HEADER_RGB)
        pdf.set_text_color(255, 255, 255)
        for label, width in zip(labels, widths):
            pdf.cell(width, self.ROW_HEIGHT, pdf.safe_text(label), border=1, align='C', fill=True)
        pdf.ln()
        pdf.set_text_color(0, 0, 0)

    def _draw_totals(self, pdf: SalaryPdf, summary: PaySummary, labels: Dict[str, str]) -> None:
        pdf.set_font(pdf.font_family_name, '', 10)
        widths = [70, 50]
        self._header_cells(pdf, [labels["item"], labels["amount"]], widths)

        rows = [
            (labels["base"], format_money(summary.base)),
            (labels["ot_pay"], format_money(summary.ot_pay)),
            (labels["travel"], format_money(summary.travel_allowance)),
            (labels["bonus"], format_money(summary.bonus)),
            (labels["deduction"], format_money(summary.leave_deduction)),
            (labels["ot_hours"], f"{summary.ot_hours:.1f}"),
            (labels["comp_balance"], f"{summary.comp_units_balance:g}"),
        ]
        for label, value in rows:
            pdf.cell(widths[0], self.ROW_HEIGHT, pdf.safe_text(label), border=1)
            pdf.cell(widths[1], self.ROW_HEIGHT, value, border=1, align='R')
            pdf.ln()

        pdf.set_fill_color(*self.TOTAL_RGB)
        pdf.cell(widths[0], self.ROW_HEIGHT, pdf.safe_text(labels["total"]), border=1, fill=True)
        pdf.cell(widths[1], self.ROW_HEIGHT, format_money(summary.total), border=1, align='R', fill=True)
        pdf.ln()

    def _draw_monthly(self, pdf: SalaryPdf, summary: PaySummary, labels: Dict[str, str]) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        widths = [24, 28, 28, 28, 26, 28, 20]
        self._header_cells(pdf, [
            labels["month"], labels["base"], labels["ot_pay"], labels["travel"],
            labels["bonus"], labels["total"], labels["ot_hours"],
        ], widths)

        for bucket in summary.monthly:
            values = [
                bucket.label,
                format_money(bucket.base),
                format_money(bucket.ot_pay),
                format_money(bucket.travel_allowance),
                format_money(bucket.bonus),
                format_money(bucket.total),
                f"{bucket.ot_hours:.1f}",
            ]
            for idx, (value, width) in enumerate(zip(values, widths)):
                pdf.cell(width, self.ROW_HEIGHT, value, border=1, align='C' if idx == 0 else 'R')
            pdf.ln()

    def _draw_destinations(
        self,
        pdf: SalaryPdf,
        destinations: List[Tuple[str, int]],
        labels: Dict[str, str]
    ) -> None:
        pdf.set_font(pdf.font_family_name, '', 10)
        widths = [70, 30]
        self._header_cells(pdf, [labels["country"], labels["days"]], widths)
        for country, days in destinations:
            pdf.cell(widths[0], self.ROW_HEIGHT, pdf.safe_text(country), border=1)
            pdf.cell(widths[1], self.ROW_HEIGHT, str(days), border=1, align='R')
            pdf.ln()
