# app/reporting/export.py
"""Export formatter: shaped rows to downloadable CSV and Excel files."""

import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils.exceptions import IllegalCharacterError

from app.reporting.exceptions import ExportError
from app.reporting.field_catalog import FieldMetadata, FieldType

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


def export_filename(report_name: str, export_format: ExportFormat, on: Optional[date] = None) -> str:
    """'Budget vs Actual' -> 'budget-vs-actual_2024-01-31.csv'."""
    slug = re.sub(r"[^a-z0-9]+", "-", (report_name or "").lower()).strip("-") or "report"
    return f"{slug}_{(on or date.today()).isoformat()}.{export_format.value}"


def to_dataframe(rows: Sequence[Dict[str, str]], fields: Sequence[FieldMetadata]) -> pd.DataFrame:
    """Frame of shaped rows with field labels as headers, in field order."""
    return pd.DataFrame(
        [[row.get(field.key, "") for field in fields] for row in rows],
        columns=[field.label for field in fields],
        dtype=object,
    )


def export(
    rows: Sequence[Dict[str, str]],
    fields: Sequence[FieldMetadata],
    report_name: str,
    export_format: ExportFormat = ExportFormat.CSV,
) -> ExportArtifact:
    """Serialize already-shaped rows. Raises ExportError when the file cannot be produced."""
    try:
        export_format = ExportFormat(export_format)
        df = to_dataframe(rows, fields)
        if export_format == ExportFormat.XLSX:
            content = _to_xlsx(df, report_name, fields)
        else:
            content = df.to_csv(index=False).encode("utf-8")
    except (ValueError, TypeError, OSError, IllegalCharacterError) as e:
        logger.error("Export of %r as %s failed: %s", report_name, export_format, e)
        raise ExportError(str(e)) from e

    return ExportArtifact(
        filename=export_filename(report_name, export_format),
        media_type=MEDIA_TYPES[export_format],
        content=content,
    )


_SHEET_TITLE_INVALID = re.compile(r"[:\\/?*\[\]]")


def sheet_title(report_name: str) -> str:
    """Excel-safe sheet title: no `: \\ / ? * [ ]`, no edge apostrophes, at most 31 chars."""
    title = _SHEET_TITLE_INVALID.sub("", report_name or "").strip().strip("'")[:31].strip()
    return title or "Report"


def _clean_cell(value):
    # control characters cannot be stored in a worksheet
    return ILLEGAL_CHARACTERS_RE.sub("", value) if isinstance(value, str) else value


def _to_xlsx(df: pd.DataFrame, report_name: str, fields: Sequence[FieldMetadata]) -> bytes:
    excel_buffer = io.BytesIO()
    sheet_name = sheet_title(report_name)
    df = df.map(_clean_cell)
    df.columns = [_clean_cell(column) for column in df.columns]
    with pd.ExcelWriter(excel_buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        _apply_excel_formatting(worksheet, len(df), fields)
        _auto_adjust_columns(worksheet)
    return excel_buffer.getvalue()


_ALIGNMENT_BY_TYPE = {
    FieldType.CURRENCY: "right",
    FieldType.NUMBER: "right",
    FieldType.PERCENT: "center",
    FieldType.DATE: "center",
}


def _apply_excel_formatting(worksheet, row_count: int, fields: List[FieldMetadata]):
    """Bold header row and type-based alignment of data cells."""
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")

    for col_num, field in enumerate(fields, start=1):
        cell = worksheet.cell(row=1, column=col_num)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment

        horizontal = _ALIGNMENT_BY_TYPE.get(field.type)
        if horizontal is None:
            continue
        for row in range(2, row_count + 2):
            worksheet.cell(row=row, column=col_num).alignment = Alignment(horizontal=horizontal)


def _auto_adjust_columns(worksheet):
    """Auto-adjust column widths for better readability."""
    for column in worksheet.columns:
        column_letter = column[0].column_letter
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        # Set column width with some padding, max 50 characters
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, 50)
