"""
Unit tests for CSV and Excel export.
"""

import io
from datetime import date
from unittest.mock import patch

import pandas as pd
import pytest
from openpyxl import load_workbook

from app.reporting.exceptions import ExportError
from app.reporting.export import ExportFormat, export, export_filename, sheet_title
from app.reporting.field_catalog import DataSource, resolve_field
from app.reporting.shaper import shape


@pytest.fixture
def fields():
    return [
        resolve_field(DataSource.PROJECTS, "project_number"),
        resolve_field(DataSource.PROJECTS, "total_expenses"),
        resolve_field(DataSource.PROJECTS, "margin_percentage"),
    ]


@pytest.fixture
def shaped_rows(fields):
    raw = [
        {"project_number": "P-1001", "total_expenses": 48250.0, "margin_percentage": 43.2},
        {"project_number": "P-1002", "total_expenses": None, "margin_percentage": None},
    ]
    return shape(raw, fields)


class TestExportFilename:
    """Test export file naming"""

    def test_slug_and_date(self):
        name = export_filename("Budget vs Actual by Project", ExportFormat.CSV, on=date(2024, 1, 31))
        assert name == "budget-vs-actual-by-project_2024-01-31.csv"

    def test_blank_name(self):
        assert export_filename("", ExportFormat.XLSX, on=date(2024, 1, 31)) == "report_2024-01-31.xlsx"


class TestCsvExport:
    """Test CSV export"""

    def test_headers_are_labels(self, shaped_rows, fields):
        artifact = export(shaped_rows, fields, "Projects")
        header = artifact.content.decode("utf-8").splitlines()[0]
        assert header == "Project #,Total Expenses,Margin %"
        assert artifact.media_type == "text/csv"
        assert artifact.filename.endswith(".csv")

    def test_values_are_display_strings(self, shaped_rows, fields):
        artifact = export(shaped_rows, fields, "Projects")
        df = pd.read_csv(io.BytesIO(artifact.content), dtype=str, keep_default_na=False)
        assert df.iloc[0].tolist() == ["P-1001", "$48,250.00", "43.2%"]

    def test_null_currency_is_empty(self, shaped_rows, fields):
        artifact = export(shaped_rows, fields, "Projects")
        text = artifact.content.decode("utf-8")
        assert "$0.00" not in text
        assert text.splitlines()[2] == "P-1002,,"

    def test_empty_rows_give_header_only(self, fields):
        artifact = export([], fields, "Projects")
        assert artifact.content.decode("utf-8").splitlines() == ["Project #,Total Expenses,Margin %"]

    def test_failure_raises_export_error(self, shaped_rows, fields):
        with patch("app.reporting.export.to_dataframe", side_effect=ValueError("bad frame")):
            with pytest.raises(ExportError):
                export(shaped_rows, fields, "Projects")


class TestExcelExport:
    """Test Excel export"""

    def test_workbook_headers_and_values(self, shaped_rows, fields):
        artifact = export(shaped_rows, fields, "Project Overview", ExportFormat.XLSX)

        assert artifact.filename.endswith(".xlsx")
        workbook = load_workbook(io.BytesIO(artifact.content))
        sheet = workbook["Project Overview"]
        assert [cell.value for cell in sheet[1]] == ["Project #", "Total Expenses", "Margin %"]
        assert sheet["A1"].font.bold
        assert sheet["B2"].value == "$48,250.00"
        assert sheet["B2"].alignment.horizontal == "right"

    def test_long_report_name_is_truncated_for_sheet(self, shaped_rows, fields):
        name = "A very long report name that exceeds Excel limits"
        artifact = export(shaped_rows, fields, name, ExportFormat.XLSX)
        workbook = load_workbook(io.BytesIO(artifact.content))
        assert workbook.sheetnames == [name[:31]]

    def test_sheet_title_drops_characters_excel_rejects(self, shaped_rows, fields):
        artifact = export(shaped_rows, fields, "Budget: Q1/Q2 [draft]?", ExportFormat.XLSX)
        workbook = load_workbook(io.BytesIO(artifact.content))
        assert workbook.sheetnames == ["Budget Q1Q2 draft"]

    @pytest.mark.parametrize("name", ["", "///", "'*'"])
    def test_sheet_title_falls_back_to_report(self, name):
        assert sheet_title(name) == "Report"

    def test_control_characters_are_removed_from_cells(self):
        fields = [resolve_field(DataSource.EXPENSES, "description")]
        artifact = export([{"description": "bad\x01value"}], fields, "Expenses", ExportFormat.XLSX)
        sheet = load_workbook(io.BytesIO(artifact.content)).active
        assert sheet["A2"].value == "badvalue"
