"""Tests for ExcelWriter: openpyxl workbook generation."""

from io import BytesIO

from openpyxl import load_workbook

from watchdesk.report.excel_writer import ExcelWriter
from watchdesk.report.tables import ReportTables, TableSection


def _tables() -> ReportTables:
    return ReportTables(
        title="Violation Report",
        summary=[("Report ID", "r-1"), ("Total Violations", 2)],
        sections=[
            TableSection(
                title="Violations",
                headers=["Employee", "Camera", "Confidence"],
                rows=[("Alice", "cam1", 0.91), ("", "cam2", "")],
            ),
            TableSection(
                title="A section title well beyond the sheet name limit",
                headers=["Key", "Count"],
            ),
        ],
    )


class TestExcelWriterStructure:
    def test_produces_valid_xlsx(self):
        buf = ExcelWriter().write_to_buffer(_tables())

        assert isinstance(buf, BytesIO)
        assert buf.tell() == 0  # Rewound to start
        assert len(buf.getvalue()) > 0

    def test_summary_sheet_then_one_sheet_per_section(self):
        wb = load_workbook(ExcelWriter().write_to_buffer(_tables()))
        assert wb.sheetnames == ["Summary", "Violations", "A section title well beyond the"]

    def test_empty_report(self):
        wb = load_workbook(ExcelWriter().write_to_buffer(ReportTables(title="Empty")))
        assert wb.sheetnames == ["Summary"]
        assert wb["Summary"].cell(row=1, column=1).value == "Empty"


class TestExcelWriterContent:
    def test_summary_rows(self):
        ws = load_workbook(ExcelWriter().write_to_buffer(_tables()))["Summary"]

        assert ws.cell(row=1, column=1).value == "Violation Report"
        assert ws.cell(row=3, column=1).value == "Metric"
        assert ws.cell(row=4, column=1).value == "Report ID"
        assert ws.cell(row=5, column=2).value == 2

    def test_section_headers_are_bold(self):
        ws = load_workbook(ExcelWriter().write_to_buffer(_tables()))["Violations"]

        headers = [ws.cell(row=1, column=c).value for c in range(1, 4)]
        assert headers == ["Employee", "Camera", "Confidence"]
        assert ws.cell(row=1, column=1).font.bold is True

    def test_float_cells_are_formatted(self):
        ws = load_workbook(ExcelWriter().write_to_buffer(_tables()))["Violations"]

        assert ws.cell(row=2, column=3).value == 0.91
        assert ws.cell(row=2, column=3).number_format == "#,##0.00"
        assert ws.max_row == 3
