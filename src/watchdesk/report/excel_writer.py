"""ExcelWriter: builds the XLSX rendition of a report with openpyxl."""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from watchdesk.report.tables import ReportTables

HEADER_FONT = Font(bold=True)
TITLE_FONT = Font(bold=True, size=14)

# Excel limits sheet titles to 31 characters
MAX_SHEET_TITLE = 31


class ExcelWriter:
    """Writes ReportTables to an in-memory Excel buffer: one summary sheet plus one sheet per section."""

    def write_to_buffer(self, tables: ReportTables) -> BytesIO:
        wb = Workbook()

        ws = wb.active
        ws.title = "Summary"
        ws.cell(row=1, column=1, value=tables.title).font = TITLE_FONT
        for col_idx, header in enumerate(["Metric", "Value"], start=1):
            ws.cell(row=3, column=col_idx, value=header).font = HEADER_FONT
        for row_idx, (label, value) in enumerate(tables.summary, start=4):
            ws.cell(row=row_idx, column=1, value=label)
            ws.cell(row=row_idx, column=2, value=value)
        _auto_fit_columns(ws)

        for section in tables.sections:
            ws = wb.create_sheet(title=section.title[:MAX_SHEET_TITLE])

            # Header row
            for col_idx, header in enumerate(section.headers, start=1):
                cell = ws.cell(row=1, column=col_idx, value=header)
                cell.font = HEADER_FONT

            for row_idx, row in enumerate(section.rows, start=2):
                for col_idx, value in enumerate(row, start=1):
                    cell = ws.cell(row=row_idx, column=col_idx, value=value)
                    if isinstance(value, float):
                        cell.number_format = "#,##0.00"

            _auto_fit_columns(ws)

        buf = BytesIO()
        wb.save(buf)
        buf.seek(0)
        return buf


def _auto_fit_columns(ws) -> None:
    """Set column widths based on content (approximate)."""
    for col_cells in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col_cells[0].column)
        for cell in col_cells:
            if cell.value is not None:
                cell_len = len(str(cell.value))
                if cell_len > max_len:
                    max_len = cell_len
        # Add padding, cap at 50
        ws.column_dimensions[col_letter].width = min(max_len + 3, 50)
