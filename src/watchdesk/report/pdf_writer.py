"""PdfWriter: renders ReportTables onto letter-size pages with the reportlab canvas."""

from io import BytesIO

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import landscape, letter
from reportlab.pdfgen import canvas

from watchdesk.report.tables import ReportTables, TableSection

MARGIN = 40
ROW_HEIGHT = 16
MAX_CELL_CHARS = 28

PRIMARY = HexColor("#0F172A")
MUTED = HexColor("#64748B")
HEADER_FILL = HexColor("#EEF2FF")


def _clip(value, limit: int = MAX_CELL_CHARS) -> str:
    text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


class PdfWriter:
    def write_to_buffer(self, tables: ReportTables) -> BytesIO:
        buffer = BytesIO()
        page_size = landscape(letter)
        pdf_canvas = canvas.Canvas(buffer, pagesize=page_size)
        width, height = page_size
        y = height - MARGIN

        def new_page() -> float:
            pdf_canvas.showPage()
            return height - MARGIN

        def ensure_room(top: float, needed: float) -> float:
            return new_page() if top - needed < MARGIN else top

        pdf_canvas.setTitle(tables.title)
        pdf_canvas.setFillColor(PRIMARY)
        pdf_canvas.setFont("Helvetica-Bold", 18)
        pdf_canvas.drawString(MARGIN, y, tables.title)
        y -= 30

        pdf_canvas.setFont("Helvetica", 10)
        for label, value in tables.summary:
            y = ensure_room(y, ROW_HEIGHT)
            pdf_canvas.setFillColor(MUTED)
            pdf_canvas.drawString(MARGIN, y, str(label))
            pdf_canvas.setFillColor(PRIMARY)
            pdf_canvas.drawString(MARGIN + 160, y, _clip(value, 80))
            y -= ROW_HEIGHT

        for section in tables.sections:
            y = self._draw_section(pdf_canvas, section, y - 12, width, ensure_room)

        pdf_canvas.save()
        buffer.seek(0)
        return buffer

    @staticmethod
    def _draw_section(pdf_canvas, section: TableSection, y: float, width: float, ensure_room) -> float:
        col_width = (width - 2 * MARGIN) / max(len(section.headers), 1)
        columns = [MARGIN + idx * col_width for idx in range(len(section.headers))]

        def draw_header(top: float) -> float:
            pdf_canvas.setFillColor(HEADER_FILL)
            pdf_canvas.rect(MARGIN, top - 4, width - 2 * MARGIN, ROW_HEIGHT, fill=1, stroke=0)
            pdf_canvas.setFillColor(PRIMARY)
            pdf_canvas.setFont("Helvetica-Bold", 9)
            for x, header in zip(columns, section.headers):
                pdf_canvas.drawString(x + 2, top, _clip(header))
            pdf_canvas.setFont("Helvetica", 9)
            return top - ROW_HEIGHT

        y = ensure_room(y, 3 * ROW_HEIGHT)
        pdf_canvas.setFillColor(PRIMARY)
        pdf_canvas.setFont("Helvetica-Bold", 13)
        pdf_canvas.drawString(MARGIN, y, section.title)
        y = draw_header(y - 20)

        if not section.rows:
            pdf_canvas.setFillColor(MUTED)
            pdf_canvas.drawString(MARGIN + 2, y, "No data")
            return y - ROW_HEIGHT

        for row in section.rows:
            top = ensure_room(y, ROW_HEIGHT)
            if top != y:
                top = draw_header(top)
            pdf_canvas.setFillColor(PRIMARY)
            for x, value in zip(columns, row):
                pdf_canvas.drawString(x + 2, top, _clip(value))
            y = top - ROW_HEIGHT
        return y
