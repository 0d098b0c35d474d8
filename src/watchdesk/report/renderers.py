"""Render a report body into its file renditions, all in memory."""

from watchdesk.domain.enums import ReportFormat
from watchdesk.domain.models.report import ReportHeader
from watchdesk.report.csv_writer import CsvWriter
from watchdesk.report.excel_writer import ExcelWriter
from watchdesk.report.pdf_writer import PdfWriter
from watchdesk.report.tables import tabulate

# File extension per rendition, in the order they are written
EXTENSIONS = ("json", "csv", "pdf", "xlsx")

# download_urls key per extension
DOWNLOAD_KEYS = {"json": "json", "csv": "csv", "pdf": "pdf", "xlsx": "excel"}

_TABULAR_WRITERS = {
    "csv": CsvWriter,
    "pdf": PdfWriter,
    "xlsx": ExcelWriter,
}


def requested_extensions(fmt: ReportFormat) -> list[str]:
    """JSON is always produced; ``all`` adds every tabular format."""
    if fmt == ReportFormat.ALL:
        return list(EXTENSIONS)
    if fmt == ReportFormat.JSON:
        return ["json"]
    return ["json", fmt.value]


def primary_extension(fmt: ReportFormat) -> str:
    """The rendition whose size is recorded as the report's file_size."""
    if fmt in (ReportFormat.ALL, ReportFormat.JSON):
        return "json"
    return fmt.value


def render_report(report: ReportHeader, fmt: ReportFormat) -> dict[str, bytes]:
    renditions = {"json": report.model_dump_json(indent=2).encode("utf-8")}
    extensions = [ext for ext in requested_extensions(fmt) if ext != "json"]
    if extensions:
        tables = tabulate(report)
        for ext in extensions:
            renditions[ext] = _TABULAR_WRITERS[ext]().write_to_buffer(tables).getvalue()
    return renditions
