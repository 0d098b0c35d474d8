import csv
import io
import json
from datetime import UTC, datetime, timedelta

import pytest

from watchdesk.domain.enums import ReportFormat
from watchdesk.domain.models.report import ReportFilters
from watchdesk.report.builders import ReportContext, build_violation_report
from watchdesk.report.data_collector import ReportDataCollector
from watchdesk.report.renderers import primary_extension, render_report, requested_extensions
from watchdesk.report.tables import cell, tabulate
from watchdesk.report.timewindow import TimeWindow
from watchdesk.report.timezones import resolve_timezone

DAY_START = datetime(2025, 10, 20, tzinfo=UTC)
WINDOW = TimeWindow(start=DAY_START, end=DAY_START + timedelta(hours=24))


@pytest.fixture()
async def violation_report(frigate_source):
    ctx = ReportContext(
        report_id="r-1",
        generated_at=DAY_START + timedelta(hours=18),
        window=WINDOW,
        filters=ReportFilters(),
        zone=resolve_timezone("UTC"),
        media_base_url="http://frigate:5000",
    )
    violations = await ReportDataCollector(frigate_source).violations(WINDOW)
    return build_violation_report(ctx, violations)


class TestExtensions:
    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            (ReportFormat.JSON, ["json"]),
            (ReportFormat.CSV, ["json", "csv"]),
            (ReportFormat.XLSX, ["json", "xlsx"]),
            (ReportFormat.ALL, ["json", "csv", "pdf", "xlsx"]),
        ],
    )
    def test_json_always_requested(self, fmt, expected):
        assert requested_extensions(fmt) == expected

    def test_primary_extension(self):
        assert primary_extension(ReportFormat.ALL) == "json"
        assert primary_extension(ReportFormat.PDF) == "pdf"


class TestCell:
    def test_normalisation(self):
        assert cell(None) == ""
        assert cell(1.23456) == 1.23
        assert cell(["a", "b"]) == "a, b"
        assert cell(datetime(2025, 10, 20, 9, 0, tzinfo=UTC)) == "2025-10-20 09:00:00 UTC"


class TestRenderReport:
    def test_json_rendition(self, violation_report):
        renditions = render_report(violation_report, ReportFormat.JSON)

        assert list(renditions) == ["json"]
        body = json.loads(renditions["json"])
        assert body["report_type"] == "violation_report"
        assert body["summary"]["total_violations"] == 2

    def test_csv_rendition(self, violation_report):
        renditions = render_report(violation_report, ReportFormat.CSV)

        rows = list(csv.reader(io.StringIO(renditions["csv"].decode("utf-8"))))
        assert rows[0] == ["Violation Report"]
        assert ["Metric", "Value"] in rows
        assert ["Timestamp", "Employee", "Camera", "Confidence", "Zones", "Snapshot"] in rows
        assert any(row[:3] == ["2025-10-20 11:00:00 UTC", "Alice", "cam1"] for row in rows)

    def test_pdf_rendition(self, violation_report):
        renditions = render_report(violation_report, ReportFormat.PDF)
        assert renditions["pdf"].startswith(b"%PDF")

    def test_all_renditions(self, violation_report):
        renditions = render_report(violation_report, ReportFormat.ALL)

        assert set(renditions) == {"json", "csv", "pdf", "xlsx"}
        assert renditions["xlsx"][:2] == b"PK"


class TestTabulate:
    def test_violation_sections(self, violation_report):
        tables = tabulate(violation_report)

        assert tables.title == "Violation Report"
        assert [s.title for s in tables.sections] == ["Violations", "By Camera", "Daily"]
        assert ("Total Violations", 2) in tables.summary
        assert tables.sections[0].rows[0][5].endswith("/api/events/evt-1/snapshot.jpg")
