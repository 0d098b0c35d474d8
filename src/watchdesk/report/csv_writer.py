"""CsvWriter: a single CSV document: summary block, then each section separated by a blank line."""

import csv
import io
from io import BytesIO

from watchdesk.report.tables import ReportTables


class CsvWriter:
    def write_to_buffer(self, tables: ReportTables) -> BytesIO:
        text = io.StringIO(newline="")
        writer = csv.writer(text)

        writer.writerow([tables.title])
        writer.writerow(["Metric", "Value"])
        writer.writerows(tables.summary)

        for section in tables.sections:
            writer.writerow([])
            writer.writerow([section.title])
            writer.writerow(section.headers)
            writer.writerows(section.rows)

        buf = BytesIO(text.getvalue().encode("utf-8"))
        buf.seek(0)
        return buf
