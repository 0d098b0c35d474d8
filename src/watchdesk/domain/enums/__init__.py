from watchdesk.domain.enums.desk import DeskStatus
from watchdesk.domain.enums.report import REPORT_TYPE_DESCRIPTIONS, ReportFormat, ReportType

__all__ = [
    "DeskStatus",
    "REPORT_TYPE_DESCRIPTIONS",
    "ReportFormat",
    "ReportType",
]
