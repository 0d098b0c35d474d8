from watchdesk.db.models.cache import CacheEntry
from watchdesk.db.models.desk import DeskAssignment
from watchdesk.db.models.report import ReportRecord

__all__ = [
    "CacheEntry",
    "DeskAssignment",
    "ReportRecord",
]
