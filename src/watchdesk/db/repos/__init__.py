from watchdesk.db.repos.cache_repo import CacheRepo
from watchdesk.db.repos.desk_repo import DeskRepo
from watchdesk.db.repos.report_repo import ReportRepo

__all__ = ["CacheRepo", "DeskRepo", "ReportRepo"]
