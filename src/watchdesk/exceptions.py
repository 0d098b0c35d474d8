"""Error taxonomy shared by the stores, the report generator and the API."""


class WatchdeskError(Exception):
    """Base class for errors the API knows how to answer."""

    status_code = 500

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(WatchdeskError):
    """Entity or file absent, or logically expired. Callers never learn which."""

    status_code = 404


class ConflictError(WatchdeskError):
    """Duplicate unique key on insert."""

    status_code = 409


class ValidationError(WatchdeskError):
    """Malformed or out-of-range input, raised before any store access."""

    status_code = 400


class StorageError(WatchdeskError):
    """Connectivity or query failure against the application store."""

    status_code = 500


class UpstreamError(WatchdeskError):
    """The Frigate analytics source failed or returned unparsable rows."""

    status_code = 502
