import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from watchdesk.exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into the store's error types.

    Drivers surface a refused or dropped connection as a plain ``OSError``;
    that is a storage failure too.
    """
    try:
        yield
    except IntegrityError as e:
        logger.warning("%s: constraint violation: %s", operation, e.orig)
        raise ConflictError(f"{operation}: duplicate key") from e
    except SQLAlchemyError as e:
        logger.error("%s failed: %s", operation, e)
        raise StorageError(f"{operation} failed") from e
    except OSError as e:
        logger.error("%s failed: connection error: %s", operation, e)
        raise StorageError(f"{operation} failed") from e
