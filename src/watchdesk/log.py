import logging

LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once per process; quiet chatty libraries."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
