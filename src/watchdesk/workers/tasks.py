"""Celery tasks for background processing."""

import asyncio
import logging

from watchdesk.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="watchdesk.workers.tasks.sweep_expired")
def sweep_expired() -> dict:
    """Purge expired cache and report rows.

    Bridges to async code via asyncio.run(); each task invocation
    creates its own engine + session (no shared state with FastAPI).
    """
    return asyncio.run(_sweep_expired_async())


async def _sweep_expired_async() -> dict:
    from watchdesk.config import settings
    from watchdesk.db.session import build_engine, build_session_factory
    from watchdesk.workers.sweeper import RetentionSweeper

    engine = build_engine(settings.database_url, echo=False)
    try:
        result = await RetentionSweeper(build_session_factory(engine)).sweep()
    finally:
        await engine.dispose()
    logger.info("Scheduled sweep finished: %s", result.to_dict())
    return result.to_dict()
