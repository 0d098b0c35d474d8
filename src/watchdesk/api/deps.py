from typing import AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from watchdesk.container import Container
from watchdesk.report.service import ReportService
from watchdesk.workers.sweeper import RetentionSweeper


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@inject
def get_report_service(
    service: ReportService = Depends(Provide[Container.report_service]),
) -> ReportService:
    return service


@inject
def get_sweeper(
    sweeper: RetentionSweeper = Depends(Provide[Container.sweeper]),
) -> RetentionSweeper:
    return sweeper
