from dependency_injector import containers, providers

from watchdesk.config import Settings
from watchdesk.db.session import build_engine, build_session_factory
from watchdesk.infra.frigate.source import FrigateSource
from watchdesk.report.artifacts import ArtifactStore
from watchdesk.report.cache import QueryCache
from watchdesk.report.data_collector import ReportDataCollector
from watchdesk.report.service import ReportService
from watchdesk.workers.sweeper import RetentionSweeper


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["watchdesk.api.deps"])

    settings = providers.Singleton(Settings)

    # Application store: reports, cache, desks
    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
        pool_size=settings.provided.app_pool_size,
        pool_timeout=settings.provided.pool_timeout_seconds,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    # Frigate store, read-only
    frigate_engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.frigate_database_url,
        echo=settings.provided.debug,
        pool_size=settings.provided.frigate_pool_size,
        pool_timeout=settings.provided.pool_timeout_seconds,
    )

    frigate_session_factory = providers.Singleton(
        build_session_factory,
        engine=frigate_engine,
    )

    frigate_source = providers.Singleton(FrigateSource, session_factory=frigate_session_factory)

    query_cache = providers.Singleton(
        QueryCache,
        session_factory=session_factory,
        ttl_seconds=settings.provided.cache_ttl_seconds,
    )

    collector = providers.Factory(ReportDataCollector, source=frigate_source, cache=query_cache)

    artifact_store = providers.Singleton(ArtifactStore, root=settings.provided.reports_dir)

    report_service = providers.Factory(
        ReportService,
        session_factory=session_factory,
        collector=collector,
        artifacts=artifact_store,
        api_base_url=settings.provided.api_base_url,
        media_base_url=settings.provided.frigate_media_url,
        default_window_hours=settings.provided.default_window_hours,
    )

    sweeper = providers.Singleton(RetentionSweeper, session_factory=session_factory)
