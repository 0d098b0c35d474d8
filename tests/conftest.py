from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from watchdesk.db.session import Base
from watchdesk.infra.frigate.rows import (
    ActivityRow,
    AttendanceRow,
    CameraActivityRow,
    PresenceRow,
    RecordingRow,
    ViolationRow,
    ZoneExitRow,
)
from watchdesk.infra.frigate.source import FrigateSource
import watchdesk.db.models  # noqa: F401  register all models


def at(hour: int, minute: int = 0) -> float:
    """Epoch seconds on 2025-10-20 (UTC)."""
    return datetime(2025, 10, 20, hour, minute, tzinfo=UTC).timestamp()


class Clock:
    """Settable replacement for utcnow, starting the morning after the fixture day."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def clock() -> Clock:
    return Clock(datetime(2025, 10, 21, 9, 0, tzinfo=UTC))


@pytest.fixture()
async def engine():
    # One shared connection so every session sees the same in-memory database
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def session(session_factory) -> AsyncSession:
    async with session_factory() as sess:
        yield sess


@pytest.fixture()
def reports_dir(tmp_path):
    path = tmp_path / "reports"
    path.mkdir()
    return path


@pytest.fixture()
def frigate_source():
    """FrigateSource double: Alice works 7h on two cameras, Bob 1h; one attributed violation."""
    source = MagicMock(spec=FrigateSource)
    source.presence = AsyncMock(return_value=[
        PresenceRow(employee_name="Alice", camera="cam1", zones=["desk_1"],
                    first_seen=at(9), last_seen=at(12), activity_count=30),
        PresenceRow(employee_name="Alice", camera="cam2", zones=["desk_2"],
                    first_seen=at(13), last_seen=at(17), activity_count=20),
        PresenceRow(employee_name="Bob", camera="cam1", zones=[],
                    first_seen=at(10), last_seen=at(11), activity_count=5),
    ])
    source.zone_exits = AsyncMock(return_value=[
        ZoneExitRow(employee_name="Alice", camera="cam1", zones=["desk_1"], left_at=at(10), previous_activity=None),
        ZoneExitRow(employee_name="Alice", camera="cam1", zones=["desk_1"], left_at=at(10, 30), previous_activity=at(10)),
        ZoneExitRow(employee_name="Alice", camera="cam2", zones=["desk_2"], left_at=at(12), previous_activity=at(10, 30)),
        ZoneExitRow(employee_name="Bob", camera="cam1", zones=[], left_at=at(11), previous_activity=None),
    ])
    source.violations = AsyncMock(return_value=[
        ViolationRow(event_id="evt-1", timestamp=at(11), camera="cam1", employee_name="Alice",
                     confidence=0.91, zones=["desk_1"]),
        ViolationRow(event_id=None, timestamp=at(15), camera="cam2"),
    ])
    source.activity = AsyncMock(return_value=[
        ActivityRow(employee_name="Alice", camera="cam1", zones=["desk_1"], hour_of_day=9, day_of_week=1, activity_count=10),
        ActivityRow(employee_name="Alice", camera="cam2", zones=["desk_2"], hour_of_day=14, day_of_week=1, activity_count=5),
        ActivityRow(employee_name="Bob", camera="cam1", zones=[], hour_of_day=10, day_of_week=1, activity_count=3),
    ])
    source.attendance = AsyncMock(return_value=[
        AttendanceRow(employee_name="Alice", attendance_date=date(2025, 10, 20),
                      first_seen=at(9), last_seen=at(17), activity_count=50),
        AttendanceRow(employee_name="Bob", attendance_date=date(2025, 10, 20),
                      first_seen=at(10), last_seen=at(11), activity_count=5),
    ])
    source.camera_activity = AsyncMock(return_value=[
        CameraActivityRow(camera="cam1", label="person", detections=40, last_seen=at(12)),
        CameraActivityRow(camera="cam1", label="cell phone", detections=1, last_seen=at(11)),
        CameraActivityRow(camera="cam2", label="car", detections=2, last_seen=at(16)),
    ])
    source.recordings = AsyncMock(return_value=[
        RecordingRow(camera="cam1", total_recordings=12, last_recording=at(16)),
    ])
    source.cameras = AsyncMock(return_value=["cam1", "cam2"])
    return source
