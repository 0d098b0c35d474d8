"""Seed desk assignments from a CSV file.

Usage:
    PYTHONPATH=src python scripts/seed_desks.py desks.csv

The CSV needs a header row with desk_number,employee_name and optionally
status,camera,notes. Idempotent: does nothing when any desk already exists.
"""

import asyncio
import csv
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logger = logging.getLogger("seed_desks")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def load_rows(path: Path) -> list[dict]:
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


async def main(path: Path) -> None:
    from watchdesk.api.schemas.desks import DeskCreate
    from watchdesk.config import settings
    from watchdesk.db.repos.desk_repo import DeskRepo
    from watchdesk.db.session import build_engine, build_session_factory, create_tables

    engine = build_engine(settings.database_url, echo=False)
    await create_tables(engine)
    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        repo = DeskRepo(session)
        existing = await repo.count()
        if existing:
            logger.info("Desk assignments already seeded (%d desks found)", existing)
            await engine.dispose()
            return

        rows = load_rows(path)
        for row in rows:
            desk = DeskCreate(
                desk_number=int(row["desk_number"]),
                employee_name=row["employee_name"],
                status=row.get("status") or "active",
                camera=row.get("camera") or None,
                notes=row.get("notes") or None,
            )
            await repo.create(
                desk_number=desk.desk_number,
                employee_name=desk.employee_name,
                status=desk.status,
                camera=desk.camera,
                notes=desk.notes,
            )
        await session.commit()
        logger.info("Seeded %d desk assignments", len(rows))

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(Path(sys.argv[1])))
