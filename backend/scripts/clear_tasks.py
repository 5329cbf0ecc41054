"""Delete every task in the configured database."""

from __future__ import annotations

import asyncio

from taskmanager.core.config import get_settings
from taskmanager.db.session import Database
from taskmanager.services import task_service


async def main() -> None:
    database = Database(get_settings().database_url)
    await database.connect()
    try:
        async with database.session() as session:
            deleted = await task_service.clear_tasks(session)
        print(f"Cleared tasks table. Deleted: {deleted}")
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(main())
