"""Create a demo account with a few sample tasks."""

from __future__ import annotations

import argparse
import asyncio

from taskmanager.core.config import get_settings
from taskmanager.db.session import Database
from taskmanager.models.task import TaskPriority
from taskmanager.schemas.task import TaskCreate
from taskmanager.services import task_service, user_service

EMAIL = "demo@example.com"
PASSWORD = "demo12345"

SAMPLE_TASKS = [
    TaskCreate(
        title="Read docs",
        description="Read backend guide",
        priority=TaskPriority.LOW,
    ),
    TaskCreate(
        title="Plan UI",
        description="Design TaskList and TaskForm",
        priority=TaskPriority.MEDIUM,
    ),
    TaskCreate(
        title="Implement API",
        description="Wire routes and controllers",
        priority=TaskPriority.HIGH,
        completed=True,
    ),
]


async def main(email: str, password: str) -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    await database.connect()
    try:
        async with database.session() as session:
            user = await user_service.get_user_by_email(session, email=email)
            if user is None:
                user = await user_service.create_user(
                    session, email=email, password=password, name="Demo"
                )
                print(f"Created user {user.email} / {password}")
            inserted = await task_service.seed_tasks(
                session, owner_id=user.id, payloads=SAMPLE_TASKS
            )
        if inserted:
            print(f"Seeded {inserted} sample tasks for {email}.")
        else:
            print(f"Tasks already exist for {email}. Skipping seeding.")
    finally:
        await database.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--email", default=EMAIL)
    parser.add_argument("--password", default=PASSWORD)
    args = parser.parse_args()
    asyncio.run(main(args.email, args.password))
