import asyncio
import random
from datetime import timedelta

from database import tasks_collection, users_collection
from logging_config import setup_logging, get_logger
from models.task import TaskModel
from models.user import UserModel
from utils.time import utcnow

setup_logging()
logger = get_logger("seed_tasks")

TASK_TITLES = [
    "Prepare quarterly report", "Review supplier contract", "Update onboarding guide",
    "Fix invoice export", "Plan team offsite", "Audit access permissions",
    "Draft release notes", "Reconcile expense claims", "Clean up shared drive",
    "Schedule vendor demo",
]

DEV_USERS = [
    {"id": "dev_manager", "name": "Dev Manager", "email": "manager@acme.co", "role": "Manager"},
    {"id": "dev_staff_1", "name": "Dev Staff One", "email": "staff1@acme.co", "role": "Staff"},
    {"id": "dev_staff_2", "name": "Dev Staff Two", "email": None, "role": "Staff"},
]

# Minutes from now; a mix of upcoming, imminent and overdue deadlines
DEADLINE_SPREAD = [-120, -5, 25, 65, 1445, 4325, 10085, None]


async def seed_tasks():
    logger.info("Seeding users and tasks...")

    for user in DEV_USERS:
        doc = UserModel(**user).model_dump()
        await users_collection.update_one({"id": doc["id"]}, {"$set": doc}, upsert=True)

    now = utcnow()
    staff_ids = [u["id"] for u in DEV_USERS if u["role"] == "Staff"]
    tasks_to_insert = []
    for title, minutes in zip(TASK_TITLES, DEADLINE_SPREAD * 2):
        offsets = random.choice([None, [30], [60, 1440]])
        task = TaskModel(
            title=title,
            status=random.choice(["To Do", "In Progress"]),
            assigned_team_members=random.sample(staff_ids, k=random.randint(1, len(staff_ids))),
            created_by="dev_manager",
            deadline=now + timedelta(minutes=minutes) if minutes is not None else None,
            reminder_offsets=offsets,
        )
        tasks_to_insert.append(task.model_dump())

    await tasks_collection.insert_many(tasks_to_insert)
    logger.info(f"Inserted {len(tasks_to_insert)} tasks")

if __name__ == "__main__":
    asyncio.run(seed_tasks())
