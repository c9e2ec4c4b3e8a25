import sys
import os
import asyncio
from pymongo import ASCENDING, DESCENDING

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import notifications_collection, tasks_collection, users_collection, comments_collection
from logging_config import get_logger, setup_logging

logger = get_logger("setup_indexes")

async def create_indexes():
    logger.info("Starting index creation")

    # --- Notifications ---
    # Inbox: find({user_id: X, read: False}).sort(scheduled_for: -1)
    await notifications_collection.create_index([("user_id", ASCENDING), ("read", ASCENDING), ("scheduled_for", DESCENDING)])
    logger.info("Created index notifications(user_id, read, scheduled_for DESC)")

    # Reminder dedup lookups: (user_id, task_id, type, reminder_offset).
    # Not unique: evaluator runs are serialized by the scheduler instead.
    await notifications_collection.create_index([
        ("user_id", ASCENDING), ("task_id", ASCENDING), ("type", ASCENDING), ("reminder_offset", ASCENDING)
    ])
    logger.info("Created index notifications(user_id, task_id, type, reminder_offset)")

    # Outbox scan: find({sent: False, type: {$in}, scheduled_for: {$lte}})
    await notifications_collection.create_index([("sent", ASCENDING), ("type", ASCENDING), ("scheduled_for", ASCENDING)])
    logger.info("Created index notifications(sent, type, scheduled_for)")

    await notifications_collection.create_index([("id", ASCENDING)], unique=True)
    logger.info("Created index notifications(id UNIQUE)")

    # --- Tasks ---
    # Reminder scan: find({status: {$ne: Done}, deadline: {$ne: null}})
    await tasks_collection.create_index([("status", ASCENDING), ("deadline", ASCENDING)])
    logger.info("Created index tasks(status, deadline)")

    await tasks_collection.create_index([("assigned_team_members", ASCENDING)])
    logger.info("Created index tasks(assigned_team_members)")

    await tasks_collection.create_index([("id", ASCENDING)], unique=True)
    logger.info("Created index tasks(id UNIQUE)")

    # --- Users / Comments ---
    await users_collection.create_index([("id", ASCENDING)], unique=True)
    await comments_collection.create_index([("task_id", ASCENDING), ("created_at", DESCENDING)])
    logger.info("Created index users(id UNIQUE), comments(task_id, created_at DESC)")

    logger.info("All indexes created successfully")

if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_indexes())
