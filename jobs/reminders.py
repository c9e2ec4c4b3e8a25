import uuid
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import config
from logging_config import get_logger, job_id_var
from services.outbox import OutboxSender
from services.reminders import check_and_create_reminders
from utils.email import MailSender, ResendMailSender

logger = get_logger("jobs.reminders")

# One scheduler per process; guards against double start on reload
_scheduler: Optional[AsyncIOScheduler] = None


async def run_reminder_cycle(db=None, mailer: Optional[MailSender] = None, now: Optional[datetime] = None) -> dict:
    """
    One tick: create due reminder/overdue notifications, then email everything due.
    Store errors propagate; the next tick retries.
    """
    if db is None:
        from database import db
    mailer = mailer or ResendMailSender()

    token = job_id_var.set(f"reminders-{uuid.uuid4().hex[:8]}")
    try:
        created = await check_and_create_reminders(db, now=now)
        sent_ids = await OutboxSender(db, mailer).send_pending_emails(now=now)
        summary = {"created": len(created), "sent": len(sent_ids)}
        if created or sent_ids:
            logger.info("Reminder cycle complete", extra={"data": summary})
        return summary
    except Exception as e:
        logger.error(f"Reminder cycle failed: {e}", exc_info=True)
        raise
    finally:
        job_id_var.reset(token)


def start_scheduler() -> Optional[AsyncIOScheduler]:
    """
    Start the reminder scheduler on the running event loop.

    - Respects ENABLE_SCHEDULER
    - No double start
    - max_instances=1 keeps evaluator runs serialized (dedup is check-then-insert)
    """
    global _scheduler

    if not config.ENABLE_SCHEDULER:
        logger.info("Reminder scheduler disabled via config (ENABLE_SCHEDULER=false)")
        return None

    if _scheduler is not None:
        logger.info("Reminder scheduler already running, skipping initialization")
        return _scheduler

    _scheduler = AsyncIOScheduler(timezone="UTC")
    _scheduler.add_job(
        run_reminder_cycle,
        trigger="interval",
        seconds=config.REMINDER_INTERVAL_SECONDS,
        id="task_reminders",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    logger.info(f"Reminder scheduler started (every {config.REMINDER_INTERVAL_SECONDS}s)")
    return _scheduler


def shutdown_scheduler():
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
    logger.info("Reminder scheduler stopped")
