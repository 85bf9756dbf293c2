import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import SessionLocal
from app.services.linked_course import LinkedCourseRepairService

logger = logging.getLogger(__name__)


def repair_linked_courses():
    """
    Scheduled task reconciling linked-course cart entries.
    Runs daily at the configured hour (UTC).
    """
    db = SessionLocal()
    try:
        result = LinkedCourseRepairService(db).repair()
        logger.info(
            f"[{datetime.now(timezone.utc)}] Linked course repair completed. "
            f"Removed {result['orphaned_removed']}, restored {result['companions_restored']}."
        )
    except Exception as e:
        logger.error(f"Error during linked course repair: {e}", exc_info=True)
    finally:
        db.close()


def start_scheduler():
    """
    Initialize and start the APScheduler for the daily repair job.
    """
    scheduler = AsyncIOScheduler(timezone=settings.timezone)

    scheduler.add_job(
        repair_linked_courses,
        trigger=CronTrigger(hour=settings.linked_course_repair_hour, minute=0),
        id="daily_linked_course_repair",
        name="Repair linked course cart entries",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started. Daily linked course repair scheduled.")

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """
    Gracefully shutdown the scheduler.
    """
    if scheduler:
        scheduler.shutdown()
        logger.info("Scheduler shut down.")
