from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from app.jobs.process_domains import domain_processor
from app.config import config
import logging
import fcntl

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

async def scheduled_process_job():
    try:
        result = await domain_processor.process_next()
        if result.processed:
            logger.info(f"Scheduled processing finished: {result.message}")
    except Exception as e:
        logger.error(f"Error during scheduled processing: {str(e)}")

# Keep handle global so it's not garbage collected (which would release the lock)
_lock_file_handle = None

def start_scheduler():
    """
    Initializes and starts the scheduler.
    Uses a file lock to ensure only one worker starts it in a multi-worker environment.
    """
    global _lock_file_handle
    if not scheduler.running:
        # Use a file lock to ensure only one process starts the scheduler
        lock_file = "/tmp/domain_scheduler.lock"
        try:
            _lock_file_handle = open(lock_file, "w")
            fcntl.flock(_lock_file_handle, fcntl.LOCK_EX | fcntl.LOCK_NB)

            scheduler.add_job(
                scheduled_process_job,
                CronTrigger.from_crontab(config.PROCESS_SCHEDULE),
                id="process_domains_scheduled",
                replace_existing=True,
                max_instances=1,
                misfire_grace_time=60,
                coalesce=True
            )
            scheduler.start()
            logger.info(f"APScheduler started: domain processing scheduled with: {config.PROCESS_SCHEDULE}")
        except (IOError, BlockingIOError):
            # Another worker already has the lock, this is expected
            _lock_file_handle = None
        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")

def stop_scheduler():
    """
    Shuts down the scheduler.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped.")
