from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from src.config import get_settings
from src.scheduler.dispatcher import run_master


def create_scheduler() -> BackgroundScheduler:
    """In-process stand-in for the external hourly cron trigger."""
    settings = get_settings()
    scheduler = BackgroundScheduler(timezone=settings.timezone or None)

    # 每小時整點觸發 master dispatcher，由它依時段決定要跑哪些工作
    scheduler.add_job(
        run_master,
        CronTrigger(minute=0),
        id="master_cron",
        name="Master Cron Dispatcher",
        max_instances=1,
        coalesce=True,
    )

    logger.info("Scheduler configured with hourly master dispatcher")
    return scheduler


def start_scheduler():
    scheduler = create_scheduler()
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler
