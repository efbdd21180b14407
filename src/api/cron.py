from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from src.api.deps import verify_cron_secret
from src.scheduler import jobs
from src.scheduler.dispatcher import run_master

router = APIRouter(
    prefix="/api/cron",
    tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)


# Sync handlers: FastAPI runs them in its threadpool, jobs use sync sessions
@router.get("/master")
def master_cron():
    try:
        return run_master()
    except Exception:
        logger.exception("Master cron job failed")
        raise HTTPException(status_code=500, detail="Master cron job failed")


@router.get("/check-expiring-documents")
def check_expiring_documents():
    try:
        return jobs.check_expiring_documents()
    except Exception:
        logger.exception("Error checking expiring documents")
        raise HTTPException(status_code=500, detail="Failed to check expiring documents")


@router.get("/daily-reminder")
def daily_reminder():
    try:
        return jobs.send_daily_reminder()
    except Exception:
        logger.exception("Error sending daily reminders")
        raise HTTPException(status_code=500, detail="Failed to send daily reminders")
