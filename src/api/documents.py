from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from src.api.deps import verify_cron_secret
from src.scheduler import jobs

router = APIRouter(
    prefix="/api",
    tags=["manual-triggers"],
    dependencies=[Depends(verify_cron_secret)],
)


class CheckExpiryRequest(BaseModel):
    user_id: str = Field(alias="userId")
    thresholds_only: bool = Field(False, alias="thresholdsOnly")


class SendReminderRequest(BaseModel):
    user_id: str = Field(alias="userId")


@router.post("/documents/check-expiry-now")
def check_expiry_now(body: CheckExpiryRequest):
    """Run the expiry check for one user's documents on demand."""
    try:
        return jobs.check_user_documents(
            body.user_id, thresholds_only=body.thresholds_only
        )
    except Exception:
        logger.exception(f"Error checking document expiry for user {body.user_id}")
        raise HTTPException(status_code=500, detail="Failed to check document expiry")


@router.post("/reminders/send-now")
def send_reminder_now(body: SendReminderRequest):
    try:
        return jobs.send_user_reminder(body.user_id)
    except Exception:
        logger.exception(f"Error sending reminder to user {body.user_id}")
        raise HTTPException(status_code=500, detail="Failed to send reminder")
