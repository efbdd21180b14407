"""Master cron dispatcher.

A single entry point, called hourly by an external scheduler, that maps the
current wall-clock hour to the jobs due at that hour:

  - 09:00 - expiry-scan
  - 18:00 - daily-reminder
  - 21:00 - daily-reminder

Nothing is remembered between calls; running twice in the same hour simply
re-evaluates the same pure checks.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from src.scheduler import jobs

EXPIRY_SCAN = "expiry-scan"
DAILY_REMINDER = "daily-reminder"

JOB_SCHEDULE: Dict[int, Tuple[str, ...]] = {
    9: (EXPIRY_SCAN,),
    18: (DAILY_REMINDER,),
    21: (DAILY_REMINDER,),
}

JOB_REGISTRY: Dict[str, Callable[[datetime], Dict[str, Any]]] = {
    EXPIRY_SCAN: lambda now: jobs.check_expiring_documents(now),
    DAILY_REMINDER: lambda now: jobs.send_daily_reminder(now),
}


@dataclass
class JobResult:
    job: str
    time: str
    status: str  # "success" | "failed" | "error"
    status_code: int
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "job": self.job,
            "time": self.time,
            "status": self.status,
            "statusCode": self.status_code,
            "data": self.data,
        }
        if self.error:
            result["error"] = self.error
        return result


def jobs_for_hour(hour: int) -> Tuple[str, ...]:
    return JOB_SCHEDULE.get(hour, ())


def _scheduled_hours() -> str:
    return ", ".join(f"{hour}:00" for hour in sorted(JOB_SCHEDULE))


def run_job(name: str, now: datetime) -> JobResult:
    """Run one job in isolation; its failure is captured, never raised."""
    slot = f"{now.hour}:00"
    logger.info(f"[master-cron] Triggering {name} at {slot}")
    try:
        data = JOB_REGISTRY[name](now)
    except Exception:
        logger.exception(f"[master-cron] {name} at {slot} failed")
        return JobResult(
            job=name,
            time=slot,
            status="error",
            status_code=500,
            error=f"Job {name} failed",
        )

    ok = bool(data.get("success", False))
    logger.info(f"[master-cron] {name} at {slot} completed: {data}")
    return JobResult(
        job=name,
        time=slot,
        status="success" if ok else "failed",
        status_code=200 if ok else 500,
        data=data,
    )


def run_master(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Run every job due at the current hour and aggregate their results."""
    now = now or jobs.local_now()
    hour = now.hour
    logger.info(f"[master-cron] Starting at {hour}:00")

    due = jobs_for_hour(hour)
    if not due:
        return {
            "success": True,
            "message": (
                f"No jobs scheduled for {hour}:00. Jobs run at {_scheduled_hours()}."
            ),
            "hour": hour,
            "jobsExecuted": 0,
            "results": [],
            "timestamp": now.isoformat(),
        }

    results: List[JobResult] = [run_job(name, now) for name in due]
    return {
        "success": all(result.succeeded for result in results),
        "hour": hour,
        "jobsExecuted": len(results),
        "results": [result.to_dict() for result in results],
        "timestamp": now.isoformat(),
    }
