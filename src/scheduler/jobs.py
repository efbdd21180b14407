"""Notification jobs run by the cron dispatcher and the manual trigger endpoints.

Jobs:
  - expiry-scan     (09:00) - check_expiring_documents
  - daily-reminder  (18:00, 21:00) - send_daily_reminder
  - manual, one user - check_user_documents, send_user_reminder
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from loguru import logger
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from src.config import get_settings
from src.db.database import ensure_sqlite_dir
from src.models import NotificationLog, NotificationType, User
from src.notifications import subscriptions as subscription_store
from src.notifications.batch import send_batch
from src.notifications.formatter import format_daily_reminder
from src.notifications.payload import BatchResult, SubscriptionInfo
from src.notifications.webpush import WebPushSender
from src.scheduler.scanner import EligibleNotification, scan

settings = get_settings()

# 同步版本的資料庫連線（排程與觸發端點共用同一個 engine）
sync_engine = create_engine(settings.sync_database_url)
SyncSession = sessionmaker(bind=sync_engine)


def get_sync_session() -> Session:
    ensure_sqlite_dir(settings.sync_database_url)
    return SyncSession()


def local_now() -> datetime:
    """Wall-clock time in the configured timezone, as a naive datetime."""
    if settings.timezone:
        return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)
    return datetime.now()


@dataclass
class DeliveryTotals:
    sent: int = 0
    failed: int = 0
    removed: int = 0

    def add(self, session: Session, batch: BatchResult) -> None:
        self.sent += batch.successful
        self.failed += batch.failed
        if batch.expired:
            self.removed += subscription_store.delete_endpoints(session, batch.expired)


def _already_notified(session: Session, document_id: int, day: date) -> bool:
    exists = session.scalar(
        select(NotificationLog.id).where(
            NotificationLog.notification_type == NotificationType.document_expiry,
            NotificationLog.reference_id == document_id,
            NotificationLog.sent_on == day,
        )
    )
    return exists is not None


def _log_notified(session: Session, document_id: int, day: date) -> None:
    session.add(
        NotificationLog(
            notification_type=NotificationType.document_expiry,
            reference_id=document_id,
            sent_on=day,
        )
    )
    session.commit()


def _deliver_expiry_notifications(
    session: Session, notifications: List[EligibleNotification], now: datetime
) -> DeliveryTotals:
    totals = DeliveryTotals()
    if not settings.notification_enabled:
        logger.info("Notifications are disabled, skipping expiry delivery")
        return totals

    sender = WebPushSender()
    for notification in notifications:
        if settings.expiry_dedup_enabled and _already_notified(
            session, notification.document_id, now.date()
        ):
            logger.debug(f"Document {notification.document_id} already notified today")
            continue

        logger.info(
            f"Notifying document {notification.document_id} "
            f"({notification.days_until_expiration} days left) "
            f"to {len(notification.subscriptions)} devices"
        )
        batch = send_batch(notification.subscriptions, notification.payload, sender)
        totals.add(session, batch)

        if settings.expiry_dedup_enabled and batch.successful:
            _log_notified(session, notification.document_id, now.date())

    return totals


def check_expiring_documents(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Global expiry scan: notify every document sitting on a threshold day."""
    now = now or local_now()
    logger.info(f"Checking expiring documents at {now}")

    with get_sync_session() as session:
        result = scan(session, now)
        totals = _deliver_expiry_notifications(session, result.notifications, now)

    logger.info(
        f"Expiry check completed: {totals.sent} sent, {totals.failed} failed, "
        f"{totals.removed} subscriptions removed"
    )
    return {
        "success": True,
        "documentsChecked": result.documents_checked,
        "notificationsSent": totals.sent,
        "notificationsFailed": totals.failed,
        "subscriptionsRemoved": totals.removed,
        "timestamp": now.isoformat(),
    }


def check_user_documents(
    user_id: str, now: Optional[datetime] = None, thresholds_only: bool = False
) -> Dict[str, Any]:
    """Expiry check restricted to one user's documents.

    Every document in the 30-day window is notified, with the plain
    emoji title. thresholds_only=True applies the scheduled scan's
    30/15/7/3/1 day filter instead.
    """
    now = now or local_now()
    logger.info(f"Checking expiring documents for user {user_id}")

    with get_sync_session() as session:
        result = scan(
            session,
            now,
            user_id=user_id,
            thresholds_only=thresholds_only,
            urgency_prefix=False,
        )

        if result.documents_checked == 0:
            return {
                "success": True,
                "message": "No hay documentos próximos a vencer",
                "documentsChecked": 0,
                "notificationsSent": 0,
                "timestamp": now.isoformat(),
            }

        if not subscription_store.list_for_user(session, user_id):
            return {
                "success": False,
                "error": "No tienes notificaciones activas",
                "documentsFound": result.documents_checked,
                "timestamp": now.isoformat(),
            }

        totals = _deliver_expiry_notifications(session, result.notifications, now)

    return {
        "success": True,
        "documentsChecked": result.documents_checked,
        "notificationsSent": totals.sent,
        "notificationsFailed": totals.failed,
        "subscriptionsRemoved": totals.removed,
        "timestamp": now.isoformat(),
    }


def send_daily_reminder(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Remind every user with a registered device to log the day's movements."""
    now = now or local_now()
    payload = format_daily_reminder(now.hour)
    logger.info(f"Sending daily reminder at {now.hour}:00")

    totals = DeliveryTotals()
    users_notified = 0
    with get_sync_session() as session:
        users = (
            session.scalars(
                select(User)
                .options(selectinload(User.push_subscriptions))
                .where(User.push_subscriptions.any())
            )
            .unique()
            .all()
        )
        logger.info(f"Found {len(users)} users with subscriptions")

        if settings.notification_enabled:
            sender = WebPushSender()
            for user in users:
                targets = [SubscriptionInfo.from_model(sub) for sub in user.push_subscriptions]
                if not targets:
                    continue
                totals.add(session, send_batch(targets, payload, sender))
                users_notified += 1
        else:
            logger.info("Notifications are disabled, skipping daily reminder")

    logger.info(f"Sent {users_notified} reminders at {now.hour}:00")
    return {
        "success": True,
        "usersNotified": users_notified,
        "notificationsSent": totals.sent,
        "notificationsFailed": totals.failed,
        "subscriptionsRemoved": totals.removed,
        "reminderTime": f"{now.hour}:00",
        "timestamp": now.isoformat(),
    }


def send_user_reminder(user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Send the daily reminder to a single user right away."""
    now = now or local_now()

    with get_sync_session() as session:
        targets = subscription_store.list_for_user(session, user_id)
        if not targets:
            return {
                "success": False,
                "error": "No tienes notificaciones activas",
                "timestamp": now.isoformat(),
            }

        totals = DeliveryTotals()
        payload = format_daily_reminder(now.hour)
        totals.add(session, send_batch(targets, payload, WebPushSender()))

    return {
        "success": True,
        "notificationsSent": totals.sent,
        "notificationsFailed": totals.failed,
        "subscriptionsRemoved": totals.removed,
        "timestamp": now.isoformat(),
    }
