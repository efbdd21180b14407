"""Expiry scanner: finds documents whose distance to expiration is a notification day.

A document is notified only on the exact day distances in NOTIFY_DAYS, so each
document matches at most one threshold per calendar day and no "already sent"
state is needed as long as the scan runs once a day.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from src.models import Asset, AssetDocument, User
from src.notifications.formatter import format_document_expiry
from src.notifications.payload import NotificationPayload, SubscriptionInfo

NOTIFY_DAYS = frozenset({30, 15, 7, 3, 1})
DEFAULT_HORIZON_DAYS = 30

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class EligibleNotification:
    document_id: int
    user_id: str
    days_until_expiration: int
    subscriptions: List[SubscriptionInfo]
    payload: NotificationPayload


@dataclass
class ScanResult:
    documents_checked: int = 0
    notifications: List[EligibleNotification] = field(default_factory=list)
    # Matching documents skipped because their owner has no devices
    skipped_no_subscriptions: int = 0


def days_until(expiration: datetime, now: datetime) -> int:
    """Whole days left, rounded up, so anything due within 24h counts as 1."""
    return math.ceil((expiration - now).total_seconds() / SECONDS_PER_DAY)


def is_notification_day(days_until_expiration: int) -> bool:
    return days_until_expiration in NOTIFY_DAYS


def load_expiring_documents(
    session: Session,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    user_id: Optional[str] = None,
) -> List[AssetDocument]:
    """Active documents expiring within [now, now + horizon_days]."""
    stmt = (
        select(AssetDocument)
        .join(AssetDocument.asset)
        .options(
            joinedload(AssetDocument.asset)
            .joinedload(Asset.user)
            .selectinload(User.push_subscriptions)
        )
        .where(
            AssetDocument.is_active == True,  # noqa: E712
            AssetDocument.expiration_date.is_not(None),
            AssetDocument.expiration_date >= now,
            AssetDocument.expiration_date <= now + timedelta(days=horizon_days),
        )
        .order_by(AssetDocument.expiration_date.asc())
    )
    if user_id is not None:
        stmt = stmt.where(Asset.user_id == user_id)

    return list(session.scalars(stmt).unique().all())


def scan(
    session: Session,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    user_id: Optional[str] = None,
    thresholds_only: bool = True,
    urgency_prefix: bool = True,
) -> ScanResult:
    """Decide which documents get an expiry notification today.

    Args:
        session: Sync database session.
        now: Reference instant (naive, same clock as stored expiration dates).
        horizon_days: How far ahead to look.
        user_id: Restrict the scan to one user's assets.
        thresholds_only: When False every document in the horizon is notified
            (manual checks only).
        urgency_prefix: Passed through to format_document_expiry.

    Returns:
        ScanResult with one EligibleNotification per document to notify.
    """
    documents = load_expiring_documents(session, now, horizon_days, user_id)
    result = ScanResult(documents_checked=len(documents))

    for document in documents:
        days = days_until(document.expiration_date, now)
        if thresholds_only and not is_notification_day(days):
            continue

        owner = document.asset.user
        if not owner.push_subscriptions:
            result.skipped_no_subscriptions += 1
            continue

        result.notifications.append(
            EligibleNotification(
                document_id=document.id,
                user_id=owner.id,
                days_until_expiration=days,
                subscriptions=[
                    SubscriptionInfo.from_model(sub) for sub in owner.push_subscriptions
                ],
                payload=format_document_expiry(document, days, urgency_prefix),
            )
        )

    logger.info(
        f"Expiry scan: {result.documents_checked} documents in {horizon_days}-day window, "
        f"{len(result.notifications)} to notify"
    )
    return result
