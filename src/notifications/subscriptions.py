from __future__ import annotations

from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from src.models.push_subscription import PushSubscription
from src.notifications.payload import SubscriptionInfo


def list_for_user(session: Session, user_id: str) -> List[SubscriptionInfo]:
    rows = session.scalars(
        select(PushSubscription).where(PushSubscription.user_id == user_id)
    ).all()
    return [SubscriptionInfo.from_model(row) for row in rows]


def list_all(session: Session) -> List[SubscriptionInfo]:
    rows = session.scalars(select(PushSubscription)).all()
    return [SubscriptionInfo.from_model(row) for row in rows]


def upsert(
    session: Session,
    user_id: str,
    endpoint: str,
    p256dh: str,
    auth: str,
    user_agent: Optional[str] = None,
) -> PushSubscription:
    """Insert or update a subscription keyed by endpoint."""
    subscription = session.scalar(
        select(PushSubscription).where(PushSubscription.endpoint == endpoint)
    )
    if subscription is None:
        subscription = PushSubscription(endpoint=endpoint)
        session.add(subscription)

    # A browser re-subscribing rotates keys and may switch owner
    subscription.user_id = user_id
    subscription.p256dh_key = p256dh
    subscription.auth_key = auth
    subscription.user_agent = user_agent
    session.commit()
    return subscription


def remove_for_user(session: Session, user_id: str, endpoint: str) -> int:
    result = session.execute(
        delete(PushSubscription).where(
            PushSubscription.user_id == user_id,
            PushSubscription.endpoint == endpoint,
        )
    )
    session.commit()
    return result.rowcount


def delete_endpoints(session: Session, endpoints: Iterable[str]) -> int:
    """Delete subscriptions by endpoint.

    Idempotent: endpoints that are already gone are ignored.
    """
    endpoints = list(set(endpoints))
    if not endpoints:
        return 0

    result = session.execute(
        delete(PushSubscription).where(PushSubscription.endpoint.in_(endpoints))
    )
    session.commit()
    logger.info(f"Removed {result.rowcount} expired push subscriptions")
    return result.rowcount
