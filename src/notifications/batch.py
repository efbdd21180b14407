from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from loguru import logger

from src.config import get_settings
from src.notifications.payload import (
    BatchResult,
    DeliveryOutcome,
    DeliveryStatus,
    NotificationPayload,
    SubscriptionInfo,
)
from src.notifications.webpush import WebPushSender


def _gather(
    sender: WebPushSender,
    subscriptions: Sequence[SubscriptionInfo],
    payload: NotificationPayload,
) -> List[DeliveryOutcome]:
    max_workers = max(1, min(len(subscriptions), get_settings().push_max_workers))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(sender.deliver, sub, payload) for sub in subscriptions]

    outcomes = []
    for sub, future in zip(subscriptions, futures):
        try:
            outcomes.append(future.result())
        except Exception as e:
            logger.exception(f"Delivery task crashed for {sub.endpoint[:60]}")
            outcomes.append(DeliveryOutcome(sub.endpoint, DeliveryStatus.failed, str(e)))
    return outcomes


def reduce_outcomes(outcomes: Sequence[DeliveryOutcome]) -> BatchResult:
    """Fold per-endpoint outcomes into sent / failed counts and expired endpoints."""
    result = BatchResult()
    for outcome in outcomes:
        if outcome.status is DeliveryStatus.sent:
            result.successful += 1
        elif outcome.status is DeliveryStatus.expired:
            result.expired.append(outcome.endpoint)
        else:
            result.failed += 1
    return result


def send_batch(
    subscriptions: Sequence[SubscriptionInfo],
    payload: NotificationPayload,
    sender: Optional[WebPushSender] = None,
) -> BatchResult:
    """Send one payload to every endpoint concurrently.

    Args:
        subscriptions: Endpoints belonging to one recipient set.
        payload: Notification to deliver.
        sender: Delivery engine; a WebPushSender is created when omitted.

    Returns:
        BatchResult. Expired endpoints are returned, not deleted; removing them
        from the store is up to the caller.
    """
    if not subscriptions:
        return BatchResult()

    sender = sender or WebPushSender()
    result = reduce_outcomes(_gather(sender, subscriptions, payload))
    logger.info(
        f"Push batch '{payload.tag or payload.title}': {result.successful} sent, "
        f"{result.failed} failed, {len(result.expired)} expired"
    )
    return result
