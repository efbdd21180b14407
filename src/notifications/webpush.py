from __future__ import annotations

from http import HTTPStatus
from typing import Optional

import requests
from loguru import logger
from pywebpush import WebPushException, webpush

from src.config import get_settings
from src.notifications.payload import (
    DeliveryOutcome,
    DeliveryStatus,
    NotificationPayload,
    SubscriptionInfo,
)

# Push services answer 404/410 once a subscription has been revoked
GONE_STATUSES = {HTTPStatus.NOT_FOUND, HTTPStatus.GONE}


def _extract_status_code(exc: WebPushException) -> Optional[int]:
    response = getattr(exc, "response", None)
    if response is None:
        return None
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class WebPushSender:
    """Deliver one payload to one endpoint and classify the outcome."""

    def __init__(self):
        settings = get_settings()
        self.private_key = settings.vapid_private_key
        self.subject = settings.vapid_subject
        self.timeout = settings.push_timeout_seconds
        self.ttl = settings.push_ttl_seconds

    @classmethod
    def is_configured(cls) -> bool:
        """Check if the VAPID private key is set.

        Signing only needs the private key; the public key is what browsers
        subscribe with and is served separately.
        """
        return bool(get_settings().vapid_private_key)

    def deliver(
        self, subscription: SubscriptionInfo, payload: NotificationPayload
    ) -> DeliveryOutcome:
        """Send a notification to a single endpoint.

        Never raises: every call resolves to sent, expired or failed.
        Timeouts and transport errors are failures, never expiry.
        """
        if not self.is_configured():
            logger.error("VAPID_PRIVATE_KEY is not configured, cannot send push notification")
            return DeliveryOutcome(
                subscription.endpoint, DeliveryStatus.failed, "vapid_not_configured"
            )

        try:
            webpush(
                subscription_info=subscription.to_webpush(),
                data=payload.to_json(),
                vapid_private_key=self.private_key,
                # webpush mutates the claims dict, so build a fresh one per call
                vapid_claims={"sub": self.subject},
                timeout=self.timeout,
                ttl=self.ttl,
            )
        except WebPushException as e:
            status_code = _extract_status_code(e)
            if status_code in GONE_STATUSES:
                logger.warning(
                    f"Push endpoint gone ({status_code}): {subscription.endpoint[:60]}"
                )
                return DeliveryOutcome(
                    subscription.endpoint, DeliveryStatus.expired, "subscription_expired"
                )
            logger.error(f"Push service error ({status_code}): {e}")
            return DeliveryOutcome(
                subscription.endpoint,
                DeliveryStatus.failed,
                f"status={status_code if status_code is not None else 'unknown'}",
            )
        except requests.Timeout:
            logger.error(f"Push delivery timed out after {self.timeout}s")
            return DeliveryOutcome(subscription.endpoint, DeliveryStatus.failed, "timeout")
        except requests.RequestException as e:
            logger.error(f"Push request failed: {e}")
            return DeliveryOutcome(subscription.endpoint, DeliveryStatus.failed, str(e))
        except Exception as e:
            logger.exception("Unexpected error sending push notification")
            return DeliveryOutcome(
                subscription.endpoint, DeliveryStatus.failed, str(e) or type(e).__name__
            )

        return DeliveryOutcome(subscription.endpoint, DeliveryStatus.sent)
