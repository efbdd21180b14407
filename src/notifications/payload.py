from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_ICON = "/icons/icon-192.png"
DEFAULT_BADGE = "/icons/icon-192.png"


@dataclass
class NotificationPayload:
    """Web Push notification as rendered by the service worker."""

    title: str
    body: str
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_BADGE
    tag: Optional[str] = None
    require_interaction: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    actions: Optional[List[Dict[str, str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title,
            "body": self.body,
            "icon": self.icon,
            "badge": self.badge,
            "requireInteraction": self.require_interaction,
            "data": self.data,
        }
        if self.tag:
            payload["tag"] = self.tag
        if self.actions:
            payload["actions"] = self.actions
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True)
class SubscriptionInfo:
    """Detached copy of a push subscription, safe to hand to worker threads."""

    endpoint: str
    p256dh: str
    auth: str

    @classmethod
    def from_model(cls, subscription) -> "SubscriptionInfo":
        return cls(
            endpoint=subscription.endpoint,
            p256dh=subscription.p256dh_key,
            auth=subscription.auth_key,
        )

    def to_webpush(self) -> Dict[str, Any]:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class DeliveryStatus(enum.Enum):
    sent = "sent"
    expired = "expired"
    failed = "failed"


@dataclass(frozen=True)
class DeliveryOutcome:
    endpoint: str
    status: DeliveryStatus
    reason: Optional[str] = None


@dataclass
class BatchResult:
    successful: int = 0
    failed: int = 0
    expired: List[str] = field(default_factory=list)
