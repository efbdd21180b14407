from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_user_id, verify_cron_secret
from src.config import get_settings
from src.db.database import get_db
from src.models.user import User
from src.notifications import subscriptions as subscription_store
from src.notifications.batch import send_batch
from src.notifications.payload import DEFAULT_BADGE, DEFAULT_ICON, NotificationPayload
from src.scheduler.jobs import get_sync_session

router = APIRouter(prefix="/api/push", tags=["push"])


class NotificationBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    body: str = ""
    icon: Optional[str] = None
    badge: Optional[str] = None
    tag: Optional[str] = None
    require_interaction: bool = Field(False, alias="requireInteraction")
    data: Optional[Dict[str, Any]] = None
    actions: Optional[List[Dict[str, str]]] = None

    def to_payload(self) -> NotificationPayload:
        return NotificationPayload(
            title=self.title,
            body=self.body,
            icon=self.icon or DEFAULT_ICON,
            badge=self.badge or DEFAULT_BADGE,
            tag=self.tag,
            require_interaction=self.require_interaction,
            data=self.data or {},
            actions=self.actions,
        )


class SendRequest(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")
    broadcast: bool = False
    notification: Optional[NotificationBody] = None


class SubscriptionKeys(BaseModel):
    p256dh: str = ""
    auth: str = ""


class SubscribeRequest(BaseModel):
    endpoint: str = ""
    keys: Optional[SubscriptionKeys] = None
    user_agent: Optional[str] = Field(None, alias="userAgent")


class UnsubscribeRequest(BaseModel):
    endpoint: str = ""


@router.post("/send", dependencies=[Depends(verify_cron_secret)])
def send_push(body: SendRequest):
    notification = body.notification
    if notification is None or not notification.title or not notification.body:
        raise HTTPException(status_code=400, detail="Invalid notification payload")
    if not body.broadcast and not body.user_id:
        raise HTTPException(
            status_code=400, detail="Either userId or broadcast must be specified"
        )

    try:
        with get_sync_session() as session:
            if body.broadcast:
                targets = subscription_store.list_all(session)
            else:
                targets = subscription_store.list_for_user(session, body.user_id)
                if not targets:
                    raise HTTPException(
                        status_code=404, detail="User has no active subscriptions"
                    )

            result = send_batch(targets, notification.to_payload())
            if result.expired:
                subscription_store.delete_endpoints(session, result.expired)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error sending push notification")
        raise HTTPException(status_code=500, detail="Failed to send push notification")

    return {
        "success": True,
        "sent": result.successful,
        "failed": result.failed,
        "expired": len(result.expired),
    }


@router.post("/subscribe")
async def subscribe(
    body: SubscribeRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if not body.endpoint or not body.keys or not body.keys.p256dh or not body.keys.auth:
        raise HTTPException(status_code=400, detail="Invalid subscription data")

    if await db.get(User, user_id) is None:
        logger.info(f"Creating user {user_id} on first subscription")
        db.add(User(id=user_id))
        await db.commit()

    subscription = await db.run_sync(
        lambda session: subscription_store.upsert(
            session,
            user_id=user_id,
            endpoint=body.endpoint,
            p256dh=body.keys.p256dh,
            auth=body.keys.auth,
            user_agent=body.user_agent,
        )
    )
    logger.info(f"Push subscription saved for user {user_id}")
    return {
        "success": True,
        "subscription": {"id": subscription.id, "endpoint": subscription.endpoint},
    }


@router.post("/unsubscribe")
async def unsubscribe(
    body: UnsubscribeRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if not body.endpoint:
        raise HTTPException(status_code=400, detail="Endpoint is required")

    await db.run_sync(
        lambda session: subscription_store.remove_for_user(session, user_id, body.endpoint)
    )
    return {"success": True}


@router.get("/vapid-public-key")
async def vapid_public_key():
    public_key = get_settings().vapid_public_key
    if not public_key:
        raise HTTPException(status_code=500, detail="VAPID public key not configured")
    return {"publicKey": public_key}
