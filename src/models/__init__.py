from src.models.asset import Asset
from src.models.asset_document import AssetDocument, DocumentType
from src.models.notification_log import NotificationLog, NotificationType
from src.models.push_subscription import PushSubscription
from src.models.user import User

__all__ = [
    "Asset",
    "AssetDocument",
    "DocumentType",
    "NotificationLog",
    "NotificationType",
    "PushSubscription",
    "User",
]
