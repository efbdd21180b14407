from __future__ import annotations

from typing import Tuple

from src.models.asset_document import AssetDocument, DocumentType
from src.notifications.payload import NotificationPayload

DOCUMENTS_URL = "/app/documentos"
FINANCES_URL = "/app/finanzas"

DOCUMENT_TYPE_NAMES = {
    DocumentType.SOAT: "SOAT",
    DocumentType.TECNOMECANICA: "Tecnomecánica",
    DocumentType.POLIZA_TODO_RIESGO: "Póliza Todo Riesgo",
    DocumentType.IMPUESTO_VEHICULAR: "Impuesto Vehicular",
    DocumentType.TARJETA_PROPIEDAD: "Tarjeta de Propiedad",
    DocumentType.OTRO: "Documento",
}

URGENT_DAYS = 3
ELEVATED_DAYS = 7


def urgency_marker(days_until_expiration: int) -> Tuple[str, str]:
    """Return (emoji, title prefix) for the urgency tier."""
    if days_until_expiration <= URGENT_DAYS:
        return "🚨", "¡URGENTE! "
    if days_until_expiration <= ELEVATED_DAYS:
        return "⚠️", "¡Atención! "
    return "📄", ""


def format_document_expiry(
    document: AssetDocument, days_until_expiration: int, urgency_prefix: bool = True
) -> NotificationPayload:
    """Build the expiry alert for one document.

    urgency_prefix=False keeps the emoji but drops the "¡URGENTE! " /
    "¡Atención! " wording from the title.
    """
    emoji, prefix = urgency_marker(days_until_expiration)
    if not urgency_prefix:
        prefix = ""
    type_name = DOCUMENT_TYPE_NAMES.get(document.type, "Documento")
    asset = document.asset
    plural = "" if days_until_expiration == 1 else "s"

    return NotificationPayload(
        title=f"{emoji} {prefix}{type_name} por vencer",
        body=(
            f"El {type_name} de {asset.name} vence en "
            f"{days_until_expiration} día{plural}"
        ),
        tag=f"document-expiry-{document.id}",
        require_interaction=days_until_expiration <= ELEVATED_DAYS,
        data={
            "url": DOCUMENTS_URL,
            "documentId": document.id,
            "assetId": document.asset_id,
            "userId": asset.user_id,
        },
    )


def format_daily_reminder(hour: int) -> NotificationPayload:
    """Evening (17:00-19:59) or night reminder to log the day's movements."""
    if 17 <= hour < 20:
        title = "💰 ¡Hora de registrar tus movimientos!"
        body = "No olvides registrar tus gastos e ingresos de hoy. Los datos valen oro 💎"
    else:
        title = "📊 Último recordatorio del día"
        body = (
            "¿Ya registraste todos tus movimientos de hoy? "
            "Mantén tu control financiero al día 🎯"
        )

    return NotificationPayload(
        title=title,
        body=body,
        tag=f"daily-reminder-{hour}",
        data={"url": FINANCES_URL, "type": "daily-reminder"},
    )
