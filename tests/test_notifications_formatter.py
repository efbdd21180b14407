from unittest.mock import MagicMock

import pytest

from src.models.asset_document import DocumentType
from src.notifications.formatter import (
    DOCUMENTS_URL,
    FINANCES_URL,
    format_daily_reminder,
    format_document_expiry,
    urgency_marker,
)


def _make_document(doc_type=DocumentType.SOAT, doc_id=7, asset_name="Hilux"):
    """Create a mock AssetDocument with nested asset."""
    asset = MagicMock()
    asset.name = asset_name
    asset.user_id = "user-1"

    document = MagicMock()
    document.id = doc_id
    document.type = doc_type
    document.asset_id = 3
    document.asset = asset
    return document


class TestUrgencyMarker:
    @pytest.mark.parametrize("days", [1, 3])
    def test_urgent(self, days):
        emoji, prefix = urgency_marker(days)
        assert emoji == "🚨"
        assert prefix == "¡URGENTE! "

    def test_elevated(self):
        emoji, prefix = urgency_marker(7)
        assert emoji == "⚠️"
        assert prefix == "¡Atención! "

    @pytest.mark.parametrize("days", [15, 30])
    def test_routine(self, days):
        assert urgency_marker(days) == ("📄", "")


class TestFormatDocumentExpiry:
    def test_urgent_requires_interaction(self):
        payload = format_document_expiry(_make_document(), 3)

        assert payload.title == "🚨 ¡URGENTE! SOAT por vencer"
        assert payload.body == "El SOAT de Hilux vence en 3 días"
        assert payload.require_interaction is True

    def test_without_urgency_prefix_keeps_emoji(self):
        assert format_document_expiry(_make_document(), 3, urgency_prefix=False).title == (
            "🚨 SOAT por vencer"
        )
        assert format_document_expiry(_make_document(), 7, urgency_prefix=False).title == (
            "⚠️ SOAT por vencer"
        )

    def test_singular_day(self):
        payload = format_document_expiry(_make_document(), 1)
        assert payload.body == "El SOAT de Hilux vence en 1 día"

    def test_routine_does_not_require_interaction(self):
        payload = format_document_expiry(
            _make_document(doc_type=DocumentType.TECNOMECANICA), 30
        )

        assert payload.title == "📄 Tecnomecánica por vencer"
        assert payload.require_interaction is False

    def test_tag_and_data(self):
        payload = format_document_expiry(_make_document(doc_id=42), 15)

        assert payload.tag == "document-expiry-42"
        assert payload.data == {
            "url": DOCUMENTS_URL,
            "documentId": 42,
            "assetId": 3,
            "userId": "user-1",
        }
        assert payload.icon == "/icons/icon-192.png"
        assert payload.badge == "/icons/icon-192.png"


class TestFormatDailyReminder:
    def test_evening_message(self):
        payload = format_daily_reminder(18)

        assert payload.title == "💰 ¡Hora de registrar tus movimientos!"
        assert payload.tag == "daily-reminder-18"
        assert payload.data == {"url": FINANCES_URL, "type": "daily-reminder"}
        assert payload.require_interaction is False

    def test_night_message(self):
        payload = format_daily_reminder(21)

        assert payload.title == "📊 Último recordatorio del día"
        assert payload.tag == "daily-reminder-21"
