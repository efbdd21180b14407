import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.notifications.payload import DeliveryStatus, NotificationPayload, SubscriptionInfo
from src.notifications.webpush import WebPushSender


class _FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class _FakeWebPushError(Exception):
    def __init__(self, status_code):
        super().__init__(f"status={status_code}")
        self.response = _FakeResponse(status_code) if status_code is not None else None


def _subscription():
    return SubscriptionInfo(
        endpoint="https://fcm.googleapis.com/fcm/send/abc",
        p256dh="BEl6f5Y8X5Y_u7d8mV_AbpZfXfTLT3s1O3L4wM1x8QY2",
        auth="gq8Yh5xA9l2mQ6pR",
    )


def _payload():
    return NotificationPayload(
        title="SOAT por vencer",
        body="El SOAT de Hilux vence en 7 días",
        tag="document-expiry-1",
        require_interaction=True,
        data={"url": "/app/documentos", "documentId": 1},
    )


@pytest.fixture
def configured(monkeypatch):
    settings = MagicMock(
        vapid_public_key="pub",
        vapid_private_key="priv",
        vapid_subject="mailto:test@example.com",
        push_timeout_seconds=5.0,
        push_ttl_seconds=60,
    )
    monkeypatch.setattr("src.notifications.webpush.get_settings", lambda: settings)
    monkeypatch.setattr("src.notifications.webpush.WebPushException", _FakeWebPushError)
    return settings


def _raising(exc):
    def _webpush(**kwargs):
        raise exc

    return _webpush


class TestWebPushSender:
    def test_success_sends_expected_payload(self, configured, monkeypatch):
        call = {}
        monkeypatch.setattr(
            "src.notifications.webpush.webpush", lambda **kwargs: call.update(kwargs)
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.sent
        assert call["subscription_info"]["endpoint"] == _subscription().endpoint
        assert call["subscription_info"]["keys"]["auth"] == "gq8Yh5xA9l2mQ6pR"
        assert call["vapid_claims"] == {"sub": "mailto:test@example.com"}
        assert call["timeout"] == 5.0
        payload = json.loads(call["data"])
        assert payload["title"] == "SOAT por vencer"
        assert payload["requireInteraction"] is True
        assert payload["tag"] == "document-expiry-1"
        assert payload["icon"] == "/icons/icon-192.png"

    def test_private_key_alone_is_enough_to_send(self, configured, monkeypatch):
        configured.vapid_public_key = ""
        mock_webpush = MagicMock()
        monkeypatch.setattr("src.notifications.webpush.webpush", mock_webpush)

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert WebPushSender.is_configured() is True
        assert outcome.status == DeliveryStatus.sent
        mock_webpush.assert_called_once()

    @pytest.mark.parametrize("status_code", [404, 410])
    def test_gone_endpoint_is_expired(self, configured, monkeypatch, status_code):
        monkeypatch.setattr(
            "src.notifications.webpush.webpush", _raising(_FakeWebPushError(status_code))
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.expired
        assert outcome.endpoint == _subscription().endpoint

    @pytest.mark.parametrize("status_code", [400, 413, 429, 500, 503, None])
    def test_other_push_errors_are_failures(self, configured, monkeypatch, status_code):
        monkeypatch.setattr(
            "src.notifications.webpush.webpush", _raising(_FakeWebPushError(status_code))
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.failed

    def test_timeout_is_failure_not_expiry(self, configured, monkeypatch):
        monkeypatch.setattr(
            "src.notifications.webpush.webpush", _raising(requests.Timeout("slow"))
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.failed
        assert outcome.reason == "timeout"

    def test_connection_error_is_failure(self, configured, monkeypatch):
        monkeypatch.setattr(
            "src.notifications.webpush.webpush",
            _raising(requests.ConnectionError("unreachable")),
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.failed

    def test_unexpected_error_never_escapes(self, configured, monkeypatch):
        monkeypatch.setattr(
            "src.notifications.webpush.webpush", _raising(ValueError("bad key"))
        )

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.failed
        assert outcome.reason == "bad key"

    @patch("src.notifications.webpush.get_settings")
    def test_unconfigured_vapid_fails_without_network(self, mock_settings, monkeypatch):
        mock_settings.return_value = MagicMock(vapid_private_key="", vapid_public_key="pub")
        mock_webpush = MagicMock()
        monkeypatch.setattr("src.notifications.webpush.webpush", mock_webpush)

        outcome = WebPushSender().deliver(_subscription(), _payload())

        assert outcome.status == DeliveryStatus.failed
        assert outcome.reason == "vapid_not_configured"
        mock_webpush.assert_not_called()
