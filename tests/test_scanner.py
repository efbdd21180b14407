from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.db.database import Base
from src.models import Asset, AssetDocument, DocumentType, PushSubscription, User
from src.scheduler.scanner import NOTIFY_DAYS, days_until, is_notification_day, scan

NOW = datetime(2026, 10, 19, 9, 0)


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    Base.metadata.drop_all(engine)


def _make_owner(session, user_id="owner", devices=1):
    user = User(id=user_id, email=f"{user_id}@example.com")
    asset = Asset(name=f"Hilux {user_id}", plate="ABC123", user=user)
    session.add_all([user, asset])
    for i in range(devices):
        session.add(
            PushSubscription(
                user=user,
                endpoint=f"https://push.example/{user_id}/{i}",
                p256dh_key="p",
                auth_key="a",
            )
        )
    session.commit()
    return asset


def _add_document(session, asset, expiration, doc_type=DocumentType.SOAT, is_active=True):
    document = AssetDocument(
        asset=asset, type=doc_type, expiration_date=expiration, is_active=is_active
    )
    session.add(document)
    session.commit()
    return document


class TestDaysUntil:
    def test_exact_days(self):
        assert days_until(NOW + timedelta(days=7), NOW) == 7

    def test_partial_day_rounds_up(self):
        assert days_until(NOW + timedelta(days=6, hours=1), NOW) == 7
        assert days_until(NOW + timedelta(minutes=5), NOW) == 1

    def test_past_is_negative(self):
        assert days_until(NOW - timedelta(days=5), NOW) == -5

    def test_notification_days(self):
        assert NOTIFY_DAYS == {30, 15, 7, 3, 1}
        assert is_notification_day(7)
        assert not is_notification_day(20)
        assert not is_notification_day(0)


class TestScan:
    def test_only_exact_threshold_days_notify(self, db_session):
        asset = _make_owner(db_session)
        for days in range(-5, 40):
            _add_document(db_session, asset, NOW + timedelta(days=days))

        result = scan(db_session, NOW)

        notified = sorted(n.days_until_expiration for n in result.notifications)
        assert notified == [1, 3, 7, 15, 30]
        # 0..30 inclusive are inside the horizon
        assert result.documents_checked == 31

    def test_twenty_days_produces_nothing(self, db_session):
        asset = _make_owner(db_session)
        _add_document(db_session, asset, NOW + timedelta(days=20))

        result = scan(db_session, NOW)

        assert result.documents_checked == 1
        assert result.notifications == []

    def test_already_expired_is_excluded(self, db_session):
        asset = _make_owner(db_session)
        _add_document(db_session, asset, NOW - timedelta(days=5))

        result = scan(db_session, NOW)

        assert result.documents_checked == 0
        assert result.notifications == []

    def test_owner_without_subscriptions_is_skipped(self, db_session):
        asset = _make_owner(db_session, devices=0)
        _add_document(db_session, asset, NOW + timedelta(days=7))

        result = scan(db_session, NOW)

        assert result.notifications == []
        assert result.skipped_no_subscriptions == 1

    def test_inactive_and_undated_documents_ignored(self, db_session):
        asset = _make_owner(db_session)
        _add_document(db_session, asset, NOW + timedelta(days=7), is_active=False)
        _add_document(db_session, asset, None)

        result = scan(db_session, NOW)

        assert result.documents_checked == 0

    def test_notification_carries_owner_devices_and_payload(self, db_session):
        asset = _make_owner(db_session, devices=2)
        document = _add_document(db_session, asset, NOW + timedelta(days=3))

        result = scan(db_session, NOW)

        assert len(result.notifications) == 1
        notification = result.notifications[0]
        assert notification.document_id == document.id
        assert notification.user_id == "owner"
        assert len(notification.subscriptions) == 2
        assert notification.payload.tag == f"document-expiry-{document.id}"
        assert notification.payload.require_interaction is True

    def test_user_scoped_scan(self, db_session):
        mine = _make_owner(db_session, user_id="me")
        theirs = _make_owner(db_session, user_id="them")
        _add_document(db_session, mine, NOW + timedelta(days=7))
        _add_document(db_session, theirs, NOW + timedelta(days=7))

        result = scan(db_session, NOW, user_id="me")

        assert result.documents_checked == 1
        assert [n.user_id for n in result.notifications] == ["me"]

    def test_window_wide_scan_notifies_every_document(self, db_session):
        asset = _make_owner(db_session)
        _add_document(db_session, asset, NOW + timedelta(days=20))
        _add_document(db_session, asset, NOW + timedelta(days=7))

        result = scan(db_session, NOW, user_id="owner", thresholds_only=False)

        assert sorted(n.days_until_expiration for n in result.notifications) == [7, 20]
