from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.workers.tasks import outbox_dispatch
from tests.workers.session_fakes import FakeSessionLocal


def _event(event_id: int, event_type: str, payload: dict, attempts: int = 0) -> SimpleNamespace:
    return SimpleNamespace(
        id=event_id,
        event_type=event_type,
        payload=payload,
        status="PENDING",
        attempts=attempts,
        last_error=None,
        processed_at=None,
    )


def _settings(**overrides) -> SimpleNamespace:
    values = {
        "outbox_batch_size": 100,
        "outbox_max_attempts": 3,
        "email_enabled": True,
        "sms_enabled": False,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_dispatch_outbox_events_task_wrapper(monkeypatch) -> None:
    async def fake_async(*, batch_size: int | None = None) -> dict[str, int]:
        return {"claimed": batch_size or 0, "sent": 0, "retried": 0, "failed": 0}

    monkeypatch.setattr(outbox_dispatch, "dispatch_outbox_events_async", fake_async)

    result = outbox_dispatch.dispatch_outbox_events(batch_size=9)
    assert result["claimed"] == 9


@pytest.mark.asyncio
async def test_dispatch_delivers_notifications_and_marks_sent(monkeypatch) -> None:
    notification = _event(1, "notification", {"recipient_id": 7, "title": "Hi"})
    role_notification = _event(2, "notification_by_role", {"role": "admin", "title": "Hi"})
    sms = _event(3, "sms", {"phone": "+1555", "message": "Hi"})
    delivered: list[tuple[str, dict]] = []

    async def _fake_claim(session, *, limit: int):
        assert limit == 100
        return [notification, role_notification, sms]

    async def _fake_notify(session, **payload):
        delivered.append(("notify", payload))

    async def _fake_notify_by_role(session, **payload):
        delivered.append(("notify_by_role", payload))

    async def _fake_send_sms(**kwargs):
        raise AssertionError("sms is disabled")

    monkeypatch.setattr(outbox_dispatch, "SessionLocal", FakeSessionLocal())
    monkeypatch.setattr(outbox_dispatch, "get_settings", _settings)
    monkeypatch.setattr(outbox_dispatch.OutboxEventsRepo, "claim_pending", _fake_claim)
    monkeypatch.setattr(outbox_dispatch.notifications, "notify", _fake_notify)
    monkeypatch.setattr(outbox_dispatch.notifications, "notify_by_role", _fake_notify_by_role)
    monkeypatch.setattr(outbox_dispatch.messaging, "send_sms", _fake_send_sms)

    result = await outbox_dispatch.dispatch_outbox_events_async()

    assert result == {"claimed": 3, "sent": 3, "retried": 0, "failed": 0}
    assert delivered == [
        ("notify", {"recipient_id": 7, "title": "Hi"}),
        ("notify_by_role", {"role": "admin", "title": "Hi"}),
    ]
    assert {event.status for event in (notification, role_notification, sms)} == {"SENT"}
    assert sms.processed_at is not None


@pytest.mark.asyncio
async def test_dispatch_retries_then_fails_undeliverable_email(monkeypatch) -> None:
    fresh = _event(1, "email", {"to": "a@example.com", "subject": "S", "body": "B"})
    exhausted = _event(2, "email", {"to": "b@example.com", "subject": "S", "body": "B"}, attempts=2)
    unknown = _event(3, "fax", {})

    async def _fake_claim(session, *, limit: int):
        return [fresh, exhausted, unknown]

    async def _fake_send_email(*, to: str, subject: str, body: str) -> bool:
        return False

    monkeypatch.setattr(outbox_dispatch, "SessionLocal", FakeSessionLocal())
    monkeypatch.setattr(outbox_dispatch, "get_settings", _settings)
    monkeypatch.setattr(outbox_dispatch.OutboxEventsRepo, "claim_pending", _fake_claim)
    monkeypatch.setattr(outbox_dispatch.messaging, "send_email", _fake_send_email)

    result = await outbox_dispatch.dispatch_outbox_events_async(batch_size=3)

    assert result == {"claimed": 3, "sent": 0, "retried": 2, "failed": 1}
    assert fresh.status == "PENDING"
    assert fresh.attempts == 1
    assert fresh.last_error == "email delivery failed"
    assert exhausted.status == "FAILED"
    assert exhausted.attempts == 3
    assert unknown.status == "PENDING"
    assert "unknown outbox event type" in unknown.last_error
