from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.services import notifications

_PAYLOAD = {
    "sender_id": 10,
    "type": "commitment",
    "sub_type": "commitment_created",
    "title": "New Deal Commitment",
    "message": "Alice committed",
    "related_id": "abc",
    "related_kind": "Commitment",
    "priority": "high",
}


def _capture_creates(monkeypatch) -> list[dict]:
    created: list[dict] = []

    async def _fake_create(session, **kwargs):
        created.append(kwargs)
        return SimpleNamespace(id=len(created), **kwargs)

    monkeypatch.setattr(notifications.NotificationsRepo, "create", _fake_create)
    return created


@pytest.mark.asyncio
async def test_notify_persists_notification(monkeypatch) -> None:
    created = _capture_creates(monkeypatch)
    monkeypatch.setattr(notifications, "get_settings", lambda: SimpleNamespace(notifications_enabled=True))

    ref = await notifications.notify(object(), recipient_id=7, **_PAYLOAD)

    assert ref == notifications.NotificationRef(recipient_id=7, notification_id=1, persisted=True)
    assert created[0]["recipient_id"] == 7
    assert created[0]["priority"] == "high"


@pytest.mark.asyncio
async def test_notify_is_noop_when_disabled(monkeypatch) -> None:
    created = _capture_creates(monkeypatch)
    monkeypatch.setattr(notifications, "get_settings", lambda: SimpleNamespace(notifications_enabled=False))

    ref = await notifications.notify(object(), recipient_id=7, **_PAYLOAD)

    assert ref.persisted is False
    assert ref.notification_id is None
    assert created == []


@pytest.mark.asyncio
async def test_notify_by_role_fans_out_to_each_user(monkeypatch) -> None:
    created = _capture_creates(monkeypatch)
    monkeypatch.setattr(notifications, "get_settings", lambda: SimpleNamespace(notifications_enabled=True))

    async def _fake_list_by_role(session, role: str):
        assert role == "admin"
        return [SimpleNamespace(id=1), SimpleNamespace(id=2)]

    monkeypatch.setattr(notifications.UsersRepo, "list_by_role", _fake_list_by_role)

    refs = await notifications.notify_by_role(object(), role="admin", **_PAYLOAD)

    assert [ref.recipient_id for ref in refs] == [1, 2]
    assert [item["recipient_id"] for item in created] == [1, 2]
