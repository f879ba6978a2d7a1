from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from app.services import messaging


class _Response:
    def raise_for_status(self) -> None:
        return None


class _Client:
    def __init__(self, calls: list[dict[str, Any]], *, fail: bool = False, auth=None) -> None:
        self._calls = calls
        self._fail = fail
        self._auth = auth

    async def __aenter__(self) -> "_Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        return None

    async def post(self, url: str, **kwargs: Any) -> _Response:
        self._calls.append({"url": url, "auth": self._auth, **kwargs})
        if self._fail:
            raise RuntimeError("delivery failed")
        return _Response()


def _settings(**overrides: object) -> SimpleNamespace:
    base = {
        "email_enabled": True,
        "sms_enabled": True,
        "brevo_api_url": "https://brevo.test/v3/smtp/email",
        "brevo_api_key": "brevo-key",
        "email_sender_name": "Group Buy Deals",
        "email_sender_address": "no-reply@example.com",
        "twilio_account_sid": "AC123",
        "twilio_auth_token": "tw-token",
        "twilio_phone_number": "+15550000000",
    }
    base.update(overrides)
    return SimpleNamespace(**base)


def _patch_http_client(
    monkeypatch: pytest.MonkeyPatch,
    calls: list[dict[str, Any]],
    *,
    fail: bool = False,
) -> None:
    def factory(timeout: float, auth=None) -> _Client:  # noqa: ARG001
        return _Client(calls, fail=fail, auth=auth)

    monkeypatch.setattr(messaging.httpx, "AsyncClient", factory)


@pytest.mark.asyncio
async def test_send_email_posts_to_brevo(monkeypatch) -> None:
    calls: list[dict[str, Any]] = []
    _patch_http_client(monkeypatch, calls)
    monkeypatch.setattr(messaging, "get_settings", lambda: _settings())

    sent = await messaging.send_email(to="alice@example.com", subject="Hello", body="Body")

    assert sent is True
    [call] = calls
    assert call["url"] == "https://brevo.test/v3/smtp/email"
    assert call["headers"]["api-key"] == "brevo-key"
    assert call["json"]["to"] == [{"email": "alice@example.com"}]
    assert call["json"]["sender"] == {"name": "Group Buy Deals", "email": "no-reply@example.com"}
    assert call["json"]["textContent"] == "Body"


@pytest.mark.asyncio
async def test_send_email_skips_when_disabled_or_unconfigured(monkeypatch) -> None:
    calls: list[dict[str, Any]] = []
    _patch_http_client(monkeypatch, calls)

    monkeypatch.setattr(messaging, "get_settings", lambda: _settings(email_enabled=False))
    assert await messaging.send_email(to="a@example.com", subject="S", body="B") is False

    monkeypatch.setattr(messaging, "get_settings", lambda: _settings(brevo_api_key=" "))
    assert await messaging.send_email(to="a@example.com", subject="S", body="B") is False
    assert calls == []


@pytest.mark.asyncio
async def test_send_email_returns_false_on_transport_error(monkeypatch) -> None:
    calls: list[dict[str, Any]] = []
    _patch_http_client(monkeypatch, calls, fail=True)
    monkeypatch.setattr(messaging, "get_settings", lambda: _settings())

    assert await messaging.send_email(to="a@example.com", subject="S", body="B") is False
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_send_sms_posts_form_to_twilio(monkeypatch) -> None:
    calls: list[dict[str, Any]] = []
    _patch_http_client(monkeypatch, calls)
    monkeypatch.setattr(messaging, "get_settings", lambda: _settings())

    sent = await messaging.send_sms(phone="+15551112222", message="Approved")

    assert sent is True
    [call] = calls
    assert call["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert call["auth"] == ("AC123", "tw-token")
    assert call["data"] == {"To": "+15551112222", "From": "+15550000000", "Body": "Approved"}


@pytest.mark.asyncio
async def test_send_sms_skips_without_credentials(monkeypatch) -> None:
    calls: list[dict[str, Any]] = []
    _patch_http_client(monkeypatch, calls)
    monkeypatch.setattr(messaging, "get_settings", lambda: _settings(twilio_auth_token=""))

    assert await messaging.send_sms(phone="+15551112222", message="Approved") is False
    assert calls == []
