from __future__ import annotations

import httpx
import structlog

from app.core.config import get_settings

logger = structlog.get_logger(__name__)
TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"


def _setting_str(settings: object, attr: str) -> str:
    value = getattr(settings, attr, "")
    return value.strip() if isinstance(value, str) else ""


async def send_email(*, to: str, subject: str, body: str) -> bool:
    """Deliver one transactional email through Brevo. Never raises."""
    settings = get_settings()
    if not settings.email_enabled:
        logger.info("email_delivery_skipped", reason="disabled")
        return False
    api_key = _setting_str(settings, "brevo_api_key")
    if not api_key or not to:
        logger.warning("email_delivery_skipped", reason="not_configured")
        return False

    request_body = {
        "sender": {
            "name": settings.email_sender_name,
            "email": settings.email_sender_address,
        },
        "to": [{"email": to}],
        "subject": subject,
        "textContent": body,
    }
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(
                settings.brevo_api_url,
                json=request_body,
                headers={"api-key": api_key, "accept": "application/json"},
            )
            response.raise_for_status()
    except Exception:
        logger.exception("email_delivery_failed", subject=subject)
        return False
    logger.info("email_delivered", subject=subject)
    return True


async def send_sms(*, phone: str, message: str) -> bool:
    """Deliver one SMS through the Twilio REST API. Never raises."""
    settings = get_settings()
    if not settings.sms_enabled:
        logger.info("sms_delivery_skipped", reason="disabled")
        return False
    account_sid = _setting_str(settings, "twilio_account_sid")
    auth_token = _setting_str(settings, "twilio_auth_token")
    sender = _setting_str(settings, "twilio_phone_number")
    if not account_sid or not auth_token or not sender or not phone:
        logger.warning("sms_delivery_skipped", reason="not_configured")
        return False

    try:
        async with httpx.AsyncClient(timeout=10.0, auth=(account_sid, auth_token)) as client:
            response = await client.post(
                TWILIO_MESSAGES_URL.format(account_sid=account_sid),
                data={"To": phone, "From": sender, "Body": message},
            )
            response.raise_for_status()
    except Exception:
        logger.exception("sms_delivery_failed")
        return False
    logger.info("sms_delivered")
    return True
