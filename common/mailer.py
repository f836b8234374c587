"""
WallDecorator - Transactional Email
====================================
Sends HTML email through the Resend REST API.
In dev mode (no RESEND_API_KEY), the message is logged and not sent.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from config.settings import RESEND_API_KEY, RESEND_API_URL, RESEND_FROM_EMAIL, EMAIL_TIMEOUT

logger = logging.getLogger("walldecorator.mailer")


@dataclass
class MailResult:
    """Result of Mailer.send()."""
    success: bool
    email_id: Optional[str] = None
    error_message: Optional[str] = None


class Mailer:

    def __init__(self, api_key: str = None, api_url: str = None, sender: str = None, transport: httpx.BaseTransport = None):
        self.api_key = RESEND_API_KEY if api_key is None else api_key
        self.api_url = api_url or RESEND_API_URL
        self.sender = sender or RESEND_FROM_EMAIL
        self.transport = transport

    def send(self, to: str, subject: str, html: str) -> MailResult:
        if not self.api_key:
            logger.info(f"Email skipped (no API key): {to} -> {subject}")
            return MailResult(success=False, error_message="Email API key is not configured")

        try:
            with httpx.Client(transport=self.transport, timeout=EMAIL_TIMEOUT) as client:
                resp = client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "from": self.sender,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                    },
                )
        except httpx.TimeoutException:
            logger.error(f"Email API timed out sending to {to}")
            return MailResult(success=False, error_message="Email API timed out")
        except httpx.HTTPError as e:
            logger.error(f"Email API unreachable: {e}")
            return MailResult(success=False, error_message=str(e))

        if resp.status_code >= 400:
            logger.error(f"Email API error: {resp.status_code} - {resp.text}")
            return MailResult(success=False, error_message=f"Email API returned {resp.status_code}")

        email_id = resp.json().get("id")
        logger.info(f"Email sent to {to} ({email_id})")
        return MailResult(success=True, email_id=email_id)


# Singleton
mailer = Mailer()
