"""
notifications.py
================
Outbound delivery transports:
 - WebhookChannel: JSON POST to a clinician / CRM endpoint
 - SmsChannel:     POST to an HTTP SMS gateway
 - EmailChannel:   HTML mail over SMTP

Each method makes exactly one attempt and returns True on success.
Transport errors (network, SMTP) are raised to the caller, which decides
how a failure is recorded.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 8
SMS_TIMEOUT = 10
SMTP_TIMEOUT = 10


class EmailNotConfigured(RuntimeError):
    """Raised when an email is requested but no SMTP host is set."""

# ---------------------------------------------------------------------------
# Webhook (clinician alert / CRM forward)
# ---------------------------------------------------------------------------

class WebhookChannel:
    """POSTs a JSON payload to a fixed URL."""

    def __init__(self, url: Optional[str], timeout: float = WEBHOOK_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def notify(self, payload: Dict[str, Any]) -> bool:
        if not self.url:
            return False
        resp = requests.post(self.url, json=payload, timeout=self.timeout)
        if not resp.ok:
            logger.warning("Webhook %s answered %s: %s", self.url, resp.status_code, resp.text[:200])
        return resp.ok

# ---------------------------------------------------------------------------
# SMS gateway
# ---------------------------------------------------------------------------

class SmsChannel:
    """Sends short texts through an HTTP gateway taking {api_key, to, message}."""

    def __init__(self, gateway_url: Optional[str], api_key: Optional[str], timeout: float = SMS_TIMEOUT):
        self.gateway_url = gateway_url
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.gateway_url and self.api_key)

    def send(self, to: str, text: str) -> bool:
        if not self.configured:
            logger.debug("SMS gateway not configured, not sending to %s", to)
            return False
        resp = requests.post(
            self.gateway_url,
            json={"api_key": self.api_key, "to": to, "message": text},
            timeout=self.timeout,
        )
        if not resp.ok:
            logger.warning("SMS gateway answered %s: %s", resp.status_code, resp.text[:200])
        return resp.ok

# ---------------------------------------------------------------------------
# Email (SMTP)
# ---------------------------------------------------------------------------

class EmailChannel:
    """Sends HTML email through an SMTP relay (STARTTLS when offered)."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: float = SMTP_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    def build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender or ""
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def send(self, to: str, subject: str, html_body: str) -> bool:
        if not self.host:
            raise EmailNotConfigured("SMTP_HOST is not set")
        msg = self.build_message(to, subject, html_body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            refused = smtp.send_message(msg)
        if refused:
            logger.warning("SMTP refused recipients: %s", refused)
        return not refused
