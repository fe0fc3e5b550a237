"""
Transactional email port and adapters.

Design:
- `Mailer.send(message)` returns the provider's message id.
- `ResendMailer` talks to the Resend REST API over requests; callers are
  responsible for exception handling (the provisioning use case treats email
  as a secondary effect).
- `NullMailer` signals a missing API key, `InMemoryMailer` collects messages
  for local development and tests.

Security:
- Never log the API key or message bodies (welcome emails carry passwords).
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
import uuid
from typing import List, Optional, Protocol

import requests

from backend.errors import ConfigurationError, UpstreamError

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_MAIL_FROM = "CampTrack <noreply@camptrack.local>"

logger = logging.getLogger("camptrack.accounts")


@dataclass(frozen=True)
class MailMessage:
    to: List[str]
    subject: str
    text: str
    html: str
    sender: str = DEFAULT_MAIL_FROM
    reply_to: Optional[str] = None


class Mailer(Protocol):
    def send(self, message: MailMessage) -> str: ...


class NullMailer:
    """Fallback mailer used when no API key is configured."""

    def send(self, message: MailMessage) -> str:  # noqa: D401
        raise ConfigurationError("RESEND_API_KEY not configured")


@dataclass
class InMemoryMailer:
    outbox: List[MailMessage] = field(default_factory=list)

    def send(self, message: MailMessage) -> str:
        self.outbox.append(message)
        return str(uuid.uuid4())


class ResendMailer:
    def __init__(self, api_key: str, *, timeout: float = 10.0) -> None:
        self._api_key = api_key
        self._timeout = timeout

    def send(self, message: MailMessage) -> str:
        payload = {
            "from": message.sender,
            "to": list(message.to),
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}
        try:
            r = requests.post(RESEND_API_URL, headers=headers, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise UpstreamError(f"email provider unreachable: {type(exc).__name__}") from exc
        if r.status_code >= 300:
            try:
                detail = (r.json() or {}).get("message")
            except ValueError:
                detail = None
            logger.warning("email send rejected: status=%s", r.status_code)
            raise UpstreamError(detail or f"email provider returned {r.status_code}")
        try:
            return str((r.json() or {}).get("id") or "")
        except ValueError:
            return ""


def get_mail_from() -> str:
    return (os.getenv("MAIL_FROM") or DEFAULT_MAIL_FROM).strip()


def get_mail_reply_to() -> Optional[str]:
    value = (os.getenv("MAIL_REPLY_TO") or "").strip()
    return value or None


def build_mailer_from_env() -> Mailer:
    """Return a ResendMailer when RESEND_API_KEY is set, else a NullMailer."""
    api_key = (os.getenv("RESEND_API_KEY") or "").strip()
    if not api_key:
        logger.warning("RESEND_API_KEY is not set; welcome emails are disabled")
        return NullMailer()
    return ResendMailer(api_key)


__all__ = [
    "MailMessage",
    "Mailer",
    "NullMailer",
    "InMemoryMailer",
    "ResendMailer",
    "build_mailer_from_env",
    "get_mail_from",
    "get_mail_reply_to",
]
