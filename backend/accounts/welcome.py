"""Welcome email sent to freshly provisioned accounts."""
from __future__ import annotations

from html import escape
import os
from typing import Optional

from .mailer import MailMessage, get_mail_from, get_mail_reply_to

SUBJECT = "Welcome to CampTrack - Your Account Has Been Created"


def get_login_url() -> str:
    base = (os.getenv("APP_BASE_URL") or "http://localhost:8000").strip().rstrip("/")
    return f"{base}/"


def build_welcome_message(
    *,
    name: str,
    email: str,
    password: str,
    login_url: Optional[str] = None,
) -> MailMessage:
    url = login_url or get_login_url()
    reply_to = get_mail_reply_to()
    support = f"\nIf you have any questions, please contact support at {reply_to}.\n" if reply_to else ""
    text = (
        f"Welcome, {name}!\n\n"
        "Your account has been successfully created. You can now access the platform "
        "using the credentials below:\n\n"
        f"Email: {email}\n"
        f"Temporary Password: {password}\n\n"
        f"Login URL: {url}\n\n"
        "IMPORTANT: Please change your temporary password after logging in.\n"
        f"{support}\n"
        "Best regards,\nThe CampTrack Team"
    )
    html = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head><body>"
        f"<h1>Welcome to CampTrack</h1><p>Hello {escape(name)},</p>"
        "<p>Your account has been successfully created. You can now access the platform "
        "using the credentials below:</p>"
        f"<p><strong>Email Address:</strong> <code>{escape(email)}</code><br>"
        f"<strong>Temporary Password:</strong> <code>{escape(password)}</code></p>"
        f"<p><a href=\"{escape(url, quote=True)}\">Login to Your Account</a></p>"
        "<p><strong>Security Notice:</strong> Please change your temporary password "
        "immediately after logging in.</p>"
        "<p>Best regards,<br><strong>The CampTrack Team</strong></p>"
        "</body></html>"
    )
    return MailMessage(
        to=[email],
        subject=SUBJECT,
        text=text,
        html=html,
        sender=get_mail_from(),
        reply_to=reply_to,
    )


__all__ = ["build_welcome_message", "get_login_url", "SUBJECT"]
