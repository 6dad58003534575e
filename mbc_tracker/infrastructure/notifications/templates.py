"""Patient-facing message templates for assessment links."""

from datetime import datetime
from html import escape

from mbc_tracker.core.interfaces.services.notification_interface import NotificationMessage
from mbc_tracker.core.utils.date_utils import format_long_date


def build_magic_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/q/{token}"


def render_magic_link_message(
    patient_first_name: str,
    measure_name: str,
    due_date: datetime,
    expires_at: datetime,
    magic_link_url: str,
) -> NotificationMessage:
    """Build the subject and HTML body inviting a patient to complete a measure."""
    subject = f"Complete Your {measure_name} Assessment"
    link = escape(magic_link_url, quote=True)

    body = f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{escape(subject)}</title></head>
<body>
  <h1>MBC Tracker</h1>
  <p>Hi {escape(patient_first_name)},</p>
  <p>Your clinician has requested that you complete a <strong>{escape(measure_name)}</strong> assessment.</p>
  <p><strong>Due date:</strong> {format_long_date(due_date)}</p>
  <p><a href="{link}">Complete Assessment</a></p>
  <p>This link will expire on {format_long_date(expires_at)}. If you have any questions, please contact your clinician.</p>
  <p>If the button doesn't work, copy and paste this link into your browser:<br><a href="{link}">{link}</a></p>
  <p>This is an automated message from MBC Tracker. Please do not reply to this email.</p>
</body>
</html>"""
    return NotificationMessage(subject=subject, body=body, link=magic_link_url)
