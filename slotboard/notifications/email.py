"""
Booking emails sent through Resend.

Both senders are fire-and-forget from the caller's point of view: they log
and return None on any failure, and skip entirely when no API key is
configured.
"""

import asyncio
import html
import logging
from typing import Any, Optional

import resend

from slotboard.config import get_settings
from slotboard.events import BookingNotification

logger = logging.getLogger(__name__)

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #10b981; text-align: center;">{heading}</h1>
  {body}
  <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 32px 0;">
  <p style="color: #9ca3af; font-size: 12px; text-align: center;">Sent by Slotboard</p>
</body>
</html>"""


def booking_confirmation_html(n: BookingNotification) -> str:
    e = html.escape
    meet = ""
    if n["meet_link"]:
        link = e(n["meet_link"], quote=True)
        meet = (
            '<div style="margin: 24px 0; padding: 16px; background-color: #f0fdf4; border-radius: 8px;">'
            '<p style="margin: 0 0 8px 0; font-weight: 600; color: #166534;">Meeting link</p>'
            f'<a href="{link}" style="color: #16a34a;">{link}</a></div>'
        )
    body = (
        f"<p>Hi {e(n['guest_name'])},</p>"
        f"<p>Your booking with <strong>{e(n['host_name'])}</strong> has been confirmed.</p>"
        '<div style="margin: 24px 0; padding: 20px; background-color: #f8fafc; border-left: 4px solid #10b981;">'
        f"<h2 style=\"margin: 0 0 16px 0; font-size: 18px;\">{e(n['room_title'])}</h2>"
        f"<p style=\"margin: 0;\"><strong>Date &amp; Time:</strong><br>{e(n['when'])}</p></div>"
        f"{meet}"
        '<p style="color: #666; font-size: 14px;">If you need to cancel or reschedule, please contact the host directly.</p>'
    )
    return _LAYOUT.format(heading="Booking Confirmed!", body=body)


def host_notification_html(n: BookingNotification) -> str:
    e = html.escape
    guest_email = e(n["guest_email"] or "not provided")
    body = (
        f"<p>Hi {e(n['host_name'])},</p>"
        f"<p>You have a new booking for <strong>{e(n['room_title'])}</strong>.</p>"
        '<div style="margin: 24px 0; padding: 20px; background-color: #f8fafc; border-left: 4px solid #10b981;">'
        f"<p><strong>Guest:</strong> {e(n['guest_name'])}<br><strong>Email:</strong> {guest_email}</p>"
        f"<p style=\"margin: 0;\"><strong>Date &amp; Time:</strong><br>{e(n['when'])}</p></div>"
    )
    return _LAYOUT.format(heading="New Booking!", body=body)


async def send_email(to: str, subject: str, html_content: str) -> Optional[dict[str, Any]]:
    """Send one email. Returns the Resend response, or None if skipped or failed."""
    settings = get_settings().email
    if not settings.enabled:
        logger.info("RESEND_API_KEY not set, skipping email to %s", to)
        return None

    resend.api_key = settings.resend_api_key
    params = {
        "from": settings.from_address,
        "to": [to],
        "subject": subject,
        "html": html_content,
    }
    try:
        # The Resend SDK is synchronous.
        response = await asyncio.to_thread(resend.Emails.send, params)
        logger.info("Email sent to %s: %s", to, response)
        return response
    except Exception as e:
        logger.error("Email send error to %s: %s", to, e)
        return None


async def send_booking_confirmation(n: BookingNotification) -> Optional[dict[str, Any]]:
    if not n["guest_email"]:
        return None
    return await send_email(
        n["guest_email"],
        f"Booking Confirmed: {n['room_title']}",
        booking_confirmation_html(n),
    )


async def send_booking_notification_to_host(n: BookingNotification) -> Optional[dict[str, Any]]:
    if not n["host_email"]:
        return None
    return await send_email(
        n["host_email"],
        f"New Booking: {n['guest_name']} - {n['room_title']}",
        host_notification_html(n),
    )


async def notify_booking(n: BookingNotification) -> None:
    """Send the guest confirmation and the host notification concurrently; never raises."""
    results = await asyncio.gather(
        send_booking_confirmation(n),
        send_booking_notification_to_host(n),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            logger.error("Booking notification failed for slot %s: %r", n["slot"], result)
