"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .notifications import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)


@shared_task(name="bookings.send_mail_message")
def send_mail_message(
    to: str,
    from_email: str,
    subject: str,
    content: str,
    template: str = DEFAULT_TEMPLATE,
) -> int:
    """Render a reservation mail and send it.

    Returns the number of delivered messages as reported by the mail backend.
    """

    html_message = render_to_string(template or DEFAULT_TEMPLATE, {"content": content, "subject": subject})
    sent = send_mail(
        subject=subject,
        message=strip_tags(content),
        from_email=from_email,
        recipient_list=[to],
        html_message=html_message,
        fail_silently=False,
    )
    logger.info(f"Sent mail '{subject}' to {to}")
    return sent
