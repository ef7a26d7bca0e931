"""
Contact-us mail and admin dashboard counters.
"""

from __future__ import annotations

import html
import logging

from fastapi import status

from auth import repository as user_repository
from auth import service as auth_service
from core import mailer
from core.errors import AppError

from . import schemas

logger = logging.getLogger(__name__)


async def contact_us(payload: schemas.ContactRequest) -> None:
    email = auth_service.validate_email(payload.email)
    body = (
        f"<p><b>Name:</b> {html.escape(payload.name)}</p>"
        f"<p><b>Email:</b> {html.escape(email)}</p>"
        f"<p>{html.escape(payload.message)}</p>"
    )
    try:
        await mailer.send_email(to=mailer.contact_us_address(), subject="Contact Us Form", html=body)
    except mailer.MailerError as exc:
        logger.warning("contact_email_failed error=%s", exc)
        raise AppError(
            "Could not send your message, please try again.",
            status.HTTP_502_BAD_GATEWAY,
        ) from exc
    logger.info("contact_form_sent from=%s", email)


async def user_stats() -> dict:
    return {
        "all_users_count": await user_repository.count_users(),
        "subscribed_users_count": await user_repository.count_subscribed_users(),
    }
