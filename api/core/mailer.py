"""
Outgoing e-mail through Amazon SES (sesv2).

boto3 is blocking, so the send runs in a worker thread. When no SES region is
configured the message is logged instead of sent (local development).
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import env

logger = logging.getLogger(__name__)


class MailerError(RuntimeError):
    pass


def ses_region() -> str:
    return env.env_str("SES_REGION") or env.env_str("AWS_REGION")


def from_address() -> str:
    return env.env_str("MAIL_FROM_EMAIL", "no-reply@lms.local")


def contact_us_address() -> str:
    return env.env_str("CONTACT_US_EMAIL", from_address())


@lru_cache(maxsize=4)
def _sesv2_client(region: str):
    config = Config(
        retries={"max_attempts": 3, "mode": "standard"},
        connect_timeout=5,
        read_timeout=30,
    )
    return boto3.client("sesv2", region_name=region, config=config)


def build_message(*, to: str, subject: str, html: str) -> dict[str, Any]:
    return {
        "FromEmailAddress": from_address(),
        "Destination": {"ToAddresses": [to]},
        "Content": {
            "Simple": {
                "Subject": {"Data": subject},
                "Body": {"Html": {"Data": html}},
            }
        },
    }


async def send_email(*, to: str, subject: str, html: str) -> None:
    to = (to or "").strip()
    if not to:
        raise MailerError("Recipient address is empty.")

    region = ses_region()
    if not region:
        logger.warning("mail_not_configured to=%s subject=%s body=%s", to, subject, html)
        return None

    message = build_message(to=to, subject=subject, html=html)
    client = _sesv2_client(region)
    try:
        resp = await asyncio.to_thread(client.send_email, **message)
    except (BotoCoreError, ClientError) as exc:
        raise MailerError(f"Failed to send e-mail: {exc}") from exc

    message_id = resp.get("MessageId") if isinstance(resp, dict) else None
    logger.info("email_sent to=%s subject=%s message_id=%s", to, subject, message_id)
