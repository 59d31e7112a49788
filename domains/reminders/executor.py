"""Deliver fired notifications."""

import httpx

from config import NOTIFY_WEBHOOK_URL
from logger import logger
from .types import NotificationContent


def format_message(content: NotificationContent) -> str:
    return f"**{content.title}**\n{content.body}"


async def deliver_notification(content: NotificationContent) -> bool:
    """Send a notification to the configured webhook.

    Called by APScheduler when a trigger fires, or straight away for
    immediate notices. Without a webhook the notice is only logged.

    Args:
        content: What to show

    Returns:
        True if delivered (or logged)
    """
    if not NOTIFY_WEBHOOK_URL:
        logger.info(f"Notification [{content.channel_id}] {content.title}: {content.body}")
        return True

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                NOTIFY_WEBHOOK_URL,
                json={"content": format_message(content)},
                timeout=10
            )
            response.raise_for_status()
        logger.info(f"Delivered notification '{content.title}' ({content.data})")
        return True
    except Exception as e:
        logger.error(f"Failed to deliver notification '{content.title}': {e}")
        return False
