"""Notification capability: permission, channels, scheduling and cancellation.

The engine only talks to the `NotificationCapability` protocol. The
implementation here runs triggers as APScheduler date jobs; job ids are the
handles the engine records on entries.
"""

import uuid
from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from config import NOTIFICATION_PERMISSION
from logger import logger
from . import config
from .executor import deliver_notification
from .types import NotificationContent, PermissionStatus


class NotificationCapability(Protocol):
    """What the reminder engine needs from the platform."""

    async def get_permission_status(self) -> PermissionStatus:
        ...

    async def request_permission(self) -> PermissionStatus:
        ...

    async def register_channel(self, channel_id: str, channel_config: dict) -> None:
        ...

    async def schedule_at(self, when: datetime, content: NotificationContent) -> str:
        ...

    async def schedule_now(self, content: NotificationContent) -> str:
        ...

    async def cancel(self, handle: str) -> None:
        ...

    async def cancel_all(self) -> None:
        ...


def _initial_permission() -> PermissionStatus:
    try:
        return PermissionStatus(NOTIFICATION_PERMISSION.lower())
    except ValueError:
        logger.warning(f"Unknown NOTIFICATION_PERMISSION '{NOTIFICATION_PERMISSION}', treating as undetermined")
        return PermissionStatus.UNDETERMINED


class SchedulerNotifications:
    """Notification capability backed by an AsyncIOScheduler.

    Usage:
        scheduler = AsyncIOScheduler()
        notifications = SchedulerNotifications(scheduler)
        scheduler.start()

        handle = await notifications.schedule_at(when, content)
        await notifications.cancel(handle)
    """

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        deliver: Callable[[NotificationContent], Awaitable] = deliver_notification,
        permission: Optional[PermissionStatus] = None
    ):
        self.scheduler = scheduler
        self.deliver = deliver
        self.permission = permission or _initial_permission()
        self.channels: dict[str, dict] = {}

    async def get_permission_status(self) -> PermissionStatus:
        return self.permission

    async def request_permission(self) -> PermissionStatus:
        """Ask for permission. An undetermined status resolves to granted;
        a denial sticks until changed by configuration."""
        if self.permission == PermissionStatus.UNDETERMINED:
            self.permission = PermissionStatus.GRANTED
            logger.info("Notification permission granted")
        return self.permission

    async def register_channel(self, channel_id: str, channel_config: dict) -> None:
        self.channels[channel_id] = dict(channel_config)
        logger.info(f"Registered notification channel '{channel_id}' ({channel_config.get('name')})")

    def _check_permission(self):
        if self.permission != PermissionStatus.GRANTED:
            raise PermissionError(f"Notification permission is {self.permission.value}")

    def _new_handle(self) -> str:
        return f"{config.JOB_PREFIX}{uuid.uuid4().hex[:8]}"

    async def schedule_at(self, when: datetime, content: NotificationContent) -> str:
        """Schedule `content` to fire at `when`.

        Returns:
            Handle for cancellation

        Raises:
            PermissionError: If permission is not granted
        """
        self._check_permission()
        handle = self._new_handle()
        self.scheduler.add_job(
            self.deliver,
            trigger=DateTrigger(run_date=when),
            args=[content],
            id=handle,
            name=f"notification:{content.title[:30]}",
            replace_existing=True
        )
        logger.debug(f"Scheduled notification {handle} at {when}")
        return handle

    async def schedule_now(self, content: NotificationContent) -> str:
        """Fire `content` as soon as the scheduler runs it."""
        self._check_permission()
        handle = self._new_handle()
        self.scheduler.add_job(
            self.deliver,
            args=[content],
            id=handle,
            name=f"notification:{content.title[:30]}"
        )
        return handle

    async def cancel(self, handle: str) -> None:
        try:
            self.scheduler.remove_job(handle)
            logger.debug(f"Cancelled notification {handle}")
        except JobLookupError:
            # Already fired or never existed
            logger.debug(f"Notification {handle} not scheduled, nothing to cancel")

    async def cancel_all(self) -> None:
        for handle in self.active_handles():
            await self.cancel(handle)

    def active_handles(self) -> set[str]:
        """Ids of notification jobs still waiting to fire."""
        return {job.id for job in self.scheduler.get_jobs() if job.id.startswith(config.JOB_PREFIX)}
