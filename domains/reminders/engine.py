"""Reminder engine: keeps planned payments and scheduled notifications in step.

An entry holds a notification handle exactly when it is eligible:

    eligible = global enabled AND "planned" preference AND entry enabled
               AND its trigger time is still in the future

Every public operation runs under one asyncio.Lock, so overlapping calls
never interleave their read-modify-write of the entry list. Capability and
store failures are logged and absorbed; an entry whose schedule failed is
simply left without a handle.
"""

import asyncio
import random
import string
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from logger import logger
from . import config
from .content import loan_due_content, planned_payment_content
from .notifications import NotificationCapability
from .persistence import load_state, save_enabled, save_entries, save_preferences
from .store import KeyValueStore
from .trigger import compute_trigger
from .types import (
    Category,
    EntryPatch,
    GlobalState,
    LoanDetails,
    NotificationContent,
    PermissionStatus,
    PlannedEntry,
)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_entry_id() -> str:
    """Millisecond timestamp plus a short random suffix, e.g. 1741600000000_k3x9qa."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{int(time.time() * 1000)}_{suffix}"


def is_eligible(entry: PlannedEntry, state: GlobalState, now: Optional[datetime] = None) -> bool:
    """Whether `entry` should hold an active schedule under `state`."""
    if not (state.allows(Category.PLANNED) and entry.enabled):
        return False
    return compute_trigger(entry.due_date, entry.remind_before_days, now=now) is not None


class ReminderEngine:
    """Owns the planned payment list and the global reminder settings.

    Usage:
        engine = ReminderEngine(notifications, store)
        await engine.initialize()

        entry_id = await engine.add_entry(title="Rent", amount=50000, due_date=due)
        await engine.toggle_entry(entry_id, False)
    """

    def __init__(
        self,
        notifications: NotificationCapability,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.notifications = notifications
        self.store = store
        self.clock = clock
        self.permission = PermissionStatus.UNDETERMINED

        self._state = GlobalState()
        self._entries: list[PlannedEntry] = []
        self._lock = asyncio.Lock()
        self._initialized = False
        self._channel_ready = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> GlobalState:
        return self._state.copy()

    @property
    def entries(self) -> list[PlannedEntry]:
        """Copies of the planned entries, newest first."""
        return [replace(e) for e in self._entries]

    def get_entry(self, entry_id: str) -> Optional[PlannedEntry]:
        index = self._find(entry_id)
        return None if index is None else replace(self._entries[index])

    def is_eligible(self, entry: PlannedEntry) -> bool:
        return is_eligible(entry, self._state, now=self.clock())

    def _find(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Capability helpers (never raise)
    # ------------------------------------------------------------------

    async def _ensure_permission(self) -> bool:
        try:
            status = await self.notifications.get_permission_status()
            if status != PermissionStatus.GRANTED:
                status = await self.notifications.request_permission()
        except Exception as e:
            logger.error(f"Failed to check notification permission: {e}")
            return False

        self.permission = status
        if status != PermissionStatus.GRANTED:
            logger.warning(f"Notification permission {status.value}, not scheduling")
            return False
        return True

    async def _schedule_at(self, when: datetime, content: NotificationContent) -> Optional[str]:
        if not await self._ensure_permission():
            return None
        try:
            handle = await self.notifications.schedule_at(when, content)
        except Exception as e:
            logger.error(f"Failed to schedule '{content.title}' at {when}: {e}")
            return None
        return handle or None

    async def _cancel(self, handle: str) -> None:
        try:
            await self.notifications.cancel(handle)
        except Exception as e:
            logger.warning(f"Failed to cancel notification {handle}: {e}")

    async def _schedule_entry(self, entry: PlannedEntry) -> Optional[str]:
        """Schedule `entry` if eligible; returns the handle or None."""
        if not (self._state.allows(Category.PLANNED) and entry.enabled):
            return None

        try:
            trigger = compute_trigger(entry.due_date, entry.remind_before_days, now=self.clock())
            content = planned_payment_content(entry) if trigger else None
        except Exception as e:
            logger.error(f"Failed to prepare reminder for planned payment {entry.id}: {e}")
            return None
        if trigger is None:
            logger.info(f"No future trigger for planned payment {entry.id} (due {entry.due_date})")
            return None

        handle = await self._schedule_at(trigger, content)
        if handle:
            logger.info(f"Scheduled reminder {handle} for '{entry.display_title}' at {trigger}")
        return handle

    async def _reschedule(self, entry: PlannedEntry) -> None:
        """Cancel any held handle, then schedule again if eligible."""
        if entry.notification_id:
            await self._cancel(entry.notification_id)
            entry.notification_id = None
        entry.notification_id = await self._schedule_entry(entry)

    async def _persist_entries(self) -> None:
        await save_entries(self.store, self._entries)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load persisted state, register the channel and read permission.

        Safe to call more than once; later calls do nothing.
        """
        async with self._lock:
            if self._initialized:
                return

            self._state, self._entries = await load_state(self.store)

            if not self._channel_ready:
                try:
                    await self.notifications.register_channel(config.CHANNEL_ID, config.CHANNEL_CONFIG)
                    self._channel_ready = True
                except Exception as e:
                    logger.error(f"Failed to register notification channel: {e}")

            try:
                self.permission = await self.notifications.get_permission_status()
            except Exception as e:
                logger.error(f"Failed to read notification permission: {e}")

            self._initialized = True
            logger.info(f"Reminder engine initialized (permission: {self.permission.value})")

    async def set_global_enabled(self, value: bool) -> None:
        """Master switch for every reminder.

        Turning off cancels all scheduled notifications and clears every
        handle. Turning on re-derives each entry's schedule.
        """
        async with self._lock:
            value = bool(value)
            previous = self._state.is_enabled
            self._state.is_enabled = value
            await save_enabled(self.store, value)

            if not value:
                for entry in self._entries:
                    if entry.notification_id:
                        await self._cancel(entry.notification_id)
                        entry.notification_id = None
                try:
                    await self.notifications.cancel_all()
                except Exception as e:
                    logger.warning(f"Failed to cancel all notifications: {e}")
            else:
                for entry in self._entries:
                    await self._reschedule(entry)

            await self._persist_entries()
            logger.info(f"Reminders {'enabled' if value else 'disabled'} (was {'enabled' if previous else 'disabled'})")

    async def set_preference(self, category: Union[Category, str], value: bool) -> None:
        """Switch one reminder category on or off.

        Only the planned category affects existing entries; the others gate
        future notices.
        """
        try:
            category = Category(category)
        except ValueError:
            logger.warning(f"Ignoring unknown reminder category {category!r}")
            return

        async with self._lock:
            value = bool(value)
            previous = self._state.preferences.get(category.value, True)
            self._state.preferences[category.value] = value
            await save_preferences(self.store, self._state.preferences)

            if category == Category.PLANNED and previous != value:
                for entry in self._entries:
                    await self._reschedule(entry)
                await self._persist_entries()

            logger.info(f"Preference {category.value} set to {value}")

    async def add_entry(
        self,
        title: str = "",
        amount: float = 0,
        due_date: Any = None,
        remind_before_days: Optional[int] = config.DEFAULT_REMIND_BEFORE_DAYS,
        enabled: bool = True
    ) -> Optional[str]:
        """Create a planned payment, scheduling its reminder if eligible.

        Returns:
            The new entry id, or None if `due_date` cannot be read
        """
        async with self._lock:
            existing = {e.id for e in self._entries}
            entry_id = new_entry_id()
            while entry_id in existing:
                entry_id = new_entry_id()

            try:
                entry = PlannedEntry(
                    id=entry_id,
                    title=title,
                    amount=amount,
                    due_date=due_date if due_date is not None else self.clock(),
                    remind_before_days=remind_before_days,
                    enabled=enabled,
                )
            except ValueError as e:
                logger.warning(f"Ignoring planned payment with bad due date: {e}")
                return None
            entry.notification_id = await self._schedule_entry(entry)

            self._entries.insert(0, entry)
            await self._persist_entries()
            logger.info(f"Added planned payment {entry.id} '{entry.display_title}' due {entry.due_date}")
            return entry.id

    async def update_entry(self, entry_id: str, patch: Union[EntryPatch, dict]) -> bool:
        """Merge `patch` into an entry and re-derive its schedule.

        The old handle is always cancelled before a new one is requested.

        Returns:
            False if no entry has `entry_id` or the patch has a bad due
            date (nothing changes)
        """
        if isinstance(patch, dict):
            try:
                patch = EntryPatch.from_dict(patch)
            except ValueError as e:
                logger.warning(f"Ignoring update of planned payment {entry_id}: {e}")
                return False

        async with self._lock:
            index = self._find(entry_id)
            if index is None:
                logger.warning(f"Ignoring update of unknown planned payment {entry_id}")
                return False

            current = self._entries[index]
            try:
                merged = patch.apply(current)
            except ValueError as e:
                logger.warning(f"Ignoring update of planned payment {entry_id}: {e}")
                return False

            if current.notification_id:
                await self._cancel(current.notification_id)
            merged.notification_id = await self._schedule_entry(merged)

            self._entries[index] = merged
            await self._persist_entries()
            logger.info(f"Updated planned payment {entry_id}: {sorted(patch.changes())}")
            return True

    async def toggle_entry(self, entry_id: str, enabled: bool) -> bool:
        return await self.update_entry(entry_id, EntryPatch(enabled=bool(enabled)))

    async def remove_entry(self, entry_id: str) -> bool:
        """Delete an entry, cancelling its reminder first.

        Returns:
            False if no entry has `entry_id`
        """
        async with self._lock:
            index = self._find(entry_id)
            if index is None:
                logger.warning(f"Ignoring removal of unknown planned payment {entry_id}")
                return False

            entry = self._entries[index]
            if entry.notification_id:
                await self._cancel(entry.notification_id)

            del self._entries[index]
            await self._persist_entries()
            logger.info(f"Removed planned payment {entry_id}")
            return True

    async def notify_immediate(self, category: Union[Category, str], content: NotificationContent) -> bool:
        """Fire-and-forget notice, gated by the master switch and `category`.

        Returns:
            True if the notice was handed to the capability
        """
        try:
            category = Category(category)
        except ValueError:
            logger.warning(f"Ignoring notice for unknown category {category!r}")
            return False

        async with self._lock:
            if not self._state.allows(category):
                return False
            if not await self._ensure_permission():
                return False
            try:
                await self.notifications.schedule_now(content)
            except Exception as e:
                logger.error(f"Failed to send '{content.title}' notice: {e}")
                return False
            return True

    async def schedule_loan_due(self, loan: LoanDetails) -> Optional[str]:
        """One-shot reminder ahead of a loan's repay-by date.

        Not tracked as a planned entry; the caller keeps the handle.
        """
        async with self._lock:
            if not self._state.allows(Category.LOAN_REMINDERS):
                return None
            if loan.repay_by is None:
                return None

            trigger = compute_trigger(loan.repay_by, loan.remind_before_days, now=self.clock())
            if trigger is None:
                logger.info(f"Loan {loan.id} repay-by {loan.repay_by} too close, no reminder")
                return None

            handle = await self._schedule_at(trigger, loan_due_content(loan))
            if handle:
                logger.info(f"Scheduled loan reminder {handle} for loan {loan.id} at {trigger}")
            return handle

    async def reconcile(self) -> int:
        """Re-derive every entry's schedule from the entry list.

        Replaces handles lost to a restart and drops handles whose trigger
        has already fired.

        Returns:
            Count of entries holding a handle afterwards
        """
        async with self._lock:
            for entry in self._entries:
                await self._reschedule(entry)
            await self._persist_entries()

            scheduled = sum(1 for e in self._entries if e.notification_id)
            logger.info(f"Reconciled {len(self._entries)} planned payment(s), {scheduled} scheduled")
            return scheduled


def start_reconciliation(scheduler: AsyncIOScheduler, engine: ReminderEngine) -> None:
    """Re-derive all schedules every RECONCILE_INTERVAL_MINUTES.

    Args:
        scheduler: APScheduler instance
        engine: The reminder engine to reconcile
    """
    scheduler.add_job(
        engine.reconcile,
        trigger=IntervalTrigger(minutes=config.RECONCILE_INTERVAL_MINUTES),
        id=config.RECONCILE_JOB_ID,
        name="Reconcile planned payment reminders",
        replace_existing=True
    )
    logger.info(f"Started reminder reconciliation (every {config.RECONCILE_INTERVAL_MINUTES}m)")
