#!/usr/bin/env python3
"""Run the reminder engine as a long-lived local service."""

import asyncio
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from logger import logger
from domains.reminders import (
    KeyValueStore,
    ReminderEngine,
    SchedulerNotifications,
    create_store,
    start_reconciliation,
)


async def build_engine(
    scheduler: AsyncIOScheduler,
    store: Optional[KeyValueStore] = None,
    notifications: Optional[SchedulerNotifications] = None
) -> ReminderEngine:
    """Wire store, capability and engine, then restore schedules.

    Handles recorded on a previous run died with that process, so a
    reconciliation pass runs straight after loading.
    """
    notifications = notifications or SchedulerNotifications(scheduler)
    engine = ReminderEngine(notifications, store or create_store())
    await engine.initialize()

    scheduled = await engine.reconcile()
    logger.info(f"Restored {scheduled} planned payment reminder(s)")

    start_reconciliation(scheduler, engine)
    return engine


async def run() -> None:
    scheduler = AsyncIOScheduler()
    scheduler.start()
    logger.info("Scheduler started")

    await build_engine(scheduler)
    logger.info(f"Reminder service running with {len(scheduler.get_jobs())} jobs")

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)


def main():
    """Entry point."""
    logger.info("Starting finance reminder service...")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Reminder service stopped")


if __name__ == "__main__":
    main()
