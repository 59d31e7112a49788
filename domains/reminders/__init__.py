"""Local reminder scheduling for planned payments and loan due dates.

Uses APScheduler date triggers with key-value persistence.
"""

from .types import (
    Category,
    PermissionStatus,
    PlannedEntry,
    EntryPatch,
    GlobalState,
    NotificationContent,
    TransactionDetails,
    LoanDetails,
)
from .trigger import compute_trigger
from .store import KeyValueStore, MemoryKeyValueStore, JsonFileStore, SupabaseKeyValueStore, create_store
from .notifications import NotificationCapability, SchedulerNotifications
from .engine import ReminderEngine, is_eligible, start_reconciliation
from .events import notify_transaction_added, schedule_loan_reminder, on_transaction_recorded

__all__ = [
    "Category",
    "PermissionStatus",
    "PlannedEntry",
    "EntryPatch",
    "GlobalState",
    "NotificationContent",
    "TransactionDetails",
    "LoanDetails",
    "compute_trigger",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileStore",
    "SupabaseKeyValueStore",
    "create_store",
    "NotificationCapability",
    "SchedulerNotifications",
    "ReminderEngine",
    "is_eligible",
    "start_reconciliation",
    "notify_transaction_added",
    "schedule_loan_reminder",
    "on_transaction_recorded",
]
