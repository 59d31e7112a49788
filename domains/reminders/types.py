"""Type definitions for the reminder engine."""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from dateutil.parser import parse as parse_datetime

from . import config


class Category(str, Enum):
    """Reminder categories a user can switch on or off."""
    PLANNED = "planned"               # Planned payment reminders
    TX_ALERTS = "txAlerts"            # Immediate "transaction added" notices
    LOAN_REMINDERS = "loanReminders"  # Loan repay-by reminders


class PermissionStatus(str, Enum):
    """Notification permission as reported by the capability."""
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


def coerce_datetime(value: Any) -> datetime:
    """Turn a date, datetime or ISO string into a naive local datetime.

    Raises:
        ValueError: If a string cannot be parsed as a date.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            dt = parse_datetime(value)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid date: {value!r}") from e
    else:
        raise ValueError(f"Invalid date: {value!r}")

    # Single local-time model
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _magnitude(amount: Any) -> float:
    try:
        value = abs(float(amount or 0))
    except (TypeError, ValueError):
        return 0.0
    # inf and nan survive a JSON round trip but are not amounts
    return value if math.isfinite(value) else 0.0


def _lead_days(days: Any) -> int:
    if days is None:
        return config.DEFAULT_REMIND_BEFORE_DAYS
    try:
        return max(0, int(days))
    except (TypeError, ValueError, OverflowError):
        return config.DEFAULT_REMIND_BEFORE_DAYS


@dataclass
class PlannedEntry:
    """A planned payment the user wants to be reminded about."""
    id: str
    title: str
    amount: float
    due_date: datetime
    remind_before_days: int = config.DEFAULT_REMIND_BEFORE_DAYS
    enabled: bool = True
    notification_id: Optional[str] = None  # Handle of the active scheduled trigger

    def __post_init__(self):
        self.title = self.title or ""
        self.amount = _magnitude(self.amount)
        self.due_date = coerce_datetime(self.due_date)
        self.remind_before_days = _lead_days(self.remind_before_days)
        self.enabled = bool(self.enabled)

    @property
    def display_title(self) -> str:
        return self.title or config.DEFAULT_TITLE

    @property
    def is_scheduled(self) -> bool:
        return self.notification_id is not None

    def to_dict(self) -> dict:
        """Serialize using the stored record layout."""
        data = {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "dueDate": self.due_date.isoformat(),
            "remindBeforeDays": self.remind_before_days,
            "enabled": self.enabled,
        }
        if self.notification_id is not None:
            data["notificationId"] = self.notification_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PlannedEntry":
        """Build an entry from a stored record.

        Raises:
            KeyError: If the record has no id or due date.
            ValueError: If the due date is unparsable.
        """
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            amount=data.get("amount", 0),
            due_date=data["dueDate"],
            remind_before_days=data.get("remindBeforeDays"),
            enabled=data.get("enabled", True),
            notification_id=data.get("notificationId") or None,
        )


@dataclass(frozen=True)
class EntryPatch:
    """Partial update of a planned entry.

    Each field left as None is unchanged by `apply`. The handle is not
    patchable; the engine owns it.
    """
    title: Optional[str] = None
    amount: Optional[float] = None
    due_date: Optional[datetime] = None
    remind_before_days: Optional[int] = None
    enabled: Optional[bool] = None

    def changes(self) -> dict:
        """Fields this patch sets, by name."""
        return {
            name: value
            for name, value in (
                ("title", self.title),
                ("amount", self.amount),
                ("due_date", self.due_date),
                ("remind_before_days", self.remind_before_days),
                ("enabled", self.enabled),
            )
            if value is not None
        }

    def apply(self, entry: PlannedEntry) -> PlannedEntry:
        """Return a merged copy of `entry`; the original is untouched."""
        return replace(entry, **self.changes())

    @classmethod
    def from_dict(cls, data: dict) -> "EntryPatch":
        """Build a patch from the camelCase keys a client sends."""
        due = data.get("dueDate")
        return cls(
            title=data.get("title"),
            amount=data.get("amount"),
            due_date=coerce_datetime(due) if due is not None else None,
            remind_before_days=data.get("remindBeforeDays"),
            enabled=data.get("enabled"),
        )


@dataclass
class GlobalState:
    """Master switch plus per-category preferences."""
    is_enabled: bool = True
    preferences: dict[str, bool] = field(default_factory=lambda: dict(config.DEFAULT_PREFERENCES))

    def allows(self, category: Category) -> bool:
        """True if notices of `category` may be delivered at all."""
        return self.is_enabled and self.preferences.get(category.value, True)

    def copy(self) -> "GlobalState":
        return GlobalState(is_enabled=self.is_enabled, preferences=dict(self.preferences))


@dataclass
class NotificationContent:
    """What a notification shows, plus routing data."""
    title: str
    body: str
    data: dict = field(default_factory=dict)
    channel_id: str = config.CHANNEL_ID


@dataclass
class TransactionDetails:
    """The parts of a recorded transaction a notice needs."""
    id: str
    amount: float
    type: str = ""  # income | expense | Loan | loanGiven | loanTaken
    category: Optional[str] = None
    title: Optional[str] = None

    @property
    def is_loan(self) -> bool:
        return self.type.lower().startswith("loan")

    @classmethod
    def from_dict(cls, data: dict) -> "TransactionDetails":
        try:
            amount = float(data.get("amount") or 0)
        except (TypeError, ValueError):
            amount = 0.0
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            amount=amount,
            type=data.get("type") or "",
            category=data.get("category"),
            title=data.get("title"),
        )


@dataclass
class LoanDetails:
    """A loan recorded with an optional repay-by date."""
    id: str
    amount: float
    repay_by: Optional[datetime] = None
    remind_before_days: int = config.DEFAULT_REMIND_BEFORE_DAYS
    loan_type: str = "Taken"  # Given = money owed to the user

    def __post_init__(self):
        self.amount = _magnitude(self.amount)
        if self.repay_by is not None:
            self.repay_by = coerce_datetime(self.repay_by)
        self.remind_before_days = _lead_days(self.remind_before_days)

    @property
    def is_receivable(self) -> bool:
        return self.loan_type.lower() in ("given", "loangiven")

    @classmethod
    def from_dict(cls, data: dict) -> "LoanDetails":
        loan_type = data.get("loanType")
        if not loan_type:
            loan_type = "Given" if (data.get("type") or "") == "loanGiven" else "Taken"
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            amount=data.get("amount", 0),
            repay_by=data.get("repayBy") or None,
            remind_before_days=data.get("loanRemindBeforeDays"),
            loan_type=loan_type,
        )
