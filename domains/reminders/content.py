"""Notification text for planned payments, transactions and loans."""

import math
from datetime import datetime

from config import CURRENCY_LABEL
from .types import LoanDetails, NotificationContent, PlannedEntry, TransactionDetails


def format_amount(amount: float) -> str:
    """Currency label plus amount with thousands separators (no decimals if whole)."""
    value = abs(amount)
    if not math.isfinite(value):
        value = 0.0
    if value == int(value):
        return f"{CURRENCY_LABEL} {value:,.0f}"
    return f"{CURRENCY_LABEL} {value:,.2f}"


def format_date(when: datetime) -> str:
    return when.strftime("%d %b %Y")


def planned_payment_content(entry: PlannedEntry) -> NotificationContent:
    return NotificationContent(
        title="Upcoming payment",
        body=f"{entry.display_title} • {format_amount(entry.amount)} • Due {format_date(entry.due_date)}",
        data={"type": "planned", "id": entry.id},
    )


def transaction_content(tx: TransactionDetails) -> NotificationContent:
    if tx.is_loan:
        title = "Loan recorded"
    elif tx.amount < 0 or tx.type.lower() == "expense":
        title = "Expense added"
    else:
        title = "Income added"

    parts = [format_amount(tx.amount)]
    if tx.category:
        parts.append(f"• {tx.category}")
    if tx.title:
        parts.append(f"• {tx.title}")

    return NotificationContent(
        title=title,
        body=" ".join(parts),
        data={"type": "tx", "id": tx.id},
    )


def loan_due_content(loan: LoanDetails) -> NotificationContent:
    side = "Receivable" if loan.is_receivable else "Payable"
    return NotificationContent(
        title="Loan due reminder",
        body=f"{side} • {format_amount(loan.amount)} • Due {format_date(loan.repay_by)}",
        data={"type": "loan-reminder", "id": loan.id},
    )
