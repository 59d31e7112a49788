"""Tests for transaction/loan event notifiers and notification text."""

from datetime import datetime

import pytest

from domains.reminders.content import (
    format_amount,
    loan_due_content,
    planned_payment_content,
    transaction_content,
)
from domains.reminders.events import (
    notify_transaction_added,
    on_transaction_recorded,
    schedule_loan_reminder,
)
from domains.reminders.types import Category, LoanDetails, PlannedEntry, TransactionDetails


class TestContent:

    def test_amount_formatting(self):
        assert format_amount(50000) == "LKR 50,000"
        assert format_amount(-1234.5) == "LKR 1,234.50"
        assert format_amount(float("inf")) == "LKR 0"
        assert format_amount(float("nan")) == "LKR 0"

    def test_planned_payment_body(self):
        entry = PlannedEntry(id="e1", title="", amount=50000, due_date=datetime(2025, 3, 10))

        content = planned_payment_content(entry)

        assert content.title == "Upcoming payment"
        assert content.body == "Payment • LKR 50,000 • Due 10 Mar 2025"
        assert content.channel_id == "payments"

    @pytest.mark.parametrize("tx_type,amount,title", [
        ("income", 2500, "Income added"),
        ("expense", 2500, "Expense added"),
        ("", -300, "Expense added"),
        ("loanGiven", 10000, "Loan recorded"),
        ("Loan", -10000, "Loan recorded"),
    ])
    def test_transaction_titles(self, tx_type, amount, title):
        tx = TransactionDetails(id="t1", amount=amount, type=tx_type)

        assert transaction_content(tx).title == title

    def test_transaction_body_parts(self):
        tx = TransactionDetails(id="t1", amount=-750, type="expense", category="Food", title="Lunch")

        content = transaction_content(tx)

        assert content.body == "LKR 750 • Food • Lunch"
        assert content.data == {"type": "tx", "id": "t1"}

    def test_loan_sides(self):
        given = LoanDetails(id="l1", amount=5000, repay_by=datetime(2025, 4, 1), loan_type="Given")
        taken = LoanDetails(id="l2", amount=5000, repay_by=datetime(2025, 4, 1))

        assert loan_due_content(given).body == "Receivable • LKR 5,000 • Due 01 Apr 2025"
        assert loan_due_content(taken).body.startswith("Payable")
        assert loan_due_content(taken).data == {"type": "loan-reminder", "id": "l2"}


class TestEventNotifiers:

    @pytest.mark.asyncio
    async def test_transaction_notice_sent(self, engine, notifications):
        assert await notify_transaction_added(engine, {"_id": "t9", "amount": 1500, "type": "income"}) is True

        [(_, content)] = [c for c in notifications.calls if c[0] == "schedule_now"]
        assert content.title == "Income added"
        assert content.data["id"] == "t9"

    @pytest.mark.asyncio
    async def test_transaction_notice_respects_preference(self, engine, notifications):
        await engine.set_preference(Category.TX_ALERTS, False)

        assert await notify_transaction_added(engine, TransactionDetails(id="t1", amount=1)) is False
        assert notifications.count("schedule_now") == 0

    @pytest.mark.asyncio
    async def test_loan_reminder_from_record(self, engine, notifications):
        handle = await schedule_loan_reminder(engine, {
            "id": "l1",
            "amount": -20000,
            "type": "loanTaken",
            "repayBy": "2025-04-01",
            "loanRemindBeforeDays": 2,
        })

        when, content = notifications.active[handle]
        assert when == datetime(2025, 3, 30, 9, 0)
        assert content.body.startswith("Payable • LKR 20,000")

    @pytest.mark.asyncio
    async def test_loan_without_repay_by(self, engine, notifications):
        assert await schedule_loan_reminder(engine, {"id": "l1", "amount": 100}) is None
        assert notifications.count("schedule_at") == 0

    @pytest.mark.asyncio
    async def test_loan_with_unreadable_repay_by(self, engine, notifications):
        assert await schedule_loan_reminder(engine, {"id": "l1", "amount": 100, "repayBy": "someday"}) is None
        assert notifications.count("schedule_at") == 0

    @pytest.mark.asyncio
    async def test_recorded_loan_notifies_and_schedules(self, engine, notifications):
        handle = await on_transaction_recorded(engine, {
            "id": "l2",
            "amount": 8000,
            "type": "loanGiven",
            "title": "To Sam",
            "repayBy": "2025-05-01",
        })

        assert handle in notifications.active
        assert notifications.active[handle][1].body.startswith("Receivable")
        assert notifications.count("schedule_now") == 1
        assert engine.entries == []

    @pytest.mark.asyncio
    async def test_recorded_expense_only_notifies(self, engine, notifications):
        handle = await on_transaction_recorded(engine, {"id": "t2", "amount": 400, "type": "expense"})

        assert handle is None
        assert notifications.count("schedule_now") == 1
        assert notifications.count("schedule_at") == 0

    @pytest.mark.asyncio
    async def test_recorded_loan_with_bad_date(self, engine, notifications):
        handle = await on_transaction_recorded(engine, {
            "id": "l3", "amount": 100, "type": "loanTaken", "repayBy": "someday",
        })

        assert handle is None
        assert notifications.count("schedule_now") == 1
