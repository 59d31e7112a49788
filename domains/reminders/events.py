"""Bridge domain events (transactions, loans) to the reminder engine."""

from typing import Optional, Union

from logger import logger
from .content import transaction_content
from .engine import ReminderEngine
from .types import Category, LoanDetails, TransactionDetails


async def notify_transaction_added(
    engine: ReminderEngine,
    tx: Union[TransactionDetails, dict]
) -> bool:
    """Immediate "income/expense/loan added" notice.

    Returns:
        True if the notice was sent
    """
    if isinstance(tx, dict):
        tx = TransactionDetails.from_dict(tx)
    return await engine.notify_immediate(Category.TX_ALERTS, transaction_content(tx))


async def schedule_loan_reminder(
    engine: ReminderEngine,
    loan: Union[LoanDetails, dict]
) -> Optional[str]:
    """Reminder ahead of a loan's repay-by date.

    Returns:
        Notification handle, or None if nothing was scheduled
    """
    if isinstance(loan, dict):
        try:
            loan = LoanDetails.from_dict(loan)
        except ValueError as e:
            logger.warning(f"Ignoring loan with an unreadable repay-by date: {e}")
            return None
    if loan.repay_by is None:
        return None
    return await engine.schedule_loan_due(loan)


async def on_transaction_recorded(engine: ReminderEngine, record: dict) -> Optional[str]:
    """Handle a freshly recorded transaction.

    Sends the transaction notice and, for loans carrying a repay-by date,
    schedules the due reminder.

    Args:
        engine: Reminder engine
        record: Transaction as the backend returns it (camelCase keys)

    Returns:
        Loan reminder handle, if one was scheduled
    """
    tx = TransactionDetails.from_dict(record)
    await notify_transaction_added(engine, tx)

    if not (tx.is_loan and record.get("repayBy")):
        return None

    try:
        loan = LoanDetails.from_dict(record)
    except ValueError as e:
        logger.warning(f"Loan {tx.id} has an unreadable repay-by date: {e}")
        return None
    return await schedule_loan_reminder(engine, loan)
