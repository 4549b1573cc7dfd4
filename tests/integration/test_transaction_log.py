"""Integration tests for manual ledger transactions"""

import pytest
from datetime import date
from decimal import Decimal
from finledger.domain.exceptions import ConsistencyError, NotFoundError
from finledger.domain.models import Direction, ExpenseDraft
from finledger.engine.account_ledger import AccountLedger
from finledger.engine.events import ExpenseRecorder
from finledger.engine.transaction_log import TransactionLog


@pytest.fixture
def second_account(db, user):
    return AccountLedger(db).open_account(user.id, "Second Bank", "Spare", "0002", Decimal("0.00"))


def test_record_then_delete_restores_balance(db, user, account):
    log = TransactionLog(db)
    entry = log.record(user.id, account.id, "out", Decimal("75.00"), date(2024, 3, 1), "Groceries")

    db.refresh(account)
    assert account.current_balance == Decimal("925.00")

    log.delete(user.id, entry.id)

    db.refresh(account)
    assert account.current_balance == Decimal("1000.00")
    with pytest.raises(NotFoundError):
        log.get(user.id, entry.id)


def test_update_replaces_entry_and_links_audit_trail(db, user, account):
    log = TransactionLog(db)
    entry = log.record(user.id, account.id, "out", Decimal("50.00"), date(2024, 3, 1))

    replacement = log.update(user.id, entry.id, account.id, "in", Decimal("20.00"), date(2024, 3, 2), "Refund")

    db.refresh(account)
    db.refresh(entry)
    assert account.current_balance == Decimal("1020.00")
    assert replacement.id != entry.id
    assert entry.reversed_at is not None
    assert entry.superseded_by_id == replacement.id


def test_update_moving_between_accounts(db, user, account, second_account):
    log = TransactionLog(db)
    entry = log.record(user.id, account.id, "in", Decimal("300.00"), date(2024, 3, 1))

    log.update(user.id, entry.id, second_account.id, "in", Decimal("300.00"), date(2024, 3, 1))

    db.refresh(account)
    db.refresh(second_account)
    assert account.current_balance == Decimal("1000.00")
    assert second_account.current_balance == Decimal("300.00")


def test_update_to_missing_account_rolls_back(db, user, account):
    log = TransactionLog(db)
    entry = log.record(user.id, account.id, "out", Decimal("40.00"), date(2024, 3, 1))

    with pytest.raises(NotFoundError):
        log.update(user.id, entry.id, 9999, "out", Decimal("40.00"), date(2024, 3, 1))

    db.refresh(account)
    db.refresh(entry)
    assert account.current_balance == Decimal("960.00")
    assert entry.reversed_at is None


def test_entries_posted_for_an_expense_cannot_be_edited_directly(db, user, account):
    expense = ExpenseRecorder(db).create(
        user.id,
        ExpenseDraft(title="Lunch", amount=Decimal("12.00"), expense_date=date(2024, 3, 1), bank_account_id=account.id),
    )
    log = TransactionLog(db)
    [entry] = log.list(user.id)
    assert entry.cause_id == expense.id

    with pytest.raises(ConsistencyError):
        log.delete(user.id, entry.id)


def test_list_filters_and_summary(db, user, account):
    log = TransactionLog(db)
    log.record(user.id, account.id, "in", Decimal("100.00"), date(2024, 2, 1))
    log.record(user.id, account.id, "out", Decimal("30.00"), date(2024, 3, 1))
    removed = log.record(user.id, account.id, "out", Decimal("99.00"), date(2024, 3, 2))
    log.delete(user.id, removed.id)

    assert len(log.list(user.id)) == 2
    assert [e.type for e in log.list(user.id, direction=Direction.OUT)] == ["out"]
    assert len(log.list(user.id, date_from=date(2024, 3, 1))) == 1

    summary = log.summary(user.id)
    assert summary["total_transactions"] == 2
    assert summary["total_in"] == Decimal("100.00")
    assert summary["total_out"] == Decimal("30.00")
    assert summary["net_balance"] == Decimal("70.00")


def test_other_users_transaction_is_not_found(db, user, other_user, account):
    log = TransactionLog(db)
    entry = log.record(user.id, account.id, "in", Decimal("10.00"), date(2024, 3, 1))

    with pytest.raises(NotFoundError):
        log.get(other_user.id, entry.id)
