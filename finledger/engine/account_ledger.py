"""Account ledger - the only code that moves a bank account's balance"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session

from finledger.domain.exceptions import ConsistencyError, NotFoundError, ValidationError
from finledger.domain.models import CauseRef, Direction, Reconciliation, parse_enum
from finledger.domain.money import ZERO, money, positive_amount
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import BankAccount, LedgerEntry
from finledger.infrastructure.database.repositories import AccountRepository, LedgerEntryRepository
from finledger.infrastructure.observability.logging import log_ledger_movement
from finledger.infrastructure.observability.metrics import record_ledger_entry


def signed_amount(direction: str, amount: Decimal) -> Decimal:
    """+amount for money in, -amount for money out"""
    return amount if direction == Direction.IN.value else -amount


class AccountLedger:
    """
    Applies and reverses ledger entries against bank accounts.

    Invariant: an account's current_balance equals its initial_amount plus the
    signed sum of its unreversed entries. available_balance moves in lockstep.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRepository(db)
        self.entries = LedgerEntryRepository(db)

    def open_account(
        self,
        user_id: int,
        bank_name: str,
        account_name: str,
        account_number: str,
        initial_amount: Any,
        account_type: str = "savings",
    ) -> BankAccount:
        """Create an account whose balances start at its initial amount"""
        initial = money(initial_amount)
        if initial < ZERO:
            raise ValidationError("initial_amount must not be negative", field="initial_amount")

        with unit_of_work(self.db):
            account = self.accounts.create(
                BankAccount(
                    user_id=user_id,
                    bank_name=bank_name,
                    account_name=account_name,
                    account_number=account_number,
                    account_type=account_type,
                    initial_amount=initial,
                    current_balance=initial,
                    available_balance=initial,
                    is_active=True,
                )
            )
        return account

    def get_account(self, user_id: int, account_id: int) -> BankAccount:
        account = self.accounts.get_for_user(user_id, account_id)
        if account is None:
            raise NotFoundError("Bank account", account_id)
        return account

    def apply(
        self,
        user_id: int,
        account_id: int,
        direction: Any,
        amount: Any,
        entry_date: date,
        cause: Optional[CauseRef] = None,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Post a new entry and move the account balance by it.

        Raises:
            ValidationError: amount <= 0, unknown direction or missing date
            NotFoundError: account absent or owned by another user
        """
        amount = positive_amount(amount)
        direction = parse_enum(Direction, direction, "type")
        if entry_date is None:
            raise ValidationError("transaction_date is required", field="transaction_date")

        with unit_of_work(self.db):
            account = self.accounts.lock_for_user(user_id, account_id)
            if account is None:
                raise NotFoundError("Bank account", account_id)

            entry = self.entries.add(
                LedgerEntry(
                    user_id=account.user_id,
                    bank_account_id=account.id,
                    type=direction.value,
                    amount=amount,
                    description=description,
                    transaction_date=entry_date,
                    cause_type=cause.kind.value if cause else None,
                    cause_id=cause.id if cause else None,
                )
            )
            self._adjust(account, signed_amount(direction.value, amount))

        record_ledger_entry(direction.value, "applied")
        log_ledger_movement("applied", user_id, account.id, entry.id, direction.value, amount, account.current_balance)
        return entry

    def reverse(self, user_id: int, entry: LedgerEntry) -> None:
        """
        Undo an entry's effect on its account and mark it reversed.

        The row is kept for audit; reversed entries drop out of listings and
        of the rebalance sum.
        """
        if entry.reversed_at is not None:
            raise ConsistencyError(f"Ledger entry {entry.id} is already reversed")

        with unit_of_work(self.db):
            account = self.accounts.lock_for_user(user_id, entry.bank_account_id)
            if account is None:
                raise NotFoundError("Bank account", entry.bank_account_id)

            self._adjust(account, -signed_amount(entry.type, money(entry.amount)))
            entry.reversed_at = datetime.now(timezone.utc)
            self.db.flush()

        record_ledger_entry(entry.type, "reversed")
        log_ledger_movement("reversed", user_id, account.id, entry.id, entry.type, money(entry.amount), account.current_balance)

    def rebalance(self, user_id: int, account_id: int) -> Decimal:
        """Balance implied by the initial amount and unreversed entries; read-only"""
        account = self.get_account(user_id, account_id)
        total = sum(
            (signed_amount(e.type, money(e.amount)) for e in self.entries.unreversed_for_account(account.id)),
            ZERO,
        )
        return money(money(account.initial_amount) + total)

    def reconcile(self, user_id: int, account_id: int) -> Reconciliation:
        account = self.get_account(user_id, account_id)
        return Reconciliation(
            account_id=account.id,
            current_balance=money(account.current_balance),
            expected_balance=self.rebalance(user_id, account_id),
        )

    def _adjust(self, account: BankAccount, delta: Decimal) -> None:
        account.current_balance = money(money(account.current_balance) + delta)
        account.available_balance = money(money(account.available_balance) + delta)
        # Flush so a later locked re-read inside the same unit sees this balance
        self.db.flush()
