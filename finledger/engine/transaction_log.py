"""Transaction log - standalone ledger transactions and their audit trail"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from finledger.domain.exceptions import ConsistencyError, NotFoundError
from finledger.domain.models import Direction
from finledger.domain.money import ZERO, money
from finledger.engine.account_ledger import AccountLedger
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import LedgerEntry
from finledger.infrastructure.database.repositories import LedgerEntryRepository


class TransactionLog:
    """
    Entry point for manual balance adjustments.

    record/update/delete are the only legal ways to change a balance from
    outside; entries posted for an expense or income belong to that record
    and can only change through it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ledger = AccountLedger(db)
        self.entries = LedgerEntryRepository(db)

    def record(
        self,
        user_id: int,
        bank_account_id: int,
        direction: Any,
        amount: Any,
        transaction_date: date,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        return self.ledger.apply(
            user_id,
            bank_account_id,
            direction,
            amount,
            transaction_date,
            description=description,
        )

    def get(self, user_id: int, entry_id: int) -> LedgerEntry:
        entry = self.entries.get_for_user(user_id, entry_id)
        if entry is None:
            raise NotFoundError("Transaction", entry_id)
        return entry

    def update(
        self,
        user_id: int,
        entry_id: int,
        bank_account_id: int,
        direction: Any,
        amount: Any,
        transaction_date: date,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Replace an entry: reverse the old movement on its account, then post the
        new one on the (possibly different) account. Returns the replacement.
        """
        with unit_of_work(self.db):
            entry = self._manual_entry(user_id, entry_id)
            self.ledger.reverse(user_id, entry)
            replacement = self.ledger.apply(
                user_id,
                bank_account_id,
                direction,
                amount,
                transaction_date,
                description=description,
            )
            entry.superseded_by_id = replacement.id
            self.db.flush()
        return replacement

    def delete(self, user_id: int, entry_id: int) -> None:
        with unit_of_work(self.db):
            entry = self._manual_entry(user_id, entry_id)
            self.ledger.reverse(user_id, entry)

    def list(
        self,
        user_id: int,
        direction: Optional[Direction] = None,
        bank_account_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[LedgerEntry]:
        return self.entries.list_for_user(user_id, direction, bank_account_id, date_from, date_to)

    def summary(self, user_id: int) -> Dict[str, Any]:
        """Totals over all of the user's live entries"""
        entries = self.entries.list_for_user(user_id)
        total_in = sum((money(e.amount) for e in entries if e.type == Direction.IN.value), ZERO)
        total_out = sum((money(e.amount) for e in entries if e.type == Direction.OUT.value), ZERO)
        return {
            "total_transactions": len(entries),
            "total_in": money(total_in),
            "total_out": money(total_out),
            "net_balance": money(total_in - total_out),
        }

    def _manual_entry(self, user_id: int, entry_id: int) -> LedgerEntry:
        entry = self.get(user_id, entry_id)
        if entry.cause_type is not None:
            raise ConsistencyError(
                f"Transaction {entry_id} was posted for {entry.cause_type} {entry.cause_id}; change it there"
            )
        return entry
