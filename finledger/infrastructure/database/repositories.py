"""Data access layer; every lookup is scoped by the owning user"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Type, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from finledger.domain.models import CauseRef, Direction, ExpenseType, SchemaKind, SchemaRef
from finledger.domain.money import ZERO, money
from finledger.infrastructure.database.models import (
    BankAccount,
    Budget,
    Category,
    Dps,
    Expense,
    Fdr,
    Income,
    LedgerEntry,
    Loan,
    User,
)

InvestmentSchema = Union[Dps, Fdr, Loan]

# Single lookup table for the polymorphic schema reference
SCHEMA_MODELS: Dict[SchemaKind, Type[InvestmentSchema]] = {
    SchemaKind.DPS: Dps,
    SchemaKind.FDR: Fdr,
    SchemaKind.LOAN: Loan,
}


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, email: str) -> User:
        user = User(name=name, email=email)
        self.db.add(user)
        self.db.flush()
        return user

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()


class CategoryRepository:
    """Repository for categories"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, name: str, type: str, color: Optional[str]) -> Category:
        category = Category(user_id=user_id, name=name, type=type, color=color)
        self.db.add(category)
        self.db.flush()
        return category

    def get_any(self, category_id: int) -> Optional[Category]:
        """Unscoped lookup, used only to tell absence from ownership mismatch"""
        return self.db.get(Category, category_id)

    def list_for_user(self, user_id: int, type: Optional[str] = None) -> List[Category]:
        query = self.db.query(Category).filter(Category.user_id == user_id)
        if type:
            query = query.filter(Category.type == type)
        return query.order_by(Category.name).all()


class AccountRepository:
    """Repository for bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, account: BankAccount) -> BankAccount:
        self.db.add(account)
        self.db.flush()
        return account

    def get_for_user(self, user_id: int, account_id: int) -> Optional[BankAccount]:
        return (
            self.db.query(BankAccount)
            .filter(BankAccount.id == account_id, BankAccount.user_id == user_id)
            .first()
        )

    def get_any(self, account_id: int) -> Optional[BankAccount]:
        """Unscoped lookup, used only to tell absence from ownership mismatch"""
        return self.db.get(BankAccount, account_id)

    def lock_for_user(self, user_id: int, account_id: int) -> Optional[BankAccount]:
        """
        Load the account row with SELECT ... FOR UPDATE.

        populate_existing() makes an identity-mapped instance pick up the
        latest persisted balance instead of a stale in-memory copy.
        """
        return (
            self.db.query(BankAccount)
            .filter(BankAccount.id == account_id, BankAccount.user_id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def list_for_user(self, user_id: int, active_only: bool = True) -> List[BankAccount]:
        query = self.db.query(BankAccount).filter(BankAccount.user_id == user_id)
        if active_only:
            query = query.filter(BankAccount.is_active.is_(True))
        return query.order_by(BankAccount.id).all()


class LedgerEntryRepository:
    """Repository for ledger entries (the transactions table)"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: LedgerEntry) -> LedgerEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_for_user(self, user_id: int, entry_id: int) -> Optional[LedgerEntry]:
        """Fetch a live (unreversed) entry"""
        return (
            self.db.query(LedgerEntry)
            .filter(
                LedgerEntry.id == entry_id,
                LedgerEntry.user_id == user_id,
                LedgerEntry.reversed_at.is_(None),
            )
            .first()
        )

    def active_for_cause(self, cause: CauseRef) -> Optional[LedgerEntry]:
        return (
            self.db.query(LedgerEntry)
            .filter(
                LedgerEntry.cause_type == cause.kind.value,
                LedgerEntry.cause_id == cause.id,
                LedgerEntry.reversed_at.is_(None),
            )
            .first()
        )

    def unreversed_for_account(self, account_id: int) -> List[LedgerEntry]:
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.bank_account_id == account_id, LedgerEntry.reversed_at.is_(None))
            .order_by(LedgerEntry.id)
            .all()
        )

    def list_for_user(
        self,
        user_id: int,
        direction: Optional[Direction] = None,
        bank_account_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[LedgerEntry]:
        query = self.db.query(LedgerEntry).filter(
            LedgerEntry.user_id == user_id, LedgerEntry.reversed_at.is_(None)
        )
        if direction is not None:
            query = query.filter(LedgerEntry.type == direction.value)
        if bank_account_id is not None:
            query = query.filter(LedgerEntry.bank_account_id == bank_account_id)
        if date_from is not None:
            query = query.filter(LedgerEntry.transaction_date >= date_from)
        if date_to is not None:
            query = query.filter(LedgerEntry.transaction_date <= date_to)
        return query.order_by(LedgerEntry.transaction_date.desc(), LedgerEntry.id.desc()).all()


class BudgetRepository:
    """Repository for budgets"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, budget: Budget) -> Budget:
        self.db.add(budget)
        self.db.flush()
        return budget

    def get_for_user(self, user_id: int, budget_id: int) -> Optional[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.id == budget_id, Budget.user_id == user_id)
            .first()
        )

    def list_for_user(self, user_id: int, status: Optional[str] = None) -> List[Budget]:
        query = self.db.query(Budget).filter(Budget.user_id == user_id)
        if status is not None:
            query = query.filter(Budget.status == status)
        return query.order_by(Budget.created_at.desc(), Budget.id.desc()).all()

    def overlapping(self, user_id: int, start: date, end: date) -> List[Budget]:
        """Budgets whose window intersects [start, end]"""
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, Budget.start_date <= end, Budget.end_date >= start)
            .order_by(Budget.id)
            .all()
        )

    def delete(self, budget: Budget) -> None:
        self.db.delete(budget)
        self.db.flush()


class ExpenseRepository:
    """Repository for expenses"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, expense: Expense) -> Expense:
        self.db.add(expense)
        self.db.flush()
        return expense

    def get_for_user(self, user_id: int, expense_id: int) -> Optional[Expense]:
        return (
            self.db.query(Expense)
            .filter(Expense.id == expense_id, Expense.user_id == user_id)
            .first()
        )

    def delete(self, expense: Expense) -> None:
        self.db.delete(expense)
        self.db.flush()

    def _window(self, user_id: int, start: Optional[date], end: Optional[date], category_id: Optional[int]):
        query = self.db.query(Expense).filter(Expense.user_id == user_id)
        if start is not None:
            query = query.filter(Expense.expense_date >= start)
        if end is not None:
            query = query.filter(Expense.expense_date <= end)
        if category_id is not None:
            query = query.filter(Expense.category_id == category_id)
        return query

    def list_for_user(
        self,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category_id: Optional[int] = None,
        expense_type: Optional[ExpenseType] = None,
    ) -> List[Expense]:
        query = self._window(user_id, start, end, category_id)
        if expense_type is not None:
            query = query.filter(Expense.expense_type == expense_type.value)
        return query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()

    def sum_in_window(self, user_id: int, category_id: Optional[int], start: date, end: date) -> Decimal:
        """
        Total of the user's expenses dated within [start, end], optionally for one category.

        Summed in Python over Decimal values; SQLite's SUM over NUMERIC is a float.
        """
        amounts = self._window(user_id, start, end, category_id).with_entities(Expense.amount).all()
        return money(sum((row.amount for row in amounts), ZERO))

    def latest_payment_date(self, ref: SchemaRef, exclude_expense_id: Optional[int] = None) -> Optional[date]:
        """Most recent expense date among payments linked to a schema"""
        query = self.db.query(func.max(Expense.expense_date)).filter(
            Expense.related_type == ref.kind.value,
            Expense.related_id == ref.id,
            Expense.expense_type != ExpenseType.REGULAR.value,
        )
        if exclude_expense_id is not None:
            query = query.filter(Expense.id != exclude_expense_id)
        return query.scalar()

    def count_linked(self, ref: SchemaRef) -> int:
        return (
            self.db.query(Expense)
            .filter(Expense.related_type == ref.kind.value, Expense.related_id == ref.id)
            .count()
        )


class IncomeRepository:
    """Repository for incomes"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, income: Income) -> Income:
        self.db.add(income)
        self.db.flush()
        return income

    def get_for_user(self, user_id: int, income_id: int) -> Optional[Income]:
        return (
            self.db.query(Income)
            .filter(Income.id == income_id, Income.user_id == user_id)
            .first()
        )

    def delete(self, income: Income) -> None:
        self.db.delete(income)
        self.db.flush()

    def list_for_user(
        self,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category_id: Optional[int] = None,
    ) -> List[Income]:
        query = self.db.query(Income).filter(Income.user_id == user_id)
        if start is not None:
            query = query.filter(Income.income_date >= start)
        if end is not None:
            query = query.filter(Income.income_date <= end)
        if category_id is not None:
            query = query.filter(Income.category_id == category_id)
        return query.order_by(Income.income_date.desc(), Income.id.desc()).all()


class SchemaRepository:
    """Repository for the three investment schema tables"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, schema: InvestmentSchema) -> InvestmentSchema:
        self.db.add(schema)
        self.db.flush()
        return schema

    def get_any(self, ref: SchemaRef, for_update: bool = False) -> Optional[InvestmentSchema]:
        """Unscoped lookup by typed reference; the caller checks ownership"""
        model = SCHEMA_MODELS[ref.kind]
        query = self.db.query(model).filter(model.id == ref.id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def list_for_user(self, user_id: int, kind: SchemaKind) -> List[InvestmentSchema]:
        model = SCHEMA_MODELS[kind]
        return self.db.query(model).filter(model.user_id == user_id).order_by(model.id).all()

    def delete(self, schema: InvestmentSchema) -> None:
        self.db.delete(schema)
        self.db.flush()
