"""Expense and income handlers - one atomic unit per domain event"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from finledger.domain.exceptions import NotFoundError, ValidationError
from finledger.domain.models import (
    PAYMENT_SCHEMA_KIND,
    CauseKind,
    CauseRef,
    Direction,
    ExpenseDraft,
    ExpenseType,
    IncomeDraft,
    SchemaKind,
    parse_enum,
)
from finledger.domain.money import ZERO, money, positive_amount
from finledger.engine.account_ledger import AccountLedger
from finledger.engine.budget_tracker import resolve_category
from finledger.engine.investment_progress import InvestmentProgressUpdater, schema_ref_for
from finledger.engine.investments import resolve_bank_account
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import Expense, Income
from finledger.infrastructure.database.repositories import (
    AccountRepository,
    CategoryRepository,
    ExpenseRepository,
    IncomeRepository,
    LedgerEntryRepository,
)


def _validate_expense_draft(draft: ExpenseDraft) -> ExpenseDraft:
    if not draft.title:
        raise ValidationError("title is required", field="title")
    if draft.expense_date is None:
        raise ValidationError("expense_date is required", field="expense_date")
    draft.amount = positive_amount(draft.amount)
    draft.expense_type = parse_enum(ExpenseType, draft.expense_type or ExpenseType.REGULAR, "expense_type")

    if draft.expense_type == ExpenseType.REGULAR:
        if draft.related_id is not None or draft.related_type is not None:
            raise ValidationError(
                "related_type/related_id only apply to investment expenses", field="related_id"
            )
        return draft

    expected_kind = PAYMENT_SCHEMA_KIND[draft.expense_type]
    if draft.related_id is None:
        raise ValidationError("related_id is required for investment expenses", field="related_id")
    if draft.related_type is None:
        draft.related_type = expected_kind
    elif parse_enum(SchemaKind, draft.related_type, "related_type") != expected_kind:
        raise ValidationError(
            f"related_type must be {expected_kind.value!r} for {draft.expense_type.value}", field="related_type"
        )
    draft.related_type = expected_kind
    return draft


class _LedgerBacked:
    """Shared wiring for records that may post one ledger entry on their own behalf"""

    cause_kind: CauseKind
    direction: Direction

    def __init__(self, db: Session):
        self.db = db
        self.ledger = AccountLedger(db)
        self.entries = LedgerEntryRepository(db)
        self.accounts = AccountRepository(db)
        self.categories = CategoryRepository(db)

    def _check_links(self, user_id: int, category_id: Optional[int], bank_account_id: Optional[int]) -> None:
        resolve_category(self.categories, user_id, category_id)
        resolve_bank_account(self.accounts, user_id, bank_account_id)

    def _post(self, record: Any, entry_date: date) -> None:
        if record.bank_account_id is None:
            return
        self.ledger.apply(
            record.user_id,
            record.bank_account_id,
            self.direction,
            record.amount,
            entry_date,
            cause=CauseRef(self.cause_kind, record.id),
            description=record.title,
        )

    def _unpost(self, record: Any) -> None:
        entry = self.entries.active_for_cause(CauseRef(self.cause_kind, record.id))
        if entry is not None:
            self.ledger.reverse(record.user_id, entry)


class ExpenseRecorder(_LedgerBacked):
    """
    Handles expense create/update/delete.

    Within one unit of work an expense write:
    1. validates links (category, bank account, investment schema) against the user
    2. reverses the previous ledger entry and investment payment, if any
    3. writes the expense row
    4. posts an "out" ledger entry when a bank account is set
    5. applies the investment payment for non-regular expenses
    Any failure rolls back all of it.
    """

    cause_kind = CauseKind.EXPENSE
    direction = Direction.OUT

    def __init__(self, db: Session):
        super().__init__(db)
        self.expenses = ExpenseRepository(db)
        self.progress = InvestmentProgressUpdater(db)

    def create(self, user_id: int, draft: ExpenseDraft) -> Expense:
        draft = _validate_expense_draft(draft)
        with unit_of_work(self.db):
            self._check_links(user_id, draft.category_id, draft.bank_account_id)
            expense = self.expenses.add(Expense(user_id=user_id, **self._columns(draft)))
            self._apply(expense)
        return expense

    def get(self, user_id: int, expense_id: int) -> Expense:
        expense = self.expenses.get_for_user(user_id, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    def update(self, user_id: int, expense_id: int, draft: ExpenseDraft) -> Expense:
        draft = _validate_expense_draft(draft)
        with unit_of_work(self.db):
            expense = self.get(user_id, expense_id)
            self._check_links(user_id, draft.category_id, draft.bank_account_id)
            self._unwind(expense)
            for name, value in self._columns(draft).items():
                setattr(expense, name, value)
            self.db.flush()
            self._apply(expense)
        return expense

    def delete(self, user_id: int, expense_id: int) -> None:
        with unit_of_work(self.db):
            expense = self.get(user_id, expense_id)
            self._unwind(expense)
            self.expenses.delete(expense)

    def list(self, user_id: int, **filters: Any) -> List[Expense]:
        return self.expenses.list_for_user(user_id, **filters)

    def stats(self, user_id: int, start: date, end: date) -> Dict[str, Any]:
        expenses = self.expenses.list_for_user(user_id, start=start, end=end)
        total = money(sum((money(e.amount) for e in expenses), ZERO))

        by_category: Dict[int, Dict[str, Any]] = {}
        for expense in expenses:
            if expense.category is None:
                continue
            bucket = by_category.setdefault(
                expense.category_id, {"category_id": expense.category_id, "name": expense.category.name, "total": ZERO, "count": 0}
            )
            bucket["total"] = money(bucket["total"] + money(expense.amount))
            bucket["count"] += 1

        return {
            "start_date": start,
            "end_date": end,
            "total_amount": total,
            "total_count": len(expenses),
            "average_amount": money(total / len(expenses)) if expenses else ZERO,
            "by_category": sorted(by_category.values(), key=lambda b: b["total"], reverse=True),
        }

    def _apply(self, expense: Expense) -> None:
        if expense.expense_type != ExpenseType.REGULAR.value:
            # Resolve before posting so a bad link fails without touching balances
            self.progress.resolve(expense.user_id, schema_ref_for(expense))
        self._post(expense, expense.expense_date)
        if expense.expense_type != ExpenseType.REGULAR.value:
            self.progress.apply_payment(expense)

    def _unwind(self, expense: Expense) -> None:
        self._unpost(expense)
        if expense.expense_type != ExpenseType.REGULAR.value:
            self.progress.revert_payment(expense)

    @staticmethod
    def _columns(draft: ExpenseDraft) -> Dict[str, Any]:
        return {
            "title": draft.title,
            "description": draft.description,
            "amount": draft.amount,
            "expense_date": draft.expense_date,
            "category_id": draft.category_id,
            "bank_account_id": draft.bank_account_id,
            "payment_method": draft.payment_method,
            "tags": list(draft.tags or []),
            "expense_type": draft.expense_type.value,
            "related_type": draft.related_type.value if draft.related_type else None,
            "related_id": draft.related_id,
        }


class IncomeRecorder(_LedgerBacked):
    """Handles income create/update/delete; a linked bank account receives an "in" entry"""

    cause_kind = CauseKind.INCOME
    direction = Direction.IN

    def __init__(self, db: Session):
        super().__init__(db)
        self.incomes = IncomeRepository(db)

    def create(self, user_id: int, draft: IncomeDraft) -> Income:
        values = self._columns(draft)
        with unit_of_work(self.db):
            self._check_links(user_id, draft.category_id, draft.bank_account_id)
            income = self.incomes.add(Income(user_id=user_id, **values))
            self._post(income, income.income_date)
        return income

    def get(self, user_id: int, income_id: int) -> Income:
        income = self.incomes.get_for_user(user_id, income_id)
        if income is None:
            raise NotFoundError("Income", income_id)
        return income

    def update(self, user_id: int, income_id: int, draft: IncomeDraft) -> Income:
        values = self._columns(draft)
        with unit_of_work(self.db):
            income = self.get(user_id, income_id)
            self._check_links(user_id, draft.category_id, draft.bank_account_id)
            self._unpost(income)
            for name, value in values.items():
                setattr(income, name, value)
            self.db.flush()
            self._post(income, income.income_date)
        return income

    def delete(self, user_id: int, income_id: int) -> None:
        with unit_of_work(self.db):
            income = self.get(user_id, income_id)
            self._unpost(income)
            self.incomes.delete(income)

    def list(self, user_id: int, **filters: Any) -> List[Income]:
        return self.incomes.list_for_user(user_id, **filters)

    def stats(self, user_id: int, start: date, end: date) -> Dict[str, Any]:
        incomes = self.incomes.list_for_user(user_id, start=start, end=end)
        total = money(sum((money(i.amount) for i in incomes), ZERO))
        return {
            "start_date": start,
            "end_date": end,
            "total_amount": total,
            "total_count": len(incomes),
            "average_amount": money(total / len(incomes)) if incomes else ZERO,
        }

    @staticmethod
    def _columns(draft: IncomeDraft) -> Dict[str, Any]:
        if not draft.title:
            raise ValidationError("title is required", field="title")
        if draft.income_date is None:
            raise ValidationError("income_date is required", field="income_date")
        return {
            "title": draft.title,
            "description": draft.description,
            "source": draft.source,
            "amount": positive_amount(draft.amount),
            "income_date": draft.income_date,
            "category_id": draft.category_id,
            "bank_account_id": draft.bank_account_id,
        }
