"""Investment progress updater - applies payments to DPS, FDR and loan schemas"""

from typing import Callable, Dict

from sqlalchemy.orm import Session

from finledger.domain.exceptions import ConsistencyError, NotFoundError, ValidationError
from finledger.domain.investments import next_payment_after, simple_interest_maturity
from finledger.domain.models import PAYMENT_SCHEMA_KIND, ExpenseType, SchemaKind, SchemaRef
from finledger.domain.money import ZERO, money
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import Dps, Expense, Fdr, Loan
from finledger.infrastructure.database.repositories import (
    ExpenseRepository,
    InvestmentSchema,
    SchemaRepository,
)
from finledger.infrastructure.observability.logging import log_investment_progress
from finledger.infrastructure.observability.metrics import record_investment_payment


def schema_ref_for(expense: Expense) -> SchemaRef:
    """
    Typed schema reference of an investment expense.

    Raises:
        ValidationError: regular expense, or related_type disagrees with expense_type
    """
    try:
        expense_type = ExpenseType(expense.expense_type)
        kind = PAYMENT_SCHEMA_KIND[expense_type]
    except (ValueError, KeyError) as e:
        raise ValidationError(
            f"Expense type {expense.expense_type!r} does not pay into an investment", field="expense_type"
        ) from e
    if expense.related_id is None:
        raise ValidationError("related_id is required for investment expenses", field="related_id")
    if expense.related_type is not None and expense.related_type != kind.value:
        raise ValidationError(
            f"related_type must be {kind.value!r} for {expense_type.value}", field="related_type"
        )
    return SchemaRef(kind=kind, id=expense.related_id)


class InvestmentProgressUpdater:
    """
    Moves an investment schema's progress counters in lockstep with the
    expenses that pay into it.

    Dispatch is a closed table keyed by schema kind, so every investment
    expense either updates exactly one schema or fails loudly.
    """

    def __init__(self, db: Session):
        self.db = db
        self.schemas = SchemaRepository(db)
        self.expenses = ExpenseRepository(db)
        self._apply: Dict[SchemaKind, Callable[[InvestmentSchema, Expense], None]] = {
            SchemaKind.DPS: self._apply_dps,
            SchemaKind.FDR: self._apply_fdr,
            SchemaKind.LOAN: self._apply_loan,
        }
        self._revert: Dict[SchemaKind, Callable[[InvestmentSchema, Expense], None]] = {
            SchemaKind.DPS: self._revert_dps,
            SchemaKind.FDR: self._revert_fdr,
            SchemaKind.LOAN: self._revert_loan,
        }

    def resolve(self, user_id: int, ref: SchemaRef, for_update: bool = False) -> InvestmentSchema:
        """
        Load a schema linked from a record owned by ``user_id``.

        Raises:
            NotFoundError: no such schema
            ConsistencyError: the schema belongs to another user
        """
        schema = self.schemas.get_any(ref, for_update=for_update)
        if schema is None:
            raise NotFoundError(f"Investment {ref.kind.value}", ref.id)
        if schema.user_id != user_id:
            raise ConsistencyError(
                f"Investment {ref.kind.value} {ref.id} belongs to a different user than the expense"
            )
        return schema

    def apply_payment(self, expense: Expense) -> InvestmentSchema:
        """Apply one investment expense to the schema it references"""
        ref = schema_ref_for(expense)
        with unit_of_work(self.db):
            schema = self.resolve(expense.user_id, ref, for_update=True)
            self._apply[ref.kind](schema, expense)
            self.db.flush()

        record_investment_payment(ref.kind.value, "applied")
        log_investment_progress("applied", expense.user_id, ref.kind.value, ref.id, expense.id, money(expense.amount))
        return schema

    def revert_payment(self, expense: Expense) -> InvestmentSchema:
        """Exact inverse of apply_payment, used before an expense is changed or deleted"""
        ref = schema_ref_for(expense)
        with unit_of_work(self.db):
            schema = self.resolve(expense.user_id, ref, for_update=True)
            self._revert[ref.kind](schema, expense)
            self.db.flush()

        record_investment_payment(ref.kind.value, "reverted")
        log_investment_progress("reverted", expense.user_id, ref.kind.value, ref.id, expense.id, money(expense.amount))
        return schema

    # Recurring deposit

    def _apply_dps(self, dps: Dps, expense: Expense) -> None:
        if dps.remaining_installments <= 0:
            raise ConsistencyError(f"DPS {dps.id} has no remaining installments")
        dps.total_deposited = money(money(dps.total_deposited) + money(expense.amount))
        dps.paid_installments += 1
        dps.remaining_installments -= 1
        dps.last_payment_date = expense.expense_date
        dps.next_payment_date = next_payment_after(expense.expense_date)

    def _revert_dps(self, dps: Dps, expense: Expense) -> None:
        if dps.paid_installments <= 0:
            raise ConsistencyError(f"DPS {dps.id} has no paid installments to revert")
        remaining_total = money(money(dps.total_deposited) - money(expense.amount))
        if remaining_total < ZERO:
            raise ConsistencyError(f"Reverting expense {expense.id} would make DPS {dps.id} negative")
        dps.total_deposited = remaining_total
        dps.paid_installments -= 1
        dps.remaining_installments += 1
        self._restore_payment_dates(dps, SchemaRef(SchemaKind.DPS, dps.id), expense)

    # Fixed deposit

    def _apply_fdr(self, fdr: Fdr, expense: Expense) -> None:
        fdr.principal_amount = money(money(fdr.principal_amount) + money(expense.amount))
        fdr.maturity_amount = simple_interest_maturity(fdr.principal_amount, fdr.interest_rate, fdr.tenure_months)

    def _revert_fdr(self, fdr: Fdr, expense: Expense) -> None:
        principal = money(money(fdr.principal_amount) - money(expense.amount))
        if principal < ZERO:
            raise ConsistencyError(f"Reverting expense {expense.id} would make FDR {fdr.id} negative")
        fdr.principal_amount = principal
        fdr.maturity_amount = simple_interest_maturity(principal, fdr.interest_rate, fdr.tenure_months)

    # Loan

    def _apply_loan(self, loan: Loan, expense: Expense) -> None:
        if loan.remaining_emis <= 0:
            raise ConsistencyError(f"Loan {loan.id} has no remaining EMIs")
        loan.amount_paid = money(money(loan.amount_paid) + money(expense.amount))
        loan.outstanding_balance = money(money(loan.principal_amount) - loan.amount_paid)
        loan.paid_emis += 1
        loan.remaining_emis -= 1
        loan.last_payment_date = expense.expense_date
        loan.next_payment_date = next_payment_after(expense.expense_date)

    def _revert_loan(self, loan: Loan, expense: Expense) -> None:
        if loan.paid_emis <= 0:
            raise ConsistencyError(f"Loan {loan.id} has no paid EMIs to revert")
        amount_paid = money(money(loan.amount_paid) - money(expense.amount))
        if amount_paid < ZERO:
            raise ConsistencyError(f"Reverting expense {expense.id} would make loan {loan.id} negative")
        loan.amount_paid = amount_paid
        loan.outstanding_balance = money(money(loan.principal_amount) - amount_paid)
        loan.paid_emis -= 1
        loan.remaining_emis += 1
        self._restore_payment_dates(loan, SchemaRef(SchemaKind.LOAN, loan.id), expense)

    def _restore_payment_dates(self, schema, ref: SchemaRef, expense: Expense) -> None:
        """Fall back to the latest other payment, or to the schedule start when none remain"""
        latest = self.expenses.latest_payment_date(ref, exclude_expense_id=expense.id)
        schema.last_payment_date = latest
        schema.next_payment_date = next_payment_after(latest or schema.start_date)
