"""Budget tracker - read-time refresh of budget spend"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from finledger.config import settings
from finledger.domain.budgets import derive_figures, summarize
from finledger.domain.exceptions import ConsistencyError, NotFoundError, ValidationError
from finledger.domain.models import BudgetFigures, BudgetStatus, BudgetView, PeriodType, parse_enum
from finledger.domain.money import HUNDRED, money, non_negative_amount
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import Budget, Category
from finledger.infrastructure.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    ExpenseRepository,
)
from finledger.infrastructure.observability.metrics import budget_recompute_counter
from finledger.utils.date_utils import period_window

_EDITABLE_FIELDS = (
    "budget_name",
    "category_id",
    "budget_amount",
    "period_type",
    "start_date",
    "end_date",
    "alert_percentage",
    "status",
    "description",
)


def resolve_category(categories: CategoryRepository, user_id: int, category_id: Optional[int]) -> Optional[Category]:
    """
    Verify a linked category belongs to the acting user.

    Raises:
        NotFoundError: no such category
        ConsistencyError: the category belongs to another user
    """
    if category_id is None:
        return None
    category = categories.get_any(category_id)
    if category is None:
        raise NotFoundError("Category", category_id)
    if category.user_id != user_id:
        raise ConsistencyError(f"Category {category_id} belongs to a different user")
    return category


class BudgetTracker:
    """
    Keeps Budget.spent_amount as a cache refreshed when budgets are read.

    Expense writes never touch budgets; list/show/analytics call
    recompute_spent before serializing, so a budget is stale only until its
    next read.
    """

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.expenses = ExpenseRepository(db)
        self.categories = CategoryRepository(db)

    def recompute_spent(self, budget: Budget) -> Budget:
        """Overwrite spent_amount with the sum of matching expenses in the budget window"""
        with unit_of_work(self.db):
            budget.spent_amount = self.expenses.sum_in_window(
                budget.user_id, budget.category_id, budget.start_date, budget.end_date
            )
            self.db.flush()
        budget_recompute_counter.inc()
        return budget

    @staticmethod
    def figures(budget: Budget) -> BudgetFigures:
        return derive_figures(budget.budget_amount, budget.spent_amount, budget.alert_percentage)

    def create(self, user_id: int, **fields: Any) -> Budget:
        if fields.get("alert_percentage") is None:
            fields["alert_percentage"] = settings.default_alert_percentage
        fields.setdefault("status", BudgetStatus.ACTIVE.value)
        values = self._validated(user_id, fields)

        with unit_of_work(self.db):
            budget = self.budgets.add(Budget(user_id=user_id, spent_amount=money(0), **values))
            self.recompute_spent(budget)
        return budget

    def get(self, user_id: int, budget_id: int, refresh: bool = True) -> Budget:
        budget = self.budgets.get_for_user(user_id, budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        if refresh:
            self.recompute_spent(budget)
        return budget

    def update(self, user_id: int, budget_id: int, **changes: Any) -> Budget:
        with unit_of_work(self.db):
            budget = self.get(user_id, budget_id, refresh=False)
            merged = {name: getattr(budget, name) for name in _EDITABLE_FIELDS}
            merged.update(changes)
            values = self._validated(user_id, merged)
            for name, value in values.items():
                setattr(budget, name, value)
            self.db.flush()
            self.recompute_spent(budget)
        return budget

    def delete(self, user_id: int, budget_id: int) -> None:
        with unit_of_work(self.db):
            budget = self.get(user_id, budget_id, refresh=False)
            self.budgets.delete(budget)

    def list(self, user_id: int, status: Optional[str] = BudgetStatus.ACTIVE.value) -> List[Budget]:
        """Refresh and return budgets; status None (or "all") disables the filter"""
        if status == "all":
            status = None
        with unit_of_work(self.db):
            budgets = self.budgets.list_for_user(user_id, status)
            for budget in budgets:
                self.recompute_spent(budget)
        return budgets

    def summarize(self, budgets: List[Budget]) -> Dict[str, Any]:
        return summarize(self.view(b) for b in budgets)

    def analytics(self, user_id: int, period: str, today: date) -> Dict[str, Any]:
        """Refresh the budgets overlapping the period window and summarize them"""
        start, end = period_window(period, today)
        with unit_of_work(self.db):
            budgets = self.budgets.overlapping(user_id, start, end)
            for budget in budgets:
                self.recompute_spent(budget)
        summary = self.summarize(budgets)
        summary["period"] = {"name": period, "start_date": start, "end_date": end}
        return summary

    def view(self, budget: Budget) -> BudgetView:
        return BudgetView(
            budget_id=budget.id,
            category_id=budget.category_id,
            category_name=budget.category.name if budget.category else None,
            status=budget.status,
            budget_amount=money(budget.budget_amount),
            spent_amount=money(budget.spent_amount),
            figures=self.figures(budget),
        )

    def _validated(self, user_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        values = {name: fields.get(name) for name in _EDITABLE_FIELDS if name in fields}

        if not values.get("budget_name"):
            raise ValidationError("budget_name is required", field="budget_name")
        if values.get("budget_amount") is None:
            raise ValidationError("budget_amount is required", field="budget_amount")
        values["budget_amount"] = non_negative_amount(values.get("budget_amount"), "budget_amount")
        values["period_type"] = parse_enum(PeriodType, values.get("period_type"), "period_type").value
        values["status"] = parse_enum(BudgetStatus, values.get("status"), "status").value

        alert = non_negative_amount(values.get("alert_percentage"), "alert_percentage")
        if alert > HUNDRED:
            raise ValidationError("alert_percentage must not exceed 100", field="alert_percentage")
        values["alert_percentage"] = alert

        start, end = values.get("start_date"), values.get("end_date")
        if start is None or end is None:
            raise ValidationError("start_date and end_date are required", field="start_date" if start is None else "end_date")
        if end <= start:
            raise ValidationError("end_date must be after start_date", field="end_date")

        resolve_category(self.categories, user_id, values.get("category_id"))
        return values
