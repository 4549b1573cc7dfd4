"""Dashboard figures computed from accounts, budgets, schemas and recorded activity"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from finledger.domain.models import ExpenseType, InvestmentStatus, SchemaKind
from finledger.domain.money import ZERO, money
from finledger.infrastructure.database.repositories import (
    AccountRepository,
    BudgetRepository,
    ExpenseRepository,
    IncomeRepository,
    SchemaRepository,
)
from finledger.utils.date_utils import add_months, month_bounds

TREND_MONTHS = 12
TOP_CATEGORIES = 5

# Keys of the per-type expense breakdown
_BREAKDOWN_KEYS = {
    ExpenseType.REGULAR: "regular",
    ExpenseType.DPS_PAYMENT: "dps_payments",
    ExpenseType.FDR_INVESTMENT: "fdr_investments",
    ExpenseType.LOAN_PAYMENT: "loan_payments",
}

# What an active schema contributes to the investment overview
_OVERVIEW_AMOUNT = {
    SchemaKind.DPS: "total_deposited",
    SchemaKind.FDR: "principal_amount",
    SchemaKind.LOAN: "outstanding_balance",
}


def _total(amounts: Iterable[Any]) -> Decimal:
    return money(sum((money(a) for a in amounts), ZERO))


def _top_categories(records: Iterable[Any]) -> List[Dict[str, Any]]:
    """Largest categories by total amount; uncategorized records are left out"""
    totals: Dict[int, Dict[str, Any]] = {}
    for record in records:
        if record.category is None:
            continue
        bucket = totals.setdefault(
            record.category_id,
            {"category_id": record.category_id, "name": record.category.name, "color": record.category.color, "total": ZERO},
        )
        bucket["total"] = money(bucket["total"] + money(record.amount))
    ranked = sorted(totals.values(), key=lambda b: b["total"], reverse=True)
    return ranked[:TOP_CATEGORIES]


def _monthly_trends(db: Session, user_id: int, today: date) -> List[Dict[str, Any]]:
    """Income, expenses and net for each of the last twelve months, oldest first"""
    first_start, _ = month_bounds(add_months(today, -(TREND_MONTHS - 1)))
    _, last_end = month_bounds(today)

    months: "OrderedDict[date, Dict[str, Any]]" = OrderedDict()
    for offset in range(TREND_MONTHS - 1, -1, -1):
        start, _ = month_bounds(add_months(today, -offset))
        months[start] = {"month": start.strftime("%b %Y"), "income": ZERO, "expenses": ZERO}

    for income in IncomeRepository(db).list_for_user(user_id, start=first_start, end=last_end):
        bucket = months[income.income_date.replace(day=1)]
        bucket["income"] = money(bucket["income"] + money(income.amount))
    for expense in ExpenseRepository(db).list_for_user(user_id, start=first_start, end=last_end):
        bucket = months[expense.expense_date.replace(day=1)]
        bucket["expenses"] = money(bucket["expenses"] + money(expense.amount))

    for bucket in months.values():
        bucket["net"] = money(bucket["income"] - bucket["expenses"])
    return list(months.values())


def build_dashboard(db: Session, user_id: int, today: date) -> Dict[str, Any]:
    """
    Financial overview for the month of ``today``.

    Balances cover active accounts; net_change is how far they have moved
    from the accounts' initial amounts. Budget figures use the cached
    spent_amount as last refreshed on read.
    """
    accounts = AccountRepository(db).list_for_user(user_id, active_only=True)
    start, end = month_bounds(today)
    incomes = IncomeRepository(db).list_for_user(user_id, start=start, end=end)
    expenses = ExpenseRepository(db).list_for_user(user_id, start=start, end=end)
    budgets = BudgetRepository(db).list_for_user(user_id)
    schemas = SchemaRepository(db)

    total_balance = _total(a.current_balance for a in accounts)
    total_initial = _total(a.initial_amount for a in accounts)
    total_income = _total(i.amount for i in incomes)
    total_expenses = _total(e.amount for e in expenses)

    investment_overview = {}
    for kind, amount_field in _OVERVIEW_AMOUNT.items():
        active = [s for s in schemas.list_for_user(user_id, kind) if s.status == InvestmentStatus.ACTIVE.value]
        investment_overview[kind.value] = {
            "count": len(active),
            "total_amount": _total(getattr(s, amount_field) for s in active),
        }

    return {
        "total_balance": total_balance,
        "net_change": money(total_balance - total_initial),
        "month_start": start,
        "month_end": end,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_balance": money(total_income - total_expenses),
        "active_accounts": len(accounts),
        "expense_breakdown": {
            key: _total(e.amount for e in expenses if e.expense_type == expense_type.value)
            for expense_type, key in _BREAKDOWN_KEYS.items()
        },
        "investment_overview": investment_overview,
        "budget_overview": {
            "total_budgets": len(budgets),
            "total_budget_amount": _total(b.budget_amount for b in budgets),
            "total_spent": _total(b.spent_amount for b in budgets),
        },
        "monthly_trends": _monthly_trends(db, user_id, today),
        "top_expense_categories": _top_categories(expenses),
        "top_income_categories": _top_categories(incomes),
    }
