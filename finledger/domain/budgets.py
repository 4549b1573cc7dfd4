"""Budget arithmetic - derived figures and analytics over loaded budgets"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from finledger.domain.models import BudgetFigures, BudgetStatus, BudgetView
from finledger.domain.money import HUNDRED, ZERO, money

UNCATEGORIZED = "No Category"


def derive_figures(budget_amount: Decimal, spent_amount: Decimal, alert_percentage: Decimal) -> BudgetFigures:
    """
    Compute the read-time budget figures.

    - remaining = max(0, budget - spent)
    - spent_percentage = spent / budget * 100, or 0 when the budget is 0
    - over budget when spent > budget
    - alert when the unrounded spent_percentage >= alert_percentage; only the
      reported percentage is rounded
    """
    budget_amount = money(budget_amount)
    spent_amount = money(spent_amount)

    if budget_amount == ZERO:
        exact_percentage = ZERO
    else:
        exact_percentage = spent_amount / budget_amount * HUNDRED

    return BudgetFigures(
        remaining_amount=max(ZERO, budget_amount - spent_amount),
        spent_percentage=money(exact_percentage),
        is_over_budget=spent_amount > budget_amount,
        is_alert_triggered=exact_percentage >= Decimal(alert_percentage),
    )


def _average(values: List[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return money(sum(values, ZERO) / len(values))


def summarize(budgets: Iterable[BudgetView]) -> Dict[str, Any]:
    """
    Aggregate already-refreshed budgets into counts, sums and per-category averages.

    Category groups keep the order in which each category is first seen;
    budgets without a category share one "No Category" bucket.
    """
    items = list(budgets)

    groups: Dict[Optional[int], List[BudgetView]] = {}
    for item in items:
        groups.setdefault(item.category_id, []).append(item)

    categories_performance = []
    for category_id, members in groups.items():
        categories_performance.append(
            {
                "category_id": category_id,
                "category": members[0].category_name or UNCATEGORIZED,
                "budgets_count": len(members),
                "total_budget": money(sum((m.budget_amount for m in members), ZERO)),
                "total_spent": money(sum((m.spent_amount for m in members), ZERO)),
                "average_performance": _average([m.figures.spent_percentage for m in members]),
            }
        )

    over_budget = sum(1 for i in items if i.figures.is_over_budget)

    return {
        "total_budgets": len(items),
        "active_budgets": sum(1 for i in items if i.status == BudgetStatus.ACTIVE.value),
        "total_budget_amount": money(sum((i.budget_amount for i in items), ZERO)),
        "total_spent": money(sum((i.spent_amount for i in items), ZERO)),
        "average_spent_percentage": _average([i.figures.spent_percentage for i in items]),
        "over_budget_count": over_budget,
        "under_budget_count": len(items) - over_budget,
        "alert_triggered_count": sum(1 for i in items if i.figures.is_alert_triggered),
        "categories_performance": categories_performance,
    }
