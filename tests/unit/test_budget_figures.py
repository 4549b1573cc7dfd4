"""Unit tests for budget arithmetic"""

from decimal import Decimal
from finledger.domain.budgets import UNCATEGORIZED, derive_figures, summarize
from finledger.domain.models import BudgetView


def _view(budget_id, amount, spent, category_id=None, category_name=None, status="active", alert="80"):
    return BudgetView(
        budget_id=budget_id,
        category_id=category_id,
        category_name=category_name,
        status=status,
        budget_amount=Decimal(amount),
        spent_amount=Decimal(spent),
        figures=derive_figures(Decimal(amount), Decimal(spent), Decimal(alert)),
    )


def test_figures_under_budget():
    figures = derive_figures(Decimal("500.00"), Decimal("100.00"), Decimal("80"))

    assert figures.remaining_amount == Decimal("400.00")
    assert figures.spent_percentage == Decimal("20.00")
    assert figures.is_over_budget is False
    assert figures.is_alert_triggered is False


def test_figures_over_budget_clamps_remaining():
    figures = derive_figures(Decimal("100.00"), Decimal("150.00"), Decimal("80"))

    assert figures.remaining_amount == Decimal("0.00")
    assert figures.spent_percentage == Decimal("150.00")
    assert figures.is_over_budget is True
    assert figures.is_alert_triggered is True


def test_figures_alert_at_exact_threshold():
    figures = derive_figures(Decimal("100.00"), Decimal("80.00"), Decimal("80"))
    assert figures.is_alert_triggered is True
    assert figures.is_over_budget is False


def test_figures_alert_uses_unrounded_percentage():
    # 239.99 / 300 is 79.9967%, reported as 80.00 but still below the threshold
    figures = derive_figures(Decimal("300.00"), Decimal("239.99"), Decimal("80"))

    assert figures.spent_percentage == Decimal("80.00")
    assert figures.is_alert_triggered is False

    figures = derive_figures(Decimal("300.00"), Decimal("240.00"), Decimal("80"))
    assert figures.is_alert_triggered is True


def test_figures_zero_budget_has_zero_percentage():
    figures = derive_figures(Decimal("0.00"), Decimal("25.00"), Decimal("80"))

    assert figures.spent_percentage == Decimal("0.00")
    assert figures.is_over_budget is True
    assert figures.is_alert_triggered is False


def test_summarize_counts_and_totals():
    summary = summarize(
        [
            _view(1, "100.00", "50.00", category_id=7, category_name="Food"),
            _view(2, "200.00", "250.00", category_id=7, category_name="Food"),
            _view(3, "300.00", "0.00", status="paused"),
        ]
    )

    assert summary["total_budgets"] == 3
    assert summary["active_budgets"] == 2
    assert summary["total_budget_amount"] == Decimal("600.00")
    assert summary["total_spent"] == Decimal("300.00")
    assert summary["over_budget_count"] == 1
    assert summary["under_budget_count"] == 2
    assert summary["alert_triggered_count"] == 1
    # (50 + 125 + 0) / 3
    assert summary["average_spent_percentage"] == Decimal("58.33")


def test_summarize_groups_categories_in_first_seen_order():
    summary = summarize(
        [
            _view(1, "100.00", "10.00"),
            _view(2, "100.00", "30.00", category_id=3, category_name="Rent"),
            _view(3, "100.00", "50.00"),
        ]
    )

    performance = summary["categories_performance"]
    assert [p["category"] for p in performance] == [UNCATEGORIZED, "Rent"]
    assert performance[0]["budgets_count"] == 2
    assert performance[0]["total_spent"] == Decimal("60.00")
    assert performance[0]["average_performance"] == Decimal("30.00")
    assert performance[1]["category_id"] == 3


def test_summarize_empty():
    summary = summarize([])

    assert summary["total_budgets"] == 0
    assert summary["average_spent_percentage"] == Decimal("0.00")
    assert summary["categories_performance"] == []
