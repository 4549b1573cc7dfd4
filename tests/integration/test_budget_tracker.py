"""Integration tests for budget spend tracking"""

import pytest
from datetime import date
from decimal import Decimal
from finledger.domain.exceptions import ConsistencyError, NotFoundError, ValidationError
from finledger.domain.models import ExpenseDraft
from finledger.engine.budget_tracker import BudgetTracker
from finledger.engine.events import ExpenseRecorder
from finledger.infrastructure.database.repositories import CategoryRepository


@pytest.fixture
def food(db, user):
    category = CategoryRepository(db).create(user.id, "Food", "expense", "#ff0000")
    db.commit()
    return category


@pytest.fixture
def rent(db, user):
    category = CategoryRepository(db).create(user.id, "Rent", "expense", None)
    db.commit()
    return category


def _spend(db, user_id, amount, day, category_id=None):
    return ExpenseRecorder(db).create(
        user_id,
        ExpenseDraft(title="Spend", amount=Decimal(amount), expense_date=day, category_id=category_id),
    )


def _march_budget(tracker, user_id, category_id=None, amount="500.00", **extra):
    return tracker.create(
        user_id,
        budget_name="March",
        category_id=category_id,
        budget_amount=Decimal(amount),
        period_type="monthly",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
        **extra,
    )


def test_create_defaults_alert_and_status(db, user):
    budget = _march_budget(BudgetTracker(db), user.id)

    assert budget.alert_percentage == Decimal("80.00")
    assert budget.status == "active"
    assert budget.spent_amount == Decimal("0.00")


def test_spent_counts_only_category_and_window(db, user, food, rent):
    _spend(db, user.id, "100.00", date(2024, 3, 1), food.id)
    _spend(db, user.id, "50.00", date(2024, 3, 31), food.id)
    _spend(db, user.id, "70.00", date(2024, 4, 1), food.id)
    _spend(db, user.id, "999.00", date(2024, 3, 10), rent.id)

    tracker = BudgetTracker(db)
    budget = _march_budget(tracker, user.id, food.id)

    assert budget.spent_amount == Decimal("150.00")


def test_budget_without_category_covers_all_expenses(db, user, food, rent):
    _spend(db, user.id, "10.00", date(2024, 3, 5), food.id)
    _spend(db, user.id, "20.00", date(2024, 3, 6), rent.id)
    _spend(db, user.id, "30.00", date(2024, 3, 7))

    budget = _march_budget(BudgetTracker(db), user.id)

    assert budget.spent_amount == Decimal("60.00")


def test_recompute_is_idempotent(db, user, food):
    _spend(db, user.id, "120.00", date(2024, 3, 5), food.id)
    tracker = BudgetTracker(db)
    budget = _march_budget(tracker, user.id, food.id)

    first = tracker.recompute_spent(budget).spent_amount
    second = tracker.recompute_spent(budget).spent_amount

    assert first == second == Decimal("120.00")


def test_reads_pick_up_later_expenses(db, user, food):
    tracker = BudgetTracker(db)
    budget = _march_budget(tracker, user.id, food.id, amount="100.00")

    _spend(db, user.id, "85.00", date(2024, 3, 20), food.id)
    refreshed = tracker.get(user.id, budget.id)
    figures = tracker.figures(refreshed)

    assert refreshed.spent_amount == Decimal("85.00")
    assert figures.spent_percentage == Decimal("85.00")
    assert figures.is_alert_triggered is True
    assert figures.is_over_budget is False


def test_update_recomputes_with_new_window(db, user, food):
    _spend(db, user.id, "40.00", date(2024, 2, 15), food.id)
    tracker = BudgetTracker(db)
    budget = _march_budget(tracker, user.id, food.id)
    assert budget.spent_amount == Decimal("0.00")

    updated = tracker.update(user.id, budget.id, start_date=date(2024, 2, 1))

    assert updated.spent_amount == Decimal("40.00")


def test_list_filters_by_status(db, user):
    tracker = BudgetTracker(db)
    _march_budget(tracker, user.id)
    _march_budget(tracker, user.id, status="paused")

    assert len(tracker.list(user.id)) == 1
    assert len(tracker.list(user.id, "paused")) == 1
    assert len(tracker.list(user.id, "all")) == 2


def test_analytics_over_period(db, user, food):
    _spend(db, user.id, "450.00", date(2024, 3, 5), food.id)
    tracker = BudgetTracker(db)
    _march_budget(tracker, user.id, food.id)
    tracker.create(
        user.id,
        budget_name="January",
        budget_amount=Decimal("100.00"),
        period_type="monthly",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )

    analytics = tracker.analytics(user.id, "current", date(2024, 3, 15))

    assert analytics["total_budgets"] == 1
    assert analytics["alert_triggered_count"] == 1
    assert analytics["period"]["start_date"] == date(2024, 3, 1)
    assert analytics["categories_performance"][0]["category"] == "Food"


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"budget_name": ""}, "budget_name"),
        ({"period_type": "weekly"}, "period_type"),
        ({"alert_percentage": Decimal("120")}, "alert_percentage"),
        ({"end_date": date(2024, 2, 1)}, "end_date"),
    ],
)
def test_create_validation(db, user, overrides, field):
    fields = {
        "budget_name": "March",
        "budget_amount": Decimal("100.00"),
        "period_type": "monthly",
        "start_date": date(2024, 3, 1),
        "end_date": date(2024, 3, 31),
    }
    fields.update(overrides)

    with pytest.raises(ValidationError) as exc_info:
        BudgetTracker(db).create(user.id, **fields)
    assert exc_info.value.field == field


def test_category_of_another_user_is_inconsistent(db, user, other_user):
    theirs = CategoryRepository(db).create(other_user.id, "Theirs", "expense", None)
    db.commit()

    with pytest.raises(ConsistencyError):
        _march_budget(BudgetTracker(db), user.id, theirs.id)


def test_missing_category_is_not_found(db, user):
    with pytest.raises(NotFoundError):
        _march_budget(BudgetTracker(db), user.id, 4242)


def test_delete(db, user):
    tracker = BudgetTracker(db)
    budget = _march_budget(tracker, user.id)

    tracker.delete(user.id, budget.id)

    with pytest.raises(NotFoundError):
        tracker.get(user.id, budget.id)
