"""/v1/budgets - budgets refreshed from expenses on every read"""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response

from finledger.api.dependencies import get_budget_tracker, get_current_user_id
from finledger.api.v1.schemas import (
    BudgetAnalyticsResponse,
    BudgetCategory,
    BudgetCreate,
    BudgetListResponse,
    BudgetResponse,
    BudgetSummary,
    BudgetUpdate,
)
from finledger.domain.money import money
from finledger.engine.budget_tracker import BudgetTracker
from finledger.infrastructure.database.models import Budget

router = APIRouter()


def to_response(tracker: BudgetTracker, budget: Budget) -> BudgetResponse:
    """Serialize a freshly recomputed budget with its read-time figures"""
    figures = tracker.figures(budget)
    return BudgetResponse(
        id=budget.id,
        budget_name=budget.budget_name,
        category=BudgetCategory.model_validate(budget.category) if budget.category else None,
        budget_amount=money(budget.budget_amount),
        spent_amount=money(budget.spent_amount),
        remaining_amount=figures.remaining_amount,
        spent_percentage=figures.spent_percentage,
        period_type=budget.period_type,
        start_date=budget.start_date,
        end_date=budget.end_date,
        alert_percentage=money(budget.alert_percentage),
        status=budget.status,
        is_over_budget=figures.is_over_budget,
        is_alert_triggered=figures.is_alert_triggered,
        description=budget.description,
    )


@router.get("/budgets/analytics", response_model=BudgetAnalyticsResponse)
def budget_analytics(
    period: Literal["current", "last_month", "last_3_months"] = Query("current"),
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    return BudgetAnalyticsResponse(**tracker.analytics(user_id, period, date.today()))


@router.get("/budgets", response_model=BudgetListResponse)
def list_budgets(
    status: Literal["active", "paused", "completed", "all"] = Query("active"),
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    """Recompute spent_amount for every listed budget, then serialize"""
    budgets = tracker.list(user_id, status)
    return BudgetListResponse(
        budgets=[to_response(tracker, b) for b in budgets],
        summary=BudgetSummary(**tracker.summarize(budgets)),
    )


@router.post("/budgets", response_model=BudgetResponse, status_code=201)
def create_budget(
    request_body: BudgetCreate,
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    budget = tracker.create(user_id, **request_body.model_dump())
    return to_response(tracker, budget)


@router.get("/budgets/{budget_id}", response_model=BudgetResponse)
def get_budget(
    budget_id: int,
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    return to_response(tracker, tracker.get(user_id, budget_id))


@router.put("/budgets/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: int,
    request_body: BudgetUpdate,
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    budget = tracker.update(user_id, budget_id, **request_body.model_dump(exclude_unset=True))
    return to_response(tracker, budget)


@router.delete("/budgets/{budget_id}", status_code=204)
def delete_budget(
    budget_id: int,
    user_id: int = Depends(get_current_user_id),
    tracker: BudgetTracker = Depends(get_budget_tracker),
):
    tracker.delete(user_id, budget_id)
    return Response(status_code=204)
