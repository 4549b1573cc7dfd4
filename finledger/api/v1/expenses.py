"""/v1/expenses - expenses, their ledger entries and investment payments"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from finledger.api.dependencies import get_current_user_id, get_expense_recorder
from finledger.api.v1.schemas import ExpenseCreate, ExpenseResponse, ExpenseStatsResponse
from finledger.domain.models import ExpenseDraft, ExpenseType
from finledger.engine.events import ExpenseRecorder
from finledger.utils.date_utils import month_bounds

router = APIRouter()


def _draft(body: ExpenseCreate) -> ExpenseDraft:
    return ExpenseDraft(**body.model_dump())


@router.get("/expenses/stats", response_model=ExpenseStatsResponse)
def expense_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    """Totals for a date range; defaults to the current month"""
    if start_date is None or end_date is None:
        start_date, end_date = month_bounds(date.today())
    return ExpenseStatsResponse(**recorder.stats(user_id, start_date, end_date))


@router.get("/expenses", response_model=List[ExpenseResponse])
def list_expenses(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    category_id: Optional[int] = Query(None),
    expense_type: Optional[ExpenseType] = Query(None),
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    expenses = recorder.list(
        user_id, start=start_date, end=end_date, category_id=category_id, expense_type=expense_type
    )
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.post("/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    request_body: ExpenseCreate,
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    """
    Record an expense.

    With a bank account the account is debited; with a non-regular
    expense_type the referenced DPS/FDR/loan is updated. Both happen in the
    same transaction as the insert.
    """
    expense = recorder.create(user_id, _draft(request_body))
    return ExpenseResponse.model_validate(expense)


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    return ExpenseResponse.model_validate(recorder.get(user_id, expense_id))


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    request_body: ExpenseCreate,
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    expense = recorder.update(user_id, expense_id, _draft(request_body))
    return ExpenseResponse.model_validate(expense)


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(
    expense_id: int,
    user_id: int = Depends(get_current_user_id),
    recorder: ExpenseRecorder = Depends(get_expense_recorder),
):
    recorder.delete(user_id, expense_id)
    return Response(status_code=204)
