"""/v1/incomes - incomes and the ledger entries they credit"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from finledger.api.dependencies import get_current_user_id, get_income_recorder
from finledger.api.v1.schemas import IncomeCreate, IncomeResponse, IncomeStatsResponse
from finledger.domain.models import IncomeDraft
from finledger.engine.events import IncomeRecorder
from finledger.utils.date_utils import month_bounds

router = APIRouter()


@router.get("/incomes/stats", response_model=IncomeStatsResponse)
def income_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    if start_date is None or end_date is None:
        start_date, end_date = month_bounds(date.today())
    return IncomeStatsResponse(**recorder.stats(user_id, start_date, end_date))


@router.get("/incomes", response_model=List[IncomeResponse])
def list_incomes(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    category_id: Optional[int] = Query(None),
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    incomes = recorder.list(user_id, start=start_date, end=end_date, category_id=category_id)
    return [IncomeResponse.model_validate(i) for i in incomes]


@router.post("/incomes", response_model=IncomeResponse, status_code=201)
def create_income(
    request_body: IncomeCreate,
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    income = recorder.create(user_id, IncomeDraft(**request_body.model_dump()))
    return IncomeResponse.model_validate(income)


@router.get("/incomes/{income_id}", response_model=IncomeResponse)
def get_income(
    income_id: int,
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    return IncomeResponse.model_validate(recorder.get(user_id, income_id))


@router.put("/incomes/{income_id}", response_model=IncomeResponse)
def update_income(
    income_id: int,
    request_body: IncomeCreate,
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    income = recorder.update(user_id, income_id, IncomeDraft(**request_body.model_dump()))
    return IncomeResponse.model_validate(income)


@router.delete("/incomes/{income_id}", status_code=204)
def delete_income(
    income_id: int,
    user_id: int = Depends(get_current_user_id),
    recorder: IncomeRecorder = Depends(get_income_recorder),
):
    recorder.delete(user_id, income_id)
    return Response(status_code=204)
