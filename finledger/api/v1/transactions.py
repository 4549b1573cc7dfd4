"""/v1/transactions - manual ledger transactions"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from finledger.api.dependencies import get_current_user_id, get_transaction_log
from finledger.api.v1.schemas import (
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
    TransactionSummary,
)
from finledger.domain.models import Direction
from finledger.engine.transaction_log import TransactionLog

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    type: Optional[Direction] = Query(None),
    bank_account_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    user_id: int = Depends(get_current_user_id),
    log: TransactionLog = Depends(get_transaction_log),
):
    """Live entries matching the filters, with totals over all of the user's entries"""
    entries = log.list(user_id, type, bank_account_id, date_from, date_to)
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(e) for e in entries],
        summary=TransactionSummary(**log.summary(user_id)),
    )


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    log: TransactionLog = Depends(get_transaction_log),
):
    entry = log.record(
        user_id,
        request_body.bank_account_id,
        request_body.type,
        request_body.amount,
        request_body.transaction_date,
        description=request_body.description,
    )
    return TransactionResponse.model_validate(entry)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    log: TransactionLog = Depends(get_transaction_log),
):
    return TransactionResponse.model_validate(log.get(user_id, transaction_id))


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    request_body: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    log: TransactionLog = Depends(get_transaction_log),
):
    """
    Reverse the old movement and post the new one.

    Returns:
        The replacement entry (a new id; the old entry stays reversed for audit)
    """
    replacement = log.update(
        user_id,
        transaction_id,
        request_body.bank_account_id,
        request_body.type,
        request_body.amount,
        request_body.transaction_date,
        description=request_body.description,
    )
    return TransactionResponse.model_validate(replacement)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    log: TransactionLog = Depends(get_transaction_log),
):
    log.delete(user_id, transaction_id)
    return Response(status_code=204)
