"""/v1/bank-accounts - accounts and ledger integrity checks"""

from fastapi import APIRouter, Depends

from finledger.api.dependencies import get_account_ledger, get_current_user_id
from finledger.api.v1.schemas import (
    BankAccountCreate,
    BankAccountListResponse,
    BankAccountResponse,
    ReconcileResponse,
)
from finledger.domain.money import ZERO, money
from finledger.engine.account_ledger import AccountLedger

router = APIRouter()


@router.post("/bank-accounts", response_model=BankAccountResponse, status_code=201)
def create_bank_account(
    request_body: BankAccountCreate,
    user_id: int = Depends(get_current_user_id),
    ledger: AccountLedger = Depends(get_account_ledger),
):
    """Open an account; both balances start at the initial amount"""
    account = ledger.open_account(
        user_id,
        bank_name=request_body.bank_name,
        account_name=request_body.account_name,
        account_number=request_body.account_number,
        account_type=request_body.account_type,
        initial_amount=request_body.initial_amount,
    )
    return BankAccountResponse.model_validate(account)


@router.get("/bank-accounts", response_model=BankAccountListResponse)
def list_bank_accounts(
    user_id: int = Depends(get_current_user_id),
    ledger: AccountLedger = Depends(get_account_ledger),
):
    accounts = ledger.accounts.list_for_user(user_id, active_only=True)
    total = money(sum((money(a.current_balance) for a in accounts), ZERO))
    return BankAccountListResponse(
        bank_accounts=[BankAccountResponse.model_validate(a) for a in accounts],
        total_balance=total,
    )


@router.get("/bank-accounts/{account_id}", response_model=BankAccountResponse)
def get_bank_account(
    account_id: int,
    user_id: int = Depends(get_current_user_id),
    ledger: AccountLedger = Depends(get_account_ledger),
):
    return BankAccountResponse.model_validate(ledger.get_account(user_id, account_id))


@router.get("/bank-accounts/{account_id}/reconcile", response_model=ReconcileResponse)
def reconcile_bank_account(
    account_id: int,
    user_id: int = Depends(get_current_user_id),
    ledger: AccountLedger = Depends(get_account_ledger),
):
    """
    Compare the stored balance with initial_amount plus unreversed entries.

    Returns:
        consistent=False means some write bypassed the ledger
    """
    result = ledger.reconcile(user_id, account_id)
    return ReconcileResponse(
        account_id=result.account_id,
        current_balance=result.current_balance,
        expected_balance=result.expected_balance,
        consistent=result.consistent,
    )
