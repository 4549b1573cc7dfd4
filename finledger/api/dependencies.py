"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from finledger.engine.account_ledger import AccountLedger
from finledger.engine.budget_tracker import BudgetTracker
from finledger.engine.events import ExpenseRecorder, IncomeRecorder
from finledger.engine.investments import InvestmentService
from finledger.engine.transaction_log import TransactionLog
from finledger.infrastructure.database.repositories import UserRepository
from finledger.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(
    x_user_id: Optional[int] = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db),
) -> int:
    """
    Acting user, as asserted by the upstream authentication layer.

    Every engine call receives this id explicitly; nothing reads it from
    ambient request state.
    """
    if x_user_id is None or UserRepository(db).get(x_user_id) is None:
        raise HTTPException(status_code=401, detail="Unknown or missing user")
    return x_user_id


def get_account_ledger(db: Session = Depends(get_db)) -> AccountLedger:
    return AccountLedger(db)


def get_transaction_log(db: Session = Depends(get_db)) -> TransactionLog:
    return TransactionLog(db)


def get_budget_tracker(db: Session = Depends(get_db)) -> BudgetTracker:
    return BudgetTracker(db)


def get_expense_recorder(db: Session = Depends(get_db)) -> ExpenseRecorder:
    return ExpenseRecorder(db)


def get_income_recorder(db: Session = Depends(get_db)) -> IncomeRecorder:
    return IncomeRecorder(db)


def get_investment_service(db: Session = Depends(get_db)) -> InvestmentService:
    return InvestmentService(db)
