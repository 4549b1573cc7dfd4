"""GET /v1/dashboard - balances and this month's activity"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finledger.api.dependencies import get_current_user_id
from finledger.api.v1.schemas import DashboardResponse
from finledger.engine.dashboard import build_dashboard
from finledger.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return DashboardResponse(**build_dashboard(db, user_id, date.today()))
