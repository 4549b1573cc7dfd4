"""/v1/categories - user-owned categories for expenses, incomes and budgets"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finledger.api.dependencies import get_current_user_id
from finledger.api.v1.schemas import CategoryCreate, CategoryResponse
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.repositories import CategoryRepository
from finledger.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    request_body: CategoryCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db):
        category = CategoryRepository(db).create(
            user_id, request_body.name, request_body.type, request_body.color
        )
    return CategoryResponse.model_validate(category)


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    type: Optional[Literal["income", "expense"]] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [CategoryResponse.model_validate(c) for c in CategoryRepository(db).list_for_user(user_id, type)]
