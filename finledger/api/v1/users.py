"""POST /v1/users - register the account holder records other rows hang off"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finledger.api.v1.schemas import UserCreate, UserResponse
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.repositories import UserRepository
from finledger.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request_body: UserCreate, db: Session = Depends(get_db)):
    """Stand-in for the external identity provider"""
    users = UserRepository(db)
    if users.get_by_email(request_body.email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    with unit_of_work(db):
        user = users.create(request_body.name, request_body.email)
    return UserResponse.model_validate(user)
