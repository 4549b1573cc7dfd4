"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finledger.api.main import create_app
from finledger.engine.account_ledger import AccountLedger
from finledger.infrastructure.database.models import Base, BankAccount, User
from finledger.infrastructure.database.repositories import UserRepository
from finledger.infrastructure.database.session import enable_sqlite_foreign_keys, get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def user(db: Session) -> User:
    user = UserRepository(db).create("Alice", "alice@example.com")
    db.commit()
    return user


@pytest.fixture
def other_user(db: Session) -> User:
    user = UserRepository(db).create("Bob", "bob@example.com")
    db.commit()
    return user


@pytest.fixture
def account(db: Session, user: User) -> BankAccount:
    """Savings account opened with 1000.00"""
    return AccountLedger(db).open_account(
        user.id,
        bank_name="First Bank",
        account_name="Main",
        account_number="0001",
        initial_amount=Decimal("1000.00"),
    )


@pytest.fixture
def headers(user: User) -> Dict[str, str]:
    return {"X-User-ID": str(user.id)}


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)
