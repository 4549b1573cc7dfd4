"""SQLAlchemy ORM models for the ledger tables"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def Money(**kwargs):
    """Fixed-point money column returned as Decimal"""
    return Column(Numeric(14, 2, asdecimal=True), **kwargs)


class User(Base):
    """Account holder; every other row is owned by exactly one user"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Category(Base):
    """User-defined grouping for expenses, incomes and budgets"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default="expense")
    color = Column(String(20), nullable=True)


class BankAccount(Base):
    """Bank account whose balance moves only through ledger entries"""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_name = Column(String(255), nullable=False)
    account_name = Column(String(255), nullable=False)
    account_number = Column(String(50), nullable=False)
    account_type = Column(String(50), nullable=False, default="savings")
    initial_amount = Money(nullable=False, default=0)
    current_balance = Money(nullable=False, default=0)
    available_balance = Money(nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entries = relationship("LedgerEntry", back_populates="account")


class LedgerEntry(Base):
    """
    One signed movement against a bank account.

    Rows are never edited: a correction reverses the entry (``reversed_at``)
    and posts a replacement, linked through ``superseded_by_id``.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False, index=True)
    type = Column(String(3), nullable=False)  # in | out
    amount = Money(nullable=False)
    description = Column(String(255), nullable=True)
    transaction_date = Column(Date, nullable=False)
    cause_type = Column(String(20), nullable=True)  # expense | income
    cause_id = Column(Integer, nullable=True)
    reversed_at = Column(DateTime(timezone=True), nullable=True)
    superseded_by_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    account = relationship("BankAccount", back_populates="entries")


class Budget(Base):
    """Spending limit over a date window; spent_amount is a read-time cache"""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    budget_name = Column(String(255), nullable=False)
    budget_amount = Money(nullable=False)
    spent_amount = Money(nullable=False, default=0)
    period_type = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    alert_percentage = Money(nullable=False, default=80)
    status = Column(String(20), nullable=False, default="active")
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("Category")


class Expense(Base):
    """Money spent; investment expenses point at the schema they pay into"""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Money(nullable=False)
    expense_date = Column(Date, nullable=False, index=True)
    payment_method = Column(String(100), nullable=True)
    tags = Column(JSON, nullable=True)
    expense_type = Column(String(20), nullable=False, default="regular")
    related_type = Column(String(10), nullable=True)  # dps | fdr | loan
    related_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("Category")


class Income(Base):
    """Money received"""

    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    source = Column(String(255), nullable=True)
    amount = Money(nullable=False)
    income_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("Category")


class Dps(Base):
    """Recurring deposit: fixed monthly installments over a tenure"""

    __tablename__ = "dps"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    dps_name = Column(String(255), nullable=False)
    dps_number = Column(String(100), nullable=True)
    monthly_installment = Money(nullable=False)
    tenure_months = Column(Integer, nullable=False)
    interest_rate = Money(nullable=False)
    start_date = Column(Date, nullable=False)
    maturity_date = Column(Date, nullable=False)
    total_deposited = Money(nullable=False, default=0)
    maturity_amount = Money(nullable=False)
    paid_installments = Column(Integer, nullable=False, default=0)
    remaining_installments = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    last_payment_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Fdr(Base):
    """Fixed deposit: lump-sum principal, topped up by further investments"""

    __tablename__ = "fdrs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    fdr_name = Column(String(255), nullable=False)
    fdr_number = Column(String(100), nullable=True)
    principal_amount = Money(nullable=False)
    interest_rate = Money(nullable=False)
    tenure_months = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    maturity_date = Column(Date, nullable=False)
    maturity_amount = Money(nullable=False)
    interest_earned = Money(nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Loan(Base):
    """Loan repaid in monthly EMIs"""

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    loan_name = Column(String(255), nullable=False)
    loan_number = Column(String(100), nullable=True)
    loan_type = Column(String(100), nullable=False, default="personal")
    principal_amount = Money(nullable=False)
    interest_rate = Money(nullable=False)
    tenure_months = Column(Integer, nullable=False)
    monthly_emi = Money(nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_amount_payable = Money(nullable=False)
    amount_paid = Money(nullable=False, default=0)
    outstanding_balance = Money(nullable=False)
    paid_emis = Column(Integer, nullable=False, default=0)
    remaining_emis = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    last_payment_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
