"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from finledger.domain.models import (
    BudgetStatus,
    Direction,
    ExpenseType,
    InvestmentStatus,
    PeriodType,
    SchemaKind,
)


class ORMModel(BaseModel):
    """Base for responses built straight from ORM rows"""

    model_config = ConfigDict(from_attributes=True)


# Users and categories


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)


class UserResponse(ORMModel):
    id: int
    name: str
    email: str


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["income", "expense"] = "expense"
    color: Optional[str] = Field(None, max_length=20)


class CategoryResponse(ORMModel):
    id: int
    name: str
    type: str
    color: Optional[str] = None


# Bank accounts


class BankAccountCreate(BaseModel):
    """Request body for POST /bank-accounts"""

    bank_name: str = Field(..., min_length=1, max_length=255)
    account_name: str = Field(..., min_length=1, max_length=255)
    account_number: str = Field(..., min_length=1, max_length=50)
    account_type: str = Field("savings", max_length=50)
    initial_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)


class BankAccountResponse(ORMModel):
    id: int
    bank_name: str
    account_name: str
    account_number: str
    account_type: str
    initial_amount: Decimal
    current_balance: Decimal
    available_balance: Decimal
    is_active: bool


class BankAccountListResponse(BaseModel):
    bank_accounts: List[BankAccountResponse]
    total_balance: Decimal


class ReconcileResponse(BaseModel):
    """Stored balance vs the balance implied by the ledger"""

    account_id: int
    current_balance: Decimal
    expected_balance: Decimal
    consistent: bool


# Ledger transactions


class TransactionCreate(BaseModel):
    """Request body for POST/PUT /transactions"""

    bank_account_id: int
    type: Direction
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    transaction_date: date
    description: Optional[str] = Field(None, max_length=255)


class TransactionResponse(ORMModel):
    id: int
    bank_account_id: int
    type: str
    amount: Decimal
    description: Optional[str] = None
    transaction_date: date
    cause_type: Optional[str] = None
    cause_id: Optional[int] = None


class TransactionSummary(BaseModel):
    total_transactions: int
    total_in: Decimal
    total_out: Decimal
    net_balance: Decimal


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    summary: TransactionSummary


# Expenses and incomes


class ExpenseCreate(BaseModel):
    """Request body for POST/PUT /expenses"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    expense_date: date
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    payment_method: Optional[str] = Field(None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    expense_type: ExpenseType = ExpenseType.REGULAR
    related_type: Optional[SchemaKind] = None
    related_id: Optional[int] = None


class ExpenseResponse(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    amount: Decimal
    expense_date: date
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    payment_method: Optional[str] = None
    tags: Optional[List[str]] = None
    expense_type: str
    related_type: Optional[str] = None
    related_id: Optional[int] = None


class CategoryTotal(BaseModel):
    category_id: int
    name: str
    total: Decimal
    count: int


class ExpenseStatsResponse(BaseModel):
    start_date: date
    end_date: date
    total_amount: Decimal
    total_count: int
    average_amount: Decimal
    by_category: List[CategoryTotal]


class IncomeCreate(BaseModel):
    """Request body for POST/PUT /incomes"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    source: Optional[str] = Field(None, max_length=255)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    income_date: date
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None


class IncomeResponse(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    source: Optional[str] = None
    amount: Decimal
    income_date: date
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None


class IncomeStatsResponse(BaseModel):
    start_date: date
    end_date: date
    total_amount: Decimal
    total_count: int
    average_amount: Decimal


# Budgets


class BudgetCreate(BaseModel):
    """Request body for POST /budgets"""

    budget_name: str = Field(..., min_length=1, max_length=255)
    category_id: Optional[int] = None
    budget_amount: Decimal = Field(..., ge=0, decimal_places=2)
    period_type: PeriodType
    start_date: date
    end_date: date
    alert_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None


class BudgetUpdate(BaseModel):
    """Request body for PUT /budgets/{id}; only sent fields change"""

    budget_name: Optional[str] = Field(None, min_length=1, max_length=255)
    category_id: Optional[int] = None
    budget_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    period_type: Optional[PeriodType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    status: Optional[BudgetStatus] = None
    description: Optional[str] = None


class BudgetCategory(ORMModel):
    id: int
    name: str
    color: Optional[str] = None


class BudgetResponse(BaseModel):
    id: int
    budget_name: str
    category: Optional[BudgetCategory] = None
    budget_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    spent_percentage: Decimal
    period_type: str
    start_date: date
    end_date: date
    alert_percentage: Decimal
    status: str
    is_over_budget: bool
    is_alert_triggered: bool
    description: Optional[str] = None


class CategoryPerformance(BaseModel):
    category_id: Optional[int] = None
    category: str
    budgets_count: int
    total_budget: Decimal
    total_spent: Decimal
    average_performance: Decimal


class BudgetSummary(BaseModel):
    total_budgets: int
    active_budgets: int
    total_budget_amount: Decimal
    total_spent: Decimal
    average_spent_percentage: Decimal
    over_budget_count: int
    under_budget_count: int
    alert_triggered_count: int
    categories_performance: List[CategoryPerformance]


class BudgetListResponse(BaseModel):
    budgets: List[BudgetResponse]
    summary: BudgetSummary


class AnalyticsPeriod(BaseModel):
    name: str
    start_date: date
    end_date: date


class BudgetAnalyticsResponse(BudgetSummary):
    period: AnalyticsPeriod


# Investments


class InvestmentCreate(BaseModel):
    """
    Request body for POST /investments.

    Required terms depend on type:
    - dps: monthly_installment
    - fdr: principal_amount
    - loan: principal_amount, monthly_emi
    """

    type: SchemaKind
    name: str = Field(..., min_length=1, max_length=255)
    number: Optional[str] = Field(None, max_length=100)
    bank_account_id: Optional[int] = None
    status: Optional[InvestmentStatus] = None
    tenure_months: int = Field(..., ge=1)
    interest_rate: Decimal = Field(..., ge=0, le=100)
    start_date: date
    maturity_date: Optional[date] = None
    monthly_installment: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    principal_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    monthly_emi: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    loan_type: Optional[str] = Field(None, max_length=100)


class InvestmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[InvestmentStatus] = None
    bank_account_id: Optional[int] = None


class DpsResponse(ORMModel):
    type: Literal["dps"] = "dps"
    id: int
    dps_name: str
    dps_number: Optional[str] = None
    bank_account_id: Optional[int] = None
    monthly_installment: Decimal
    tenure_months: int
    interest_rate: Decimal
    start_date: date
    maturity_date: date
    total_deposited: Decimal
    maturity_amount: Decimal
    paid_installments: int
    remaining_installments: int
    status: str
    last_payment_date: Optional[date] = None
    next_payment_date: Optional[date] = None
    progress_percentage: Optional[Decimal] = None


class FdrResponse(ORMModel):
    type: Literal["fdr"] = "fdr"
    id: int
    fdr_name: str
    fdr_number: Optional[str] = None
    bank_account_id: Optional[int] = None
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: int
    start_date: date
    maturity_date: date
    maturity_amount: Decimal
    interest_earned: Decimal
    status: str


class LoanResponse(ORMModel):
    type: Literal["loan"] = "loan"
    id: int
    loan_name: str
    loan_number: Optional[str] = None
    loan_type: str
    bank_account_id: Optional[int] = None
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: int
    monthly_emi: Decimal
    start_date: date
    end_date: date
    total_amount_payable: Decimal
    amount_paid: Decimal
    outstanding_balance: Decimal
    paid_emis: int
    remaining_emis: int
    status: str
    last_payment_date: Optional[date] = None
    next_payment_date: Optional[date] = None
    progress_percentage: Optional[Decimal] = None


class InvestmentListResponse(BaseModel):
    dps: List[DpsResponse] = Field(default_factory=list)
    fdr: List[FdrResponse] = Field(default_factory=list)
    loan: List[LoanResponse] = Field(default_factory=list)


class InvestmentStatsResponse(BaseModel):
    total_count: int
    by_type: Dict[str, int]
    total_amounts: Dict[str, Decimal]
    by_status: Dict[str, int]


# Dashboard


class ExpenseBreakdown(BaseModel):
    regular: Decimal
    dps_payments: Decimal
    fdr_investments: Decimal
    loan_payments: Decimal


class InvestmentKindOverview(BaseModel):
    count: int
    total_amount: Decimal


class InvestmentOverview(BaseModel):
    """Active schemas only; loans report their outstanding balance"""

    dps: InvestmentKindOverview
    fdr: InvestmentKindOverview
    loan: InvestmentKindOverview


class BudgetOverview(BaseModel):
    total_budgets: int
    total_budget_amount: Decimal
    total_spent: Decimal


class MonthlyTrend(BaseModel):
    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal


class TopCategory(BaseModel):
    category_id: int
    name: str
    color: Optional[str] = None
    total: Decimal


class DashboardResponse(BaseModel):
    total_balance: Decimal
    net_change: Decimal
    month_start: date
    month_end: date
    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    active_accounts: int
    expense_breakdown: ExpenseBreakdown
    investment_overview: InvestmentOverview
    budget_overview: BudgetOverview
    monthly_trends: List[MonthlyTrend]
    top_expense_categories: List[TopCategory]
    top_income_categories: List[TopCategory]
