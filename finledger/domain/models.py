"""Domain models - enums and dataclasses shared by the engine and the API"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from finledger.domain.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class Direction(str, Enum):
    """Direction of a ledger entry relative to the account"""

    IN = "in"
    OUT = "out"


class ExpenseType(str, Enum):
    REGULAR = "regular"
    DPS_PAYMENT = "dps_payment"
    FDR_INVESTMENT = "fdr_investment"
    LOAN_PAYMENT = "loan_payment"


class SchemaKind(str, Enum):
    """Investment schema tables an expense may point at"""

    DPS = "dps"
    FDR = "fdr"
    LOAN = "loan"


class CauseKind(str, Enum):
    """Domain records that post ledger entries on their own behalf"""

    EXPENSE = "expense"
    INCOME = "income"


class PeriodType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class BudgetStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class InvestmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Each investment expense type pays into exactly one schema kind
PAYMENT_SCHEMA_KIND = {
    ExpenseType.DPS_PAYMENT: SchemaKind.DPS,
    ExpenseType.FDR_INVESTMENT: SchemaKind.FDR,
    ExpenseType.LOAN_PAYMENT: SchemaKind.LOAN,
}


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Coerce a raw value into an enum member, raising ValidationError on unknown values"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name) from e


@dataclass(frozen=True)
class SchemaRef:
    """Typed pointer at one investment schema row"""

    kind: SchemaKind
    id: int


@dataclass(frozen=True)
class CauseRef:
    """Typed pointer at the record a ledger entry was posted for"""

    kind: CauseKind
    id: int


@dataclass
class ExpenseDraft:
    """Field values for creating or replacing an expense"""

    title: str
    amount: Decimal
    expense_date: date
    description: Optional[str] = None
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    payment_method: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    expense_type: ExpenseType = ExpenseType.REGULAR
    related_type: Optional[SchemaKind] = None
    related_id: Optional[int] = None


@dataclass
class IncomeDraft:
    """Field values for creating or replacing an income"""

    title: str
    amount: Decimal
    income_date: date
    description: Optional[str] = None
    source: Optional[str] = None
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None


@dataclass
class BudgetFigures:
    """Read-time figures derived from a budget's amount and cached spend"""

    remaining_amount: Decimal
    spent_percentage: Decimal
    is_over_budget: bool
    is_alert_triggered: bool


@dataclass
class BudgetView:
    """Flattened budget used by analytics"""

    budget_id: int
    category_id: Optional[int]
    category_name: Optional[str]
    status: str
    budget_amount: Decimal
    spent_amount: Decimal
    figures: BudgetFigures


@dataclass
class Reconciliation:
    """Stored balance compared with the balance implied by the ledger"""

    account_id: int
    current_balance: Decimal
    expected_balance: Decimal

    @property
    def consistent(self) -> bool:
        return self.current_balance == self.expected_balance
