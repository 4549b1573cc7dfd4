"""Investment schema arithmetic - maturity figures and payment progress"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from finledger.domain.exceptions import ValidationError
from finledger.domain.money import HUNDRED, ZERO, money, non_negative_amount
from finledger.utils.date_utils import add_months

MONTHS_PER_YEAR = Decimal(12)


def simple_interest_maturity(principal: Decimal, interest_rate: Decimal, tenure_months: int) -> Decimal:
    """
    Simple-interest maturity value.

    maturity = principal * (1 + rate/100 * tenure_months/12)

    Example:
        1200.00 at 6% for 12 months -> 1200 * 1.06 = 1272.00
    """
    factor = Decimal(1) + (Decimal(interest_rate) / HUNDRED) * (Decimal(tenure_months) / MONTHS_PER_YEAR)
    return money(Decimal(principal) * factor)


def next_payment_after(payment_date: date) -> date:
    """Installments fall due monthly"""
    return add_months(payment_date, 1)


def progress_percentage(paid: int, tenure_months: int) -> Decimal:
    if tenure_months <= 0:
        return ZERO
    return money(Decimal(paid) / Decimal(tenure_months) * HUNDRED)


def _required_amount(value: Any, field: str) -> Decimal:
    """Terms that a schema kind cannot be opened without"""
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    return non_negative_amount(value, field)


def _validate_terms(interest_rate: Any, tenure_months: Any, prefix: str = "") -> Decimal:
    rate = _required_amount(interest_rate, f"{prefix}interest_rate")
    if rate > HUNDRED:
        raise ValidationError("interest_rate must not exceed 100", field=f"{prefix}interest_rate")
    if not isinstance(tenure_months, int) or tenure_months < 1:
        raise ValidationError("tenure_months must be a positive integer", field=f"{prefix}tenure_months")
    return rate


def _validate_maturity_date(start_date: date, maturity_date: Optional[date], field: str) -> None:
    if maturity_date is not None and maturity_date <= start_date:
        raise ValidationError(f"{field} must be after the start date", field=field)


def dps_opening_figures(
    monthly_installment: Any,
    tenure_months: int,
    interest_rate: Any,
    start_date: date,
    maturity_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Derive the fields of a new recurring deposit.

    The maturity amount applies simple interest to the full installment total
    and is fixed at creation; later payments do not recompute it.
    """
    installment = _required_amount(monthly_installment, "monthly_installment")
    rate = _validate_terms(interest_rate, tenure_months)
    _validate_maturity_date(start_date, maturity_date, "maturity_date")

    return {
        "monthly_installment": installment,
        "tenure_months": tenure_months,
        "interest_rate": rate,
        "start_date": start_date,
        "maturity_date": maturity_date or add_months(start_date, tenure_months),
        "maturity_amount": simple_interest_maturity(installment * tenure_months, rate, tenure_months),
        "total_deposited": ZERO,
        "paid_installments": 0,
        "remaining_installments": tenure_months,
        "last_payment_date": None,
        "next_payment_date": next_payment_after(start_date),
    }


def fdr_opening_figures(
    principal_amount: Any,
    tenure_months: int,
    interest_rate: Any,
    start_date: date,
    maturity_date: Optional[date] = None,
) -> Dict[str, Any]:
    """Derive the fields of a new fixed deposit"""
    principal = _required_amount(principal_amount, "principal_amount")
    rate = _validate_terms(interest_rate, tenure_months)
    _validate_maturity_date(start_date, maturity_date, "maturity_date")

    return {
        "principal_amount": principal,
        "tenure_months": tenure_months,
        "interest_rate": rate,
        "start_date": start_date,
        "maturity_date": maturity_date or add_months(start_date, tenure_months),
        "maturity_amount": simple_interest_maturity(principal, rate, tenure_months),
        "interest_earned": ZERO,
    }


def loan_opening_figures(
    principal_amount: Any,
    tenure_months: int,
    interest_rate: Any,
    monthly_emi: Any,
    start_date: date,
) -> Dict[str, Any]:
    """Derive the fields of a new loan; nothing is paid yet so the whole principal is outstanding"""
    principal = _required_amount(principal_amount, "principal_amount")
    emi = _required_amount(monthly_emi, "monthly_emi")
    rate = _validate_terms(interest_rate, tenure_months)

    return {
        "principal_amount": principal,
        "tenure_months": tenure_months,
        "interest_rate": rate,
        "monthly_emi": emi,
        "start_date": start_date,
        "end_date": add_months(start_date, tenure_months),
        "total_amount_payable": money(emi * tenure_months),
        "amount_paid": ZERO,
        "outstanding_balance": principal,
        "paid_emis": 0,
        "remaining_emis": tenure_months,
        "last_payment_date": None,
        "next_payment_date": next_payment_after(start_date),
    }
