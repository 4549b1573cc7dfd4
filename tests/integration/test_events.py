"""Integration tests for expense and income records posting ledger entries"""

import pytest
from datetime import date
from decimal import Decimal
from finledger.domain.exceptions import ConsistencyError, ValidationError
from finledger.domain.models import ExpenseDraft, ExpenseType, IncomeDraft, SchemaKind
from finledger.engine.account_ledger import AccountLedger
from finledger.engine.budget_tracker import BudgetTracker
from finledger.engine.dashboard import build_dashboard
from finledger.engine.events import ExpenseRecorder, IncomeRecorder
from finledger.engine.investments import InvestmentService
from finledger.engine.transaction_log import TransactionLog
from finledger.infrastructure.database.repositories import CategoryRepository


def _expense(amount="25.00", day=date(2024, 3, 3), **extra):
    return ExpenseDraft(title="Coffee beans", amount=Decimal(amount), expense_date=day, **extra)


def _income(amount="2000.00", day=date(2024, 3, 1), **extra):
    return IncomeDraft(title="Salary", amount=Decimal(amount), income_date=day, source="Employer", **extra)


def test_expense_with_account_debits_it(db, user, account):
    expense = ExpenseRecorder(db).create(user.id, _expense(bank_account_id=account.id))

    db.refresh(account)
    [entry] = TransactionLog(db).list(user.id)
    assert account.current_balance == Decimal("975.00")
    assert entry.type == "out"
    assert entry.cause_type == "expense"
    assert entry.cause_id == expense.id


def test_expense_without_account_leaves_balances_alone(db, user, account):
    ExpenseRecorder(db).create(user.id, _expense())

    db.refresh(account)
    assert account.current_balance == Decimal("1000.00")
    assert TransactionLog(db).list(user.id) == []


def test_expense_update_moves_amount_and_account(db, user, account):
    spare = AccountLedger(db).open_account(user.id, "Other", "Spare", "0009", Decimal("100.00"))
    recorder = ExpenseRecorder(db)
    expense = recorder.create(user.id, _expense(bank_account_id=account.id))

    recorder.update(user.id, expense.id, _expense(amount="40.00", bank_account_id=spare.id))

    db.refresh(account)
    db.refresh(spare)
    assert account.current_balance == Decimal("1000.00")
    assert spare.current_balance == Decimal("60.00")
    assert AccountLedger(db).reconcile(user.id, spare.id).consistent is True


def test_expense_delete_reverses_entry(db, user, account):
    recorder = ExpenseRecorder(db)
    expense = recorder.create(user.id, _expense(bank_account_id=account.id))

    recorder.delete(user.id, expense.id)

    db.refresh(account)
    assert account.current_balance == Decimal("1000.00")
    assert recorder.list(user.id) == []
    assert AccountLedger(db).reconcile(user.id, account.id).consistent is True


def test_regular_expense_must_not_reference_a_schema(db, user):
    with pytest.raises(ValidationError) as exc_info:
        ExpenseRecorder(db).create(user.id, _expense(related_type=SchemaKind.DPS, related_id=1))
    assert exc_info.value.field == "related_id"


def test_investment_expense_requires_related_id(db, user):
    with pytest.raises(ValidationError) as exc_info:
        ExpenseRecorder(db).create(user.id, _expense(expense_type=ExpenseType.LOAN_PAYMENT))
    assert exc_info.value.field == "related_id"


def test_expense_with_another_users_account_is_inconsistent(db, user, other_user, account):
    with pytest.raises(ConsistencyError):
        ExpenseRecorder(db).create(other_user.id, _expense(bank_account_id=account.id))

    db.refresh(account)
    assert account.current_balance == Decimal("1000.00")


def test_expense_stats_group_by_category(db, user):
    categories = CategoryRepository(db)
    food = categories.create(user.id, "Food", "expense", None)
    fuel = categories.create(user.id, "Fuel", "expense", None)
    db.commit()
    recorder = ExpenseRecorder(db)
    recorder.create(user.id, _expense("10.00", category_id=food.id))
    recorder.create(user.id, _expense("20.00", category_id=food.id))
    recorder.create(user.id, _expense("45.00", category_id=fuel.id))
    recorder.create(user.id, _expense("5.00"))

    stats = recorder.stats(user.id, date(2024, 3, 1), date(2024, 3, 31))

    assert stats["total_amount"] == Decimal("80.00")
    assert stats["total_count"] == 4
    assert stats["average_amount"] == Decimal("20.00")
    assert [c["name"] for c in stats["by_category"]] == ["Fuel", "Food"]
    assert stats["by_category"][1]["count"] == 2


def test_income_with_account_credits_it(db, user, account):
    recorder = IncomeRecorder(db)
    income = recorder.create(user.id, _income(bank_account_id=account.id))

    db.refresh(account)
    assert account.current_balance == Decimal("3000.00")

    recorder.update(user.id, income.id, _income(amount="1500.00", bank_account_id=account.id))
    db.refresh(account)
    assert account.current_balance == Decimal("2500.00")

    recorder.delete(user.id, income.id)
    db.refresh(account)
    assert account.current_balance == Decimal("1000.00")


def test_income_requires_positive_amount(db, user):
    with pytest.raises(ValidationError):
        IncomeRecorder(db).create(user.id, _income(amount="0"))


def test_dashboard_figures(db, user, account):
    IncomeRecorder(db).create(user.id, _income(bank_account_id=account.id))
    ExpenseRecorder(db).create(user.id, _expense("300.00", bank_account_id=account.id))
    ExpenseRecorder(db).create(user.id, _expense("50.00", day=date(2024, 2, 28)))

    dashboard = build_dashboard(db, user.id, date(2024, 3, 15))

    assert dashboard["total_balance"] == Decimal("2700.00")
    assert dashboard["net_change"] == Decimal("1700.00")
    assert dashboard["total_income"] == Decimal("2000.00")
    assert dashboard["total_expenses"] == Decimal("300.00")
    assert dashboard["net_balance"] == Decimal("1700.00")
    assert dashboard["active_accounts"] == 1


def test_dashboard_trends_cover_last_twelve_months(db, user, account):
    IncomeRecorder(db).create(user.id, _income(bank_account_id=account.id))
    ExpenseRecorder(db).create(user.id, _expense("300.00", bank_account_id=account.id))
    ExpenseRecorder(db).create(user.id, _expense("50.00", day=date(2024, 2, 28)))
    ExpenseRecorder(db).create(user.id, _expense("70.00", day=date(2023, 3, 31)))

    trends = build_dashboard(db, user.id, date(2024, 3, 15))["monthly_trends"]

    assert len(trends) == 12
    assert trends[0]["month"] == "Apr 2023"
    assert trends[-1] == {
        "month": "Mar 2024",
        "income": Decimal("2000.00"),
        "expenses": Decimal("300.00"),
        "net": Decimal("1700.00"),
    }
    assert trends[-2]["expenses"] == Decimal("50.00")
    assert sum(t["expenses"] for t in trends) == Decimal("350.00")


def test_dashboard_breakdown_and_overviews(db, user, account):
    service = InvestmentService(db)
    dps = service.create(
        user.id,
        SchemaKind.DPS,
        name="Plan",
        monthly_installment=Decimal("100.00"),
        tenure_months=12,
        interest_rate=Decimal("6"),
        start_date=date(2024, 1, 1),
    )
    loan = service.create(
        user.id,
        SchemaKind.LOAN,
        name="Car",
        principal_amount=Decimal("1200.00"),
        monthly_emi=Decimal("110.00"),
        tenure_months=12,
        interest_rate=Decimal("9"),
        start_date=date(2024, 1, 1),
    )
    closed = service.create(
        user.id,
        SchemaKind.FDR,
        name="Matured",
        principal_amount=Decimal("900.00"),
        tenure_months=6,
        interest_rate=Decimal("4"),
        start_date=date(2023, 1, 1),
    )
    service.update(user.id, SchemaKind.FDR, closed.id, status="completed")

    categories = CategoryRepository(db)
    food = categories.create(user.id, "Food", "expense", "#00ff00")
    salary = categories.create(user.id, "Salary", "income", None)
    db.commit()

    recorder = ExpenseRecorder(db)
    recorder.create(user.id, _expense("40.00", category_id=food.id))
    recorder.create(user.id, _expense("100.00", expense_type=ExpenseType.DPS_PAYMENT, related_id=dps.id))
    recorder.create(user.id, _expense("110.00", expense_type=ExpenseType.LOAN_PAYMENT, related_id=loan.id))
    IncomeRecorder(db).create(user.id, _income(category_id=salary.id))
    BudgetTracker(db).create(
        user.id,
        budget_name="Food",
        category_id=food.id,
        budget_amount=Decimal("200.00"),
        period_type="monthly",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
    )

    dashboard = build_dashboard(db, user.id, date(2024, 3, 15))

    assert dashboard["expense_breakdown"] == {
        "regular": Decimal("40.00"),
        "dps_payments": Decimal("100.00"),
        "fdr_investments": Decimal("0.00"),
        "loan_payments": Decimal("110.00"),
    }
    overview = dashboard["investment_overview"]
    assert overview["dps"] == {"count": 1, "total_amount": Decimal("100.00")}
    assert overview["loan"] == {"count": 1, "total_amount": Decimal("1090.00")}
    assert overview["fdr"] == {"count": 0, "total_amount": Decimal("0.00")}
    assert dashboard["budget_overview"] == {
        "total_budgets": 1,
        "total_budget_amount": Decimal("200.00"),
        "total_spent": Decimal("40.00"),
    }
    assert [c["name"] for c in dashboard["top_expense_categories"]] == ["Food"]
    assert dashboard["top_expense_categories"][0]["color"] == "#00ff00"
    assert dashboard["top_income_categories"][0]["total"] == Decimal("2000.00")
