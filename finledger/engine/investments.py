"""Investment schemas - creation-time derivations and record keeping"""

from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from finledger.domain.exceptions import ConsistencyError, NotFoundError, ValidationError
from finledger.domain.investments import (
    dps_opening_figures,
    fdr_opening_figures,
    loan_opening_figures,
    progress_percentage,
)
from finledger.domain.models import InvestmentStatus, SchemaKind, SchemaRef, parse_enum
from finledger.domain.money import ZERO, money
from finledger.engine.unit_of_work import unit_of_work
from finledger.infrastructure.database.models import BankAccount, Dps, Fdr, Loan
from finledger.infrastructure.database.repositories import (
    AccountRepository,
    ExpenseRepository,
    InvestmentSchema,
    SchemaRepository,
)

# Per-kind name of the label column and of the amount reported in stats
_NAME_FIELD = {SchemaKind.DPS: "dps_name", SchemaKind.FDR: "fdr_name", SchemaKind.LOAN: "loan_name"}
_AMOUNT_FIELD = {SchemaKind.DPS: "total_deposited", SchemaKind.FDR: "principal_amount", SchemaKind.LOAN: "principal_amount"}


def resolve_bank_account(
    accounts: AccountRepository, user_id: int, account_id: Optional[int]
) -> Optional[BankAccount]:
    """
    Verify a linked bank account belongs to the acting user.

    Raises:
        NotFoundError: no such account
        ConsistencyError: the account belongs to another user
    """
    if account_id is None:
        return None
    account = accounts.get_any(account_id)
    if account is None:
        raise NotFoundError("Bank account", account_id)
    if account.user_id != user_id:
        raise ConsistencyError(f"Bank account {account_id} belongs to a different user")
    return account


def schema_progress(kind: SchemaKind, schema: InvestmentSchema) -> Any:
    """Read-time progress percentage; FDRs have no installment progress"""
    if kind == SchemaKind.DPS:
        return progress_percentage(schema.paid_installments, schema.tenure_months)
    if kind == SchemaKind.LOAN:
        return progress_percentage(schema.paid_emis, schema.tenure_months)
    return None


class InvestmentService:
    """Creates, reads and retires DPS, FDR and loan schemas"""

    def __init__(self, db: Session):
        self.db = db
        self.schemas = SchemaRepository(db)
        self.accounts = AccountRepository(db)
        self.expenses = ExpenseRepository(db)

    def create(self, user_id: int, kind: Any, **fields: Any) -> InvestmentSchema:
        kind = parse_enum(SchemaKind, kind, "type")
        status = parse_enum(InvestmentStatus, fields.get("status") or InvestmentStatus.ACTIVE.value, "status")
        name = fields.get("name")
        if not name:
            raise ValidationError("name is required", field="name")
        start_date: Optional[date] = fields.get("start_date")
        if start_date is None:
            raise ValidationError("start_date is required", field="start_date")

        common = {
            "user_id": user_id,
            "bank_account_id": fields.get("bank_account_id"),
            "status": status.value,
        }

        if kind == SchemaKind.DPS:
            schema = Dps(
                dps_name=name,
                dps_number=fields.get("number"),
                **common,
                **dps_opening_figures(
                    fields.get("monthly_installment"),
                    fields.get("tenure_months"),
                    fields.get("interest_rate"),
                    start_date,
                    fields.get("maturity_date"),
                ),
            )
        elif kind == SchemaKind.FDR:
            schema = Fdr(
                fdr_name=name,
                fdr_number=fields.get("number"),
                **common,
                **fdr_opening_figures(
                    fields.get("principal_amount"),
                    fields.get("tenure_months"),
                    fields.get("interest_rate"),
                    start_date,
                    fields.get("maturity_date"),
                ),
            )
        else:
            schema = Loan(
                loan_name=name,
                loan_number=fields.get("number"),
                loan_type=fields.get("loan_type") or "personal",
                **common,
                **loan_opening_figures(
                    fields.get("principal_amount"),
                    fields.get("tenure_months"),
                    fields.get("interest_rate"),
                    fields.get("monthly_emi"),
                    start_date,
                ),
            )

        with unit_of_work(self.db):
            resolve_bank_account(self.accounts, user_id, common["bank_account_id"])
            self.schemas.add(schema)
        return schema

    def get(self, user_id: int, kind: Any, schema_id: int) -> InvestmentSchema:
        kind = parse_enum(SchemaKind, kind, "type")
        schema = self.schemas.get_any(SchemaRef(kind, schema_id))
        # Ownership mismatch is reported exactly like absence
        if schema is None or schema.user_id != user_id:
            raise NotFoundError(f"Investment {kind.value}", schema_id)
        return schema

    def list(self, user_id: int, kind: Optional[Any] = None) -> Dict[SchemaKind, List[InvestmentSchema]]:
        kinds = [parse_enum(SchemaKind, kind, "type")] if kind else list(SchemaKind)
        return {k: self.schemas.list_for_user(user_id, k) for k in kinds}

    def update(self, user_id: int, kind: Any, schema_id: int, **changes: Any) -> InvestmentSchema:
        """Rename, re-status or re-link a schema; financial terms are fixed at creation"""
        kind = parse_enum(SchemaKind, kind, "type")
        with unit_of_work(self.db):
            schema = self.get(user_id, kind, schema_id)
            if changes.get("name"):
                setattr(schema, _NAME_FIELD[kind], changes["name"])
            if changes.get("status"):
                schema.status = parse_enum(InvestmentStatus, changes["status"], "status").value
            if "bank_account_id" in changes:
                resolve_bank_account(self.accounts, user_id, changes["bank_account_id"])
                schema.bank_account_id = changes["bank_account_id"]
            self.db.flush()
        return schema

    def delete(self, user_id: int, kind: Any, schema_id: int) -> None:
        kind = parse_enum(SchemaKind, kind, "type")
        with unit_of_work(self.db):
            schema = self.get(user_id, kind, schema_id)
            linked = self.expenses.count_linked(SchemaRef(kind, schema_id))
            if linked:
                raise ConsistencyError(
                    f"Investment {kind.value} {schema_id} still has {linked} linked expense(s)"
                )
            self.schemas.delete(schema)

    def stats(self, user_id: int) -> Dict[str, Any]:
        by_kind = self.list(user_id)
        statuses = Counter(s.status for schemas in by_kind.values() for s in schemas)
        return {
            "total_count": sum(len(schemas) for schemas in by_kind.values()),
            "by_type": {k.value: len(schemas) for k, schemas in by_kind.items()},
            "total_amounts": {
                k.value: money(sum((money(getattr(s, _AMOUNT_FIELD[k])) for s in schemas), ZERO))
                for k, schemas in by_kind.items()
            },
            "by_status": dict(statuses),
        }
