"""End-to-end scenarios driven through the HTTP API"""

from decimal import Decimal
from fastapi.testclient import TestClient


def _account(client, headers, initial):
    response = client.post(
        "/v1/bank-accounts",
        json={"bank_name": "First Bank", "account_name": "Main", "account_number": "100", "initial_amount": initial},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def _balance(client, headers, account_id) -> Decimal:
    return Decimal(client.get(f"/v1/bank-accounts/{account_id}", headers=headers).json()["current_balance"])


def _post_transaction(client, headers, account_id, direction, amount):
    response = client.post(
        "/v1/transactions",
        json={"bank_account_id": account_id, "type": direction, "amount": amount, "transaction_date": "2024-03-01"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def _recurring_deposit(client, headers):
    response = client.post(
        "/v1/investments",
        json={
            "type": "dps",
            "name": "Monthly savings",
            "monthly_installment": "100.00",
            "tenure_months": 12,
            "interest_rate": "6",
            "start_date": "2024-01-01",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_transactions_move_balance_and_deletion_undoes_them(client: TestClient, headers):
    """Deposit, withdraw, then delete the deposit"""
    account = _account(client, headers, "1000.00")

    deposit = _post_transaction(client, headers, account["id"], "in", "250.50")
    assert _balance(client, headers, account["id"]) == Decimal("1250.50")

    _post_transaction(client, headers, account["id"], "out", "300.00")
    assert _balance(client, headers, account["id"]) == Decimal("950.50")

    response = client.delete(f"/v1/transactions/{deposit['id']}", headers=headers)
    assert response.status_code == 204
    assert _balance(client, headers, account["id"]) == Decimal("700.00")

    reconcile = client.get(f"/v1/bank-accounts/{account['id']}/reconcile", headers=headers).json()
    assert reconcile["consistent"] is True


def test_dps_payment_advances_schema(client: TestClient, headers):
    """A dps_payment expense counts as one installment"""
    dps = _recurring_deposit(client, headers)
    assert Decimal(dps["maturity_amount"]) == Decimal("1272.00")

    response = client.post(
        "/v1/expenses",
        json={
            "title": "DPS installment",
            "amount": "100.00",
            "expense_date": "2024-02-01",
            "expense_type": "dps_payment",
            "related_id": dps["id"],
        },
        headers=headers,
    )
    assert response.status_code == 201
    assert response.json()["related_type"] == "dps"

    schema = client.get(f"/v1/investments/dps/{dps['id']}", headers=headers).json()
    assert schema["paid_installments"] == 1
    assert schema["remaining_installments"] == 11
    assert Decimal(schema["total_deposited"]) == Decimal("100.00")
    assert schema["next_payment_date"] == "2024-03-01"


def test_payment_into_another_users_schema_writes_nothing(client: TestClient, headers, other_user):
    """Cross-user link fails and leaves no expense, no balance change and no progress"""
    dps = _recurring_deposit(client, headers)
    intruder = {"X-User-ID": str(other_user.id)}
    account = _account(client, intruder, "500.00")

    response = client.post(
        "/v1/expenses",
        json={
            "title": "Sneaky",
            "amount": "100.00",
            "expense_date": "2024-02-01",
            "bank_account_id": account["id"],
            "expense_type": "dps_payment",
            "related_type": "dps",
            "related_id": dps["id"],
        },
        headers=intruder,
    )

    assert response.status_code == 422
    assert response.json()["error"] == "consistency_error"
    assert client.get("/v1/expenses", headers=intruder).json() == []
    assert _balance(client, intruder, account["id"]) == Decimal("500.00")

    schema = client.get(f"/v1/investments/dps/{dps['id']}", headers=headers).json()
    assert schema["paid_installments"] == 0
