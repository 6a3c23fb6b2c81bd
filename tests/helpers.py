from datetime import date

USER_ID = "user_123"
OTHER_USER_ID = "user_456"


def make_transaction(client, account_id, transaction_type="expense", amount="30.00", budget_id=None,
                     category="Food", on=None, **extra):
    payload = {
        "type": transaction_type,
        "amount": amount,
        "account_id": account_id,
        "category": {"name": category},
        "date": (on or date.today()).isoformat(),
    }
    if budget_id is not None:
        payload["budget_id"] = budget_id
    payload.update(extra)
    return client.post("/transactions/", json=payload)
