import csv
import io
from datetime import date

from tests.helpers import make_transaction


def read_csv(res):
    return list(csv.reader(io.StringIO(res.text)))


def test_export_csv(client, account):
    make_transaction(client, account["id"], amount="30.00", on=date(2024, 5, 2),
                     category="Food", description="Groceries")
    client.post("/transactions/", json={
        "type": "income",
        "amount": "1200",
        "account_id": account["id"],
        "category": {"name": "Salary", "subCategory": "Paycheck"},
        "date": "2024-05-01",
    })

    res = client.get("/transactions/export")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers["content-disposition"]

    rows = read_csv(res)
    assert rows[0] == ["Date", "Type", "Description", "Category", "Subcategory", "Amount"]
    assert rows[1] == ["2024-05-02", "expense", "Groceries", "Food", "", "-30.00"]
    assert rows[2] == ["2024-05-01", "income", "Untitled Transaction", "Salary", "Paycheck", "1200.00"]


def test_export_applies_filters(client, account):
    make_transaction(client, account["id"], amount="30.00", category="Food")
    make_transaction(client, account["id"], transaction_type="income", amount="10.00", category="Gift")

    rows = read_csv(client.get("/transactions/export", params={"type": "income"}))
    assert len(rows) == 2
    assert rows[1][3] == "Gift"
