"""
Runs the API under uvicorn against a fresh database and walks through the
balance bookkeeping over HTTP: open an account, record an expense against a
budget, delete it again and check every total returns to where it started.
"""
import json
import os
import signal
import subprocess
import sys
import time
from datetime import date, timedelta
from decimal import Decimal

import requests

BASE_URL = os.environ.get("SMOKE_BASE_URL", "http://127.0.0.1:8000")
UVICORN_COMMAND = ["uvicorn", "wallet_api.main:app"]
USER_ID = os.environ.get("SMOKE_USER_ID", f"smoke-{int(time.time())}")
HEADERS = {"X-User-Id": USER_ID, "Content-Type": "application/json"}


class SmokeFailure(Exception):
    pass


def api(method: str, endpoint: str, data: dict = None, expected: int = 200):
    """Makes an API request and returns the decoded JSON body."""
    url = f"{BASE_URL}{endpoint}"
    body = json.dumps(data, default=str) if data is not None else None
    response = requests.request(method, url, data=body, headers=HEADERS, timeout=10)
    if response.status_code != expected:
        raise SmokeFailure(f"{method} {endpoint}: expected {expected}, got {response.status_code}: {response.text}")
    return response.json() if response.text else None


def check(label: str, actual, expected):
    if Decimal(str(actual)) != Decimal(str(expected)):
        raise SmokeFailure(f"{label}: expected {expected}, got {actual}")
    print(f"  ok  {label} = {actual}")


def wait_for_server(timeout: float = 15.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            requests.get(f"{BASE_URL}/", timeout=1)
            return
        except requests.exceptions.ConnectionError:
            time.sleep(0.5)
    raise SmokeFailure(f"Server at {BASE_URL} did not come up")


def run_checks():
    print(f"--- Smoke run as {USER_ID} ---")
    response = requests.get(f"{BASE_URL}/accounts/", timeout=10)
    if response.status_code != 401:
        raise SmokeFailure(f"anonymous request: expected 401, got {response.status_code}")
    print("  ok  anonymous request rejected")

    account = api("POST", "/accounts/", {"name": "Smoke Checking", "type": "bank", "balance": "100.00"}, expected=201)
    today = date.today()
    budget = api("POST", "/budgets/", {
        "name": "Smoke Budget",
        "amount": "500",
        "start_date": (today - timedelta(days=1)).isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
        "account_id": account["id"],
    }, expected=201)

    expense = api("POST", "/transactions/", {
        "type": "expense",
        "amount": "30.00",
        "account_id": account["id"],
        "budget_id": budget["id"],
        "category": {"name": "Food"},
    }, expected=201)
    check("balance after expense", api("GET", f"/accounts/{account['id']}")["balance"], "70.00")
    check("budget after expense", api("GET", f"/budgets/{budget['id']}")["current_amount"], "30.00")

    stats = api("GET", "/stats/")
    check("dashboard balance", stats["balance"], Decimal(stats["income"]) - Decimal(stats["expense"]))

    api("DELETE", "/transactions/", {"id": expense["id"]})
    check("balance after delete", api("GET", f"/accounts/{account['id']}")["balance"], "100.00")
    check("budget after delete", api("GET", f"/budgets/{budget['id']}")["current_amount"], "0")

    months = api("GET", "/reports/monthly")
    if len(months) != 6:
        raise SmokeFailure(f"monthly report: expected 6 entries, got {len(months)}")
    print("  ok  monthly report has 6 entries")


def main():
    print("--- Preparing database ---")
    try:
        subprocess.run(["alembic", "upgrade", "head"], check=True, capture_output=True, text=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        print(f"Error running migrations: {e}")
        return 1

    server_process = subprocess.Popen(UVICORN_COMMAND)
    try:
        wait_for_server()
        run_checks()
        print("--- Smoke run passed ---")
        return 0
    except (SmokeFailure, requests.exceptions.RequestException) as e:
        print(f"Smoke run failed: {e}")
        return 1
    finally:
        os.kill(server_process.pid, signal.SIGTERM)
        server_process.wait()


if __name__ == "__main__":
    sys.exit(main())
