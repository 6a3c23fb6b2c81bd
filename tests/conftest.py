import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wallet_api.db.core import init_db, get_db
from wallet_api.main import app
from tests.helpers import USER_ID, OTHER_USER_ID


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = testing_session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, headers={"X-User-Id": USER_ID})
    app.dependency_overrides.clear()


@pytest.fixture
def other_client(client):
    return TestClient(app, headers={"X-User-Id": OTHER_USER_ID})


@pytest.fixture
def account(client):
    res = client.post("/accounts/", json={"name": "Checking", "type": "bank", "balance": "100.00"})
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture
def budget(client, account):
    today = date.today()
    res = client.post("/budgets/", json={
        "name": "Groceries",
        "amount": "500.00",
        "period": "monthly",
        "start_date": (today - timedelta(days=10)).isoformat(),
        "end_date": (today + timedelta(days=20)).isoformat(),
        "account_id": account["id"],
    })
    assert res.status_code == 201, res.text
    return res.json()


