# backend/tests/conftest.py
"""Shared fixtures: no simulated latency, a fresh store per test."""

import pytest
from fastapi.testclient import TestClient

from tabledash import store as store_module
from tabledash.main import app
from tabledash.settings import settings
from tabledash.store import DashboardStore, get_store

SALES_CSV = b"""date,region,product,revenue,units
2024-01-01,North,Widget,100,3
2024-01-02,South,Gadget,250,5
2024-01-03,East,Widget,175,2
2024-01-04,North,Gadget,90,1
2024-01-05,South,Widget,310,7
2024-01-06,East,Gadget,60,2
2024-01-07,North,Widget,220,4
2024-01-08,South,Gadget,145,3
2024-01-09,East,Widget,80,1
2024-01-10,North,Gadget,400,8
2024-01-11,South,Widget,130,2
2024-01-12,East,Gadget,55,1
"""


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "CONNECTION_TEST_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "QUERY_DELAY_SECONDS", 0.0)


@pytest.fixture
def store(monkeypatch):
    """Fresh store, also installed as the module-level singleton."""
    s = DashboardStore()
    monkeypatch.setattr(store_module, "store", s)
    return s


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sales_csv():
    return SALES_CSV


@pytest.fixture
def loaded_client(client, sales_csv):
    r = client.post("/upload", files={"file": ("sales.csv", sales_csv, "text/csv")})
    assert r.status_code == 200, r.text
    return client
