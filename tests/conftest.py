# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

import main


@pytest.fixture(scope="session")
def client():
    return TestClient(main.app)


# ----------------------------------------------------------
# Disable Supabase for ALL tests
# ----------------------------------------------------------
@pytest.fixture(autouse=True)
def mock_supabase():
    with patch("utils.supabase_client.supabase", None), \
         patch("utils.supabase_client.SUPABASE_URL", ""), \
         patch("utils.supabase_client._session"):
        yield


class FakeQuery:
    """
    Records supabase-py query-builder calls and returns canned rows.
    """

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        if name in ("select", "eq", "ilike", "order", "range", "limit", "update", "in_"):
            def _record(*args, **kwargs):
                self.calls.append((name, args, kwargs))
                return self
            return _record
        raise AttributeError(name)

    def execute(self):
        self.client.executed.append(self)
        result = self.client.results.pop(0) if self.client.results else {"data": [], "count": None}
        return type("Res", (), {"data": result.get("data", []), "count": result.get("count")})()


class FakeSupabase:
    def __init__(self, results=None):
        self.results = list(results or [])
        self.executed = []

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    def _install(*results):
        client = FakeSupabase(results)
        patcher = patch("utils.supabase_client.supabase", client)
        patcher.start()
        _patchers.append(patcher)
        return client

    _patchers = []
    yield _install
    for p in reversed(_patchers):
        p.stop()


@pytest.fixture
def clinic_row():
    return {
        "id": "c-1",
        "slug": "dent-lux",
        "name": "Dent Lux",
        "name_ru": "Дент Люкс",
        "name_ro": "Dent Lux",
        "city_id": "chisinau",
        "verified": True,
        "recommended": False,
        "google_rating": 4.5,
        "google_reviews_count": 250,
        "doctor_experience": 12,
        "has_licenses": True,
        "has_certificates": None,
        "online_booking": True,
        "weekend_work": False,
        "evening_work": None,
        "urgent_care": False,
        "convenient_location": True,
        "published_pricing": True,
        "free_consultation": False,
        "interest_free_installment": None,
        "implant_warranty": False,
        "popular_services_promotions": False,
        "online_price_calculator": False,
        "reviews_index": 70,
        "trust_index": 70,
        "access_index": 70,
        "price_index": 50,
        "d_score": 65,
    }
