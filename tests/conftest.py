import os
import threading

# Pas de Redis pendant les tests (doit précéder l'import de l'app)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any, Optional
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from seasonpass.app import app as fastapi_app
from seasonpass.utils.security import require_user, require_admin
from seasonpass.payments.errors import TicketConflictError

SEASON_YEAR = 2026

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

# Aucun accès Supabase réel: un test qui oublie de patcher un repository récupère un MagicMock
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("seasonpass.infra.supabase_client.get_service_supabase", lambda: MagicMock())

@pytest.fixture(autouse=True)
def fixed_season(monkeypatch):
    monkeypatch.setattr("seasonpass.payments.service.current_season_year", lambda: SEASON_YEAR)
    return SEASON_YEAR

def make_member(**overrides) -> Dict[str, Any]:
    member: Dict[str, Any] = {
        "id": 1,
        "first_name": "Ana",
        "last_name": "Silva",
        "username": "ana_s",
        "email": "ana@example.com",
        "status": "confirmed",
        "discount_percentage": 0,
        "has_season_ticket": False,
        "season_ticket_year": None,
        "stripe_customer_id": None,
        "created_at": "2026-01-10T10:00:00+00:00",
    }
    member.update(overrides)
    return member

class InMemoryStore:
    """
    Stockage membres/abonnements en mémoire, avec les mêmes garanties que le schéma SQL:
    UNIQUE(user_id, season_year), UNIQUE(stripe_payment_intent_id), insertion + drapeaux atomiques.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self.members: Dict[Any, Dict[str, Any]] = {}
        self.tickets: list = []
        self.insert_attempts = 0

    def add_member(self, **overrides) -> Dict[str, Any]:
        m = make_member(**overrides)
        self.members[m["id"]] = m
        return dict(m)

    def get_member(self, user_id):
        m = self.members.get(int(user_id)) if str(user_id).isdigit() else None
        return dict(m) if m else None

    def find_ticket(self, user_id, season_year):
        with self._lock:
            for t in self.tickets:
                if t["user_id"] == user_id and t["season_year"] == int(season_year):
                    return dict(t)
        return None

    def find_ticket_by_payment_intent(self, payment_intent_id):
        with self._lock:
            for t in self.tickets:
                if t["stripe_payment_intent_id"] == payment_intent_id:
                    return dict(t)
        return None

    def set_stripe_customer_id(self, user_id, customer_id):
        with self._lock:
            m = self.members[user_id]
            if m.get("stripe_customer_id") is None:
                m["stripe_customer_id"] = customer_id
            return m["stripe_customer_id"]

    def record_season_ticket(self, *, user_id, season_year, amount_paid, payment_intent_id, ticket_type="regular"):
        with self._lock:
            self.insert_attempts += 1
            for t in self.tickets:
                if (t["user_id"] == user_id and t["season_year"] == season_year) or t["stripe_payment_intent_id"] == payment_intent_id:
                    raise TicketConflictError(user_id, season_year)
            ticket = {
                "id": len(self.tickets) + 1,
                "user_id": user_id,
                "season_year": season_year,
                "amount_paid": amount_paid,
                "stripe_payment_intent_id": payment_intent_id,
                "ticket_type": ticket_type,
                "is_active": True,
                "purchase_date": "2026-03-01T12:00:00+00:00",
            }
            self.tickets.append(ticket)
            m = self.members[user_id]
            m["has_season_ticket"] = True
            m["season_ticket_year"] = season_year
            return dict(ticket)

class FakeStripe:
    """Customers et PaymentIntents Stripe simulés."""
    def __init__(self):
        self.customers: Dict[str, Dict[str, Any]] = {}
        self.intents: Dict[str, Dict[str, Any]] = {}

    def create_customer(self, *, user_id, username, email=None, name=None):
        cid = f"cus_{len(self.customers) + 1}"
        self.customers[cid] = {"id": cid, "metadata": {"userId": str(user_id), "username": username or ""}}
        return dict(self.customers[cid])

    def create_payment_intent(self, *, amount, currency, customer, metadata, description):
        pid = f"pi_{len(self.intents) + 1}"
        self.intents[pid] = {
            "id": pid,
            "client_secret": f"{pid}_secret_x",
            "amount": amount,
            "currency": currency,
            "customer": customer,
            "metadata": dict(metadata),
            "description": description,
            "status": "requires_payment_method",
        }
        return dict(self.intents[pid])

    def retrieve_payment_intent(self, payment_intent_id):
        return dict(self.intents[payment_intent_id])

    def succeed(self, payment_intent_id):
        self.intents[payment_intent_id]["status"] = "succeeded"

@pytest.fixture
def store(monkeypatch) -> InMemoryStore:
    s = InMemoryStore()
    for name in ("get_member", "find_ticket", "find_ticket_by_payment_intent", "set_stripe_customer_id", "record_season_ticket"):
        monkeypatch.setattr(f"seasonpass.payments.repository.{name}", getattr(s, name))
    return s

@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    f = FakeStripe()
    for name in ("create_customer", "create_payment_intent", "retrieve_payment_intent"):
        monkeypatch.setattr(f"seasonpass.payments.stripe_client.{name}", getattr(f, name))
    return f

@pytest.fixture
def member_client(app, client, store):
    """Client API authentifié comme le membre 1 du store (relu à chaque requête)."""
    store.add_member()
    app.dependency_overrides[require_user] = lambda: store.get_member(1)
    yield client
    app.dependency_overrides.pop(require_user, None)

@pytest.fixture
def authenticated_admin_client(app, client):
    def _override_require_admin():
        return {"id": 1, "username": "admin", "email": "admin@example.com", "role": "admin"}
    app.dependency_overrides[require_admin] = _override_require_admin
    yield client
    app.dependency_overrides.pop(require_admin, None)
