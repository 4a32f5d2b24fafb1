from decimal import Decimal

from seasonpass.auth import tokens


def test_admin_routes_require_admin_token(client, monkeypatch):
    assert client.get("/api/v1/admin/users").status_code == 401

    # jeton membre valide: refusé par la console admin
    token = tokens.encode_member_token(1, "ana_s")
    r = client.get("/api/v1/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_admin_token_reaches_admin_routes(client, monkeypatch):
    monkeypatch.setattr(
        "seasonpass.auth.service.get_admin_by_id",
        lambda admin_id: {"id": 3, "username": "root", "role": "admin"},
    )
    monkeypatch.setattr("seasonpass.admin.repository.list_users", lambda **kw: ([], 0))
    token = tokens.encode_admin_token(3, "root", "admin")

    r = client.get("/api/v1/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["pagination"]["total"] == 0


def test_list_users_with_filters(authenticated_admin_client, monkeypatch):
    calls = {}

    def fake_list(**kwargs):
        calls.update(kwargs)
        return [{"id": 4, "username": "ana_s", "status": "pending"}], 1

    monkeypatch.setattr("seasonpass.admin.repository.list_users", fake_list)
    r = authenticated_admin_client.get(
        "/api/v1/admin/users",
        params={"page": 1, "limit": 10, "status": "Pending", "search": "ana", "hasSeasonTicket": "false"},
    )
    assert r.status_code == 200
    assert calls == {"page": 1, "limit": 10, "status": "pending", "search": "ana", "has_season_ticket": False}
    assert r.json()["users"][0]["username"] == "ana_s"


def test_list_users_invalid_status(authenticated_admin_client):
    r = authenticated_admin_client.get("/api/v1/admin/users", params={"status": "banned"})
    assert r.status_code == 400


def test_update_status(authenticated_admin_client, monkeypatch):
    monkeypatch.setattr(
        "seasonpass.admin.repository.update_user",
        lambda user_id, data: {"id": user_id, "username": "ana_s", **data},
    )
    r = authenticated_admin_client.patch("/api/v1/admin/users/4/status", json={"status": "confirmed"})
    assert r.status_code == 200
    assert r.json()["user"]["status"] == "confirmed"

    bad = authenticated_admin_client.patch("/api/v1/admin/users/4/status", json={"status": "banned"})
    assert bad.status_code == 400
    assert bad.json()["errors"][0]["field"] == "status"


def test_update_status_unknown_user(authenticated_admin_client, monkeypatch):
    monkeypatch.setattr("seasonpass.admin.repository.update_user", lambda user_id, data: None)
    r = authenticated_admin_client.patch("/api/v1/admin/users/404/status", json={"status": "suspended"})
    assert r.status_code == 404


def test_update_discount_bounds(authenticated_admin_client, monkeypatch):
    monkeypatch.setattr(
        "seasonpass.admin.repository.update_user",
        lambda user_id, data: {"id": user_id, "username": "ana_s", **data},
    )
    ok = authenticated_admin_client.patch("/api/v1/admin/users/4/discount", json={"discountPercentage": 100})
    assert ok.status_code == 200
    assert ok.json()["user"]["discountPercentage"] == 100

    for bad in (101, -1, 12.5, "10", True):
        r = authenticated_admin_client.patch("/api/v1/admin/users/4/discount", json={"discountPercentage": bad})
        assert r.status_code == 400, bad


def test_user_detail_and_recompute(authenticated_admin_client, monkeypatch):
    monkeypatch.setattr("seasonpass.users.repository.get_user_by_id", lambda uid: {"id": uid, "username": "ana_s"})
    monkeypatch.setattr("seasonpass.users.repository.list_user_tickets", lambda uid: [])
    monkeypatch.setattr(
        "seasonpass.payments.repository.recompute_season_ticket_flags",
        lambda uid: {"has_season_ticket": True, "season_ticket_year": 2026},
    )

    detail = authenticated_admin_client.get("/api/v1/admin/users/4")
    assert detail.status_code == 200
    assert detail.json()["user"]["seasonTickets"] == []

    r = authenticated_admin_client.post("/api/v1/admin/users/4/entitlement/recompute")
    assert r.json() == {"userId": 4, "hasSeasonTicket": True, "seasonTicketYear": 2026}


def test_dashboard_stats(authenticated_admin_client, monkeypatch):
    monkeypatch.setattr("seasonpass.admin.repository.count_rows", lambda table, filters=None, gte=None: 2)
    monkeypatch.setattr("seasonpass.admin.repository.sum_revenue", lambda year: Decimal("200.00"))
    r = authenticated_admin_client.get("/api/v1/admin/dashboard/stats")
    assert r.status_code == 200
    body = r.json()
    assert body["seasonYear"] == 2026
    assert body["revenue"] == 200.0
    assert body["seasonTicketsSold"] == 2
