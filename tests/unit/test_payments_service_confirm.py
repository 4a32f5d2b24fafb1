import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
import stripe

from seasonpass.payments import service
from seasonpass.payments.errors import PurchaseError

def _paid_intent(store, fake_stripe, member_id=1):
    member = store.get_member(member_id)
    out = service.begin_purchase(member)
    fake_stripe.succeed(out["paymentIntentId"])
    return out["paymentIntentId"]

def test_confirm_creates_ticket_and_sets_flags(store, fake_stripe):
    store.add_member()
    pi = _paid_intent(store, fake_stripe)

    outcome, ticket = service.confirm_purchase(store.get_member(1), pi)

    assert outcome == "created"
    assert ticket["season_year"] == 2026
    assert ticket["amount_paid"] == "100.00"
    assert ticket["stripe_payment_intent_id"] == pi
    assert ticket["is_active"] is True
    assert store.members[1]["has_season_ticket"] is True
    assert store.members[1]["season_ticket_year"] == 2026

def test_replay_same_intent_returns_existing_ticket(store, fake_stripe):
    store.add_member()
    pi = _paid_intent(store, fake_stripe)
    _, first = service.confirm_purchase(store.get_member(1), pi)

    outcome, again = service.confirm_purchase(store.get_member(1), pi)

    assert outcome == "already_processed"
    assert again["id"] == first["id"]
    assert len(store.tickets) == 1

def test_second_intent_same_season_is_rejected(store, fake_stripe):
    store.add_member()
    pi1 = _paid_intent(store, fake_stripe)
    # session ouverte avant le premier achat, payée après
    pi2 = fake_stripe.create_payment_intent(
        amount=10000, currency="usd", customer="cus_1",
        metadata=dict(fake_stripe.intents[pi1]["metadata"]), description="x",
    )["id"]
    fake_stripe.succeed(pi2)
    service.confirm_purchase(store.get_member(1), pi1)

    with pytest.raises(PurchaseError) as exc:
        service.confirm_purchase(store.get_member(1), pi2)
    assert exc.value.code == "ticket-already-exists"
    assert exc.value.status_code == 409
    assert len(store.tickets) == 1

def test_unpaid_intent_is_rejected(store, fake_stripe):
    member = store.add_member()
    out = service.begin_purchase(member)
    with pytest.raises(PurchaseError) as exc:
        service.confirm_purchase(store.get_member(1), out["paymentIntentId"])
    assert exc.value.code == "payment-not-completed"
    assert exc.value.status_code == 400
    assert store.tickets == []

@pytest.mark.parametrize("paid", [True, False])
def test_foreign_intent_is_ownership_mismatch_whatever_its_status(store, fake_stripe, paid):
    store.add_member(id=1)
    store.add_member(id=2, username="bob")
    member_two = store.get_member(2)
    out = service.begin_purchase(member_two)
    if paid:
        fake_stripe.succeed(out["paymentIntentId"])

    with pytest.raises(PurchaseError) as exc:
        service.confirm_purchase(store.get_member(1), out["paymentIntentId"])
    assert exc.value.code == "ownership-mismatch"
    assert exc.value.status_code == 403
    assert store.tickets == []

def test_ownership_mismatch_is_logged_as_warning(store, fake_stripe, caplog):
    store.add_member(id=1)
    store.add_member(id=2, username="bob")
    out = service.begin_purchase(store.get_member(2))
    with caplog.at_level("WARNING", logger="seasonpass.payments.service"):
        with pytest.raises(PurchaseError):
            service.confirm_purchase(store.get_member(1), out["paymentIntentId"])
    assert any("ownership mismatch" in r.getMessage() for r in caplog.records)

def test_missing_payment_intent_id(store):
    with pytest.raises(PurchaseError) as exc:
        service.confirm_purchase({"id": 1}, "  ")
    assert exc.value.code == "invalid-payment-request"

def test_unknown_intent_maps_to_not_found(store, monkeypatch):
    def _missing(pid):
        raise stripe.InvalidRequestError("No such payment_intent", "intent", code="resource_missing")

    monkeypatch.setattr("seasonpass.payments.stripe_client.retrieve_payment_intent", _missing)
    with pytest.raises(PurchaseError) as exc:
        service.confirm_purchase({"id": 1}, "pi_nope")
    assert exc.value.code == "payment-not-found"
    assert exc.value.status_code == 404

def test_amount_paid_comes_from_intent_amount(store, fake_stripe):
    store.add_member(discount_percentage=25)
    pi = _paid_intent(store, fake_stripe)
    _, ticket = service.confirm_purchase(store.get_member(1), pi)
    assert ticket["amount_paid"] == "75.00"

def test_concurrent_confirmations_create_a_single_ticket(store, fake_stripe, monkeypatch):
    store.add_member()
    pi1 = _paid_intent(store, fake_stripe)
    pi2 = fake_stripe.create_payment_intent(
        amount=10000, currency="usd", customer="cus_1",
        metadata=dict(fake_stripe.intents[pi1]["metadata"]), description="x",
    )["id"]
    fake_stripe.succeed(pi2)

    # tous les threads passent la vérification d'existence avant toute insertion
    barrier = threading.Barrier(8)
    original_find = store.find_ticket

    def _find_then_wait(user_id, season_year):
        found = original_find(user_id, season_year)
        barrier.wait(timeout=5)
        return found

    monkeypatch.setattr("seasonpass.payments.repository.find_ticket", _find_then_wait)

    def _confirm(pi):
        try:
            return service.confirm_purchase(store.get_member(1), pi)[0]
        except PurchaseError as e:
            return e.code

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(_confirm, [pi1, pi2] * 4))

    assert len(store.tickets) == 1
    assert results.count("created") == 1
    winner = store.tickets[0]["stripe_payment_intent_id"]
    for pi, res in zip([pi1, pi2] * 4, results):
        if pi == winner:
            assert res in ("created", "already_processed")
        else:
            assert res == "ticket-already-exists"
    assert store.insert_attempts == 8
