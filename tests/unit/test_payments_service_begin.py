import pytest
import stripe

from seasonpass.payments import service
from seasonpass.payments.errors import PurchaseError

def test_begin_purchase_creates_customer_and_intent(store, fake_stripe):
    member = store.add_member(discount_percentage=25)

    out = service.begin_purchase(member)

    assert out["amount"] == 7500
    assert out["originalAmount"] == 10000
    assert out["discountPercentage"] == 25
    assert out["discountAmount"] == 2500
    assert out["currency"] == "usd"
    assert out["clientSecret"].startswith(out["paymentIntentId"])

    intent = fake_stripe.intents[out["paymentIntentId"]]
    assert intent["customer"] == "cus_1"
    assert intent["metadata"] == {
        "userId": "1",
        "seasonYear": "2026",
        "originalAmount": "10000",
        "discountPercentage": "25",
        "discountAmount": "2500",
    }
    assert intent["description"].endswith("Season Ticket 2026")
    # référence customer stockée sur le membre
    assert store.members[1]["stripe_customer_id"] == "cus_1"

def test_begin_purchase_reuses_existing_customer(store, fake_stripe):
    member = store.add_member(stripe_customer_id="cus_existing")
    out = service.begin_purchase(member)
    assert fake_stripe.customers == {}
    assert fake_stripe.intents[out["paymentIntentId"]]["customer"] == "cus_existing"

def test_begin_purchase_keeps_customer_stored_by_concurrent_request(store, fake_stripe, monkeypatch):
    member = store.add_member()
    # une autre requête a stocké sa référence entre la lecture du membre et l'écriture
    store.members[1]["stripe_customer_id"] = "cus_winner"
    out = service.begin_purchase(member)
    assert fake_stripe.intents[out["paymentIntentId"]]["customer"] == "cus_winner"
    assert store.members[1]["stripe_customer_id"] == "cus_winner"

def test_begin_purchase_uses_configured_base_price(store, fake_stripe, monkeypatch):
    monkeypatch.setattr("seasonpass.config.SEASON_TICKET_PRICE", 5000)
    member = store.add_member(discount_percentage=10)
    out = service.begin_purchase(member)
    assert out["originalAmount"] == 5000
    assert out["amount"] == 4500

def test_begin_purchase_refuses_pending_member(store, fake_stripe):
    member = store.add_member(status="pending")
    with pytest.raises(PurchaseError) as exc:
        service.begin_purchase(member)
    assert exc.value.code == "account-not-confirmed"
    assert fake_stripe.intents == {}
    assert fake_stripe.customers == {}

def test_begin_purchase_refuses_when_ticket_exists(store, fake_stripe):
    member = store.add_member()
    store.record_season_ticket(user_id=1, season_year=2026, amount_paid="100.00", payment_intent_id="pi_old")
    with pytest.raises(PurchaseError) as exc:
        service.begin_purchase(member)
    assert exc.value.code == "ticket-already-exists"
    assert exc.value.status_code == 409

def test_begin_purchase_rejects_unknown_currency(store, fake_stripe):
    member = store.add_member()
    with pytest.raises(PurchaseError) as exc:
        service.begin_purchase(member, "gbp")
    assert exc.value.code == "invalid-payment-request"

def test_begin_purchase_accepts_eur(store, fake_stripe):
    member = store.add_member()
    out = service.begin_purchase(member, "EUR")
    assert out["currency"] == "eur"

def test_provider_unavailable_is_retryable_error(store, monkeypatch):
    member = store.add_member(stripe_customer_id="cus_1")

    def _down(**kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr("seasonpass.payments.stripe_client.create_payment_intent", _down)
    with pytest.raises(PurchaseError) as exc:
        service.begin_purchase(member)
    assert exc.value.code == "payment-provider-unavailable"
    assert exc.value.status_code == 503
    assert exc.value.retryable is True

def test_get_pricing_in_major_units(monkeypatch):
    monkeypatch.setattr("seasonpass.config.SEASON_TICKET_PRICE", 10000)
    out = service.get_pricing({"id": 1, "discount_percentage": 25})
    assert out == {
        "originalPrice": 100.0,
        "discountPercentage": 25,
        "discountAmount": 25.0,
        "finalPrice": 75.0,
        "currency": "USD",
    }
