"""
Cas d'usage 'payments': orchestre entitlement, pricing, stripe, metadata et repository.
- get_pricing: prix affiché au membre (unités majeures)
- begin_purchase: ouvre un PaymentIntent pour un membre éligible
- confirm_purchase: vérifie le paiement et matérialise l'abonnement (idempotent par PaymentIntent)
- handle_webhook_event: le webhook Stripe converge sur confirm_purchase
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
import logging

import stripe

from seasonpass import config
from seasonpass import constants as c
from . import repository
from . import stripe_client
from . import metadata as meta
from .entitlement import ensure_can_purchase
from .errors import (
    PurchaseError,
    TicketConflictError,
    INVALID_PAYMENT_REQUEST,
    MEMBER_NOT_FOUND,
    OWNERSHIP_MISMATCH,
    PAYMENT_FAILED,
    PAYMENT_NOT_COMPLETED,
    PAYMENT_NOT_FOUND,
    PAYMENT_PROVIDER_UNAVAILABLE,
    TICKET_ALREADY_EXISTS,
)
from .pricing import price_breakdown, to_major_units

logger = logging.getLogger(__name__)

CREATED = "created"
ALREADY_PROCESSED = "already_processed"

# module seasonpass.payments.service
def current_season_year() -> int:
    """Saison courante = année civile (UTC)."""
    return datetime.now(timezone.utc).year

def _member_discount(member: Dict[str, Any]) -> int:
    value = (member or {}).get("discount_percentage")
    return 0 if value is None else value

def ticket_to_public(ticket: Dict[str, Any]) -> Dict[str, Any]:
    """Billet (ligne season_tickets) -> JSON camelCase."""
    amount = ticket.get("amount_paid")
    return {
        "id": ticket.get("id"),
        "userId": ticket.get("user_id"),
        "seasonYear": ticket.get("season_year"),
        "amountPaid": float(amount) if amount is not None else None,
        "ticketType": ticket.get("ticket_type"),
        "isActive": ticket.get("is_active", True),
        "stripePaymentIntentId": ticket.get("stripe_payment_intent_id"),
        "purchaseDate": ticket.get("purchase_date"),
    }

def _stripe_call(fn, *args, **kwargs):
    """
    Exécute un appel Stripe et traduit ses erreurs en PurchaseError.
    Aucun retry: l'indisponibilité est remontée (503) et l'appelant rejoue s'il le souhaite.
    """
    try:
        return fn(*args, **kwargs)
    except stripe.CardError as e:
        raise PurchaseError(PAYMENT_FAILED, e.user_message or "Paiement refusé par la banque") from e
    except stripe.InvalidRequestError as e:
        if getattr(e, "code", None) == "resource_missing":
            raise PurchaseError(PAYMENT_NOT_FOUND, "Paiement introuvable") from e
        logger.warning("payments.service stripe invalid request: %s", e)
        raise PurchaseError(INVALID_PAYMENT_REQUEST, "Requête de paiement invalide") from e
    except stripe.StripeError as e:
        logger.exception("payments.service stripe unavailable")
        raise PurchaseError(PAYMENT_PROVIDER_UNAVAILABLE, "Service de paiement indisponible, réessayez plus tard") from e

def get_pricing(member: Dict[str, Any]) -> Dict[str, Any]:
    """
    Prix de l'abonnement pour ce membre, en unités majeures.
    Ex: base 10000, remise 25 -> {"originalPrice": 100.0, "discountAmount": 25.0, "finalPrice": 75.0}
    """
    b = price_breakdown(config.SEASON_TICKET_PRICE, _member_discount(member))
    return {
        "originalPrice": float(to_major_units(b["original_amount"])),
        "discountPercentage": b["discount_percentage"],
        "discountAmount": float(to_major_units(b["discount_amount"])),
        "finalPrice": float(to_major_units(b["amount"])),
        "currency": config.DEFAULT_CURRENCY.upper(),
    }

def _normalize_currency(currency: Optional[str]) -> str:
    cur = (currency or config.DEFAULT_CURRENCY).strip().lower()
    if cur not in config.ALLOWED_CURRENCIES:
        raise PurchaseError(INVALID_PAYMENT_REQUEST, f"Devise non supportée: {cur}")
    return cur

def _ensure_customer(member: Dict[str, Any]) -> str:
    """
    Référence customer Stripe du membre, créée au premier achat puis réutilisée.
    La référence est stockée avant de poursuivre; si une autre requête l'a stockée
    entre-temps, on utilise la valeur déjà en base.
    """
    existing = member.get("stripe_customer_id")
    if existing:
        return existing
    names = " ".join(p for p in (member.get("first_name"), member.get("last_name")) if p)
    customer = _stripe_call(
        stripe_client.create_customer,
        user_id=member["id"],
        username=member.get("username"),
        email=member.get("email"),
        name=names or None,
    )
    stored = repository.set_stripe_customer_id(member["id"], customer["id"])
    if stored and stored != customer["id"]:
        logger.info("payments.service customer already stored user_id=%s keep=%s", member["id"], stored)
    return stored or customer["id"]

def begin_purchase(member: Dict[str, Any], currency: Optional[str] = None) -> Dict[str, Any]:
    """
    Ouvre un PaymentIntent pour l'abonnement de la saison courante.
    1) éligibilité (compte confirmé, pas de billet pour la saison)
    2) customer Stripe (création paresseuse)
    3) prix via pricing (prix de base = config.SEASON_TICKET_PRICE)
    4) PaymentIntent avec metadata {userId, seasonYear, originalAmount, discountPercentage, discountAmount}
    Retour: {clientSecret, paymentIntentId, amount, originalAmount, discountPercentage, discountAmount, currency}
    """
    cur = _normalize_currency(currency)
    season_year = current_season_year()
    existing = repository.find_ticket(member["id"], season_year)
    ensure_can_purchase(member, season_year, existing)

    customer_id = _ensure_customer(member)
    b = price_breakdown(config.SEASON_TICKET_PRICE, _member_discount(member))
    intent = _stripe_call(
        stripe_client.create_payment_intent,
        amount=b["amount"],
        currency=cur,
        customer=customer_id,
        metadata=meta.make_metadata(user_id=member["id"], season_year=season_year, breakdown=b),
        description=f"{config.CLUB_NAME} - Season Ticket {season_year}",
    )
    logger.info(
        "payments.service intent created user_id=%s season_year=%s amount=%s payment_intent_id=%s",
        member["id"], season_year, b["amount"], intent.get("id"),
    )
    return {
        "clientSecret": intent.get("client_secret"),
        "paymentIntentId": intent.get("id"),
        "amount": b["amount"],
        "originalAmount": b["original_amount"],
        "discountPercentage": b["discount_percentage"],
        "discountAmount": b["discount_amount"],
        "currency": cur,
    }

def _already_processed_or_conflict(member_id: Any, payment_intent_id: str, season_year: int) -> Dict[str, Any]:
    ticket = repository.find_ticket_by_payment_intent(payment_intent_id)
    if ticket and str(ticket.get("user_id")) == str(member_id):
        return ticket
    raise PurchaseError(TICKET_ALREADY_EXISTS, f"Vous avez déjà un abonnement pour la saison {season_year}")

def confirm_purchase(member: Dict[str, Any], payment_intent_id: str) -> Tuple[str, Dict[str, Any]]:
    """
    Confirme un paiement Stripe et crée l'abonnement.
    Ordre des vérifications:
      a) PaymentIntent relu chez Stripe
      b) metadata.userId == membre (sinon ownership-mismatch, quel que soit le statut)
      c) status == succeeded (sinon payment-not-completed)
      d) pas de billet pour (membre, saison) sauf s'il vient de ce même PaymentIntent
      e) insertion billet + drapeaux membre en une transaction (purchase_season_ticket)
    La contrainte d'unicité tranche les confirmations concurrentes.
    Retour: ("created", ticket) ou ("already_processed", ticket)
    """
    payment_intent_id = (payment_intent_id or "").strip()
    if not payment_intent_id:
        raise PurchaseError(INVALID_PAYMENT_REQUEST, "paymentIntentId manquant")

    intent = _stripe_call(stripe_client.retrieve_payment_intent, payment_intent_id)

    owner_id = meta.metadata_user_id(intent)
    if owner_id != str(member["id"]):
        logger.warning(
            "payments.service ownership mismatch payment_intent_id=%s caller=%s owner=%s",
            payment_intent_id, member["id"], owner_id,
        )
        raise PurchaseError(OWNERSHIP_MISMATCH, "Ce paiement appartient à un autre utilisateur")

    status = intent.get("status") or ""
    if status != c.PAYMENT_SUCCEEDED:
        raise PurchaseError(PAYMENT_NOT_COMPLETED, f"Paiement non finalisé (status={status})")

    season_year = meta.extract_metadata(intent)["season_year"]

    existing = repository.find_ticket(member["id"], season_year)
    if existing:
        if existing.get("stripe_payment_intent_id") == payment_intent_id:
            return ALREADY_PROCESSED, existing
        raise PurchaseError(TICKET_ALREADY_EXISTS, f"Vous avez déjà un abonnement pour la saison {season_year}")

    amount = intent.get("amount")
    if amount is None:
        raise PurchaseError(INVALID_PAYMENT_REQUEST, "Montant du paiement absent")

    try:
        ticket = repository.record_season_ticket(
            user_id=member["id"],
            season_year=season_year,
            amount_paid=str(to_major_units(amount)),
            payment_intent_id=payment_intent_id,
            ticket_type=c.TICKET_TYPE_REGULAR,
        )
    except TicketConflictError:
        return ALREADY_PROCESSED, _already_processed_or_conflict(member["id"], payment_intent_id, season_year)

    logger.info(
        "payments.service ticket created user_id=%s season_year=%s payment_intent_id=%s",
        member["id"], season_year, payment_intent_id,
    )
    return CREATED, ticket

def handle_webhook_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Traite un event Stripe déjà authentifié (signature vérifiée par stripe_client.parse_event).
    - payment_intent.succeeded: retrouve le membre via metadata.userId puis confirm_purchase
    - payment_intent.payment_failed: journalisé
    - autres types: ignorés
    Les refus métier sont journalisés et acquittés; seule l'indisponibilité Stripe remonte (503).
    """
    event_type = (event or {}).get("type")
    intent = meta.payment_intent_from_event(event)
    intent_id = intent.get("id")

    if event_type == "payment_intent.payment_failed":
        logger.info("payments.webhook payment failed payment_intent_id=%s", intent_id)
        return {"status": "logged"}
    if event_type != "payment_intent.succeeded":
        logger.info("payments.webhook ignored type=%s", event_type)
        return {"status": "ignored"}

    user_id = meta.metadata_user_id(intent)
    member = repository.get_member(user_id) if user_id else None
    if not member:
        logger.warning("payments.webhook member not found payment_intent_id=%s user_id=%s", intent_id, user_id)
        return {"status": "rejected", "code": MEMBER_NOT_FOUND}

    try:
        outcome, ticket = confirm_purchase(member, intent_id)
    except PurchaseError as e:
        if e.retryable:
            raise
        logger.warning("payments.webhook rejected payment_intent_id=%s code=%s", intent_id, e.code)
        return {"status": "rejected", "code": e.code}
    logger.info("payments.webhook %s payment_intent_id=%s ticket_id=%s", outcome, intent_id, ticket.get("id"))
    return {"status": outcome, "ticketId": ticket.get("id")}
