import logging
from typing import Any, Dict, Optional

import stripe
from fastapi import APIRouter, Request, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool

from seasonpass.utils.security import require_user
from seasonpass.utils.rate_limit import optional_rate_limit
from seasonpass.payments import stripe_client
from seasonpass.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

class CreatePaymentIntentRequest(BaseModel):
    currency: Optional[str] = None

    @field_validator("currency")
    def currency_lower(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None

class ConfirmPaymentRequest(BaseModel):
    paymentIntentId: str = Field(min_length=1)

# module seasonpass.payments.views
@router.get("/pricing")
def pricing(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """
    Prix de l'abonnement pour le membre connecté (unités majeures).
    Retour: {originalPrice, discountPercentage, discountAmount, finalPrice, currency}
    """
    return payments_service.get_pricing(user)

@router.post("/create-payment-intent", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_payment_intent(
    body: Optional[CreatePaymentIntentRequest] = None,
    user: Dict[str, Any] = Depends(require_user),
) -> Dict[str, Any]:
    """
    Ouvre un PaymentIntent Stripe pour l'abonnement de la saison courante.
    - Entrée JSON optionnelle: {"currency": "usd" | "eur"}
    - Refus: 403 account-not-confirmed, 409 ticket-already-exists, 503 Stripe indisponible
    - Retour: {clientSecret, amount, originalAmount, discountPercentage, discountAmount, currency}
    """
    currency = body.currency if body else None
    return payments_service.begin_purchase(user, currency)

@router.post("/confirm-payment", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
def confirm_payment(body: ConfirmPaymentRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """
    Confirme un paiement et crée l'abonnement.
    Rejouer la même confirmation renvoie le billet existant avec alreadyProcessed=true.
    """
    outcome, ticket = payments_service.confirm_purchase(user, body.paymentIntentId)
    already = outcome == payments_service.ALREADY_PROCESSED
    return {
        "message": "Paiement déjà traité" if already else "Abonnement acheté avec succès",
        "alreadyProcessed": already,
        "ticket": payments_service.ticket_to_public(ticket),
    }

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request) -> Dict[str, Any]:
    """
    Webhook Stripe (PaymentIntent).
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET), 400 si invalide
    - payment_intent.succeeded: même chemin idempotent que /confirm-payment
    - Réponse: {"received": true, "status": ...}
    """
    try:
        event = await stripe_client.parse_event(request)
    except (ValueError, stripe.SignatureVerificationError):
        logger.warning("payments.webhook invalid payload or signature")
        raise HTTPException(status_code=400, detail="Invalid Stripe webhook payload")
    # appels Stripe/Supabase bloquants: hors de la boucle d'événements
    result = await run_in_threadpool(payments_service.handle_webhook_event, event)
    return {"received": True, **result}
