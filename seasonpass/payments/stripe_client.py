"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les appels ne sont jamais rejoués ici: max_network_retries vient de la config (0 par défaut).
"""
import stripe
from typing import Any, Dict, Optional
from fastapi import Request

from seasonpass import config

# module seasonpass.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échouent côté SDK (AuthenticationError),
      traduit en payment-provider-unavailable par le service.
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    stripe.max_network_retries = config.STRIPE_MAX_NETWORK_RETRIES
    return stripe

def _to_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject -> dict (récursif via to_dict)
    if obj is None:
        return {}
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_customer(*, user_id: Any, username: Optional[str], email: Optional[str] = None, name: Optional[str] = None) -> Dict[str, Any]:
    """
    Crée un customer Stripe pour un membre.
    metadata: {"userId": "...", "username": "..."} pour retrouver le membre depuis le dashboard Stripe.
    Retour: dict customer (ex: {"id": "cus_...", ...})
    """
    require_stripe()
    params: Dict[str, Any] = {
        "metadata": {"userId": str(user_id), "username": username or ""},
    }
    if email:
        params["email"] = email
    if name:
        params["name"] = name
    customer = stripe.Customer.create(**params)
    return _to_dict(customer)

def create_payment_intent(
    *,
    amount: int,
    currency: str,
    customer: str,
    metadata: Dict[str, str],
    description: str,
) -> Dict[str, Any]:
    """
    Crée un PaymentIntent (paiement carte côté client via client_secret).
    - amount: centimes
    - metadata: voir payments.metadata.make_metadata (relu à la confirmation)
    Retour: dict PaymentIntent incluant "id" et "client_secret".
    """
    require_stripe()
    intent = stripe.PaymentIntent.create(
        amount=amount,
        currency=currency,
        customer=customer,
        metadata=metadata,
        description=description,
        automatic_payment_methods={"enabled": True},
    )
    return _to_dict(intent)

def retrieve_payment_intent(payment_intent_id: str) -> Dict[str, Any]:
    """
    Récupère un PaymentIntent par son identifiant.
    Retour: dict incluant "id", "status", "amount", "currency", "metadata".
    """
    require_stripe()
    intent = stripe.PaymentIntent.retrieve(payment_intent_id)
    return _to_dict(intent)

async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Lève ValueError (payload) ou stripe.SignatureVerificationError (signature).
    """
    require_stripe()
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    event = stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET or "")
    return _to_dict(event)
