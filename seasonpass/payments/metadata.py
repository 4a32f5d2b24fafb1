"""
Sérialisation/désérialisation des métadonnées Stripe d'un PaymentIntent.
Clés: userId, seasonYear, originalAmount, discountPercentage, discountAmount.
Stripe stocke toutes les valeurs en chaînes: on convertit à l'aller et au retour.
"""
from typing import Any, Dict, Optional

from .errors import PurchaseError, INVALID_PAYMENT_METADATA

# module seasonpass.payments.metadata
def make_metadata(*, user_id: Any, season_year: int, breakdown: Dict[str, int]) -> Dict[str, str]:
    """
    Construit les metadata Stripe à partir du détail de prix (pricing.price_breakdown).
    Ex: {"userId": "42", "seasonYear": "2026", "originalAmount": "10000", ...}
    """
    return {
        "userId": str(user_id),
        "seasonYear": str(int(season_year)),
        "originalAmount": str(int(breakdown["original_amount"])),
        "discountPercentage": str(int(breakdown["discount_percentage"])),
        "discountAmount": str(int(breakdown["discount_amount"])),
    }

def _int_or_none(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return None

def extract_metadata(payment_intent: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extrait les metadata d'un PaymentIntent (dict).
    - user_id: chaîne (None si absent)
    - season_year: entier, obligatoire -> PurchaseError(invalid-payment-metadata) sinon
    - original_amount / discount_percentage / discount_amount: entiers ou None
    """
    meta = (payment_intent or {}).get("metadata") or {}
    user_id = meta.get("userId")
    season_year = _int_or_none(meta.get("seasonYear"))
    if season_year is None:
        raise PurchaseError(INVALID_PAYMENT_METADATA, "Métadonnées de paiement invalides (seasonYear)")
    return {
        "user_id": str(user_id) if user_id not in (None, "") else None,
        "season_year": season_year,
        "original_amount": _int_or_none(meta.get("originalAmount")),
        "discount_percentage": _int_or_none(meta.get("discountPercentage")),
        "discount_amount": _int_or_none(meta.get("discountAmount")),
    }

def metadata_user_id(payment_intent: Dict[str, Any]) -> Optional[str]:
    """userId brut des metadata (sans valider le reste), pour le contrôle de propriété."""
    meta = (payment_intent or {}).get("metadata") or {}
    user_id = meta.get("userId")
    return str(user_id) if user_id not in (None, "") else None

def payment_intent_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Objet PaymentIntent porté par un event webhook (event.data.object)."""
    if not isinstance(event, dict):
        return {}
    return (event.get("data") or {}).get("object") or {}
