"""
Calcul de prix pur (pas de Stripe, pas de DB).
Le prix de base est toujours passé en argument (config.SEASON_TICKET_PRICE côté service).
"""
from decimal import Decimal
from typing import Any, Dict

from seasonpass import constants as c
from .errors import PurchaseError, INVALID_DISCOUNT

# module seasonpass.payments.pricing
def discount_amount(base_price: int, discount_percentage: int) -> int:
    """
    Montant de la remise en centimes, arrondi au centime supérieur à partir de .5.
    - Calcul entier: (base * pct + 50) // 100, sans passer par les flottants.
    - Lève PurchaseError(invalid-discount) hors de [0, 100], ValueError si base < 0.
    """
    if isinstance(base_price, bool) or not isinstance(base_price, int) or base_price < 0:
        raise ValueError(f"base_price doit être un entier >= 0 (reçu: {base_price!r})")
    if (
        isinstance(discount_percentage, bool)
        or not isinstance(discount_percentage, int)
        or not c.DISCOUNT_MIN <= discount_percentage <= c.DISCOUNT_MAX
    ):
        raise PurchaseError(INVALID_DISCOUNT, f"Remise invalide: {discount_percentage!r}")
    return (base_price * discount_percentage + 50) // 100

def compute_charge(base_price: int, discount_percentage: int) -> int:
    """Montant final facturé (centimes) = prix de base - remise."""
    return base_price - discount_amount(base_price, discount_percentage)

def price_breakdown(base_price: int, discount_percentage: int) -> Dict[str, int]:
    """Décomposition en centimes, utilisée pour la session Stripe et la réponse client."""
    discount = discount_amount(base_price, discount_percentage)
    return {
        "original_amount": base_price,
        "discount_percentage": discount_percentage,
        "discount_amount": discount,
        "amount": base_price - discount,
    }

def to_major_units(amount_minor: Any) -> Decimal:
    """Centimes -> unités (Decimal à 2 décimales), ex: 10000 -> Decimal('100.00')."""
    return (Decimal(int(amount_minor)) / 100).quantize(Decimal("0.01"))
