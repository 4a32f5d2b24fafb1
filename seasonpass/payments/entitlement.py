from typing import Any, Dict, Optional, Tuple

from seasonpass import constants as c
from .errors import PurchaseError, ACCOUNT_NOT_CONFIRMED, TICKET_ALREADY_EXISTS

# module seasonpass.payments.entitlement
def can_purchase(
    member: Dict[str, Any],
    season_year: int,
    existing_ticket: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Règle d'éligibilité à l'achat d'un abonnement pour une saison.
    - Autorisé ssi status == confirmed ET aucun billet pour (membre, saison)
    - Retour: (True, None) ou (False, "account-not-confirmed" | "ticket-already-exists")
    Vérification consultative: elle est rejouée à la confirmation (le verrou réel
    est la contrainte d'unicité en base).
    """
    if (member or {}).get("status") != c.STATUS_CONFIRMED:
        return False, ACCOUNT_NOT_CONFIRMED
    if existing_ticket and int(existing_ticket.get("season_year") or season_year) == int(season_year):
        return False, TICKET_ALREADY_EXISTS
    return True, None

def ensure_can_purchase(
    member: Dict[str, Any],
    season_year: int,
    existing_ticket: Optional[Dict[str, Any]] = None,
) -> None:
    """Variante qui lève PurchaseError avec la raison du refus."""
    allowed, reason = can_purchase(member, season_year, existing_ticket)
    if allowed:
        return
    if reason == ACCOUNT_NOT_CONFIRMED:
        raise PurchaseError(reason, "Votre compte doit être confirmé avant d'acheter un abonnement")
    raise PurchaseError(reason, f"Vous avez déjà un abonnement pour la saison {season_year}")
