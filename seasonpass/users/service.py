"""Couche service du domaine Utilisateurs.
Profil du membre connecté, historique des abonnements et éligibilité à l'achat.
Les réponses sont en camelCase (convention des front-ends).
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException
from postgrest.exceptions import APIError

from seasonpass.infra.supabase_client import pg_error_code
from seasonpass.payments import service as payments_service
from seasonpass.payments import repository as payments_repo
from seasonpass.payments.entitlement import can_purchase
from . import repository

logger = logging.getLogger(__name__)

def user_to_public(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": user.get("id"),
        "firstName": user.get("first_name"),
        "lastName": user.get("last_name"),
        "username": user.get("username"),
        "email": user.get("email"),
        "status": user.get("status"),
        "discountPercentage": user.get("discount_percentage") or 0,
        "hasSeasonTicket": bool(user.get("has_season_ticket")),
        "seasonTicketYear": user.get("season_ticket_year"),
        "createdAt": user.get("created_at"),
    }

def update_profile(user: Dict[str, Any], first_name: Optional[str] = None, last_name: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
    """Met à jour prénom/nom/email du membre.
    - 400 si aucun champ fourni
    - 409 si l'email appartient déjà à un autre membre
    """
    fields: Dict[str, Any] = {}
    if first_name is not None:
        fields["first_name"] = first_name
    if last_name is not None:
        fields["last_name"] = last_name
    if email is not None:
        other = repository.get_user_by_email(email)
        if other and str(other.get("id")) != str(user.get("id")):
            raise HTTPException(status_code=409, detail="Email déjà utilisé")
        fields["email"] = email
    if not fields:
        raise HTTPException(status_code=400, detail="Aucun champ à mettre à jour")

    try:
        updated = repository.update_user(user["id"], fields)
    except APIError as e:
        if pg_error_code(e) == "23505":
            raise HTTPException(status_code=409, detail="Email déjà utilisé")
        raise
    if not updated:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")
    return user_to_public(updated)

def list_season_tickets(user_id: Any) -> List[Dict[str, Any]]:
    return [payments_service.ticket_to_public(t) for t in repository.list_user_tickets(user_id)]

def purchase_eligibility(user: Dict[str, Any]) -> Dict[str, Any]:
    """Le membre peut-il acheter l'abonnement de la saison courante ?"""
    year = payments_service.current_season_year()
    existing = payments_repo.find_ticket(user["id"], year)
    allowed, reason = can_purchase(user, year, existing)
    out: Dict[str, Any] = {
        "canPurchase": allowed,
        "currentYear": year,
        "userStatus": user.get("status"),
        "hasCurrentYearTicket": existing is not None,
    }
    if reason:
        out["reason"] = reason
    return out
