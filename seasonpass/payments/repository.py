"""
Accès aux données pour la feature 'payments' (membres, abonnements).
Sur le parcours d'achat, une erreur de stockage n'est jamais convertie en valeur par défaut:
on log puis on relance, le service décide du rendu.
"""
from typing import Any, Dict, Optional
import logging

from postgrest.exceptions import APIError

import seasonpass.infra.supabase_client as supabase_client
from seasonpass import constants as c
from .errors import TicketConflictError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

MEMBER_COLUMNS = (
    "id, username, first_name, last_name, email, status, discount_percentage, "
    "has_season_ticket, season_ticket_year, stripe_customer_id"
)

def _first(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, list):
        return data[0] if data else None
    return data or None

# module seasonpass.payments.repository
def get_member(user_id: Any) -> Optional[Dict[str, Any]]:
    """Lit un membre (table 'users') par id. None si introuvable."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select(MEMBER_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("payments.repository.get_member failed user_id=%s", user_id)
        raise

def find_ticket(user_id: Any, season_year: int) -> Optional[Dict[str, Any]]:
    """Billet existant pour (membre, saison), ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("season_tickets")
            .select("*")
            .eq("user_id", user_id)
            .eq("season_year", int(season_year))
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("payments.repository.find_ticket failed user_id=%s season_year=%s", user_id, season_year)
        raise

def find_ticket_by_payment_intent(payment_intent_id: str) -> Optional[Dict[str, Any]]:
    """Billet créé par un PaymentIntent donné (clé d'idempotence), ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("season_tickets")
            .select("*")
            .eq("stripe_payment_intent_id", payment_intent_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("payments.repository.find_ticket_by_payment_intent failed payment_intent_id=%s", payment_intent_id)
        raise

def set_stripe_customer_id(user_id: Any, customer_id: str) -> Optional[str]:
    """
    Enregistre le customer Stripe du membre seulement s'il n'en a pas encore
    (UPDATE ... WHERE stripe_customer_id IS NULL), puis relit la valeur stockée.
    Si deux tentatives concurrentes ont créé chacune un customer, la première écriture gagne
    et les deux appelants repartent avec la même référence.
    """
    client = supabase_client.get_service_supabase()
    try:
        (
            client
            .table("users")
            .update({"stripe_customer_id": customer_id})
            .eq("id", user_id)
            .is_("stripe_customer_id", "null")
            .execute()
        )
        res = (
            client
            .table("users")
            .select("stripe_customer_id")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        row = _first(res.data) or {}
        return row.get("stripe_customer_id")
    except Exception:
        logger.exception("payments.repository.set_stripe_customer_id failed user_id=%s", user_id)
        raise

def record_season_ticket(
    *,
    user_id: Any,
    season_year: int,
    amount_paid: str,
    payment_intent_id: str,
    ticket_type: str = c.TICKET_TYPE_REGULAR,
) -> Dict[str, Any]:
    """
    Insère le billet ET met à jour has_season_ticket/season_ticket_year dans une seule
    transaction (fonction SQL purchase_season_ticket, voir sql/schema.sql).
    - amount_paid: montant en unités (ex: "100.00")
    - Lève TicketConflictError si une contrainte d'unicité rejette l'insertion (23505)
    """
    params = {
        "p_user_id": user_id,
        "p_season_year": int(season_year),
        "p_amount_paid": amount_paid,
        "p_payment_intent_id": payment_intent_id,
        "p_ticket_type": ticket_type,
    }
    try:
        res = supabase_client.get_service_supabase().rpc("purchase_season_ticket", params).execute()
    except APIError as e:
        if supabase_client.pg_error_code(e) == UNIQUE_VIOLATION:
            logger.info(
                "payments.repository.record_season_ticket conflict user_id=%s season_year=%s payment_intent_id=%s",
                user_id, season_year, payment_intent_id,
            )
            raise TicketConflictError(user_id, season_year) from e
        logger.exception("payments.repository.record_season_ticket failed user_id=%s season_year=%s", user_id, season_year)
        raise
    except Exception:
        logger.exception("payments.repository.record_season_ticket failed user_id=%s season_year=%s", user_id, season_year)
        raise
    ticket = _first(res.data)
    if not ticket:
        raise RuntimeError("purchase_season_ticket n'a retourné aucune ligne")
    return ticket

def recompute_season_ticket_flags(user_id: Any) -> Dict[str, Any]:
    """
    Recalcule has_season_ticket/season_ticket_year depuis season_tickets (réparation/audit).
    Retour: {"has_season_ticket": bool, "season_ticket_year": int | None}
    """
    try:
        res = supabase_client.get_service_supabase().rpc(
            "recompute_season_ticket_flags", {"p_user_id": user_id}
        ).execute()
    except Exception:
        logger.exception("payments.repository.recompute_season_ticket_flags failed user_id=%s", user_id)
        raise
    row = _first(res.data) or {}
    return {
        "has_season_ticket": bool(row.get("has_season_ticket")),
        "season_ticket_year": row.get("season_ticket_year"),
    }
