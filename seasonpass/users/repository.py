"""Couche d'accès aux données (Supabase) pour le domaine Utilisateurs (membres).
Tables: users, season_tickets.
Les lectures qui servent à l'authentification (par id, par username) loggent puis
relancent: une panne de base ne doit pas se déguiser en « membre introuvable ».
Les autres lectures retournent des valeurs neutres ([], None);
les écritures loggent puis relancent (l'appelant doit distinguer un doublon 23505).
"""
from typing import Any, Dict, List, Optional
import logging

import seasonpass.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# Colonnes exposables (jamais password_hash)
PUBLIC_COLUMNS = (
    "id, first_name, last_name, username, email, status, discount_percentage, "
    "has_season_ticket, season_ticket_year, stripe_customer_id, created_at, updated_at"
)

def _first(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, list):
        return data[0] if data else None
    return data or None

def get_user_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    """Membre par id (sans hash). None si introuvable; les erreurs DB remontent."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select(PUBLIC_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("users.repository.get_user_by_id failed user_id=%s", user_id)
        raise

def get_user_by_username(username: str) -> Optional[Dict[str, Any]]:
    """Membre par username, hash inclus (réservé à la connexion)."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("*")
            .eq("username", username)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("users.repository.get_user_by_username failed username=%s", username)
        raise

def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """Membre par email. None si introuvable/erreur."""
    if not email:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("id, username, email")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("users.repository.get_user_by_email failed")
        return None

def create_user(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère un membre (status par défaut 'pending' côté DB).
    Lève postgrest.exceptions.APIError (ex: 23505 si username/email déjà pris).
    """
    try:
        res = supabase_client.get_service_supabase().table("users").insert(payload).execute()
    except Exception:
        logger.exception("users.repository.create_user failed username=%s", payload.get("username"))
        raise
    row = _first(res.data) or {}
    row.pop("password_hash", None)
    return row

def update_user(user_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Met à jour un membre et retourne la ligne (sans hash), None si id inconnu."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .update(fields)
            .eq("id", user_id)
            .execute()
        )
    except Exception:
        logger.exception("users.repository.update_user failed user_id=%s fields=%s", user_id, list(fields))
        raise
    row = _first(res.data)
    if row:
        row.pop("password_hash", None)
    return row

def list_user_tickets(user_id: Any) -> List[Dict[str, Any]]:
    """Abonnements du membre, saison la plus récente d'abord. [] en cas d'erreur."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("season_tickets")
            .select("*")
            .eq("user_id", user_id)
            .order("season_year", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("users.repository.list_user_tickets failed user_id=%s", user_id)
        return []
