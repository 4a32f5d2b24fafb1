from typing import Any, Dict, Optional
import logging

import seasonpass.infra.supabase_client as supabase_client
from seasonpass.users.repository import (
    get_user_by_id,
    get_user_by_username,
    get_user_by_email,
    create_user,
)

logger = logging.getLogger(__name__)

__all__ = [
    "get_user_by_id",
    "get_user_by_username",
    "get_user_by_email",
    "create_user",
    "get_admin_by_username",
    "get_admin_by_id",
]

# --- Comptes admin (table admin_users) ---

def get_admin_by_username(username: str) -> Optional[Dict[str, Any]]:
    """Admin par username, hash inclus (réservé à la connexion). None si introuvable; les erreurs DB remontent."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("admin_users")
            .select("*")
            .eq("username", username)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("auth.repository.get_admin_by_username failed username=%s", username)
        raise

def get_admin_by_id(admin_id: Any) -> Optional[Dict[str, Any]]:
    """Admin par id (sans hash). None si introuvable; les erreurs DB remontent."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("admin_users")
            .select("id, username, email, role, created_at")
            .eq("id", admin_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("auth.repository.get_admin_by_id failed admin_id=%s", admin_id)
        raise
