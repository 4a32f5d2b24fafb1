from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
import logging

import seasonpass.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

LIST_COLUMNS = (
    "id, first_name, last_name, username, email, status, has_season_ticket, "
    "discount_percentage, season_ticket_year, created_at"
)

# Caractères qui casseraient la syntaxe du filtre PostgREST or=(...)
_SEARCH_FORBIDDEN = ",()*"

def _search_filter(search: str) -> str:
    term = "".join(ch for ch in search if ch not in _SEARCH_FORBIDDEN).strip()
    pattern = f"%{term}%"
    return ",".join(f"{col}.ilike.{pattern}" for col in ("first_name", "last_name", "username", "email"))

# module seasonpass.admin.repository
def list_users(
    *,
    page: int,
    limit: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
    has_season_ticket: Optional[bool] = None,
) -> Tuple[List[dict], int]:
    """
    Page de membres pour la console admin, plus récents d'abord.
    - Filtres: status, has_season_ticket, recherche ILIKE sur prénom/nom/username/email
    - Retour: (lignes, total filtré); ([], 0) en cas d'erreur
    """
    offset = (page - 1) * limit
    try:
        query = (
            supabase_client.get_service_supabase()
            .table("users")
            .select(LIST_COLUMNS, count="exact")
        )
        if status:
            query = query.eq("status", status)
        if has_season_ticket is not None:
            query = query.eq("has_season_ticket", has_season_ticket)
        if search and search.strip():
            query = query.or_(_search_filter(search))
        res = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        rows = res.data or []
        total = getattr(res, "count", None)
        return rows, int(total) if total is not None else len(rows)
    except Exception:
        logger.exception("admin.repository.list_users failed page=%s limit=%s", page, limit)
        return [], 0

def update_user(user_id: Any, data: Dict[str, Any]) -> Optional[dict]:
    """Met à jour un membre; None si l'id n'existe pas. Les erreurs DB remontent."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .update(data)
            .eq("id", user_id)
            .execute()
        )
    except Exception:
        logger.exception("admin.repository.update_user failed id=%s data=%s", user_id, data)
        raise
    rows = res.data or []
    row = rows[0] if isinstance(rows, list) and rows else (rows if isinstance(rows, dict) else None)
    if row:
        row.pop("password_hash", None)
    return row

def count_rows(table_name: str, filters: Optional[Dict[str, Any]] = None, gte: Optional[Dict[str, Any]] = None) -> int:
    """
    Compte les lignes d'une table via Supabase (count='exact').
    - filters: égalités {colonne: valeur}; gte: bornes basses {colonne: valeur}
    - 0 en cas d'erreur
    """
    try:
        query = supabase_client.get_service_supabase().table(table_name).select("id", count="exact")
        for col, val in (filters or {}).items():
            query = query.eq(col, val)
        for col, val in (gte or {}).items():
            query = query.gte(col, val)
        res = query.execute()
        if getattr(res, "count", None) is not None:
            return int(res.count)  # type: ignore
        return len(res.data or [])
    except Exception:
        logger.exception("admin.repository.count_rows failed table=%s", table_name)
        return 0

def sum_revenue(season_year: int) -> Decimal:
    """Somme des amount_paid de la saison (Decimal); Decimal('0') en cas d'erreur."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("season_tickets")
            .select("amount_paid")
            .eq("season_year", int(season_year))
            .execute()
        )
        return sum((Decimal(str(r.get("amount_paid") or 0)) for r in (res.data or [])), Decimal("0"))
    except Exception:
        logger.exception("admin.repository.sum_revenue failed season_year=%s", season_year)
        return Decimal("0")
