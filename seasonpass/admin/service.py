# module seasonpass.admin.service

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException

from seasonpass import constants as c
from seasonpass.admin import repository as admin_repository
from seasonpass.users import repository as users_repository
from seasonpass.users.service import user_to_public
from seasonpass.payments import repository as payments_repository
from seasonpass.payments import service as payments_service

logger = logging.getLogger(__name__)

RECENT_REGISTRATION_DAYS = 30

def list_users(
    page: int = 1,
    limit: int = c.DEFAULT_PAGE_SIZE,
    status: Optional[str] = None,
    search: Optional[str] = None,
    has_season_ticket: Optional[bool] = None,
) -> Dict[str, Any]:
    """Liste paginée des membres (limit plafonnée à MAX_PAGE_SIZE)."""
    page = max(1, int(page or 1))
    limit = min(max(1, int(limit or c.DEFAULT_PAGE_SIZE)), c.MAX_PAGE_SIZE)
    rows, total = admin_repository.list_users(
        page=page, limit=limit, status=status, search=search, has_season_ticket=has_season_ticket
    )
    total_pages = (total + limit - 1) // limit if total else 0
    return {
        "users": [user_to_public(r) for r in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
    }

def get_user_detail(user_id: int) -> Dict[str, Any]:
    user = users_repository.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")
    out = user_to_public(user)
    out["stripeCustomerId"] = user.get("stripe_customer_id")
    out["updatedAt"] = user.get("updated_at")
    out["seasonTickets"] = [payments_service.ticket_to_public(t) for t in users_repository.list_user_tickets(user_id)]
    return out

def set_status(user_id: int, status: str) -> Dict[str, Any]:
    user = admin_repository.update_user(user_id, {"status": status})
    if not user:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")
    logger.info("admin.set_status user_id=%s status=%s", user_id, status)
    return {
        "id": user.get("id"),
        "firstName": user.get("first_name"),
        "lastName": user.get("last_name"),
        "username": user.get("username"),
        "status": user.get("status"),
    }

def set_discount(user_id: int, discount_percentage: int) -> Dict[str, Any]:
    user = admin_repository.update_user(user_id, {"discount_percentage": discount_percentage})
    if not user:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")
    logger.info("admin.set_discount user_id=%s discount_percentage=%s", user_id, discount_percentage)
    return {
        "id": user.get("id"),
        "firstName": user.get("first_name"),
        "lastName": user.get("last_name"),
        "username": user.get("username"),
        "discountPercentage": user.get("discount_percentage"),
    }

def recompute_entitlement(user_id: int) -> Dict[str, Any]:
    """Reconstruit has_season_ticket/season_ticket_year depuis les abonnements (réparation)."""
    if not users_repository.get_user_by_id(user_id):
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")
    flags = payments_repository.recompute_season_ticket_flags(user_id)
    logger.info("admin.recompute_entitlement user_id=%s flags=%s", user_id, flags)
    return {
        "userId": user_id,
        "hasSeasonTicket": flags["has_season_ticket"],
        "seasonTicketYear": flags["season_ticket_year"],
    }

def dashboard_stats() -> Dict[str, Any]:
    """Agrégats du tableau de bord pour la saison courante."""
    year = payments_service.current_season_year()
    since = (datetime.now(timezone.utc) - timedelta(days=RECENT_REGISTRATION_DAYS)).isoformat()
    revenue = admin_repository.sum_revenue(year)
    return {
        "seasonYear": year,
        "totalUsers": admin_repository.count_rows("users"),
        "usersByStatus": {s: admin_repository.count_rows("users", filters={"status": s}) for s in c.USER_STATUSES},
        "seasonTicketsSold": admin_repository.count_rows("season_tickets", filters={"season_year": year}),
        "revenue": float(revenue),
        "recentRegistrations": admin_repository.count_rows("users", gte={"created_at": since}),
    }
