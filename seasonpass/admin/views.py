from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from seasonpass import constants as c
from seasonpass.utils.security import require_admin
from seasonpass.utils.validators import validate_discount_percentage, validate_status
from seasonpass.admin import service as admin_service

# module seasonpass.admin.views
router = APIRouter(prefix="/api/v1/admin", tags=["Admin API"])

class StatusUpdateRequest(BaseModel):
    status: str

    @field_validator("status")
    def status_values(cls, v: str) -> str:
        return validate_status(v)

class DiscountUpdateRequest(BaseModel):
    discountPercentage: Any

    @field_validator("discountPercentage")
    def discount_range(cls, v: Any) -> int:
        return validate_discount_percentage(v)

@router.get("/users")
def admin_list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=c.DEFAULT_PAGE_SIZE, ge=1),
    status: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    hasSeasonTicket: Optional[bool] = Query(default=None),
    admin: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    if status:
        try:
            status = validate_status(status)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return admin_service.list_users(page=page, limit=limit, status=status, search=search, has_season_ticket=hasSeasonTicket)

@router.get("/users/{user_id}")
def admin_get_user(user_id: int, admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    return {"user": admin_service.get_user_detail(user_id)}

@router.patch("/users/{user_id}/status")
def admin_update_status(user_id: int, body: StatusUpdateRequest, admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    user = admin_service.set_status(user_id, body.status)
    return {"message": "Statut mis à jour", "user": user}

@router.patch("/users/{user_id}/discount")
def admin_update_discount(user_id: int, body: DiscountUpdateRequest, admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    user = admin_service.set_discount(user_id, body.discountPercentage)
    return {"message": "Remise mise à jour", "user": user}

@router.post("/users/{user_id}/entitlement/recompute")
def admin_recompute_entitlement(user_id: int, admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    return admin_service.recompute_entitlement(user_id)

@router.get("/dashboard/stats")
def admin_dashboard_stats(admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    return admin_service.dashboard_stats()
