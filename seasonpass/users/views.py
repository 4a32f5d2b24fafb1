# module seasonpass.users.views

"""API du membre connecté (/api/v1/users).
- /me: lecture et mise à jour du profil
- /season-tickets: historique des abonnements
- /can-purchase-ticket: éligibilité à l'achat pour la saison courante
Toutes les routes exigent un jeton membre (require_user); un compte suspendu reçoit 403.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, field_validator

from seasonpass.utils.security import require_user
from seasonpass.utils.validators import validate_optional_name
from . import service

router = APIRouter(prefix="/api/v1/users", tags=["Users API"])

class UpdateProfileRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("firstName", "lastName")
    def names(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_name(v)

@router.get("/me")
def get_me(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {"user": service.user_to_public(user)}

@router.patch("/me")
def update_me(body: UpdateProfileRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    updated = service.update_profile(
        user,
        first_name=body.firstName,
        last_name=body.lastName,
        email=str(body.email) if body.email else None,
    )
    return {"message": "Profil mis à jour", "user": updated}

@router.get("/season-tickets")
def season_tickets(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {"seasonTickets": service.list_season_tickets(user["id"])}

@router.get("/can-purchase-ticket")
def can_purchase_ticket(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return service.purchase_eligibility(user)
