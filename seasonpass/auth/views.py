from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, Dict, Any

from seasonpass.utils.rate_limit import optional_rate_limit
from seasonpass.utils.validators import validate_name, validate_password, validate_username
from .service import (
    register as svc_register,
    login as svc_login,
    admin_login as svc_admin_login,
)

# --- API Router (/api/v1/auth) ---

api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])

class RegisterRequest(BaseModel):
    firstName: str
    lastName: str
    username: str
    password: str
    email: Optional[EmailStr] = None

    @field_validator("firstName", "lastName")
    def names(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("username")
    def username_rules(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    def password_rules(cls, v: str) -> str:
        return validate_password(v)

class LoginRequest(BaseModel):
    username: str
    password: str

@api_router.post("/register", status_code=201, dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_register(req: RegisterRequest) -> Dict[str, Any]:
    """Inscription d'un membre (status 'pending' jusqu'à validation par un admin).
    - 409 si username/email déjà pris
    - Retourne {message, user, token}
    """
    result = svc_register(
        first_name=req.firstName,
        last_name=req.lastName,
        username=req.username,
        password=req.password,
        email=str(req.email) if req.email else None,
    )
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.error or "Inscription impossible")
    return {"message": "Inscription réussie", "user": result.user, "token": result.token}

@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest) -> Dict[str, Any]:
    """Connexion membre: 401 identifiants invalides, 403 compte suspendu."""
    result = svc_login(req.username, req.password)
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.error or "Identifiants invalides")
    return {"message": "Connexion réussie", "user": result.user, "token": result.token}

@api_router.post("/admin/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_admin_login(req: LoginRequest) -> Dict[str, Any]:
    """Connexion console admin."""
    result = svc_admin_login(req.username, req.password)
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.error or "Identifiants invalides")
    return {"message": "Connexion admin réussie", "admin": result.user, "token": result.token}
