from fastapi import Request, HTTPException, Depends
from typing import Optional, Dict, Any
import logging

import jwt

from seasonpass import constants as c

logger = logging.getLogger(__name__)

UNAVAILABLE_DETAIL = "Service temporairement indisponible, réessayez plus tard"

def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None

def get_current_user(request: Request) -> Dict[str, Any]:
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    try:
        # Délégué au service Auth
        from seasonpass.auth.service import get_member_from_token as _svc_get_member_from_token
        return _svc_get_member_from_token(token)
    except HTTPException:
        raise
    except (jwt.InvalidTokenError, LookupError):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    except Exception:
        # jeton valide mais base injoignable: pas une session expirée
        logger.exception("security.get_current_user member lookup failed path=%s", request.url.path)
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL)

def get_current_admin(request: Request) -> Dict[str, Any]:
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    try:
        from seasonpass.auth.service import get_admin_from_token as _svc_get_admin_from_token
        return _svc_get_admin_from_token(token)
    except HTTPException:
        raise
    except LookupError:
        # jeton valide mais pas celui d'un admin
        raise HTTPException(status_code=403, detail="Accès interdit")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    except Exception:
        logger.exception("security.get_current_admin admin lookup failed path=%s", request.url.path)
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL)

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("status") == c.STATUS_SUSPENDED:
        raise HTTPException(status_code=403, detail="Compte suspendu")
    return user

def require_admin(admin: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
    if admin.get("role") not in c.ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Accès interdit")
    return admin
