from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Service temporairement indisponible, réessayez plus tard"

class AuthResponse:
    def __init__(
        self,
        success: bool,
        user: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        error: Optional[str] = None,
        status_code: int = 200,
    ):
        self.success = success
        self.user = user
        self.token = token
        self.error = error
        self.status_code = status_code

def admin_to_public(admin: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": admin.get("id"),
        "username": admin.get("username"),
        "email": admin.get("email"),
        "role": admin.get("role"),
    }

def handle_exception(action: str, e: Exception) -> AuthResponse:
    logger.exception(f"Erreur {action}")
    return AuthResponse(False, error=f"Erreur {action}", status_code=500)

def storage_unavailable(action: str, e: Exception) -> AuthResponse:
    # base injoignable: l'appelant peut réessayer, ce n'est pas un échec d'identifiants
    logger.exception(f"Base indisponible pendant {action}")
    return AuthResponse(False, error=UNAVAILABLE_MESSAGE, status_code=503)
