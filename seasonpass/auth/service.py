from typing import Optional, Dict, Any
import logging

from postgrest.exceptions import APIError

from seasonpass import constants as c
from seasonpass.infra.supabase_client import pg_error_code
from seasonpass.auth.models import AuthResponse, admin_to_public, handle_exception, storage_unavailable
from seasonpass.users.service import user_to_public
from . import tokens
from .passwords import hash_password, verify_password
from .repository import (
    get_user_by_id,
    get_user_by_username,
    get_user_by_email,
    create_user,
    get_admin_by_username,
    get_admin_by_id,
)

logger = logging.getLogger(__name__)

# --- Cas d'usage Auth exposés ---

def register(first_name: str, last_name: str, username: str, password: str, email: Optional[str] = None) -> AuthResponse:
    """Inscription d'un membre:
    - Refuse un username ou un email déjà pris (409)
    - Hash bcrypt du mot de passe, compte créé en status 'pending'
    - Retourne le membre et un jeton (7 jours) avec status_code 201
    """
    try:
        username_taken = get_user_by_username(username)
    except Exception as e:
        return storage_unavailable("register", e)
    try:
        if username_taken:
            return AuthResponse(False, error="Nom d'utilisateur déjà utilisé", status_code=409)
        if email and get_user_by_email(email):
            return AuthResponse(False, error="Email déjà utilisé", status_code=409)

        row = create_user({
            "first_name": first_name,
            "last_name": last_name,
            "username": username,
            "email": email,
            "password_hash": hash_password(password),
            "status": c.STATUS_PENDING,
        })
        token = tokens.encode_member_token(row.get("id"), username)
        logger.info("auth.register user_id=%s username=%s", row.get("id"), username)
        return AuthResponse(True, user=user_to_public(row), token=token, status_code=201)
    except APIError as e:
        if pg_error_code(e) == "23505":
            return AuthResponse(False, error="Nom d'utilisateur ou email déjà utilisé", status_code=409)
        return handle_exception("register", e)
    except Exception as e:
        return handle_exception("register", e)

def login(username: str, password: str) -> AuthResponse:
    """Connexion membre: 401 si identifiants invalides, 403 si compte suspendu, 503 si base injoignable."""
    try:
        user = get_user_by_username((username or "").strip())
    except Exception as e:
        return storage_unavailable("login", e)
    if not user or not verify_password(password, user.get("password_hash") or ""):
        return AuthResponse(False, error="Identifiants invalides", status_code=401)
    if user.get("status") == c.STATUS_SUSPENDED:
        return AuthResponse(False, error="Compte suspendu", status_code=403)
    token = tokens.encode_member_token(user.get("id"), user.get("username"))
    return AuthResponse(True, user=user_to_public(user), token=token)

def admin_login(username: str, password: str) -> AuthResponse:
    """Connexion console admin (table admin_users), jeton valable 24h."""
    try:
        admin = get_admin_by_username((username or "").strip())
    except Exception as e:
        return storage_unavailable("admin_login", e)
    if not admin or not verify_password(password, admin.get("password_hash") or ""):
        return AuthResponse(False, error="Identifiants invalides", status_code=401)
    token = tokens.encode_admin_token(admin.get("id"), admin.get("username"), admin.get("role") or c.ROLE_ADMIN)
    return AuthResponse(True, user=admin_to_public(admin), token=token)

# --- Intégration sécurité ---

def get_member_from_token(access_token: str) -> Dict[str, Any]:
    """Jeton membre -> ligne users (sans hash).
    Lève jwt.InvalidTokenError ou LookupError (utils.security traduit en 401);
    une erreur de base remonte telle quelle (503).
    """
    payload = tokens.decode_token(access_token)
    if payload.get("kind") != tokens.KIND_MEMBER:
        raise LookupError("jeton non membre")
    user = get_user_by_id(payload["sub"])
    if not user:
        raise LookupError("membre introuvable")
    return user

def get_admin_from_token(access_token: str) -> Dict[str, Any]:
    """Jeton admin -> ligne admin_users (sans hash)."""
    payload = tokens.decode_token(access_token)
    if payload.get("kind") != tokens.KIND_ADMIN:
        raise LookupError("jeton non admin")
    admin = get_admin_by_id(payload["sub"])
    if not admin or admin.get("role") not in c.ADMIN_ROLES:
        raise LookupError("admin introuvable")
    return admin
