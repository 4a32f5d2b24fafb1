"""
Jetons d'accès JWT (HS256, PyJWT).
- membre: kind="member", valable MEMBER_TOKEN_TTL_DAYS jours
- admin: kind="admin", valable ADMIN_TOKEN_TTL_HOURS heures
Le décodage vérifie signature, expiration et émetteur; lève jwt.InvalidTokenError sinon.
"""
import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from seasonpass import config

ALGORITHM = "HS256"
KIND_MEMBER = "member"
KIND_ADMIN = "admin"

def _encode(sub: Any, kind: str, ttl_seconds: int, extra: Dict[str, Any]) -> str:
    now = int(time.time())
    body: Dict[str, Any] = {
        "iss": config.JWT_ISSUER,
        "iat": now,
        "exp": now + ttl_seconds,
        "sub": str(sub),
        "kind": kind,
    }
    body.update(extra)
    return jwt.encode(body, config.JWT_SECRET, algorithm=ALGORITHM)

def encode_member_token(user_id: Any, username: str) -> str:
    return _encode(user_id, KIND_MEMBER, config.MEMBER_TOKEN_TTL_DAYS * 86400, {"username": username})

def encode_admin_token(admin_id: Any, username: str, role: str) -> str:
    return _encode(admin_id, KIND_ADMIN, config.ADMIN_TOKEN_TTL_HOURS * 3600, {"username": username, "role": role})

def decode_token(token: str) -> Dict[str, Any]:
    """Décode et valide un jeton; les claims sub et kind sont obligatoires."""
    payload = jwt.decode(
        token,
        config.JWT_SECRET,
        algorithms=[ALGORITHM],
        issuer=config.JWT_ISSUER,
        leeway=5,
        options={"require": ["exp", "iat", "iss", "sub"]},
    )
    if payload.get("kind") not in (KIND_MEMBER, KIND_ADMIN):
        raise InvalidTokenError("missing_claim:kind")
    return payload
