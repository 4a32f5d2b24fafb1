import re
from typing import Optional

from seasonpass import constants as c

# Validateurs partagés par les modèles pydantic (inscription, profil, admin).
# Chaque fonction retourne la valeur normalisée ou lève ValueError.

def validate_username(v: str) -> str:
    v = (v or "").strip()
    if len(v) < c.USERNAME_MIN_LENGTH:
        raise ValueError(f"Le nom d'utilisateur doit contenir au moins {c.USERNAME_MIN_LENGTH} caractères")
    if len(v) > c.USERNAME_MAX_LENGTH:
        raise ValueError(f"Le nom d'utilisateur doit contenir au plus {c.USERNAME_MAX_LENGTH} caractères")
    if not re.match(c.USERNAME_PATTERN, v):
        raise ValueError("Le nom d'utilisateur ne peut contenir que des lettres, chiffres et underscores")
    return v

def validate_password(v: str) -> str:
    if not v or len(v) < c.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Le mot de passe doit contenir au moins {c.PASSWORD_MIN_LENGTH} caractères")
    if len(v) > c.PASSWORD_MAX_LENGTH:
        raise ValueError(f"Le mot de passe doit contenir au plus {c.PASSWORD_MAX_LENGTH} caractères")
    return v

def validate_name(v: str) -> str:
    v = (v or "").strip()
    if len(v) < c.NAME_MIN_LENGTH:
        raise ValueError(f"Le nom doit contenir au moins {c.NAME_MIN_LENGTH} caractères")
    if len(v) > c.NAME_MAX_LENGTH:
        raise ValueError(f"Le nom doit contenir au plus {c.NAME_MAX_LENGTH} caractères")
    return v

def validate_optional_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return validate_name(v)

def validate_discount_percentage(v: int) -> int:
    # bool est un int en Python: on le refuse explicitement
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError("La remise doit être un entier")
    if v < c.DISCOUNT_MIN or v > c.DISCOUNT_MAX:
        raise ValueError(f"La remise doit être comprise entre {c.DISCOUNT_MIN}% et {c.DISCOUNT_MAX}%")
    return v

def validate_status(v: str) -> str:
    v = (v or "").strip().lower()
    if v not in c.USER_STATUSES:
        raise ValueError(f"Statut invalide (attendu: {', '.join(c.USER_STATUSES)})")
    return v
