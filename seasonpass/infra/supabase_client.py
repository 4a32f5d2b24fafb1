from typing import Optional
from supabase import create_client, Client
from seasonpass.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

_service_supabase: Optional[Client] = None

def get_service_supabase() -> Client:
    """
    Client Supabase service-role (bypass RLS), partagé par tous les repositories.
    L'authentification des membres est gérée par nos propres JWT, pas par Supabase Auth.
    """
    global _service_supabase
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_URL/SUPABASE_SERVICE_KEY manquants pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase

def pg_error_code(e: Exception) -> Optional[str]:
    """
    Extrait le SQLSTATE d'une postgrest.exceptions.APIError (ex: '23505' = violation d'unicité).
    Tolère les deux formes: attribut .code ou dict dans e.args[0].
    """
    code = getattr(e, "code", None)
    if code:
        return str(code)
    if e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
        return str(code) if code else None
    return None
