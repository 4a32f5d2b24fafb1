# seasonpass.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, JWT)
- Expose la configuration métier (prix de l'abonnement, devises, nom du club)
- Sécurité HTTP: CORS, hôtes autorisés, HSTS
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} doit être un entier (valeur: {raw!r})")

# Supabase: URL et clé service (le backend opère côté serveur, sans RLS utilisateur)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé secrète, secret webhook et retries réseau du SDK (0 = aucun retry)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_MAX_NETWORK_RETRIES = _int_env("STRIPE_MAX_NETWORK_RETRIES", 0)

# Abonnement saison: prix de base en centimes, injecté dans le calcul de prix
SEASON_TICKET_PRICE = _int_env("SEASON_TICKET_PRICE", 10000)
if SEASON_TICKET_PRICE < 0:
    raise RuntimeError("SEASON_TICKET_PRICE doit être positif ou nul")
DEFAULT_CURRENCY = _clean_env(os.getenv("DEFAULT_CURRENCY") or "usd").lower()
ALLOWED_CURRENCIES = [c.strip().lower() for c in os.getenv("ALLOWED_CURRENCIES", "usd,eur").split(",") if c.strip()]
CLUB_NAME = _clean_env(os.getenv("CLUB_NAME") or "Solaris Waterpolo Club")

# JWT: signature HS256 des jetons membres/admins
JWT_SECRET = _clean_env(os.getenv("JWT_SECRET") or "change_me_with_a_long_random_secret")
JWT_ISSUER = _clean_env(os.getenv("JWT_ISSUER") or "seasonpass-api")
MEMBER_TOKEN_TTL_DAYS = _int_env("MEMBER_TOKEN_TTL_DAYS", 7)
ADMIN_TOKEN_TTL_HOURS = _int_env("ADMIN_TOKEN_TTL_HOURS", 24)

# CORS: les deux front-ends (app mobile/web et console admin) + liste libre
_front_urls = [_clean_env(os.getenv(k) or "") for k in ("FRONTEND_URL", "ADMIN_URL")]
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()] + [u for u in _front_urls if u]
if not CORS_ORIGINS:
    CORS_ORIGINS = ["*"]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# HSTS uniquement derrière HTTPS
ENABLE_HSTS = (os.getenv("ENABLE_HSTS", "false").lower() == "true")
