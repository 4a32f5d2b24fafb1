from datetime import datetime, timezone
from typing import Any, Dict, Tuple
import logging

import seasonpass.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

def health_database_info() -> Tuple[int, Dict[str, Any]]:
    """
    Sonde la base (SELECT id FROM users LIMIT 1).
    Retour: (200, {status: OK, ...}) ou (500, {status: ERROR, ...})
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        supabase_client.get_service_supabase().table("users").select("id").limit(1).execute()
        return 200, {"status": "OK", "message": "Service opérationnel", "timestamp": timestamp}
    except Exception:
        logger.exception("health.database check failed")
        return 500, {"status": "ERROR", "message": "Base de données injoignable", "timestamp": timestamp}
