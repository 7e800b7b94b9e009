# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Service-role client
# ============================================================

_client: Optional[Client] = None


def get_supabase_client() -> Optional[Client]:
    """
    Shared Supabase client built with the SERVICE ROLE KEY, so token
    validation and permission/plan tables are reachable regardless of
    row level security. Returns None when credentials are missing.
    """
    global _client
    if _client is not None:
        return _client

    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.error(
            f"Missing Supabase credentials (URL: {settings.SUPABASE_URL or 'MISSING'}, "
            f"SERVICE ROLE KEY: {'SET' if settings.SUPABASE_SERVICE_ROLE_KEY else 'MISSING'})"
        )
        return None

    try:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None

    return _client


# ============================================================
# Health check
# ============================================================

# Tables every gated request depends on
HEALTH_TABLES = ["plans", "features", "plan_features", "profiles", "profile_object_permissions", "subscriptions"]


def ping_supabase() -> dict:
    """
    Reads one row from each table in HEALTH_TABLES.
    Status is "ok", "degraded" (some tables failed) or "not_configured".
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    tables = {}
    for table in HEALTH_TABLES:
        try:
            res = client.table(table).select("id").limit(1).execute()
            tables[table] = {"status": "ok", "rows_found": len(res.data or [])}
        except Exception as err:
            logger.warning(f"Health check failed on {table}: {err}")
            tables[table] = {"status": "error", "detail": str(err)}

    failed = [t for t, r in tables.items() if r["status"] != "ok"]
    return {
        "service": "Supabase",
        "status": "degraded" if failed else "ok",
        "tables": tables,
    }
