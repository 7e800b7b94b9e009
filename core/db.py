# core/db.py

"""
Thin data store adapter over the Supabase client.

Every route and helper goes through these functions instead of building
PostgREST queries inline, so the store can be swapped (or faked in tests)
by patching ``core.db.get_supabase_client``.

Filters:
    eq     → {"column": value}; a None value becomes ``IS NULL``
    in_    → {"column": [values]}
    neq    → {"column": value}
"""

from typing import Any, Dict, List, Optional

from core.errors import StoreError, extract_supabase_error
from core.supabase_client import get_supabase_client
from core.utils import sanitize


# =================================================================
#  INTERNALS
# =================================================================

def _client():
    client = get_supabase_client()
    if client is None:
        raise StoreError("Supabase client not configured")
    return client


def _apply_filters(query, eq: Optional[Dict[str, Any]] = None, in_: Optional[Dict[str, list]] = None,
                   neq: Optional[Dict[str, Any]] = None):
    for key, val in (eq or {}).items():
        if val is None:
            query = query.is_(key, "null")
        else:
            query = query.eq(key, val)
    for key, values in (in_ or {}).items():
        query = query.in_(key, list(values))
    for key, val in (neq or {}).items():
        query = query.neq(key, val)
    return query


def _execute(query, table: str, operation: str):
    try:
        return query.execute()
    except Exception as e:
        raise StoreError(
            f"Failed to {operation} {table}: {extract_supabase_error(e)}",
            table=table,
            operation=operation,
        ) from e


# =================================================================
#  SELECT
# =================================================================

def select(
    table: str,
    *,
    columns: str = "*",
    eq: Optional[Dict[str, Any]] = None,
    in_: Optional[Dict[str, list]] = None,
    neq: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = None,
    ascending: bool = True,
    limit: Optional[int] = None,
) -> List[dict]:
    """SELECT rows; returns [] when nothing matches."""
    query = _apply_filters(_client().table(table).select(columns), eq, in_, neq)

    if order_by:
        query = query.order(order_by, desc=not ascending)
    if limit is not None:
        query = query.limit(limit)

    result = _execute(query, table, "select from")
    return result.data or []


def select_one(table: str, *, eq: Dict[str, Any], columns: str = "*") -> Optional[dict]:
    """First row matching ``eq`` or None."""
    rows = select(table, columns=columns, eq=eq, limit=1)
    return rows[0] if rows else None


def count(table: str, *, eq: Optional[Dict[str, Any]] = None) -> int:
    query = _apply_filters(_client().table(table).select("*", count="exact"), eq)
    result = _execute(query, table, "count")
    if result.count is not None:
        return result.count
    return len(result.data or [])


# =================================================================
#  INSERT / UPDATE / DELETE
# =================================================================

def insert_one(table: str, data: dict) -> dict:
    """INSERT one row and return it as stored."""
    query = _client().table(table).insert(sanitize(data), returning="representation")
    result = _execute(query, table, "insert into")

    if not result.data:
        raise StoreError(f"Insert into {table} returned no data", table=table, operation="insert")
    return result.data[0]


def update(table: str, data: dict, *, eq: Dict[str, Any]) -> List[dict]:
    """UPDATE every row matching ``eq``; returns the updated rows."""
    if not eq:
        raise StoreError(f"Refusing unfiltered update on {table}", table=table, operation="update")

    query = _apply_filters(
        _client().table(table).update(sanitize(data), returning="representation"), eq
    )
    result = _execute(query, table, "update")
    return result.data or []


def update_one(table: str, data: dict, *, eq: Dict[str, Any]) -> Optional[dict]:
    rows = update(table, data, eq=eq)
    return rows[0] if rows else None


def delete(table: str, *, eq: Dict[str, Any]) -> List[dict]:
    """DELETE every row matching ``eq``; returns the deleted rows."""
    if not eq:
        raise StoreError(f"Refusing unfiltered delete on {table}", table=table, operation="delete")

    query = _apply_filters(_client().table(table).delete(returning="representation"), eq)
    result = _execute(query, table, "delete from")
    return result.data or []
