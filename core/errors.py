# core/errors.py

from typing import Any, Optional

from fastapi import HTTPException


class StoreError(Exception):
    """
    Raised by the data store adapter (core/db.py) when a Supabase
    call fails. Carries the table and operation for log context.
    """

    def __init__(self, message: str, *, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.table = table
        self.operation = operation


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError carries .message)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: PostgREST / Auth errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: plain string fallback
    return str(error) or "Unknown Supabase error"


def error_body(error: str, details: Any = None) -> dict:
    """JSON body shared by every error response: {error, details?}."""
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return body


def handle_store_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle store errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what failed (e.g., "Failed to create profile")
        status_code: HTTP status code used when nothing more specific matches

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    # User-friendly messages for common Postgres failures
    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=409, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
