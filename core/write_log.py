# core/write_log.py

"""
Compensating-action log for multi-row writes.

Supabase's REST client has no transactions, so bulk endpoints record how
to undo each write as they go. When a later write fails, the recorded
steps are replayed in reverse and the caller gets a BulkWriteError that
says exactly what was undone (and what could not be).
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from core import db
from core.errors import extract_supabase_error
from core.logging_config import logger


class BulkWriteError(Exception):
    def __init__(self, label: str, failed_index: int, cause: Exception,
                 rolled_back: int, rollback_errors: List[str]):
        super().__init__(f"{label}: entry {failed_index} failed: {extract_supabase_error(cause)}")
        self.label = label
        self.failed_index = failed_index
        self.cause = cause
        self.rolled_back = rolled_back
        self.rollback_errors = rollback_errors

    def to_details(self) -> Dict[str, Any]:
        return {
            "operation": self.label,
            "failedIndex": self.failed_index,
            "cause": extract_supabase_error(self.cause),
            "rolledBack": self.rolled_back,
            "rollbackErrors": self.rollback_errors,
            "consistent": not self.rollback_errors,
        }


class WriteLog:
    def __init__(self, label: str):
        self.label = label
        self._undo: List[Dict[str, Any]] = []

    def __len__(self):
        return len(self._undo)

    # -------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------
    def record_insert(self, table: str, key: Dict[str, Any]):
        """Undo = delete the row identified by ``key``."""
        self._undo.append({"kind": "delete", "table": table, "key": dict(key)})

    def record_update(self, table: str, key: Dict[str, Any], before: dict, columns: Iterable[str]):
        """Undo = write back the previous values of ``columns``."""
        previous = {col: before.get(col) for col in columns}
        self._undo.append({"kind": "restore", "table": table, "key": dict(key), "values": previous})

    # -------------------------------------------------------------
    # Rollback
    # -------------------------------------------------------------
    def rollback(self) -> tuple:
        """
        Undo recorded writes newest first.
        Returns (steps_undone, [error messages]).
        """
        undone = 0
        errors: List[str] = []

        while self._undo:
            step = self._undo.pop()
            try:
                if step["kind"] == "delete":
                    db.delete(step["table"], eq=step["key"])
                else:
                    db.update(step["table"], step["values"], eq=step["key"])
                undone += 1
            except Exception as e:
                message = f"{step['kind']} {step['table']} {step['key']}: {extract_supabase_error(e)}"
                logger.error(f"[{self.label}] rollback step failed: {message}")
                errors.append(message)

        logger.warning(f"[{self.label}] rolled back {undone} write(s), {len(errors)} failure(s)")
        return undone, errors


def run_bulk(label: str, entries: Iterable[Any], apply: Callable[[Any, WriteLog], Optional[Any]]) -> List[Any]:
    """
    Apply ``apply(entry, log)`` to each entry in order. Results that are
    None are dropped. Any exception undoes earlier writes and is re-raised
    as BulkWriteError.
    """
    log = WriteLog(label)
    results = []

    for index, entry in enumerate(entries):
        try:
            result = apply(entry, log)
        except Exception as e:
            logger.error(f"[{label}] entry {index} failed: {extract_supabase_error(e)}")
            rolled_back, rollback_errors = log.rollback()
            raise BulkWriteError(label, index, e, rolled_back, rollback_errors) from e

        if result is not None:
            results.append(result)

    return results
