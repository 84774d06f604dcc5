"""Error logging with database persistence.

Stores request failures in an ``error_log`` table next to the product
catalog so they survive restarts of a hosted instance.

Error types captured:
- validation_error: Invalid input rejected with HTTP 400
- scrape_error: Rendering proxy failures
- database_error: Query failures, connection issues
- unexpected_error: Uncaught exceptions with full stack trace
"""

import json
import logging
import sqlite3
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from aom_scrape.config import DB_PATH

__all__ = [
    "ErrorLogger",
    "log_unexpected_error",
]

logger = logging.getLogger(__name__)


class ErrorLogger:
    """Log errors to the SQLite database."""

    def __init__(self, db_path: Optional[Union[Path, str]] = None):
        self.db_path = str(db_path or DB_PATH)
        self._ensure_table_exists()

    def _get_connection(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_table_exists(self) -> None:
        """Create the error_log table if it doesn't exist."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS error_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    error_type TEXT NOT NULL,
                    error_message TEXT NOT NULL,
                    stack_trace TEXT,
                    context JSON,
                    operation TEXT,
                    request_path TEXT
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_error_timestamp
                ON error_log(timestamp)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_error_type
                ON error_log(error_type)
            """)
            conn.commit()
        finally:
            conn.close()

    def log_error(
        self,
        error_type: str,
        error_message: str,
        operation: Optional[str] = None,
        request_path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        stack_trace: Optional[str] = None,
    ) -> None:
        """Log error to database.

        Failures here are reported through the module logger only; the
        caller is usually already handling another error.
        """
        if stack_trace is None:
            stack_trace = traceback.format_exc() if sys.exc_info()[0] else None

        try:
            conn = self._get_connection()
            try:
                conn.execute("""
                    INSERT INTO error_log (
                        timestamp, error_type, error_message, stack_trace,
                        context, operation, request_path
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now(timezone.utc).isoformat(),
                    error_type,
                    error_message,
                    stack_trace,
                    json.dumps(context, default=str) if context else None,
                    operation,
                    request_path,
                ))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to log error to database: {e}")
            return

        logger.info(f"Logged {error_type} for {request_path or operation}")

    def get_errors(
        self,
        error_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query errors, newest first."""
        query = "SELECT * FROM error_log WHERE 1=1"
        params: List[Any] = []

        if error_type:
            query += " AND error_type = ?"
            params.append(error_type)

        query += " ORDER BY id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        conn = self._get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()

        errors = []
        for row in rows:
            error = dict(row)
            if error.get("context"):
                error["context"] = json.loads(error["context"])
            errors.append(error)
        return errors

    def get_error_summary(self) -> Dict[str, Any]:
        """Get error counts, total and per type."""
        conn = self._get_connection()
        try:
            total = conn.execute("SELECT COUNT(*) AS count FROM error_log").fetchone()["count"]
            by_type = {
                row["error_type"]: row["count"]
                for row in conn.execute("""
                    SELECT error_type, COUNT(*) AS count
                    FROM error_log
                    GROUP BY error_type
                    ORDER BY count DESC
                """)
            }
        finally:
            conn.close()

        return {"total_errors": total, "errors_by_type": by_type}


def log_unexpected_error(
    error: Exception,
    db_path: Optional[Union[Path, str]] = None,
    operation: Optional[str] = None,
    request_path: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Persist an uncaught exception with its stack trace."""
    stack_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    ErrorLogger(db_path).log_error(
        error_type="unexpected_error",
        error_message=f"{type(error).__name__}: {error}",
        operation=operation,
        request_path=request_path,
        context=context,
        stack_trace=stack_trace,
    )
