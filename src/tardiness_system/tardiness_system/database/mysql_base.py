from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.exceptions import ConcurrencyConflict
from .connection import DatabaseConnection

_CONFLICT_ERRNOS = {errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT}


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One transaction on a fresh connection: commit on success, rollback on error.

    Deadlocks and lock wait timeouts are re-raised as ``ConcurrencyConflict``.
    """
    conn = conn_factory.connect()
    try:
        conn.start_transaction(isolation_level="READ COMMITTED")
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql_errors.DatabaseError as e:
        conn.rollback()
        if e.errno in _CONFLICT_ERRNOS:
            raise ConcurrencyConflict(str(e)) from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
