"""
Locker lifecycle on top of the visits table.

A locker is checked out implicitly when a visit is recorded with a
``locker_number`` and stays out while ``locker_returned_at`` is NULL. The
rows written by one multi-room submission form a single checkout, so a
return closes all of them at once.

Checkout does not look for an outstanding checkout of the same locker; two
submissions naming the same locker both succeed.
"""

import logging
from typing import TYPE_CHECKING, Any

from backend.errors import ConflictError, NotFoundError, ValidationError
from database.visits import get_visit

if TYPE_CHECKING:
    import sqlite3

    from database.db import Database

logger = logging.getLogger(__name__)


def _close_checkout(cur: "sqlite3.Cursor", visit: dict[str, Any], returned_at: str) -> int:
    cur.execute(
        """
        UPDATE visits
        SET locker_returned_at = ?
        WHERE locker_number = ?
          AND nim = ?
          AND visit_time = ?
          AND locker_returned_at IS NULL
        """,
        (returned_at, visit["locker_number"], visit["nim"], visit["visit_time"]),
    )
    return cur.rowcount


def find_active_checkout_today(db: "Database", locker_number: str) -> dict[str, Any] | None:
    today = db.now().date().isoformat()
    return db.fetch_one(
        """
        SELECT id, nama, nim, prodi, locker_number, visit_time, locker_returned_at
        FROM visits
        WHERE locker_number = ?
          AND locker_returned_at IS NULL
          AND DATE(visit_time) = ?
        ORDER BY visit_time DESC, id DESC
        LIMIT 1
        """,
        (locker_number, today),
    )


def return_locker_by_number(db: "Database", locker_number: str) -> dict[str, Any]:
    """
    Self-service return: closes today's most recent open checkout of the locker.
    Yesterday's unreturned checkouts are deliberately out of reach here.
    """
    locker_number = locker_number.strip()
    if not locker_number:
        raise ValidationError("locker_number is required.")

    with db.transaction() as cur:
        visit = find_active_checkout_today(db, locker_number)
        if not visit:
            raise NotFoundError(f"No active checkout for locker #{locker_number} today.")
        returned_at = db.timestamp()
        closed = _close_checkout(cur, visit, returned_at)

    logger.info("Locker #%s returned by nim=%s (%d row(s))", locker_number, visit["nim"], closed)
    return {
        "nama": visit["nama"],
        "nim": visit["nim"],
        "prodi": visit["prodi"],
        "locker_number": visit["locker_number"],
        "visit_time": visit["visit_time"],
        "locker_returned_at": returned_at,
    }


def return_locker_by_visit(db: "Database", visit_id: int) -> dict[str, Any]:
    """Administrative return of the checkout a given visit belongs to, any day."""
    with db.transaction() as cur:
        visit = get_visit(db, visit_id)
        if visit is None:
            raise NotFoundError("Visit not found.")
        if not visit["locker_number"]:
            raise ValidationError("This visit has no locker assigned.")
        if visit["locker_returned_at"]:
            raise ConflictError("Locker already returned.")

        returned_at = db.timestamp()
        closed = _close_checkout(cur, visit, returned_at)

    logger.info("Locker #%s returned via visit %d (%d row(s))", visit["locker_number"], visit_id, closed)
    return {
        "id": visit_id,
        "locker_number": visit["locker_number"],
        "locker_returned_at": returned_at,
    }
