import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from backend.catalog import faculty_for

if TYPE_CHECKING:
    from database.db import Database

logger = logging.getLogger(__name__)

VISIT_COLUMNS = (
    "id, nama, nim, prodi, faculty, gender, ruangan, umur, "
    "locker_number, locker_returned_at, visit_time, created_at"
)


def _insert_visit(
    cur: sqlite3.Cursor,
    *,
    nama: str,
    nim: str,
    prodi: str,
    faculty: str,
    gender: str,
    ruangan: str,
    umur: int | None,
    locker_number: str | None,
    visit_time: str,
) -> int:
    cur.execute(
        """
        INSERT INTO visits (
            nama, nim, prodi, faculty, gender, ruangan,
            umur, locker_number, visit_time, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (nama, nim, prodi, faculty, gender, ruangan, umur, locker_number, visit_time, visit_time),
    )
    return int(cur.lastrowid)


def record_visits(
    db: "Database",
    *,
    nama: str,
    nim: str,
    prodi: str,
    gender: str,
    rooms: list[str],
    umur: int | None = None,
    locker_number: str | None = None,
) -> list[int]:
    """
    Writes one visit row per room, all-or-nothing.

    Inputs are expected to be validated already. Every row of one submission
    shares the same ``visit_time``; together with ``nim`` and
    ``locker_number`` that identifies the locker checkout they belong to.
    """
    faculty = faculty_for(prodi)
    visit_time = db.timestamp()

    with db.transaction() as cur:
        visit_ids = [
            _insert_visit(
                cur,
                nama=nama,
                nim=nim,
                prodi=prodi,
                faculty=faculty,
                gender=gender,
                ruangan=room,
                umur=umur,
                locker_number=locker_number,
                visit_time=visit_time,
            )
            for room in rooms
        ]

    logger.info(
        "Recorded %d visit(s) for nim=%s rooms=%s locker=%s",
        len(visit_ids),
        nim,
        ",".join(rooms),
        locker_number,
    )
    return visit_ids


def get_visit(db: "Database", visit_id: int) -> dict[str, Any] | None:
    return db.fetch_one(
        f"SELECT {VISIT_COLUMNS} FROM visits WHERE id = ?",
        (visit_id,),
    )


def query_visits(
    db: "Database",
    *,
    ruangan: str | None = None,
    locker_number: str | None = None,
    start: str | None = None,
    end: str | None = None,
    limit: int,
) -> list[dict[str, Any]]:
    clauses: list[str] = []
    params: list[Any] = []

    if locker_number:
        clauses.append("locker_number = ?")
        params.append(locker_number)
    if ruangan:
        clauses.append("ruangan = ?")
        params.append(ruangan)
    if start:
        clauses.append("visit_time >= ?")
        params.append(start)
    if end:
        clauses.append("visit_time <= ?")
        params.append(end)

    where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    params.append(limit)
    return db.fetch_all(
        f"""
        SELECT {VISIT_COLUMNS}
        FROM visits
        {where_sql}
        ORDER BY visit_time DESC, id DESC
        LIMIT ?
        """,
        params,
    )