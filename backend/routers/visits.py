from datetime import date, datetime, time

from fastapi import APIRouter, Depends

from backend.catalog import GENDERS, ROOMS, invalid_rooms
from backend.config import (
    STATS_DEFAULT_DAYS,
    STATS_MAX_DAYS,
    VISITS_DEFAULT_LIMIT,
    VISITS_MAX_LIMIT,
)
from backend.dependencies import get_db
from backend.errors import ValidationError
from backend.schemas import LockerReturn, VisitCreate
from backend.security import require_session
from database.db import TIMESTAMP_FORMAT, Database
from database.lockers import return_locker_by_number, return_locker_by_visit
from database.stats import get_visit_stats
from database.visits import query_visits, record_visits

router = APIRouter()


def _clamped_int(value: str | None, *, default: int, low: int, high: int) -> int:
    # Garbage falls back to the default; out-of-range numbers are clamped.
    try:
        number = int((value or "").strip())
    except ValueError:
        number = default
    return min(max(number, low), high)


def _timestamp_bound(value: str | None, field: str, *, end_of_day: bool) -> str | None:
    text = (value or "").strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            moment = datetime.combine(date.fromisoformat(text), time.max if end_of_day else time.min)
        else:
            moment = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid {field}; expected an ISO date or datetime.")
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment.strftime(TIMESTAMP_FORMAT)


def _room_filter(ruangan: str | None) -> str | None:
    room = (ruangan or "").strip()
    if not room:
        return None
    if room not in ROOMS:
        raise ValidationError(f"Invalid room: {room}. Valid rooms: {', '.join(ROOMS)}")
    return room


@router.post("/visits", status_code=201)
def create_visit(payload: VisitCreate, db: Database = Depends(get_db)):
    nama = payload.nama.strip()
    nim = payload.nim.strip()
    prodi = payload.prodi.strip()
    gender = payload.gender.strip()
    rooms = payload.rooms()

    missing = [
        name
        for name, value in (
            ("nama", nama),
            ("nim", nim),
            ("prodi", prodi),
            ("gender", gender),
            ("ruangan", rooms),
        )
        if not value
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if gender not in GENDERS:
        raise ValidationError("Gender must be L (Laki-laki) or P (Perempuan).")

    bad_rooms = invalid_rooms(rooms)
    if bad_rooms:
        raise ValidationError(
            f"Invalid room(s): {', '.join(bad_rooms)}. Valid rooms: {', '.join(ROOMS)}"
        )

    locker = payload.locker()
    record_visits(
        db,
        nama=nama,
        nim=nim,
        prodi=prodi,
        gender=gender,
        rooms=rooms,
        umur=payload.age(),
        locker_number=locker,
    )
    return {
        "success": True,
        "message": "Attendance recorded successfully",
        "data": {
            "nama": nama,
            "nim": nim,
            "rooms": rooms,
            "locker": locker,
        },
    }


@router.get("/visits")
def list_visits(
    ruangan: str | None = None,
    startDate: str | None = None,
    endDate: str | None = None,
    locker_number: str | None = None,
    limit: str | None = None,
    db: Database = Depends(get_db),
):
    rows = query_visits(
        db,
        ruangan=_room_filter(ruangan),
        locker_number=(locker_number or "").strip() or None,
        start=_timestamp_bound(startDate, "startDate", end_of_day=False),
        end=_timestamp_bound(endDate, "endDate", end_of_day=True),
        limit=_clamped_int(limit, default=VISITS_DEFAULT_LIMIT, low=1, high=VISITS_MAX_LIMIT),
    )
    return {"success": True, "count": len(rows), "data": rows}


@router.get("/visits/stats")
def visit_stats(
    ruangan: str | None = None,
    days: str | None = None,
    db: Database = Depends(get_db),
):
    stats = get_visit_stats(
        db,
        days=_clamped_int(days, default=STATS_DEFAULT_DAYS, low=1, high=STATS_MAX_DAYS),
        ruangan=_room_filter(ruangan),
    )
    return {"success": True, "data": stats}


@router.put("/visits/return-locker-by-number")
def return_locker_self_service(payload: LockerReturn, db: Database = Depends(get_db)):
    borrower = return_locker_by_number(db, payload.locker_number)
    return {
        "success": True,
        "message": f"Locker #{borrower['locker_number']} returned.",
        "data": borrower,
    }


@router.put("/visits/{visit_id}/return-locker")
def return_locker_admin(
    visit_id: int,
    db: Database = Depends(get_db),
    _session: dict = Depends(require_session),
):
    result = return_locker_by_visit(db, visit_id)
    return {
        "success": True,
        "message": f"Locker #{result['locker_number']} returned.",
        "data": result,
    }
