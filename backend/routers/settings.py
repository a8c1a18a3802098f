from fastapi import APIRouter, Depends

from backend.dependencies import get_db
from backend.errors import NotFoundError, ValidationError
from backend.schemas import OperatingHours, SettingValue
from backend.security import require_session
from database.db import Database
from database.settings import (
    OPERATING_HOURS_KEY,
    get_operating_hours,
    get_setting,
    put_operating_hours,
    put_setting,
)

router = APIRouter()


@router.get("/settings/operating-hours")
def read_operating_hours(db: Database = Depends(get_db)):
    return {"success": True, "data": get_operating_hours(db)}


@router.put("/settings/operating-hours")
def update_operating_hours(
    payload: OperatingHours,
    db: Database = Depends(get_db),
    _session: dict = Depends(require_session),
):
    hours = put_operating_hours(db, payload.model_dump())
    return {"success": True, "message": "Operating hours updated.", "data": hours}


@router.get("/settings/{key}")
def read_setting(key: str, db: Database = Depends(get_db)):
    row = get_setting(db, key.strip())
    if not row:
        raise NotFoundError(f"Setting '{key}' not found.")
    return {"success": True, "data": row}


@router.put("/settings/{key}")
def update_setting(
    key: str,
    payload: SettingValue,
    db: Database = Depends(get_db),
    _session: dict = Depends(require_session),
):
    key = key.strip()
    if not key:
        raise ValidationError("Setting key is required.")
    if key == OPERATING_HOURS_KEY:
        raise ValidationError("Use /settings/operating-hours to change operating hours.")
    return {"success": True, "data": put_setting(db, key, payload.value)}
