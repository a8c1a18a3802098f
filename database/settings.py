import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from backend.catalog import DEFAULT_OPERATING_HOURS
from backend.schemas import OperatingHours

if TYPE_CHECKING:
    from database.db import Database

logger = logging.getLogger(__name__)

OPERATING_HOURS_KEY = "operating_hours"


def get_setting(db: "Database", key: str) -> dict[str, Any] | None:
    return db.fetch_one(
        "SELECT key, value, updated_at FROM settings WHERE key = ?",
        (key,),
    )


def put_setting(db: "Database", key: str, value: str) -> dict[str, Any]:
    updated_at = db.timestamp()
    db.execute(
        """
        INSERT INTO settings (key, value, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value, updated_at),
    )
    return {"key": key, "value": value, "updated_at": updated_at}


def ensure_default_operating_hours(db: "Database") -> bool:
    if get_setting(db, OPERATING_HOURS_KEY):
        return False
    put_setting(db, OPERATING_HOURS_KEY, json.dumps(dict(DEFAULT_OPERATING_HOURS)))
    logger.info("Default operating hours seeded")
    return True


def _default_hours() -> dict[str, Any]:
    return {day: dict(hours) for day, hours in DEFAULT_OPERATING_HOURS.items()}


def get_operating_hours(db: "Database") -> dict[str, Any]:
    row = get_setting(db, OPERATING_HOURS_KEY)
    if not row:
        return _default_hours()
    try:
        return OperatingHours.model_validate_json(row["value"]).model_dump()
    except PydanticValidationError:
        logger.warning("Stored operating hours are malformed; serving defaults")
        return _default_hours()


def put_operating_hours(db: "Database", hours: dict[str, Any]) -> dict[str, Any]:
    put_setting(db, OPERATING_HOURS_KEY, json.dumps(hours))
    return hours
