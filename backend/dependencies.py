from fastapi import Request

from backend.errors import ServiceUnavailableError
from database.db import Database


def get_db(request: Request) -> Database:
    db: Database | None = getattr(request.app.state, "db", None)
    if db is None or not db.is_ready:
        raise ServiceUnavailableError("Database is not ready. Please retry.")
    return db
