from datetime import datetime

from fastapi import APIRouter, Depends

from backend.config import APP_VERSION
from backend.dependencies import get_db
from backend.security import require_session
from database.db import Database

router = APIRouter()

# Mounted by create_app() only when ENABLE_DEBUG_ENDPOINTS is set.
debug_router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": datetime.now().astimezone().isoformat(timespec="seconds"),
        "version": APP_VERSION,
    }


@debug_router.get("/debug/lockers")
def debug_lockers(db: Database = Depends(get_db), _session: dict = Depends(require_session)):
    rows = db.fetch_all(
        """
        SELECT id, nama, locker_number, locker_returned_at, visit_time
        FROM visits
        WHERE locker_number IS NOT NULL
        ORDER BY id DESC
        LIMIT 10
        """
    )
    return {"status": "ok", "totalRows": len(rows), "data": rows}
