import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator

from backend.config import FLUSH_DEBOUNCE_SECONDS
from backend.errors import InternalError, ServiceUnavailableError
from database.admins import ensure_default_admin
from database.settings import ensure_default_operating_hours

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class FlushScheduler:
    """
    Debounces flush requests: the first ``schedule()`` arms a timer and every
    further call before it fires is folded into that same flush.
    """

    def __init__(self, flush: Callable[[], None], delay: float):
        self._flush = flush
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> bool:
        """Returns True if a new timer was armed, False if one was already pending."""
        with self._lock:
            if self._closed or self._timer is not None:
                return False
            timer = threading.Timer(self.delay, self._run)
            timer.daemon = True
            self._timer = timer
            timer.start()
            return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush_now(self) -> None:
        self.cancel()
        self._flush()

    def open(self) -> None:
        with self._lock:
            self._closed = False

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.flush_now()

    def _run(self) -> None:
        with self._lock:
            self._timer = None
        try:
            self._flush()
        except Exception:
            # Nothing above a timer thread can handle this; the next mutation re-arms.
            logger.exception("Scheduled database flush failed")


class Database:
    """
    In-memory SQLite image mirrored to ``path``.

    Lifecycle: ``init()`` loads the file (if any) and migrates the schema,
    ``close()`` writes one last time and releases the connection. Mutations
    call ``mark_dirty()``; the image reaches disk at most ``flush_delay``
    seconds later, or immediately through ``flush_now()``.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        flush_delay: float = FLUSH_DEBOUNCE_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.path = Path(path)
        self.clock = clock
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None
        self._ready = False
        self.scheduler = FlushScheduler(self._write_image, flush_delay)

    # -----------------------------
    # Lifecycle
    # -----------------------------
    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def lock(self):
        return self._lock

    def init(self) -> None:
        with self._lock:
            if self._conn is not None:
                return
            conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
            conn.row_factory = sqlite3.Row
            if self.path.exists():
                source = sqlite3.connect(str(self.path))
                try:
                    source.backup(conn)
                finally:
                    source.close()
                logger.info("Loaded database image from %s", self.path)
            else:
                logger.info("No database file at %s; starting with an empty store", self.path)

            self._conn = conn
            self.scheduler.open()
            self._create_schema()
            ensure_default_operating_hours(self)
            ensure_default_admin(self)
            self._ready = True

        self.flush_now()

    def close(self) -> None:
        if self._conn is None:
            return
        self._ready = False
        self.scheduler.close()
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
        logger.info("Database closed")

    def mark_dirty(self) -> None:
        self.scheduler.schedule()

    def flush_now(self) -> None:
        self.scheduler.flush_now()

    def _write_image(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            if tmp_path.exists():
                tmp_path.unlink()
            target = sqlite3.connect(str(tmp_path))
            try:
                self._conn.backup(target)
            finally:
                target.close()
            os.replace(tmp_path, self.path)
        logger.info("Database flushed to %s", self.path)

    # -----------------------------
    # Clock
    # -----------------------------
    def now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    def timestamp(self, value: datetime | None = None) -> str:
        return (value or self.now()).strftime(TIMESTAMP_FORMAT)

    # -----------------------------
    # Statement helpers
    # -----------------------------
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ServiceUnavailableError("Database is not ready. Please retry.")
        return self._conn

    @contextmanager
    def _guard(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self._connection()
            try:
                yield conn
            except sqlite3.Error:
                logger.exception("Database error during %s", operation)
                raise InternalError()

    def fetch_all(self, sql: str, params: tuple | list = ()) -> list[dict[str, Any]]:
        with self._guard("query") as conn:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def fetch_one(self, sql: str, params: tuple | list = ()) -> dict[str, Any] | None:
        with self._guard("query") as conn:
            row = conn.execute(sql, params).fetchone()
            return dict(row) if row is not None else None

    def execute(self, sql: str, params: tuple | list = ()) -> sqlite3.Cursor:
        with self._guard("write") as conn:
            cur = conn.execute(sql, params)
        self.mark_dirty()
        return cur

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Explicit BEGIN/COMMIT around the block. Any exception rolls back;
        SQLite errors are logged and surface as ``InternalError``.
        """
        with self._lock:
            conn = self._connection()
            cur = conn.cursor()
            cur.execute("BEGIN")
            try:
                yield cur
                cur.execute("COMMIT")
            except sqlite3.Error:
                conn.rollback()
                logger.exception("Transaction rolled back")
                raise InternalError()
            except BaseException:
                conn.rollback()
                raise
        self.mark_dirty()

    # -----------------------------
    # Schema
    # -----------------------------
    def _create_schema(self) -> None:
        conn = self._connection()
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS visits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                nama TEXT NOT NULL,
                nim TEXT NOT NULL,
                prodi TEXT NOT NULL,
                faculty TEXT,
                gender TEXT CHECK(gender IN ('L', 'P')),
                ruangan TEXT NOT NULL,
                locker_number TEXT,
                locker_returned_at TEXT DEFAULT NULL,
                umur INTEGER,
                visit_time TEXT NOT NULL,
                created_at TEXT
            );

            CREATE TABLE IF NOT EXISTS admins (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT NOT NULL UNIQUE COLLATE NOCASE,
                password_hash TEXT NOT NULL,
                display_name TEXT,
                created_at TEXT
            );

            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT
            );
            """
        )

        # Migration for older DB files
        for column_ddl in (
            "locker_number TEXT",
            "locker_returned_at TEXT DEFAULT NULL",
            "umur INTEGER",
            "faculty TEXT",
            "created_at TEXT",
        ):
            try:
                conn.execute(f"ALTER TABLE visits ADD COLUMN {column_ddl};")
            except sqlite3.OperationalError:
                pass

        conn.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_visits_ruangan ON visits(ruangan);
            CREATE INDEX IF NOT EXISTS idx_visits_visit_time ON visits(visit_time);
            CREATE INDEX IF NOT EXISTS idx_visits_nim ON visits(nim);
            CREATE INDEX IF NOT EXISTS idx_visits_room_time ON visits(ruangan, visit_time);
            CREATE INDEX IF NOT EXISTS idx_visits_locker_time ON visits(locker_number, visit_time);
            """
        )
