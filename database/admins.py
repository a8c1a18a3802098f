import hashlib
import hmac
import logging
import secrets
from typing import TYPE_CHECKING, Any

from backend.config import ADMIN_DISPLAY_NAME, ADMIN_PASSWORD, ADMIN_USERNAME
from backend.errors import AuthError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from database.db import Database

logger = logging.getLogger(__name__)

PASSWORD_HASH_ALGO = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS = 120_000


def _hash_password(password: str, *, salt: str | None = None) -> str:
    salt_value = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{PASSWORD_HASH_ALGO}${PASSWORD_HASH_ITERATIONS}${salt_value}${digest}"


def _verify_password(password: str, password_hash: str) -> bool:
    try:
        algo, rounds_text, salt_value, expected_digest = password_hash.split("$", 3)
        rounds = int(rounds_text)
    except (ValueError, TypeError):
        return False

    if algo != PASSWORD_HASH_ALGO or rounds <= 0:
        return False

    candidate_digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        rounds,
    ).hex()
    return hmac.compare_digest(candidate_digest, expected_digest)


def count_admins(db: "Database") -> int:
    row = db.fetch_one("SELECT COUNT(*) AS total FROM admins")
    return int(row["total"]) if row else 0


def ensure_default_admin(db: "Database") -> bool:
    """Seeds the configured default admin when no admin exists yet."""
    with db.transaction() as cur:
        if count_admins(db) > 0:
            return False
        cur.execute(
            """
            INSERT INTO admins (username, password_hash, display_name, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (ADMIN_USERNAME, _hash_password(ADMIN_PASSWORD), ADMIN_DISPLAY_NAME, db.timestamp()),
        )
    logger.info("Default admin %r seeded", ADMIN_USERNAME)
    return True


def get_admin_by_username(db: "Database", username: str) -> dict[str, Any] | None:
    return db.fetch_one(
        """
        SELECT id, username, password_hash, display_name, created_at
        FROM admins
        WHERE username = ? COLLATE NOCASE
        """,
        (username,),
    )


def create_admin(db: "Database", username: str, password: str, display_name: str | None = None) -> int:
    password_hash = _hash_password(password)
    with db.transaction() as cur:
        cur.execute("SELECT id FROM admins WHERE username = ? COLLATE NOCASE", (username,))
        if cur.fetchone():
            raise ValidationError("Username already exists.")
        cur.execute(
            """
            INSERT INTO admins (username, password_hash, display_name, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (username, password_hash, display_name or username, db.timestamp()),
        )
        admin_id = int(cur.lastrowid)
    logger.info("Admin %r created", username)
    return admin_id


def verify_admin_credentials(db: "Database", username: str, password: str) -> dict[str, Any] | None:
    admin = get_admin_by_username(db, username)
    if not admin or not _verify_password(password, admin["password_hash"]):
        return None
    return {
        "id": admin["id"],
        "username": admin["username"],
        "display_name": admin["display_name"] or admin["username"],
    }


def change_password(db: "Database", username: str, current_password: str, new_password: str) -> None:
    admin = get_admin_by_username(db, username)
    if not admin:
        raise NotFoundError("Admin not found.")
    if not _verify_password(current_password, admin["password_hash"]):
        raise AuthError("Current password is incorrect.")

    db.execute(
        "UPDATE admins SET password_hash = ? WHERE id = ?",
        (_hash_password(new_password), admin["id"]),
    )
    logger.info("Password changed for admin %r", admin["username"])


def list_admins(db: "Database") -> list[dict[str, Any]]:
    return db.fetch_all(
        """
        SELECT id, username, display_name, created_at
        FROM admins
        ORDER BY created_at DESC, id DESC
        """
    )
