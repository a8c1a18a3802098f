import time

from fastapi import APIRouter, Depends

from backend.config import MIN_PASSWORD_LENGTH
from backend.dependencies import get_db
from backend.errors import AuthError, ValidationError
from backend.schemas import AdminLogin, AdminRegister, PasswordChange
from backend.security import issue_session_token, require_init_secret, require_session
from database.admins import (
    change_password,
    create_admin,
    ensure_default_admin,
    list_admins,
    verify_admin_credentials,
)
from database.db import Database

router = APIRouter()


def _check_new_password(password: str, label: str = "Password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters.")


@router.post("/auth/login")
def admin_login(payload: AdminLogin, db: Database = Depends(get_db)):
    username = payload.username.strip()
    password = payload.password

    if not username:
        raise ValidationError("Username is required.")
    if not password:
        raise ValidationError("Password is required.")

    admin = verify_admin_credentials(db, username, password)
    if not admin:
        raise AuthError("Invalid admin credentials.")

    token, claims = issue_session_token(admin["username"], admin_id=admin["id"])
    now = int(time.time())
    return {
        "success": True,
        "data": {
            "token": token,
            "token_type": "bearer",
            "expires_at": claims["exp"],
            "expires_in": max(0, int(claims["exp"]) - now),
            "user": {
                "id": admin["id"],
                "username": admin["username"],
                "displayName": admin["display_name"],
            },
        },
    }


@router.get("/auth/me")
def auth_me(session: dict = Depends(require_session)):
    return {
        "success": True,
        "data": {
            "username": session.get("sub"),
            "id": session.get("uid"),
            "role": session.get("role", "admin"),
            "expires_at": session.get("exp"),
            "issued_at": session.get("iat"),
        },
    }


@router.post("/auth/register", status_code=201)
def register_admin(
    payload: AdminRegister,
    db: Database = Depends(get_db),
    _session: dict = Depends(require_session),
):
    username = payload.username.strip()
    if not username or not payload.password:
        raise ValidationError("Username and password are required.")
    _check_new_password(payload.password)

    display_name = (payload.displayName or "").strip() or username
    admin_id = create_admin(db, username, payload.password, display_name)
    return {
        "success": True,
        "message": "Admin created.",
        "data": {"id": admin_id, "username": username, "displayName": display_name},
    }


@router.put("/auth/password")
def update_password(payload: PasswordChange, db: Database = Depends(get_db)):
    username = payload.username.strip()
    if not username or not payload.currentPassword or not payload.newPassword:
        raise ValidationError("All fields are required.")
    _check_new_password(payload.newPassword, "New password")

    change_password(db, username, payload.currentPassword, payload.newPassword)
    return {"success": True, "message": "Password updated."}


@router.get("/auth/admins")
def admins(db: Database = Depends(get_db), _session: dict = Depends(require_session)):
    rows = list_admins(db)
    return {
        "success": True,
        "data": [
            {
                "id": r["id"],
                "username": r["username"],
                "displayName": r["display_name"],
                "createdAt": r["created_at"],
            }
            for r in rows
        ],
    }


@router.post("/auth/init", dependencies=[Depends(require_init_secret)])
def init_default_admin(db: Database = Depends(get_db)):
    initialized = ensure_default_admin(db)
    if not initialized:
        return {"success": True, "message": "An admin account already exists.", "initialized": False}
    return {
        "success": True,
        "message": "Default admin initialized. Change its password immediately.",
        "initialized": True,
    }
