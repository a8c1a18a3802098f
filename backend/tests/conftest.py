from datetime import datetime

import pytest
from fastapi.testclient import TestClient

import backend.config as config
from backend.main import create_app
from database.db import Database

FIXED_NOW = datetime(2026, 3, 10, 14, 30, 0)


class FrozenClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture()
def clock():
    return FrozenClock(FIXED_NOW)


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "perpus_test.db"


@pytest.fixture()
def app(db_path, clock):
    # Long debounce so only explicit flushes touch the file during a test.
    return create_app(db=Database(db_path, flush_delay=60, clock=clock))


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(client, app) -> Database:
    return app.state.db


@pytest.fixture()
def auth_headers(client):
    res = client.post(
        "/auth/login",
        json={
            "username": config.ADMIN_USERNAME,
            "password": config.ADMIN_PASSWORD,
        },
    )
    assert res.status_code == 200
    token = res.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


def insert_visit(
    db: Database,
    *,
    visit_time: str,
    ruangan: str = "referensi",
    nama: str = "Siti Aminah",
    nim: str = "30602100001",
    prodi: str = "S1 Teknik Informatika",
    faculty: str = "Fakultas Teknologi Industri",
    gender: str = "P",
    locker_number: str | None = None,
    locker_returned_at: str | None = None,
) -> int:
    cur = db.execute(
        """
        INSERT INTO visits (
            nama, nim, prodi, faculty, gender, ruangan,
            locker_number, locker_returned_at, visit_time, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            nama,
            nim,
            prodi,
            faculty,
            gender,
            ruangan,
            locker_number,
            locker_returned_at,
            visit_time,
            visit_time,
        ),
    )
    return int(cur.lastrowid)


def visit_payload(**overrides):
    payload = {
        "nama": "Budi Santoso",
        "nim": "30602100042",
        "prodi": "S1 Teknik Informatika",
        "gender": "L",
        "ruangan": "referensi",
    }
    payload.update(overrides)
    return payload


def count_visits(db: Database) -> int:
    row = db.fetch_one("SELECT COUNT(*) AS total FROM visits")
    return int(row["total"]) if row else 0
