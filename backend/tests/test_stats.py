import pytest

from conftest import insert_visit


@pytest.fixture()
def seeded(db):
    insert_visit(db, visit_time="2026-03-10 09:00:00", ruangan="karel", gender="L", faculty="Fakultas Hukum")
    insert_visit(db, visit_time="2026-03-10 09:30:00", ruangan="smartlab", gender="P", faculty="Fakultas Teknik")
    insert_visit(db, visit_time="2026-03-09 10:00:00", ruangan="karel", gender="P", faculty="Fakultas Hukum")
    insert_visit(db, visit_time="2026-03-05 09:10:00", ruangan="referensi", gender="L", faculty="Unknown")
    insert_visit(db, visit_time="2026-02-20 13:00:00", ruangan="karel", gender="L", faculty="Fakultas Hukum")
    # outside the default window
    insert_visit(db, visit_time="2025-12-01 10:00:00", ruangan="karel", gender="P", faculty="Fakultas Hukum")
    # after "now"
    insert_visit(db, visit_time="2026-03-11 09:00:00", ruangan="karel", gender="P", faculty="Fakultas Hukum")
    return db


def _stats(client, **params):
    res = client.get("/visits/stats", params=params)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    return body["data"]


def test_stats_default_window(client, seeded):
    data = _stats(client)

    assert data["totalVisits"] == 5
    assert data["byRoom"] == [
        {"ruangan": "karel", "count": 3},
        {"ruangan": "referensi", "count": 1},
        {"ruangan": "smartlab", "count": 1},
    ]
    assert data["byFaculty"][0] == {"faculty": "Fakultas Hukum", "count": 3}
    assert data["byGender"] == [
        {"gender": "L", "count": 3},
        {"gender": "P", "count": 2},
    ]
    assert data["dailyTrend"] == [
        {"date": "2026-03-05", "count": 1},
        {"date": "2026-03-09", "count": 1},
        {"date": "2026-03-10", "count": 2},
    ]
    assert data["peakHours"] == [
        {"hour": "09", "count": 3},
        {"hour": "10", "count": 1},
        {"hour": "13", "count": 1},
    ]


@pytest.mark.parametrize("days", ["1", "7", "30", "3650"])
def test_stats_sub_totals_agree(client, seeded, days):
    data = _stats(client, days=days)
    total = data["totalVisits"]
    assert total == sum(r["count"] for r in data["byRoom"])
    assert total == sum(r["count"] for r in data["byGender"])
    assert total == sum(r["count"] for r in data["byFaculty"])


def test_stats_days_is_clamped(client, seeded):
    assert _stats(client, days="1")["totalVisits"] == 2
    assert _stats(client, days="0")["totalVisits"] == 2
    assert _stats(client, days="-3")["totalVisits"] == 2
    assert _stats(client, days="abc")["totalVisits"] == 5
    assert _stats(client, days="999999")["totalVisits"] == 6


def test_stats_trend_ignores_days_parameter(client, seeded):
    narrow = _stats(client, days="1")
    wide = _stats(client, days="3650")
    assert narrow["dailyTrend"] == wide["dailyTrend"]


def test_stats_room_filter(client, seeded):
    data = _stats(client, ruangan="karel")
    assert data["totalVisits"] == 3
    assert data["byRoom"] == [{"ruangan": "karel", "count": 3}]
    assert data["dailyTrend"] == [
        {"date": "2026-03-09", "count": 1},
        {"date": "2026-03-10", "count": 1},
    ]


def test_stats_peak_hours_are_capped_at_five(client, db):
    for hour in range(8, 16):
        insert_visit(db, visit_time=f"2026-03-10 {hour:02d}:05:00")
    insert_visit(db, visit_time="2026-03-10 12:45:00")

    peaks = _stats(client)["peakHours"]
    assert len(peaks) == 5
    assert peaks[0] == {"hour": "12", "count": 2}


def test_stats_empty_store(client):
    data = _stats(client)
    assert data["totalVisits"] == 0
    assert data["byRoom"] == []
    assert data["dailyTrend"] == []


def test_stats_rejects_unknown_room(client):
    res = client.get("/visits/stats", params={"ruangan": "basement"})
    assert res.status_code == 400
    assert res.json()["success"] is False
