from datetime import timedelta
from typing import TYPE_CHECKING, Any

from backend.config import STATS_PEAK_HOURS, STATS_TREND_DAYS

if TYPE_CHECKING:
    from database.db import Database


def _window_filter(db: "Database", days: int, ruangan: str | None) -> tuple[str, list[Any]]:
    """
    WHERE clause shared by every aggregate so that the sub-totals of one
    response always describe the same rows.
    """
    now = db.now()
    clauses = ["visit_time >= ?", "visit_time <= ?"]
    params: list[Any] = [db.timestamp(now - timedelta(days=days)), db.timestamp(now)]
    if ruangan:
        clauses.append("ruangan = ?")
        params.append(ruangan)
    return "WHERE " + " AND ".join(clauses), params


def _grouped(db: "Database", column: str, where_sql: str, params: list[Any], *, order_by: str) -> list[dict[str, Any]]:
    return db.fetch_all(
        f"""
        SELECT {column}, COUNT(*) AS count
        FROM visits
        {where_sql}
        GROUP BY {column}
        ORDER BY {order_by}
        """,
        params,
    )


def get_visit_stats(db: "Database", *, days: int, ruangan: str | None = None) -> dict[str, Any]:
    # Hold the store lock so no write lands between the sub-queries.
    with db.lock:
        where_sql, params = _window_filter(db, days, ruangan)

        total_row = db.fetch_one(f"SELECT COUNT(*) AS total FROM visits {where_sql}", params)
        by_room = _grouped(db, "ruangan", where_sql, params, order_by="count DESC, ruangan")
        by_faculty = _grouped(db, "faculty", where_sql, params, order_by="count DESC, faculty")
        by_gender = _grouped(db, "gender", where_sql, params, order_by="gender")

        trend_where, trend_params = _window_filter(db, STATS_TREND_DAYS, ruangan)
        daily_trend = db.fetch_all(
            f"""
            SELECT DATE(visit_time) AS date, COUNT(*) AS count
            FROM visits
            {trend_where}
            GROUP BY DATE(visit_time)
            ORDER BY date
            """,
            trend_params,
        )

        peak_hours = db.fetch_all(
            f"""
            SELECT strftime('%H', visit_time) AS hour, COUNT(*) AS count
            FROM visits
            {where_sql}
            GROUP BY hour
            ORDER BY count DESC, hour
            LIMIT ?
            """,
            [*params, STATS_PEAK_HOURS],
        )

    return {
        "totalVisits": int(total_row["total"]) if total_row else 0,
        "byRoom": by_room,
        "byFaculty": by_faculty,
        "byGender": by_gender,
        "dailyTrend": daily_trend,
        "peakHours": peak_hours,
    }
