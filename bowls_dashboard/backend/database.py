# backend/database.py
import aiosqlite
import os
import json
import time
from typing import Optional, List, Dict, Any
import config

# Per-drill summary columns; each drill fills the ones it has
SUMMARY_COLUMNS = (
    "player_a_final_score",
    "player_b_final_score",
    "winner",
    "player_a_total",
    "player_b_total",
    "player_a_total_penalties",
    "player_b_total_penalties",
    "player_a_forehand_success",
    "player_a_backhand_success",
    "player_b_forehand_success",
    "player_b_backhand_success",
    "total_bowls",
    "successful_bowls",
    "success_percentage",
)

LIST_COLUMNS = (
    "id", "drill_type", "player_a_name", "player_b_name", "session_date",
    "surface", "number_of_ends", "bowls_per_player", "ends_played",
) + SUMMARY_COLUMNS + ("created_at",)


async def get_db():
    """Get database connection"""
    db_path = os.path.join(os.path.dirname(__file__), config.DATABASE_PATH)
    os.makedirs(os.path.dirname(db_path), exist_ok=True)
    return await aiosqlite.connect(db_path)


async def init_db():
    """Initialize database with schema"""
    db = await get_db()
    try:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS drill_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                drill_type TEXT NOT NULL,
                player_a_name TEXT,
                player_b_name TEXT,
                session_date TEXT,
                surface TEXT,
                number_of_ends INTEGER NOT NULL,
                bowls_per_player INTEGER NOT NULL,
                ends_played INTEGER NOT NULL,
                config_data TEXT NOT NULL,
                ends_data TEXT NOT NULL,
                stats_data TEXT NOT NULL,
                player_a_final_score INTEGER,
                player_b_final_score INTEGER,
                winner TEXT,
                player_a_total INTEGER,
                player_b_total INTEGER,
                player_a_total_penalties INTEGER,
                player_b_total_penalties INTEGER,
                player_a_forehand_success INTEGER,
                player_a_backhand_success INTEGER,
                player_b_forehand_success INTEGER,
                player_b_backhand_success INTEGER,
                total_bowls INTEGER,
                successful_bowls INTEGER,
                success_percentage REAL,
                created_at REAL NOT NULL
            )
        """)

        await db.execute("CREATE INDEX IF NOT EXISTS idx_drill_sessions_type ON drill_sessions(drill_type)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_drill_sessions_created ON drill_sessions(created_at DESC)")

        await db.commit()
        print("[DB] Database initialized successfully")
    finally:
        await db.close()


async def save_session(
    drill_type: str,
    config_data: Dict[str, Any],
    ends_data: List[Dict[str, Any]],
    stats_data: Dict[str, Any],
    summary: Optional[Dict[str, Any]] = None
) -> int:
    """Insert a completed drill session and return its id"""
    summary = summary or {}
    unknown = set(summary) - set(SUMMARY_COLUMNS)
    if unknown:
        raise ValueError(f"unknown summary columns: {', '.join(sorted(unknown))}")

    columns = [
        "drill_type", "player_a_name", "player_b_name", "session_date", "surface",
        "number_of_ends", "bowls_per_player", "ends_played",
        "config_data", "ends_data", "stats_data", "created_at",
    ]
    values = [
        drill_type,
        config_data.get("player_a_name"),
        config_data.get("player_b_name"),
        config_data.get("session_date"),
        config_data.get("surface"),
        config_data["num_ends"],
        config_data["bowls_per_player"],
        len(ends_data),
        json.dumps(config_data),
        json.dumps(ends_data),
        json.dumps(stats_data),
        time.time(),
    ]
    for col in SUMMARY_COLUMNS:
        if col in summary:
            columns.append(col)
            values.append(summary[col])

    db = await get_db()
    try:
        placeholders = ", ".join("?" for _ in columns)
        cursor = await db.execute(
            f"INSERT INTO drill_sessions ({', '.join(columns)}) VALUES ({placeholders})",
            values,
        )
        session_id = cursor.lastrowid
        await db.commit()
        print(f"[DB] Saved {drill_type} session {session_id}: {len(ends_data)} ends")
        return session_id
    finally:
        await db.close()


async def get_session(session_id: int) -> Optional[Dict[str, Any]]:
    """Get a stored session with its config, ends and statistics"""
    db = await get_db()
    try:
        db.row_factory = aiosqlite.Row
        async with db.execute("SELECT * FROM drill_sessions WHERE id = ?", (session_id,)) as cursor:
            row = await cursor.fetchone()
            if not row:
                return None

        session = {col: row[col] for col in LIST_COLUMNS}
        session["config"] = json.loads(row["config_data"])
        session["ends_data"] = json.loads(row["ends_data"])
        session["stats"] = json.loads(row["stats_data"])
        return session
    finally:
        await db.close()


async def list_sessions(
    limit: int = config.HISTORY_PAGE_SIZE,
    offset: int = 0,
    drill_type: Optional[str] = None
) -> Dict[str, Any]:
    """List sessions newest first, optionally for one drill type"""
    db = await get_db()
    try:
        where_sql = ""
        params: List[Any] = []
        if drill_type:
            where_sql = "WHERE drill_type = ?"
            params.append(drill_type)

        async with db.execute(f"SELECT COUNT(*) FROM drill_sessions {where_sql}", params) as cursor:
            row = await cursor.fetchone()
            total = row[0]

        sessions = []
        query = f"""
            SELECT {', '.join(LIST_COLUMNS)}
            FROM drill_sessions
            {where_sql}
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
        """
        async with db.execute(query, params + [limit, offset]) as cursor:
            async for row in cursor:
                sessions.append(dict(zip(LIST_COLUMNS, row)))

        return {"sessions": sessions, "total": total}
    finally:
        await db.close()


async def delete_session(session_id: int) -> bool:
    """Delete a session; returns False if it did not exist"""
    db = await get_db()
    try:
        cursor = await db.execute("DELETE FROM drill_sessions WHERE id = ?", (session_id,))
        await db.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            print(f"[DB] Deleted session {session_id}")
        return deleted
    finally:
        await db.close()
