import os
import sqlite3
from pathlib import Path
from typing import Optional

from app.errors import DatabaseError


def _ensure_schema(conn):
    conn.execute("""
    CREATE TABLE IF NOT EXISTS kv(
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)


class SqliteStore:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def get_conn(self):
        os.makedirs(self.db_path.parent, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        _ensure_schema(conn)
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = None
        try:
            conn = self.get_conn()
            row = conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
            return row[0] if row else None
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()

    def set(self, key: str, value: str) -> None:
        conn = None
        try:
            conn = self.get_conn()
            conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()

    def delete(self, key: str) -> None:
        conn = None
        try:
            conn = self.get_conn()
            conn.execute("DELETE FROM kv WHERE key=?", (key,))
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()
