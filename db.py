"""
db.py
SQLite helpers + initialization (credentials table, session key-value store).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable


@contextmanager
def get_conn(db_file: Path):
    conn = sqlite3.connect(db_file, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(db_file: Path, sql: str, params: tuple = ()) -> int:
    with get_conn(db_file) as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def executemany(db_file: Path, sql: str, seq_of_params: list[tuple]) -> None:
    with get_conn(db_file) as conn:
        conn.executemany(sql, seq_of_params)


def fetch_one(db_file: Path, sql: str, params: tuple = ()):
    with get_conn(db_file) as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def _create_tables(db_file: Path) -> None:
    execute(
        db_file,
        """
        CREATE TABLE IF NOT EXISTS credentials (
            email TEXT NOT NULL,
            role TEXT NOT NULL CHECK(role IN ('student','trainer')),
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (email, role)
        )
        """,
    )

    # Local key-value store; holds the serialized session record
    execute(
        db_file,
        """
        CREATE TABLE IF NOT EXISTS app_settings (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL
        )
        """,
    )


def init_db(db_file: Path, default_hash: str, accounts: Iterable[tuple[str, str]]) -> None:
    """
    Initialize the database.
    - Create tables
    - Insert a credential for every (email, role) account that has none;
      existing hashes are left alone
    """
    _create_tables(db_file)

    now = datetime.now(timezone.utc).isoformat(timespec="seconds")
    executemany(
        db_file,
        "INSERT OR IGNORE INTO credentials(email, role, password_hash, created_at) VALUES(?,?,?,?)",
        [(email, role, default_hash, now) for email, role in accounts],
    )


def get_password_hash(db_file: Path, email: str, role: str) -> str | None:
    row = fetch_one(
        db_file,
        "SELECT password_hash FROM credentials WHERE email = ? AND role = ?",
        (email, role),
    )
    return str(row["password_hash"]) if row else None


def set_password_hash(db_file: Path, email: str, role: str, password_hash: str) -> None:
    execute(
        db_file,
        "UPDATE credentials SET password_hash = ? WHERE email = ? AND role = ?",
        (password_hash, email, role),
    )


class SessionStore:
    """
    get/set/remove on raw bytes, one row per key. Errors are sqlite3.Error and
    are left to the caller.
    """

    def __init__(self, db_file: Path):
        self.db_file = db_file

    def get(self, key: str) -> bytes | None:
        row = fetch_one(self.db_file, "SELECT value FROM app_settings WHERE key = ?", (key,))
        return bytes(row["value"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        execute(
            self.db_file,
            """
            INSERT INTO app_settings(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, sqlite3.Binary(value)),
        )

    def remove(self, key: str) -> None:
        execute(self.db_file, "DELETE FROM app_settings WHERE key = ?", (key,))
