"""
SQLite record store and simple migration system.

``GuestStore`` is the only component that talks to the database.  It
keeps one SQLite connection for the lifetime of the application,
serialises access to it with a lock and runs every statement in a
worker thread so that request handlers never block the event loop.
To switch to another DBMS you would replace this class and keep its
public coroutine methods.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import asyncio
import logging
import os
import sqlite3
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from .errors import DuplicateRecordError, StoreUnavailableError
from ..schemas.guest import GuestRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

MEMORY_DATABASE = ":memory:"

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: guest records
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS guests (
            id TEXT PRIMARY KEY,
            full_name TEXT NOT NULL,
            date_of_birth TEXT NOT NULL,
            id_number TEXT NOT NULL UNIQUE,
            adm_no TEXT NOT NULL,
            registered_at TEXT NOT NULL,
            registered_from TEXT,
            status TEXT NOT NULL DEFAULT 'active',
            version TEXT NOT NULL DEFAULT '1.0.0'
        );
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    If ``database_url`` is an absolute path or ``:memory:``, use it
    directly.  Otherwise resolve it relative to the project root.
    """
    if database_url == MEMORY_DATABASE or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent  # project root
    return str((base_dir / database_url).resolve())


def _row_to_record(row: sqlite3.Row) -> GuestRecord:
    return GuestRecord(
        id=row["id"],
        full_name=row["full_name"],
        date_of_birth=date.fromisoformat(row["date_of_birth"]),
        id_number=row["id_number"],
        adm_no=row["adm_no"],
        registered_at=datetime.fromisoformat(row["registered_at"]),
        registered_from=row["registered_from"],
        status=row["status"],
        version=row["version"],
    )


class GuestStore:
    """Persistent collection of guest records backed by SQLite."""

    def __init__(self, database_url: str):
        self.path = get_database_path(database_url)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        """Open the connection and apply pending migrations."""
        await asyncio.to_thread(self._connect_sync)

    def _connect_sync(self) -> None:
        if self._conn is not None:
            return
        if self.path != MEMORY_DATABASE:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Cannot open database {self.path}: {exc}") from exc
        # Return rows as dict‑like objects keyed by column name
        conn.row_factory = sqlite3.Row
        self._conn = conn
        try:
            self._init_db_sync()
        except sqlite3.Error as exc:
            self._close_sync()
            raise StoreUnavailableError(f"Cannot initialise database {self.path}: {exc}") from exc
        logger.info("Guest store connected (%s)", self.path)

    def _init_db_sync(self) -> None:
        """Create the ``migrations`` table and apply new migrations."""
        with self._lock:
            cursor = self._conn.cursor()
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY, applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
            )
            row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current = row["version"] or 0
            for version, sql in MIGRATIONS:
                if version <= current:
                    continue
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied migration %s", version)
            self._conn.commit()

    async def close(self) -> None:
        """Close the connection.  Safe to call more than once."""
        await asyncio.to_thread(self._close_sync)

    def _close_sync(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("Guest store connection closed")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _run(self, func: Callable[[sqlite3.Connection], T]) -> T:
        return await asyncio.to_thread(self._run_sync, func)

    def _run_sync(self, func: Callable[[sqlite3.Connection], T]) -> T:
        with self._lock:
            if self._conn is None:
                raise StoreUnavailableError("Guest store is not connected")
            try:
                result = func(self._conn)
                self._conn.commit()
                return result
            except sqlite3.IntegrityError as exc:
                self._conn.rollback()
                raise DuplicateRecordError(str(exc)) from exc
            except sqlite3.Error as exc:
                raise StoreUnavailableError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def insert(self, record: GuestRecord) -> None:
        """Persist a new record.

        Raises ``DuplicateRecordError`` if the ``id`` or ``idNumber`` is
        already stored.
        """

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO guests (id, full_name, date_of_birth, id_number, adm_no,
                                    registered_at, registered_from, status, version)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.full_name,
                    record.date_of_birth.isoformat(),
                    record.id_number,
                    record.adm_no,
                    record.registered_at.isoformat(),
                    record.registered_from,
                    record.status,
                    record.version,
                ),
            )

        await self._run(_insert)

    async def find_by_id_number(self, id_number: str) -> Optional[GuestRecord]:
        """Return the record with the given natural identifier, if any."""

        def _find(conn: sqlite3.Connection) -> Optional[GuestRecord]:
            row = conn.execute("SELECT * FROM guests WHERE id_number = ?", (id_number,)).fetchone()
            return _row_to_record(row) if row else None

        return await self._run(_find)

    async def list_all(self) -> List[GuestRecord]:
        """Return every stored record in registration order."""

        def _list(conn: sqlite3.Connection) -> List[GuestRecord]:
            rows = conn.execute("SELECT * FROM guests ORDER BY registered_at, rowid").fetchall()
            return [_row_to_record(row) for row in rows]

        return await self._run(_list)

