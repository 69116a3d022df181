"""Storage backends for contact form submissions.

This module provides in-memory, JSON-file and SQLite storage for contact
entries. Every backend lists entries newest first.
"""

import asyncio
import json
import os
import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import aiofiles
from pydantic import ValidationError

from contactme.api.models import ContactEntry, ContactStats
from contactme.config.settings import StorageConfig

SQLITE_MAX_INTEGER = 2**63 - 1


@dataclass(frozen=True)
class ContactFilters:
    """Optional equality filters for listing contacts."""

    status: str | None = None
    priority: str | None = None
    is_spam: bool | None = None

    def matches(self, entry: ContactEntry) -> bool:
        if self.status is not None and entry.status.value != self.status:
            return False
        if self.priority is not None and entry.priority.value != self.priority:
            return False
        if self.is_spam is not None and entry.is_spam != self.is_spam:
            return False
        return True


class StorageBackend(Protocol):
    """Protocol for contact storage backends."""

    async def save(self, entry: ContactEntry) -> None:
        """Insert or replace a contact entry.

        Args:
            entry: The contact entry to save
        """
        ...

    async def get(self, contact_id: str) -> ContactEntry | None:
        """Retrieve a contact entry by ID.

        Args:
            contact_id: The contact identifier

        Returns:
            The contact entry if found, None otherwise
        """
        ...

    async def list_page(
        self, page: int, limit: int, filters: ContactFilters
    ) -> tuple[list[ContactEntry], int]:
        """List one page of contact entries.

        Args:
            page: 1-based page number
            limit: Page size
            filters: Equality filters

        Returns:
            The entries on the page and the total number of matches
        """
        ...

    async def delete(self, contact_id: str) -> bool:
        """Delete a contact entry.

        Returns:
            True if an entry was deleted
        """
        ...

    async def stats(self) -> ContactStats:
        """Count entries by status."""
        ...

    async def health(self) -> dict[str, str]:
        """Report whether the backend is usable."""
        ...


def _paginate(
    entries: list[ContactEntry], page: int, limit: int, filters: ContactFilters
) -> tuple[list[ContactEntry], int]:
    matching = [entry for entry in entries if filters.matches(entry)]
    matching.sort(key=lambda x: x.created_at, reverse=True)
    start = (page - 1) * limit
    if start >= len(matching):
        return [], len(matching)
    return matching[start : start + limit], len(matching)


class InMemoryStorageBackend:
    """In-memory storage backend for contact entries.

    Useful for testing or temporary storage. Data is lost on process restart.

    Attributes:
        _storage: Dictionary storing entries by id
    """

    def __init__(self) -> None:
        """Initialize the in-memory storage backend."""
        self._storage: dict[str, ContactEntry] = {}

    async def save(self, entry: ContactEntry) -> None:
        self._storage[entry.id] = entry

    async def get(self, contact_id: str) -> ContactEntry | None:
        return self._storage.get(contact_id)

    async def list_page(
        self, page: int, limit: int, filters: ContactFilters
    ) -> tuple[list[ContactEntry], int]:
        return _paginate(list(self._storage.values()), page, limit, filters)

    async def delete(self, contact_id: str) -> bool:
        return self._storage.pop(contact_id, None) is not None

    async def stats(self) -> ContactStats:
        return ContactStats.from_entries(list(self._storage.values()))

    async def health(self) -> dict[str, str]:
        return {"status": "healthy", "backend": "memory"}


class FileStorageBackend:
    """File-based storage backend for contact entries.

    Stores each entry as a separate JSON file in the configured directory.

    Attributes:
        storage_dir: Directory where entries are stored
    """

    def __init__(self, storage_dir: Path | str = ".contactme/contacts") -> None:
        """Initialize the file storage backend.

        Args:
            storage_dir: Directory path for storing entries
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, contact_id: str) -> Path:
        return self.storage_dir / f"{contact_id}.json"

    async def _read(self, file_path: Path) -> ContactEntry | None:
        try:
            async with aiofiles.open(file_path, mode="r", encoding="utf-8") as f:
                content = await f.read()
            return ContactEntry(**json.loads(content))
        except (OSError, json.JSONDecodeError, ValidationError):
            return None

    async def _read_all(self) -> list[ContactEntry]:
        entries = []
        for file_path in self.storage_dir.glob("*.json"):
            entry = await self._read(file_path)
            # Skip invalid files
            if entry is not None:
                entries.append(entry)
        return entries

    async def save(self, entry: ContactEntry) -> None:
        async with aiofiles.open(self._path(entry.id), mode="w", encoding="utf-8") as f:
            await f.write(entry.model_dump_json(indent=2))

    async def get(self, contact_id: str) -> ContactEntry | None:
        file_path = self._path(contact_id)
        if not file_path.exists():
            return None
        return await self._read(file_path)

    async def list_page(
        self, page: int, limit: int, filters: ContactFilters
    ) -> tuple[list[ContactEntry], int]:
        return _paginate(await self._read_all(), page, limit, filters)

    async def delete(self, contact_id: str) -> bool:
        file_path = self._path(contact_id)
        if not file_path.exists():
            return False
        file_path.unlink()
        return True

    async def stats(self) -> ContactStats:
        return ContactStats.from_entries(await self._read_all())

    async def health(self) -> dict[str, str]:
        if self.storage_dir.is_dir() and os.access(self.storage_dir, os.W_OK):
            return {"status": "healthy", "backend": "file", "path": str(self.storage_dir)}
        return {"status": "unhealthy", "backend": "file", "path": str(self.storage_dir)}


class SqliteStorageBackend:
    """SQLite storage backend for contact entries.

    Queries run in a worker thread through ``asyncio.to_thread`` so the event
    loop is never blocked on disk I/O; a lock serializes use of the shared
    connection.

    Attributes:
        db_path: Database file path
        conn: Open database connection
    """

    _COLUMNS = (
        "id", "first_name", "last_name", "email", "phone", "subject", "message",
        "status", "priority", "ip_address", "user_agent", "is_spam",
        "created_at", "updated_at",
    )

    def __init__(self, db_path: Path | str = ".contactme/contacts.db") -> None:
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS contacts (
                id TEXT PRIMARY KEY,
                first_name TEXT NOT NULL,
                last_name TEXT NOT NULL,
                email TEXT NOT NULL,
                phone TEXT,
                subject TEXT NOT NULL,
                message TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'new',
                priority TEXT NOT NULL DEFAULT 'medium',
                ip_address TEXT,
                user_agent TEXT,
                is_spam INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_contacts_email ON contacts (email)")
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_contacts_status_created ON contacts (status, created_at)"
        )
        self.conn.commit()

    def _to_entry(self, row: sqlite3.Row) -> ContactEntry:
        data = dict(row)
        data["is_spam"] = bool(data["is_spam"])
        return ContactEntry(**data)

    @staticmethod
    def _where(filters: ContactFilters) -> tuple[str, list[object]]:
        clauses: list[str] = []
        params: list[object] = []
        if filters.status is not None:
            clauses.append("status = ?")
            params.append(filters.status)
        if filters.priority is not None:
            clauses.append("priority = ?")
            params.append(filters.priority)
        if filters.is_spam is not None:
            clauses.append("is_spam = ?")
            params.append(int(filters.is_spam))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def _save(self, entry: ContactEntry) -> None:
        data = entry.model_dump(mode="json")
        data["is_spam"] = int(entry.is_spam)
        placeholders = ", ".join("?" for _ in self._COLUMNS)
        with self._lock:
            self.conn.execute(
                f"INSERT OR REPLACE INTO contacts ({', '.join(self._COLUMNS)}) VALUES ({placeholders})",
                tuple(data[column] for column in self._COLUMNS),
            )
            self.conn.commit()

    def _get(self, contact_id: str) -> ContactEntry | None:
        with self._lock:
            row = self.conn.execute(
                "SELECT * FROM contacts WHERE id = ?", (contact_id,)
            ).fetchone()
        return self._to_entry(row) if row else None

    def _list_page(
        self, page: int, limit: int, filters: ContactFilters
    ) -> tuple[list[ContactEntry], int]:
        where, params = self._where(filters)
        offset = (page - 1) * limit
        with self._lock:
            total = self.conn.execute(
                f"SELECT COUNT(*) FROM contacts{where}", params
            ).fetchone()[0]
            # SQLite integers are 64-bit; an offset past the rows is an empty page
            if offset >= total or limit > SQLITE_MAX_INTEGER:
                return [], total
            rows = self.conn.execute(
                f"SELECT * FROM contacts{where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
        return [self._to_entry(row) for row in rows], total

    def _delete(self, contact_id: str) -> bool:
        with self._lock:
            cursor = self.conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
            self.conn.commit()
        return cursor.rowcount > 0

    def _stats(self) -> ContactStats:
        with self._lock:
            row = self.conn.execute(
                """
                SELECT
                    COUNT(*) AS total,
                    COALESCE(SUM(status = 'new'), 0) AS new,
                    COALESCE(SUM(status = 'read'), 0) AS read,
                    COALESCE(SUM(status = 'replied'), 0) AS replied,
                    COALESCE(SUM(status = 'archived'), 0) AS archived,
                    COALESCE(SUM(is_spam), 0) AS spam
                FROM contacts
                """
            ).fetchone()
        return ContactStats(**dict(row))

    def _ping(self) -> None:
        with self._lock:
            self.conn.execute("SELECT 1").fetchone()

    async def save(self, entry: ContactEntry) -> None:
        await asyncio.to_thread(self._save, entry)

    async def get(self, contact_id: str) -> ContactEntry | None:
        return await asyncio.to_thread(self._get, contact_id)

    async def list_page(
        self, page: int, limit: int, filters: ContactFilters
    ) -> tuple[list[ContactEntry], int]:
        return await asyncio.to_thread(self._list_page, page, limit, filters)

    async def delete(self, contact_id: str) -> bool:
        return await asyncio.to_thread(self._delete, contact_id)

    async def stats(self) -> ContactStats:
        return await asyncio.to_thread(self._stats)

    async def health(self) -> dict[str, str]:
        try:
            await asyncio.to_thread(self._ping)
        except sqlite3.Error as e:
            return {"status": "unhealthy", "backend": "sqlite", "error": str(e)}
        return {"status": "healthy", "backend": "sqlite", "path": str(self.db_path)}

    def close(self) -> None:
        with self._lock:
            self.conn.close()


def create_storage(config: StorageConfig) -> StorageBackend:
    """Build the storage backend named in the configuration.

    Args:
        config: Storage configuration

    Returns:
        A storage backend instance
    """
    if config.backend == "memory":
        return InMemoryStorageBackend()
    if config.backend == "sqlite":
        path = Path(config.path)
        if path.suffix != ".db":
            path = path / "contacts.db"
        return SqliteStorageBackend(path)
    return FileStorageBackend(config.path)


def generate_contact_id() -> str:
    """Generate a unique contact ID.

    Returns:
        24 lowercase hex characters: 8 for the creation time in seconds
        followed by 16 random ones
    """
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{os.urandom(8).hex()}"
