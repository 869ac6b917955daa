from __future__ import annotations

import asyncio
import logging
import re
import ssl
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence
from urllib.parse import urlparse

import aiosqlite
import asyncpg

from fisio_api.config import (
    DATABASE_MAX_CONNECTIONS,
    DATABASE_PATH,
    DATABASE_PORT,
    DATABASE_SSL,
    DATABASE_URL,
    HOST_AZURE,
    NAME_DB,
    PASSWORD_DB,
    USER_DB,
)

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0

    def first(self) -> dict[str, Any] | None:
        return self.rows[0] if self.rows else None


class DatabaseAdapter:
    """Executes parameterized statements against one relational backend.

    Statements use ``?`` placeholders. ``regex_op`` is the backend's
    case-insensitive regular-expression match operator, used as
    ``<expr> {regex_op} ?`` so the pattern is always a bound parameter.
    ``date_param`` is a placeholder whose text value the database itself
    converts to a DATE.
    """

    engine: str
    regex_op: str
    date_param: str

    async def execute(self, query: str, params: Sequence | None = None) -> QueryResult:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def executescript(self, script: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


def _regexp(pattern: str | None, value: str | None) -> bool | None:
    # SQLite evaluates "X REGEXP Y" as regexp(Y, X)
    if pattern is None or value is None:
        return None
    return re.search(pattern, value, re.IGNORECASE) is not None


def _as_date(value: str | None) -> str | None:
    # Accepts a date or a full ISO timestamp; anything else fails the statement
    if value is None:
        return None
    return datetime.fromisoformat(value).date().isoformat()


def _bind_sqlite(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass
class SQLiteAdapter(DatabaseAdapter):
    conn: aiosqlite.Connection
    engine: str = "sqlite"
    regex_op: str = "REGEXP"
    date_param: str = "as_date(?)"

    @classmethod
    async def connect(cls, path: str) -> "SQLiteAdapter":
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.create_function("regexp", 2, _regexp, deterministic=True)
        await conn.create_function("as_date", 1, _as_date, deterministic=True)
        return cls(conn)

    async def execute(self, query: str, params: Sequence | None = None) -> QueryResult:
        cursor = await self.conn.execute(query, [_bind_sqlite(p) for p in (params or ())])
        try:
            rows = [dict(row) for row in await cursor.fetchall()]
            rowcount = cursor.rowcount
        finally:
            await cursor.close()
        if self.conn.in_transaction:
            await self.conn.commit()
        return QueryResult(rows=rows, rowcount=rowcount if rowcount >= 0 else len(rows))

    async def close(self) -> None:
        await self.conn.close()

    async def executescript(self, script: str) -> None:
        await self.conn.executescript(script)


def _rowcount_from_status(status: str | None, fallback: int) -> int:
    # asyncpg status messages look like "UPDATE 1", "INSERT 0 1", "SELECT 3"
    if status:
        last = status.rsplit(" ", 1)[-1]
        if last.isdigit():
            return int(last)
    return fallback


@dataclass
class PostgresAdapter(DatabaseAdapter):
    pool: asyncpg.Pool
    engine: str = "postgres"
    regex_op: str = "~*"
    # Bound as text so asyncpg does not demand a date object
    date_param: str = "CAST(CAST(? AS TEXT) AS DATE)"

    @staticmethod
    def _translate_query(query: str) -> str:
        # Convert ? placeholders to asyncpg-style $1, $2, ...
        if "$1" in query:
            return query
        idx = 1
        out = []
        for ch in query:
            if ch == "?":
                out.append(f"${idx}")
                idx += 1
            else:
                out.append(ch)
        return "".join(out)

    async def execute(self, query: str, params: Sequence | None = None) -> QueryResult:
        q = self._translate_query(query)
        async with self.pool.acquire() as conn:
            stmt = await conn.prepare(q)
            records = await stmt.fetch(*(params or ()))
            status = stmt.get_statusmsg()
        rows = [dict(r) for r in records]
        return QueryResult(rows=rows, rowcount=_rowcount_from_status(status, len(rows)))

    async def close(self) -> None:
        await self.pool.close()

    async def executescript(self, script: str) -> None:
        # The PostgreSQL schema is managed outside the application.
        raise NotImplementedError


_db: DatabaseAdapter | None = None
_connect_lock = asyncio.Lock()


def _ssl_context() -> ssl.SSLContext:
    # TLS on, server certificate not validated
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


async def _connect() -> DatabaseAdapter:
    ssl_arg = _ssl_context() if DATABASE_SSL else None
    if HOST_AZURE:
        pool = await asyncpg.create_pool(
            host=HOST_AZURE,
            port=DATABASE_PORT,
            user=USER_DB,
            password=PASSWORD_DB,
            database=NAME_DB,
            ssl=ssl_arg,
            min_size=1,
            max_size=DATABASE_MAX_CONNECTIONS,
        )
        logger.info("Connected to PostgreSQL at %s:%s/%s", HOST_AZURE, DATABASE_PORT, NAME_DB)
        return PostgresAdapter(pool)

    if DATABASE_URL and not DATABASE_URL.startswith("sqlite"):
        pool = await asyncpg.create_pool(
            dsn=DATABASE_URL,
            ssl=ssl_arg,
            min_size=1,
            max_size=DATABASE_MAX_CONNECTIONS,
        )
        logger.info("Connected to PostgreSQL")
        return PostgresAdapter(pool)

    sqlite_path = DATABASE_PATH
    if DATABASE_URL:
        sqlite_path = _sqlite_path_from_url(DATABASE_URL) or DATABASE_PATH
    db = await SQLiteAdapter.connect(sqlite_path)
    logger.info("Connected to SQLite database at %s", sqlite_path)
    return db


async def get_db() -> DatabaseAdapter:
    """Return the shared adapter, connecting on first use.

    A failed connection is not cached, so the next call tries again.
    """
    global _db
    if _db is None:
        async with _connect_lock:
            if _db is None:
                _db = await _connect()
    return _db


def _sqlite_path_from_url(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path or ""
    if not path or path == "/":
        return ""
    # sqlite:////absolute/path.db -> keep absolute path
    if url.startswith("sqlite:////"):
        return "/" + path.lstrip("/")
    # sqlite:///relative.db -> strip leading slash
    if path.startswith("/"):
        return path[1:]
    return path


SQLITE_SCHEMA = """
    CREATE TABLE IF NOT EXISTS paciente_fisio (
        paciente_id TEXT NOT NULL,
        nombre TEXT NOT NULL,
        apellidos TEXT,
        direccion TEXT,
        telefono TEXT,
        fecha_nacimiento DATE,
        fisio_id TEXT NOT NULL,
        PRIMARY KEY (paciente_id, fisio_id)
    );

    CREATE TABLE IF NOT EXISTS diagnostico_medico (
        id TEXT PRIMARY KEY,
        sistema_lesionado TEXT,
        zona_afectada TEXT
    );

    CREATE TABLE IF NOT EXISTS paciente_historial_medico (
        paciente_id TEXT NOT NULL,
        fisio_id TEXT NOT NULL,
        diagnostico_id TEXT NOT NULL REFERENCES diagnostico_medico(id),
        fecha_diagnostico DATE,
        fecha_inicio_tratamiento DATE,
        fecha_fin_tratamiento DATE,
        sintomas TEXT,
        medicamentos TEXT,
        PRIMARY KEY (paciente_id, fisio_id, diagnostico_id)
    );
"""


async def init_db() -> None:
    db = await get_db()

    if db.engine == "sqlite":
        await db.executescript(SQLITE_SCHEMA)
        logger.info("SQLite schema ready")
    else:
        logger.info("Using externally managed %s schema", db.engine)


async def close_db() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("Database connection closed")
