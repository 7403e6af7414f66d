import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite


class Database:
    """One shared aiosqlite connection.

    Reads go straight through. Writes run inside ``transaction()``, which
    holds a lock for the whole BEGIN..COMMIT span so one request's commit or
    rollback never lands in the middle of another request's writes.
    """

    def __init__(self):
        self.conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: str) -> "Database":
        db_path = Path(path)
        if not db_path.exists():
            raise FileNotFoundError(
                f"Quote intake database not found at {path}. "
                f"Run 'python scripts/seed_database.py' first."
            )
        db = cls()
        db.conn = await aiosqlite.connect(str(db_path))
        db.conn.row_factory = aiosqlite.Row
        await db.conn.execute("PRAGMA journal_mode=WAL")
        await db.conn.execute("PRAGMA foreign_keys=ON")
        return db

    async def fetchone(self, query: str, params: tuple = ()) -> dict | None:
        async with self.conn.execute(query, params) as cursor:
            row = await cursor.fetchone()
            return dict(row) if row is not None else None

    async def fetchall(self, query: str, params: tuple = ()) -> list[dict]:
        async with self.conn.execute(query, params) as cursor:
            return [dict(row) for row in await cursor.fetchall()]

    async def fetchcolumn(self, query: str, params: tuple = ()) -> list:
        """First column of every row, e.g. joined names for one equipment id."""
        async with self.conn.execute(query, params) as cursor:
            return [row[0] for row in await cursor.fetchall()]

    async def execute(self, query: str, params: tuple = ()) -> aiosqlite.Cursor:
        """Run a write statement. Call inside ``transaction()``."""
        return await self.conn.execute(query, params)

    @asynccontextmanager
    async def transaction(self):
        """Commit the block's writes on success, roll them back on any error.

        Not reentrant: code inside the block calls ``execute`` directly.
        """
        async with self._write_lock:
            try:
                yield self
            except BaseException:
                await self.conn.rollback()
                raise
            await self.conn.commit()

    async def close(self):
        if self.conn:
            await self.conn.close()
