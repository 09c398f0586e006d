import asyncio
import logging
from logging import INFO
from typing import Any, Optional

from fastapi import Request
from tortoise import Tortoise
from tortoise.exceptions import BaseORMException

from stockroom.core.config import DB_URL
from stockroom.core.exceptions import StorageFault
from stockroom.services.schema_service import SchemaReport, ensure_schema

# Set logging level for Tortoise ORM
logging.getLogger('tortoise').setLevel(INFO)

log = logging.getLogger(__name__)

# Define all models modules for the ORM
MODELS_MODULES = [
    "stockroom.models.item",
    "stockroom.models.sale",
    "stockroom.models.option",
]


class Database:
    """
    Storage handle owned by the composition root and passed to every service.

    The first call to open() starts the actual open; callers arriving while it
    is still running await the same task instead of opening again.

    Tortoise keeps its connections in a process-wide registry, so only one
    handle can be open at a time: opening a second one while another is open
    raises StorageFault instead of re-pointing the first. Services reach the
    connection and start transactions through `connection_name`.
    """

    connection_name = "default"

    # The handle currently bound to the Tortoise registry
    _current: Optional["Database"] = None

    def __init__(self, db_url: str = DB_URL):
        self.db_url = db_url
        self.schema_report: Optional[SchemaReport] = None
        self._opening: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        task = self._opening
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    async def _open(self) -> Any:
        """Initializes the Tortoise ORM connection and brings the schema up to date."""
        current = Database._current
        if current is not None and current is not self:
            raise StorageFault(f"Another database is already open at {current.db_url}")
        Database._current = self

        try:
            try:
                await Tortoise.init(
                    db_url=self.db_url,
                    modules={"models": MODELS_MODULES},
                )
                conn = Tortoise.get_connection(self.connection_name)
                await conn.execute_script("PRAGMA journal_mode = WAL;")
            except (BaseORMException, OSError) as e:
                log.error(f"FATAL ERROR: Could not open database at {self.db_url}. Error: {e}")
                raise StorageFault("Could not open the inventory database") from e

            self.schema_report = await ensure_schema(conn)
        except BaseException:
            Database._current = None
            raise
        log.info(f"Database ready at {self.db_url}")
        return conn

    async def open(self) -> Any:
        if self._opening is None:
            self._opening = asyncio.ensure_future(self._open())
        task = self._opening
        try:
            # shield: a cancelled waiter must not cancel the shared open
            return await asyncio.shield(task)
        except BaseException:
            if self._opening is task and task.done():
                # Let a later call retry a failed open
                self._opening = None
            raise

    async def connection(self) -> Any:
        """Returns the ORM connection, opening the database on first use."""
        await self.open()
        return Tortoise.get_connection(self.connection_name)

    async def close(self) -> None:
        """Closes all database connections."""
        if self._opening is None:
            return
        if self.is_open:
            await Tortoise.close_connections()
            log.info("Database connections closed.")
        self._opening = None
        if Database._current is self:
            Database._current = None


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the app's storage handle."""
    return request.app.state.db
