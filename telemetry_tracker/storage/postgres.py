"""PostgreSQL EventStore backed by an asyncpg connection pool."""

import json

import asyncpg

from telemetry_tracker.observability.logging import get_logger
from telemetry_tracker.storage.errors import ConnectionError, WriteError
from telemetry_tracker.storage.models import Event

logger = get_logger(__name__)

INSERT_EVENT = "INSERT INTO events (event_type, timestamp, data) VALUES ($1, $2, $3)"

# asyncpg client-side errors, such as a closing pool, derive from neither
# PostgresError nor OSError
WRITE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncpg.exceptions.InternalClientError,
    OSError,
    TimeoutError,
)


class PostgresEventStore:
    """Inserts one row per event into the ``events`` table.

    Usage:
        store = PostgresEventStore(dsn="postgresql://...")
        await store.connect()
        try:
            await store.store(event)
        finally:
            await store.close()
    """

    def __init__(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 15,
        command_timeout: float = 5.0,
    ) -> None:
        """Initialize pool configuration.

        Args:
            dsn: Database connection string
            min_size: Minimum number of connections to keep open
            max_size: Maximum number of connections in the pool
            command_timeout: Timeout for a single insert (seconds)
        """
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Create the pool and verify connectivity."""
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
            )
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except Exception as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            if self._pool is not None:
                await self._pool.close()
                self._pool = None
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

        logger.info(
            "postgres_pool_connected",
            min_size=self._min_size,
            max_size=self._max_size,
        )

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_pool_closed")

    async def store(self, event: Event) -> None:
        """Insert ``event``.

        Raises:
            WriteError: If the insert fails or does not affect exactly one row
        """
        if self._pool is None:
            await self.connect()

        try:
            status = await self._pool.execute(
                INSERT_EVENT,
                event.event_type,
                event.timestamp,
                json.dumps(event.data),
                timeout=self._command_timeout,
            )
        except WRITE_ERRORS as e:
            raise WriteError(f"unable to insert event: {e}", cause=e) from e

        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        rows = int(status.rsplit(" ", 1)[-1])
        if rows != 1:
            raise WriteError(f"expected 1 row to be affected by insert, but got {rows}")

    async def health_check(self) -> bool:
        """Return True if the pool is connected and responsive."""
        if self._pool is None:
            return False

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False

    @property
    def is_connected(self) -> bool:
        return self._pool is not None
