"""
StoreClient - connection to the bookstore's MongoDB server.

Wraps a Motor client with an explicit connect/close lifecycle so the runner
can acquire one connection and release it on every exit path.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

from loguru import logger
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from .types import ConnectionError, OperationFailure, StoreError

__all__ = ["StoreClient"]


class StoreClient:
    """
    Connection to a MongoDB server.

    Databases can be accessed with subscript notation once connected.

    Example:
        client = StoreClient("mongodb://localhost:27017")
        await client.connect()

        books = client.get_collection("plp_bookstore", "books")
        print(await books.count_documents({}))

        await client.close()

        # Or use as async context manager
        async with StoreClient("mongodb://localhost:27017") as client:
            db = client["plp_bookstore"]
            ...
    """

    __slots__ = ("_uri", "_driver", "_connected", "_options")

    def __init__(self, uri: str, **options: Any) -> None:
        """
        Initialize the client.

        Args:
            uri: MongoDB connection URI.
            **options: Additional connection options.
                - server_selection_timeout_ms: How long to wait for a
                  reachable server (default: 5000).
        """
        self._uri = uri
        self._driver: AsyncIOMotorClient | None = None
        self._connected = False
        self._options = options

    @property
    def uri(self) -> str:
        """Get the connection URI."""
        return self._uri

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._connected

    async def connect(self) -> StoreClient:
        """
        Connect to the server and verify it answers ``ping``.

        Returns:
            Self for chaining.

        Raises:
            ConnectionError: If the server cannot be reached.
        """
        if self._connected:
            return self

        timeout = self._options.get("server_selection_timeout_ms", 5000)
        try:
            self._driver = AsyncIOMotorClient(self._uri, serverSelectionTimeoutMS=timeout)
            await self._driver.admin.command("ping")
        except Exception as e:
            await self.close()
            raise ConnectionError(f"Failed to connect to {self._uri}: {e}") from e

        self._connected = True
        logger.debug("Connected to {}", self._uri)
        return self

    async def close(self) -> None:
        """Close the connection. Safe to call when not connected."""
        if self._driver is not None:
            self._driver.close()
            self._driver = None
        self._connected = False

    def _ensure_connected(self) -> None:
        """Ensure the client is connected."""
        if not self._connected or self._driver is None:
            raise StoreError("Client is not connected. Call connect() first.")

    def __getitem__(self, name: str) -> AsyncIOMotorDatabase:
        """
        Get a database by name using subscript notation.

        Example:
            db = client["plp_bookstore"]
        """
        self._ensure_connected()
        return self._driver[name]

    def get_database(self, name: str) -> AsyncIOMotorDatabase:
        """Get a database by name."""
        return self[name]

    def get_collection(self, database: str, collection: str) -> AsyncIOMotorCollection:
        """Get a collection by database and collection name."""
        try:
            return self[database][collection]
        except StoreError:
            raise
        except Exception as e:
            raise OperationFailure(
                f"Invalid namespace {database}.{collection}: {e}",
                operation="get_collection",
            ) from e

    async def drop_database(self, name: str) -> None:
        """
        Drop a database.

        Args:
            name: Name of the database to drop.
        """
        self._ensure_connected()
        await self._driver.drop_database(name)

    async def __aenter__(self) -> StoreClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        status = "connected" if self._connected else "disconnected"
        return f"StoreClient({self._uri!r}, {status})"
