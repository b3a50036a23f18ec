"""
FindQuery - chainable description of a find against a collection.

Collects filter, projection, sort, skip and limit before anything is sent to
the store, then runs the find (or asks the server to explain it) in a single
request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCursor

    from .types import Filter, MutableDocument, Projection, Sort

__all__ = ["FindQuery"]


class FindQuery:
    """
    Description of a find query.

    Example:
        query = FindQuery({"genre": "Fantasy"}).sort("price", -1).limit(5)
        docs = await query.fetch(collection)

        stats = await FindQuery({"title": "The Hobbit"}).explain(collection)
    """

    __slots__ = ("_filter", "_projection", "_sort", "_skip", "_limit")

    def __init__(
        self,
        filter: Filter | None = None,
        projection: Projection = None,
    ) -> None:
        """
        Initialize a query.

        Args:
            filter: Query filter.
            projection: Fields to include/exclude.
        """
        self._filter: dict[str, Any] = dict(filter or {})
        self._projection: dict[str, Any] | None = None
        self._sort: Sort = None
        self._skip: int = 0
        self._limit: int = 0
        self.project(projection)

    @property
    def filter(self) -> dict[str, Any]:
        return self._filter

    @property
    def projection(self) -> dict[str, Any] | None:
        return self._projection

    @property
    def sort_spec(self) -> Sort:
        return self._sort

    @property
    def skip_count(self) -> int:
        return self._skip

    @property
    def limit_count(self) -> int:
        return self._limit

    def sort(self, key_or_list: str | list[tuple[str, int]], direction: int = 1) -> FindQuery:
        """
        Sort the results.

        Args:
            key_or_list: Field name or list of (field, direction) tuples.
            direction: Sort direction (1 for ascending, -1 for descending).
                       Only used if key_or_list is a string.

        Returns:
            Self for chaining.
        """
        if isinstance(key_or_list, str):
            self._sort = [(key_or_list, direction)]
        else:
            self._sort = list(key_or_list)
        return self

    def skip(self, skip: int) -> FindQuery:
        """
        Skip the first N results.

        Returns:
            Self for chaining.
        """
        if skip < 0:
            raise ValueError("skip must be >= 0")
        self._skip = skip
        return self

    def limit(self, limit: int) -> FindQuery:
        """
        Limit the number of results. 0 means no limit.

        Returns:
            Self for chaining.
        """
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self._limit = limit
        return self

    def project(self, projection: Projection) -> FindQuery:
        """
        Set field projection.

        A list of field names is turned into an inclusion mapping.

        Returns:
            Self for chaining.
        """
        if not projection:
            self._projection = None
        elif isinstance(projection, (list, tuple)):
            self._projection = {field: 1 for field in projection}
        else:
            self._projection = dict(projection)
        return self

    def cursor(self, collection: AsyncIOMotorCollection) -> AsyncIOMotorCursor:
        """Build the driver cursor for this query."""
        cursor = collection.find(self._filter, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip > 0:
            cursor = cursor.skip(self._skip)
        if self._limit > 0:
            cursor = cursor.limit(self._limit)
        return cursor

    async def fetch(self, collection: AsyncIOMotorCollection) -> list[MutableDocument]:
        """Run the query and return every matching document."""
        return await self.cursor(collection).to_list(length=None)

    def explain_command(self, collection_name: str, verbosity: str) -> dict[str, Any]:
        """Build the ``explain`` command document for this query."""
        find: dict[str, Any] = {"find": collection_name, "filter": self._filter}
        if self._projection:
            find["projection"] = self._projection
        if self._sort:
            find["sort"] = dict(self._sort)
        if self._skip > 0:
            find["skip"] = self._skip
        if self._limit > 0:
            find["limit"] = self._limit
        return {"explain": find, "verbosity": verbosity}

    async def explain(
        self,
        collection: AsyncIOMotorCollection,
        verbosity: str = "executionStats",
    ) -> dict[str, Any]:
        """
        Ask the server how it would execute this query.

        Args:
            collection: Collection the query targets.
            verbosity: ``queryPlanner``, ``executionStats`` or
                       ``allPlansExecution``.

        Returns:
            The server's explain document.
        """
        command = self.explain_command(collection.name, verbosity)
        return await collection.database.command(command)

    def clone(self) -> FindQuery:
        """Return a new query with the same parameters."""
        query = FindQuery(self._filter, self._projection)
        query._sort = list(self._sort) if self._sort else None
        query._skip = self._skip
        query._limit = self._limit
        return query

    def __repr__(self) -> str:
        parts = [f"filter={self._filter!r}"]
        if self._projection:
            parts.append(f"projection={self._projection!r}")
        if self._sort:
            parts.append(f"sort={self._sort!r}")
        if self._skip:
            parts.append(f"skip={self._skip}")
        if self._limit:
            parts.append(f"limit={self._limit}")
        return f"FindQuery({', '.join(parts)})"
