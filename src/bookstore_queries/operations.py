"""
Operations - single-request store operations the runner can execute.

Each operation is one call into the driver against a collection. It knows
how to execute itself and how to render what the store returned; it keeps
no state between runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .query import FindQuery

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    from .render import Renderer
    from .types import Filter, Pipeline, Update

__all__ = [
    "Operation",
    "Find",
    "UpdateOne",
    "DeleteOne",
    "Aggregate",
    "CreateIndex",
    "Explain",
]


class Operation:
    """
    Base class for runner operations.

    Attributes:
        name: Short identifier, unique within a run.
        label: Text shown above (or instead of) the result.
        counts_writes: True when the result is a count of affected
            documents, which strict-count mode checks.
    """

    counts_writes = False

    def __init__(self, name: str, label: str) -> None:
        self.name = name
        self.label = label

    async def execute(self, collection: AsyncIOMotorCollection) -> Any:
        """Send the request and return what the store answered."""
        raise NotImplementedError

    def render(self, value: Any, renderer: Renderer) -> None:
        """Write the result for a person to read."""
        renderer.heading(self.label)
        renderer.line(repr(value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Find(Operation):
    """
    Find documents.

    Example:
        Find("fantasy", "All Fantasy books:", FindQuery({"genre": "Fantasy"}))
    """

    def __init__(self, name: str, label: str, query: FindQuery) -> None:
        super().__init__(name, label)
        self.query = query

    async def execute(self, collection: AsyncIOMotorCollection) -> list[dict[str, Any]]:
        return await self.query.fetch(collection)

    def render(self, value: list[dict[str, Any]], renderer: Renderer) -> None:
        renderer.heading(self.label)
        renderer.documents(value)


class UpdateOne(Operation):
    """
    Update the first document matching a filter.

    The label is a format string receiving ``count``, the number of
    documents modified.
    """

    counts_writes = True

    def __init__(self, name: str, label: str, filter: Filter, update: Update) -> None:
        super().__init__(name, label)
        self.filter = dict(filter)
        self.update = dict(update)

    async def execute(self, collection: AsyncIOMotorCollection) -> int:
        result = await collection.update_one(self.filter, self.update)
        return result.modified_count

    def render(self, value: int, renderer: Renderer) -> None:
        renderer.heading(self.label.format(count=value))


class DeleteOne(Operation):
    """
    Delete the first document matching a filter.

    The label is a format string receiving ``count``, the number of
    documents deleted.
    """

    counts_writes = True

    def __init__(self, name: str, label: str, filter: Filter) -> None:
        super().__init__(name, label)
        self.filter = dict(filter)

    async def execute(self, collection: AsyncIOMotorCollection) -> int:
        result = await collection.delete_one(self.filter)
        return result.deleted_count

    def render(self, value: int, renderer: Renderer) -> None:
        renderer.heading(self.label.format(count=value))


class Aggregate(Operation):
    """Run an aggregation pipeline on the server."""

    def __init__(self, name: str, label: str, pipeline: Pipeline) -> None:
        super().__init__(name, label)
        self.pipeline = pipeline

    async def execute(self, collection: AsyncIOMotorCollection) -> list[dict[str, Any]]:
        return await collection.aggregate(self.pipeline).to_list(length=None)

    def render(self, value: list[dict[str, Any]], renderer: Renderer) -> None:
        renderer.heading(self.label)
        renderer.documents(value)


class CreateIndex(Operation):
    """
    Create an index.

    Args:
        keys: List of (field, direction) tuples, or a single field name
              for an ascending index.
        options: Extra create_index options such as ``unique`` or the
                 index ``name``.
    """

    def __init__(
        self,
        name: str,
        label: str,
        keys: list[tuple[str, int]] | str,
        options: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(name, label)
        self.keys = [(keys, 1)] if isinstance(keys, str) else list(keys)
        self.options = dict(options or {})

    async def execute(self, collection: AsyncIOMotorCollection) -> str:
        return await collection.create_index(self.keys, **self.options)

    def render(self, value: str, renderer: Renderer) -> None:
        renderer.line(self.label)


class Explain(Operation):
    """
    Explain how the server executes a query.

    Returns the ``executionStats`` section of the explain output, or the
    whole document when the server omits it (e.g. ``queryPlanner``
    verbosity).
    """

    def __init__(
        self,
        name: str,
        label: str,
        query: FindQuery,
        verbosity: str = "executionStats",
    ) -> None:
        super().__init__(name, label)
        self.query = query
        self.verbosity = verbosity

    async def execute(self, collection: AsyncIOMotorCollection) -> dict[str, Any]:
        plan = await self.query.explain(collection, self.verbosity)
        return plan.get("executionStats", plan)

    def render(self, value: dict[str, Any], renderer: Renderer) -> None:
        renderer.heading(self.label)
        renderer.json(value)
