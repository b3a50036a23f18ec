"""
bookstore-queries - run a fixed set of MongoDB queries against a bookstore.

This package connects to a MongoDB server and runs, in order, against one
``books`` collection:
- Basic CRUD (filtered finds, update one, delete one)
- Advanced queries (conjunctions, projection, sorting, pagination)
- Aggregation pipelines (group, sort, limit)
- Index management and an explain of a point query

Example usage:
    from bookstore_queries import OperationRunner, StoreConfig

    async def main():
        config = StoreConfig(
            uri="mongodb://localhost:27017",
            database_name="plp_bookstore",
            collection_name="books",
        )
        report = await OperationRunner(config).run()
        print(report.value_of("update_gatsby_price"))

    import asyncio
    asyncio.run(main())
"""

from __future__ import annotations

__version__ = "0.1.0"

from .catalog import Section, bookstore_operations, bookstore_sections
from .client import StoreClient
from .config import StoreConfig
from .operations import (
    Aggregate,
    CreateIndex,
    DeleteOne,
    Explain,
    Find,
    Operation,
    UpdateOne,
)
from .query import FindQuery
from .render import Renderer
from .runner import OperationRunner
from .seed import SAMPLE_BOOKS, seed_books, seed_store
from .types import (
    ConnectionError,
    OperationFailure,
    RunReport,
    StepOutcome,
    StoreError,
    UnexpectedCountError,
)

__all__ = [
    # Main classes
    "OperationRunner",
    "StoreClient",
    "StoreConfig",
    "FindQuery",
    "Renderer",
    # Operations
    "Operation",
    "Find",
    "UpdateOne",
    "DeleteOne",
    "Aggregate",
    "CreateIndex",
    "Explain",
    "Section",
    "bookstore_sections",
    "bookstore_operations",
    # Seeding
    "SAMPLE_BOOKS",
    "seed_books",
    "seed_store",
    # Result types
    "StepOutcome",
    "RunReport",
    # Exceptions
    "StoreError",
    "ConnectionError",
    "OperationFailure",
    "UnexpectedCountError",
    # Version
    "__version__",
]
