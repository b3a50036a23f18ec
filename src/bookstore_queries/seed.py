"""Sample books and a loader that puts them into a collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from loguru import logger

from .client import StoreClient
from .types import OperationFailure

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    from .config import StoreConfig
    from .types import Document

__all__ = ["SAMPLE_BOOKS", "seed_books", "seed_store"]


SAMPLE_BOOKS: list[dict[str, Any]] = [
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Fiction",
        "published_year": 1960,
        "price": 12.99,
        "in_stock": True,
        "pages": 336,
        "publisher": "J. B. Lippincott & Co.",
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Dystopian",
        "published_year": 1949,
        "price": 10.99,
        "in_stock": True,
        "pages": 328,
        "publisher": "Secker & Warburg",
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Fiction",
        "published_year": 1925,
        "price": 9.99,
        "in_stock": True,
        "pages": 180,
        "publisher": "Charles Scribner's Sons",
    },
    {
        "title": "Brave New World",
        "author": "Aldous Huxley",
        "genre": "Dystopian",
        "published_year": 1932,
        "price": 11.50,
        "in_stock": False,
        "pages": 311,
        "publisher": "Chatto & Windus",
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "published_year": 1937,
        "price": 14.99,
        "in_stock": True,
        "pages": 310,
        "publisher": "George Allen & Unwin",
    },
    {
        "title": "The Catcher in the Rye",
        "author": "J.D. Salinger",
        "genre": "Fiction",
        "published_year": 1951,
        "price": 8.99,
        "in_stock": True,
        "pages": 224,
        "publisher": "Little, Brown and Company",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "published_year": 1813,
        "price": 7.99,
        "in_stock": True,
        "pages": 432,
        "publisher": "T. Egerton",
    },
    {
        "title": "The Lord of the Rings",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "published_year": 1954,
        "price": 19.99,
        "in_stock": True,
        "pages": 1178,
        "publisher": "Allen & Unwin",
    },
    {
        "title": "Animal Farm",
        "author": "George Orwell",
        "genre": "Political Satire",
        "published_year": 1945,
        "price": 8.50,
        "in_stock": False,
        "pages": 112,
        "publisher": "Secker & Warburg",
    },
    {
        "title": "The Alchemist",
        "author": "Paulo Coelho",
        "genre": "Fiction",
        "published_year": 1988,
        "price": 10.99,
        "in_stock": True,
        "pages": 197,
        "publisher": "HarperOne",
    },
    {
        "title": "Moby Dick",
        "author": "Herman Melville",
        "genre": "Adventure",
        "published_year": 1851,
        "price": 12.50,
        "in_stock": False,
        "pages": 635,
        "publisher": "Harper & Brothers",
    },
    {
        "title": "Wuthering Heights",
        "author": "Emily Brontë",
        "genre": "Gothic Fiction",
        "published_year": 1847,
        "price": 9.99,
        "in_stock": True,
        "pages": 342,
        "publisher": "Thomas Cautley Newby",
    },
]


async def seed_books(
    collection: AsyncIOMotorCollection,
    books: Sequence[Document] | None = None,
    drop: bool = True,
) -> int:
    """
    Load books into a collection.

    Args:
        collection: Target collection.
        books: Documents to insert (default: ``SAMPLE_BOOKS``). Copies are
               inserted so the driver's generated ``_id`` never leaks back.
        drop: Drop the collection first so the result is exactly ``books``.

    Returns:
        Number of documents inserted.
    """
    docs = [dict(book) for book in (SAMPLE_BOOKS if books is None else books)]
    if drop:
        await collection.drop()
    if not docs:
        return 0
    result = await collection.insert_many(docs)
    return len(result.inserted_ids)


async def seed_store(config: StoreConfig, books: Sequence[Document] | None = None) -> int:
    """Connect with ``config`` and reload the collection with sample books."""

    async with StoreClient(
        config.uri,
        server_selection_timeout_ms=config.server_selection_timeout_ms,
    ) as client:
        collection = client.get_collection(config.database_name, config.collection_name)
        try:
            count = await seed_books(collection, books)
        except Exception as e:
            raise OperationFailure(f"Failed to seed {config.namespace}: {e}", operation="seed") from e
    logger.info("Seeded {} books into {}", count, config.namespace)
    return count
