"""The fixed bookstore query sequence.

Order matters: the delete and later reads assume the price update already
ran, so the list is executed exactly as written.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .operations import Aggregate, CreateIndex, DeleteOne, Explain, Find, Operation, UpdateOne
from .query import FindQuery

__all__ = ["Section", "bookstore_sections", "bookstore_operations"]


@dataclass
class Section:
    """A titled group of operations printed under one banner."""

    title: str
    operations: list[Operation] = field(default_factory=list)


def _basic_crud() -> Section:
    return Section(
        "BASIC CRUD OPERATIONS",
        [
            Find("fantasy_books", "All Fantasy books:", FindQuery({"genre": "Fantasy"})),
            Find(
                "published_after_1950",
                "Books published after 1950:",
                FindQuery({"published_year": {"$gt": 1950}}),
            ),
            Find(
                "books_by_orwell",
                "Books by George Orwell:",
                FindQuery({"author": "George Orwell"}),
            ),
            UpdateOne(
                "update_gatsby_price",
                'Updated price of "The Great Gatsby": {count} document(s) updated',
                {"title": "The Great Gatsby"},
                {"$set": {"price": 11.99}},
            ),
            DeleteOne(
                "delete_moby_dick",
                'Deleted "Moby Dick": {count} document(s) deleted',
                {"title": "Moby Dick"},
            ),
        ],
    )


def _advanced_queries() -> Section:
    return Section(
        "ADVANCED QUERIES",
        [
            Find(
                "in_stock_after_2010",
                "Books in stock and published after 2010:",
                FindQuery({"in_stock": True, "published_year": {"$gt": 2010}}),
            ),
            Find(
                "projection",
                "Projection (title, author, price only):",
                FindQuery({}, {"_id": 0, "title": 1, "author": 1, "price": 1}),
            ),
            Find(
                "sort_price_asc",
                "Books sorted by price (ascending):",
                FindQuery().sort("price", 1),
            ),
            Find(
                "sort_price_desc",
                "Books sorted by price (descending):",
                FindQuery().sort("price", -1),
            ),
            Find(
                "page_1",
                "Pagination (Page 1 - first 5 books):",
                FindQuery().skip(0).limit(5),
            ),
            Find(
                "page_2",
                "Pagination (Page 2 - next 5 books):",
                FindQuery().skip(5).limit(5),
            ),
        ],
    )


# floor(published_year / 10) * 10, as a string, plus "s": 1987 -> "1980s"
DECADE_KEY = {
    "$concat": [
        {"$toString": {"$multiply": [{"$floor": {"$divide": ["$published_year", 10]}}, 10]}},
        "s",
    ]
}


def _aggregations() -> Section:
    return Section(
        "AGGREGATION PIPELINES",
        [
            Aggregate(
                "avg_price_by_genre",
                "Average price of books by genre:",
                [{"$group": {"_id": "$genre", "avgPrice": {"$avg": "$price"}}}],
            ),
            Aggregate(
                "top_author",
                "Author with the most books:",
                [
                    {"$group": {"_id": "$author", "totalBooks": {"$sum": 1}}},
                    {"$sort": {"totalBooks": -1}},
                    {"$limit": 1},
                ],
            ),
            Aggregate(
                "books_by_decade",
                "Books grouped by publication decade:",
                [{"$group": {"_id": DECADE_KEY, "totalBooks": {"$sum": 1}}}],
            ),
        ],
    )


def _indexing() -> Section:
    return Section(
        "INDEXING",
        [
            CreateIndex("index_title", "Created index on title", [("title", 1)]),
            CreateIndex(
                "index_author_year",
                "Created compound index on author and published_year",
                [("author", 1), ("published_year", -1)],
            ),
            Explain(
                "explain_title_search",
                "Explain query performance for title search:",
                FindQuery({"title": "The Hobbit"}),
            ),
        ],
    )


def bookstore_sections() -> list[Section]:
    """Return the bookstore operations grouped by section, in run order."""

    return [_basic_crud(), _advanced_queries(), _aggregations(), _indexing()]


def bookstore_operations() -> list[Operation]:
    """Return the seventeen bookstore operations as one ordered list."""

    return [op for section in bookstore_sections() for op in section.operations]
