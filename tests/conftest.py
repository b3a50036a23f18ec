"""
Pytest fixtures for bookstore-queries tests.

Provides an in-memory stand-in for the Motor client so the runner can be
exercised without a MongoDB server.
"""

from __future__ import annotations

import math
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from pymongo.errors import InvalidName, OperationFailure, ServerSelectionTimeoutError

from bookstore_queries import StoreConfig, seed_books


class FakeCursor:
    """Mock for AsyncIOMotorCursor."""

    def __init__(self, collection: FakeCollection, filter: dict[str, Any], projection: dict[str, Any] | None) -> None:
        self._collection = collection
        self._filter = filter
        self._projection = projection
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: Any, direction: int = 1) -> FakeCursor:
        if isinstance(key_or_list, str):
            self._sort = [(key_or_list, direction)]
        else:
            self._sort = list(key_or_list)
        return self

    def skip(self, skip: int) -> FakeCursor:
        self._skip = skip
        return self

    def limit(self, limit: int) -> FakeCursor:
        self._limit = limit
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        self._collection._check("find")
        results = [dict(doc) for doc in self._collection.docs if _matches(doc, self._filter)]
        results = _sort(results, self._sort)
        if self._skip:
            results = results[self._skip:]
        if self._limit:
            results = results[: self._limit]
        if self._projection:
            results = [_project(doc, self._projection) for doc in results]
        if length is not None:
            results = results[:length]
        return results


class FakeCommandCursor:
    """Mock for AsyncIOMotorCommandCursor returned by aggregate()."""

    def __init__(self, results: list[dict[str, Any]]) -> None:
        self._results = results

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        if length is not None:
            return self._results[:length]
        return self._results


class FakeCollection:
    """Mock for AsyncIOMotorCollection."""

    def __init__(self, database: FakeDatabase, name: str) -> None:
        self.database = database
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.indexes: dict[str, list[tuple[str, int]]] = {}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _check(self, method: str) -> None:
        self.calls.append(method)
        if method in self.fail_on:
            raise OperationFailure(f"{method} failed", code=2)

    def find(self, filter: dict[str, Any] | None = None, projection: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor(self, dict(filter or {}), projection)

    async def find_one(self, filter: dict[str, Any] | None = None) -> dict[str, Any] | None:
        for doc in self.docs:
            if _matches(doc, filter or {}):
                return dict(doc)
        return None

    async def insert_many(self, documents: list[dict[str, Any]]) -> SimpleNamespace:
        self._check("insert_many")
        ids = []
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.docs.append(dict(document))
            ids.append(document["_id"])
        return SimpleNamespace(inserted_ids=ids, acknowledged=True)

    async def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        self._check("update_one")
        for doc in self.docs:
            if _matches(doc, filter):
                modified = _apply_update(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=int(modified), acknowledged=True)
        return SimpleNamespace(matched_count=0, modified_count=0, acknowledged=True)

    async def delete_one(self, filter: dict[str, Any]) -> SimpleNamespace:
        self._check("delete_one")
        for i, doc in enumerate(self.docs):
            if _matches(doc, filter):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1, acknowledged=True)
        return SimpleNamespace(deleted_count=0, acknowledged=True)

    async def count_documents(self, filter: dict[str, Any]) -> int:
        return sum(1 for doc in self.docs if _matches(doc, filter))

    def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeCommandCursor:
        self._check("aggregate")
        return FakeCommandCursor(_aggregate([dict(doc) for doc in self.docs], pipeline))

    async def create_index(self, keys: list[tuple[str, int]], **kwargs: Any) -> str:
        self._check("create_index")
        name = kwargs.get("name") or "_".join(f"{k}_{d}" for k, d in keys)
        self.indexes[name] = list(keys)
        return name

    async def drop(self) -> None:
        self.docs.clear()
        self.indexes.clear()


class FakeDatabase:
    """Mock for AsyncIOMotorDatabase."""

    def __init__(self, store: FakeStore, name: str) -> None:
        self._store = store
        self.name = name
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if not name:
            raise InvalidName("collection names cannot be empty")
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    async def command(self, command: Any) -> dict[str, Any]:
        if self._store.unreachable:
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")
        if command == "ping":
            return {"ok": 1.0}
        if isinstance(command, dict) and "explain" in command:
            return self._explain(command["explain"], command.get("verbosity"))
        return {"ok": 1.0}

    def _explain(self, find: dict[str, Any], verbosity: str | None) -> dict[str, Any]:
        collection = self[find["find"]]
        filter = find.get("filter", {})
        matched = [doc for doc in collection.docs if _matches(doc, filter)]
        indexed = any(keys[0][0] in filter for keys in collection.indexes.values())
        plan: dict[str, Any] = {
            "queryPlanner": {
                "namespace": f"{self.name}.{collection.name}",
                "winningPlan": {"stage": "FETCH" if indexed else "COLLSCAN"},
            },
            "ok": 1.0,
        }
        if verbosity in ("executionStats", "allPlansExecution"):
            plan["executionStats"] = {
                "executionSuccess": True,
                "nReturned": len(matched),
                "executionTimeMillis": 0,
                "totalKeysExamined": len(matched) if indexed else 0,
                "totalDocsExamined": len(matched) if indexed else len(collection.docs),
            }
        return plan


class FakeMotorClient:
    """Mock for AsyncIOMotorClient."""

    def __init__(self, store: FakeStore, uri: str, **kwargs: Any) -> None:
        self._store = store
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False

    @property
    def admin(self) -> FakeDatabase:
        return self._store["admin"]

    def __getitem__(self, name: str) -> FakeDatabase:
        return self._store[name]

    async def drop_database(self, name: str) -> None:
        self._store.drop(name)

    def close(self) -> None:
        self.closed = True


class FakeStore:
    """Shared server state seen by every FakeMotorClient."""

    def __init__(self) -> None:
        self._databases: dict[str, FakeDatabase] = {}
        self.clients: list[FakeMotorClient] = []
        self.unreachable = False

    def __getitem__(self, name: str) -> FakeDatabase:
        if not name:
            raise InvalidName("database name cannot be the empty string")
        if name not in self._databases:
            self._databases[name] = FakeDatabase(self, name)
        return self._databases[name]

    def drop(self, name: str) -> None:
        self._databases.pop(name, None)

    def client(self, uri: str, **kwargs: Any) -> FakeMotorClient:
        client = FakeMotorClient(self, uri, **kwargs)
        self.clients.append(client)
        return client


def _matches(doc: dict[str, Any], filter: dict[str, Any]) -> bool:
    """Check if document matches filter."""
    for key, value in filter.items():
        if key == "$and":
            if not all(_matches(doc, f) for f in value):
                return False
            continue
        if key == "$or":
            if not any(_matches(doc, f) for f in value):
                return False
            continue

        doc_value = doc.get(key)

        if isinstance(value, dict):
            for op, op_value in value.items():
                if op == "$eq" and doc_value != op_value:
                    return False
                if op == "$ne" and doc_value == op_value:
                    return False
                if op == "$gt" and (doc_value is None or doc_value <= op_value):
                    return False
                if op == "$gte" and (doc_value is None or doc_value < op_value):
                    return False
                if op == "$lt" and (doc_value is None or doc_value >= op_value):
                    return False
                if op == "$lte" and (doc_value is None or doc_value > op_value):
                    return False
                if op == "$in" and doc_value not in op_value:
                    return False
        elif doc_value != value:
            return False

    return True


def _apply_update(doc: dict[str, Any], update: dict[str, Any]) -> bool:
    """Apply $set / $inc to document; return whether it changed."""
    modified = False
    for op, fields in update.items():
        if op == "$set":
            for key, value in fields.items():
                if doc.get(key) != value:
                    doc[key] = value
                    modified = True
        elif op == "$inc":
            for key, value in fields.items():
                doc[key] = doc.get(key, 0) + value
                modified = True
    return modified


def _project(doc: dict[str, Any], projection: dict[str, Any]) -> dict[str, Any]:
    """Apply projection to document."""
    include_mode = any(v == 1 for k, v in projection.items() if k != "_id")
    if include_mode:
        result = {}
        if "_id" in doc and projection.get("_id", 1) != 0:
            result["_id"] = doc["_id"]
        for key, include in projection.items():
            if include and key != "_id" and key in doc:
                result[key] = doc[key]
        return result
    return {k: v for k, v in doc.items() if projection.get(k, 1) != 0}


def _sort(docs: list[dict[str, Any]], spec: Any) -> list[dict[str, Any]]:
    if isinstance(spec, dict):
        spec = list(spec.items())
    for field, direction in reversed(spec or []):
        docs.sort(key=lambda d: (d.get(field) is not None, d.get(field)), reverse=(direction == -1))
    return docs


def _to_string(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _evaluate(expr: Any, doc: dict[str, Any]) -> Any:
    """Evaluate an aggregation expression against a document."""
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    if isinstance(expr, dict) and len(expr) == 1:
        op, arg = next(iter(expr.items()))
        if op == "$concat":
            return "".join(_evaluate(part, doc) for part in arg)
        if op == "$toString":
            return _to_string(_evaluate(arg, doc))
        if op == "$floor":
            return float(math.floor(_evaluate(arg, doc)))
        if op == "$divide":
            return _evaluate(arg[0], doc) / _evaluate(arg[1], doc)
        if op == "$multiply":
            product = 1
            for part in arg:
                product *= _evaluate(part, doc)
            return product
    return expr


def _group(docs: list[dict[str, Any]], spec: dict[str, Any]) -> list[dict[str, Any]]:
    groups: dict[Any, list[dict[str, Any]]] = {}
    for doc in docs:
        groups.setdefault(_evaluate(spec["_id"], doc), []).append(doc)

    results = []
    for key, members in groups.items():
        row: dict[str, Any] = {"_id": key}
        for field, accumulator in spec.items():
            if field == "_id":
                continue
            op, arg = next(iter(accumulator.items()))
            values = [_evaluate(arg, doc) for doc in members]
            if op == "$sum":
                row[field] = sum(v for v in values if isinstance(v, (int, float)))
            elif op == "$avg":
                numbers = [v for v in values if isinstance(v, (int, float))]
                row[field] = sum(numbers) / len(numbers) if numbers else None
        results.append(row)
    return results


def _aggregate(docs: list[dict[str, Any]], pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Run the $group/$sort/$limit/$match subset of the aggregation framework."""
    for stage in pipeline:
        name, spec = next(iter(stage.items()))
        if name == "$group":
            docs = _group(docs, spec)
        elif name == "$sort":
            docs = _sort(docs, spec)
        elif name == "$limit":
            docs = docs[:spec]
        elif name == "$match":
            docs = [doc for doc in docs if _matches(doc, spec)]
        else:
            raise OperationFailure(f"Unrecognized pipeline stage name: '{name}'", code=40324)
    return docs


@pytest.fixture
def fake_store() -> FakeStore:
    """Create an empty fake server."""
    return FakeStore()


@pytest.fixture
def mock_motor(fake_store: FakeStore, monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    """Route StoreClient connections to the fake server."""
    monkeypatch.setattr("bookstore_queries.client.AsyncIOMotorClient", fake_store.client)
    return fake_store


@pytest.fixture
def config() -> StoreConfig:
    """Config pointing at an isolated test database."""
    return StoreConfig(
        uri="mongodb://test-host:27017",
        database_name="testdb",
        collection_name="books",
    )


@pytest.fixture
def books(mock_motor: FakeStore, config: StoreConfig) -> FakeCollection:
    """The empty books collection on the fake server."""
    return mock_motor[config.database_name][config.collection_name]


@pytest.fixture
async def seeded(books: FakeCollection) -> FakeCollection:
    """The books collection loaded with the sample books."""
    await seed_books(books)
    return books
