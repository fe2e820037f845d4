"""
docstore/store.py -- SQLAlchemy-backed document store for AssetVerse.

Each collection is one table holding schema-flexible JSON documents. The
table columns only carry identity and bookkeeping; every client field lives
inside the JSON `document` column, so assets, requests, and packages can
change shape without a migration.

Uses SQLAlchemy Core (not ORM). Swapping SQLite for PostgreSQL is a
connection string change: JSON field filters compile to JSON_EXTRACT on
SQLite and ->> on PostgreSQL.

Pattern: Repository. DocumentStore owns the engine and exposes one Collection
handle per collection; route handlers never touch SQL directly.

Identity: the store assigns every document a 24-hex-character `_id` on
insert. A client-supplied `_id` is dropped on insert and on update, so a
document's identity never changes after creation.

Strict JSON: NaN and Infinity are refused before any write. SQLite stores them
as bare tokens that JSON_EXTRACT rejects, which would break every filtered
read on the collection.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = DocumentStore("sqlite:///asset_verse.db")
    result = store.assets.insert_one({"name": "Laptop"})
    store.assets.update_one({"_id": result.inserted_id}, {"status": "assigned"})
    store.requests.find({"hrEmail": "hr@example.com"})
    store.close()
"""

from __future__ import annotations

import json
import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table, create_engine, event, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from docstore.errors import DocumentStoreError, InvalidDocumentError, UnsupportedFilterError
from docstore.models import (
    ASSETS,
    ASSIGNED_ASSETS,
    COLLECTION_NAMES,
    EMPLOYEE_AFFILIATIONS,
    PACKAGES,
    PAYMENTS,
    REQUESTS,
    USERS,
    DeleteResult,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger("assetverse.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()


def _collection_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("seq", Integer, primary_key=True, autoincrement=True),  # insertion order
        Column("doc_id", String(24), nullable=False, unique=True),
        Column("document", JSON, nullable=False),
        Column("created_at", String(32), nullable=False),
    )


_tables: dict[str, Table] = {name: _collection_table(name) for name in COLLECTION_NAMES}


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    """Return a random 24-hex-character document id (96 bits of entropy)."""
    return secrets.token_hex(12)


def _without_id(document: dict) -> dict:
    return {k: v for k, v in document.items() if k != "_id"}


def _strict_json(value: Any) -> str:
    """JSON column serializer. NaN and Infinity are not JSON and break JSON_EXTRACT."""
    return json.dumps(value, allow_nan=False)


def _storable(collection: str, document: dict) -> dict:
    """Return the document without _id, or raise InvalidDocumentError if it is not strict JSON."""
    body = _without_id(document)
    try:
        _strict_json(body)
    except (TypeError, ValueError) as exc:
        raise InvalidDocumentError(f"Document for {collection} is not valid JSON: {exc}") from exc
    return body


def _to_document(doc_id: str, body: dict) -> dict:
    """Mapper: table row -> client document with _id as the first key."""
    return {"_id": doc_id, **body}


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise DocumentStoreError(f"{operation} failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class Collection:
    """One named collection of JSON documents.

    Filters are dicts of top-level field equality tests, ANDed together.
    The key "_id" matches the document id; any other key matches a field
    inside the document. Only str and int filter values are supported.
    """

    def __init__(self, engine: Engine, table: Table) -> None:
        self._engine = engine
        self._table = table

    @property
    def name(self) -> str:
        return self._table.name

    def _where(self, filter: dict[str, Any] | None) -> list:
        t = self._table
        clauses = []
        for key, value in (filter or {}).items():
            if key == "_id":
                clauses.append(t.c.doc_id == str(value))
                continue
            field = t.c.document[key]
            # bool is an int subclass; JSON true/false does not compare equal to 1/0 in SQL
            if isinstance(value, bool):
                raise UnsupportedFilterError(f"Cannot filter {self.name}.{key} on a boolean.")
            if isinstance(value, str):
                clauses.append(field.as_string() == value)
            elif isinstance(value, int):
                clauses.append(field.as_integer() == value)
            else:
                raise UnsupportedFilterError(
                    f"Cannot filter {self.name}.{key} on a {type(value).__name__}."
                )
        return clauses

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_one(self, document: dict) -> InsertResult:
        """Insert a document and return its generated _id."""
        doc_id = _new_id()
        with _translate_errors(f"insert into {self.name}"), self._engine.begin() as conn:
            conn.execute(
                self._table.insert().values(
                    doc_id=doc_id,
                    document=_storable(self.name, document),
                    created_at=_now_iso(),
                )
            )
        return InsertResult(inserted_id=doc_id)

    def insert_many(self, documents: list[dict]) -> list[str]:
        """Insert several documents in one transaction. Returns their ids in order."""
        ids = [_new_id() for _ in documents]
        if not documents:
            return ids
        now = _now_iso()
        rows = [
            {"doc_id": doc_id, "document": _storable(self.name, doc), "created_at": now}
            for doc_id, doc in zip(ids, documents)
        ]
        with _translate_errors(f"bulk insert into {self.name}"), self._engine.begin() as conn:
            conn.execute(self._table.insert(), rows)
        return ids

    def update_one(self, filter: dict[str, Any], fields: dict) -> UpdateResult:
        """Merge fields into the first matching document.

        Top-level keys in `fields` replace the stored values; keys not named
        are left alone. The read and the write share one transaction.
        """
        t = self._table
        changes = _storable(self.name, fields)
        with _translate_errors(f"update in {self.name}"), self._engine.begin() as conn:
            row = conn.execute(
                select(t.c.seq, t.c.document).where(*self._where(filter)).order_by(t.c.seq).limit(1)
            ).first()
            if row is None:
                return UpdateResult(matched_count=0, modified_count=0)
            merged = {**row.document, **changes}
            if merged == row.document:
                return UpdateResult(matched_count=1, modified_count=0)
            conn.execute(t.update().where(t.c.seq == row.seq).values(document=merged))
        return UpdateResult(matched_count=1, modified_count=1)

    def delete_one(self, filter: dict[str, Any]) -> DeleteResult:
        t = self._table
        with _translate_errors(f"delete from {self.name}"), self._engine.begin() as conn:
            seq = conn.execute(
                select(t.c.seq).where(*self._where(filter)).order_by(t.c.seq).limit(1)
            ).scalar()
            if seq is None:
                return DeleteResult(deleted_count=0)
            conn.execute(t.delete().where(t.c.seq == seq))
        return DeleteResult(deleted_count=1)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, filter: dict[str, Any] | None = None) -> list[dict]:
        """Return every matching document in insertion order."""
        t = self._table
        with _translate_errors(f"find in {self.name}"), self._engine.connect() as conn:
            rows = conn.execute(
                select(t.c.doc_id, t.c.document).where(*self._where(filter)).order_by(t.c.seq)
            ).fetchall()
        return [_to_document(row.doc_id, row.document) for row in rows]

    def find_one(self, filter: dict[str, Any]) -> dict | None:
        t = self._table
        with _translate_errors(f"find in {self.name}"), self._engine.connect() as conn:
            row = conn.execute(
                select(t.c.doc_id, t.c.document).where(*self._where(filter)).order_by(t.c.seq).limit(1)
            ).first()
        if row is None:
            return None
        return _to_document(row.doc_id, row.document)

    def count(self) -> int:
        with _translate_errors(f"count {self.name}"), self._engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(self._table)).scalar()
        return result or 0


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class DocumentStore:
    """Owns the engine and one Collection handle per AssetVerse collection.

    A single instance is shared by every request. The engine manages its own
    connection pool; the store holds no per-request state.
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, json_serializer=_strict_json)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        with _translate_errors("schema setup"):
            metadata.create_all(self.engine)

        self._collections = {name: Collection(self.engine, table) for name, table in _tables.items()}
        self.users = self._collections[USERS]
        self.employee_affiliations = self._collections[EMPLOYEE_AFFILIATIONS]
        self.assets = self._collections[ASSETS]
        self.requests = self._collections[REQUESTS]
        self.assigned_assets = self._collections[ASSIGNED_ASSETS]
        self.packages = self._collections[PACKAGES]
        self.payments = self._collections[PAYMENTS]

    def collection(self, name: str) -> Collection:
        """Return the collection by its wire name. Raises KeyError if unknown."""
        try:
            return self._collections[name]
        except KeyError:
            raise KeyError(f"Unknown collection {name!r}. Known: {', '.join(COLLECTION_NAMES)}") from None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("Document store ping failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
