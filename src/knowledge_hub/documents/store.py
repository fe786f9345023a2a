"""
Document store implementations following the gold standard pattern.

Pattern: Protocol -> Production impl -> Test double -> Factory

This module contains:
1. DocumentStoreConfig - Configuration dataclass
2. PgDocumentStore - PostgreSQL with pgvector (production)
3. InMemoryDocumentStore - In-memory store (testing/development)
4. get_document_store() - Factory function

Both stores honour the same query contract: case-insensitive literal
substring matching across fields, tag equality, "has embedding" filtering,
newest-update-first ordering and skip/limit pagination.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import numpy as np
import psycopg
from pgvector.psycopg import register_vector_async
from psycopg.rows import dict_row

from knowledge_hub.core import DocumentFilter
from knowledge_hub.documents.document import Document, normalize_tags

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"title", "content", "tags", "summary", "embedding", "owner_id", "updated_at"}
)


def _clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unknown fields and coerce tags/embedding to their stored shapes."""
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    cleaned = dict(fields)
    if "tags" in cleaned:
        cleaned["tags"] = normalize_tags(cleaned["tags"])
    if "embedding" in cleaned and cleaned["embedding"] is not None:
        cleaned["embedding"] = [float(x) for x in cleaned["embedding"]]
    return cleaned


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class DocumentStoreConfig:
    """Configuration for the document store."""

    connection_string: str = "postgresql://localhost/knowledge_hub"
    table_name: str = "documents"

    @classmethod
    def from_env(cls) -> "DocumentStoreConfig":
        return cls(
            connection_string=os.environ.get(
                "DATABASE_URL", "postgresql://localhost/knowledge_hub"
            ),
            table_name=os.environ.get("DOCUMENTS_TABLE", "documents"),
        )


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryDocumentStore:
    """
    In-memory document store for development/testing.

    Implements the same interface as PgDocumentStore but doesn't require
    Postgres. Every read returns copies, so callers can never mutate stored
    state without going through update_fields().
    """

    def __init__(self, documents: list[Document] | None = None):
        self._documents: dict[str, Document] = {}
        for doc in documents or []:
            self._documents[doc.id] = doc.copy()

    async def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    async def close(self) -> None:
        """No-op for in-memory store."""
        pass

    async def insert(self, doc: Document) -> Document:
        if doc.id in self._documents:
            raise ValueError(f"Duplicate document id: {doc.id}")
        self._documents[doc.id] = doc.copy()
        return doc.copy()

    async def get(self, doc_id: str) -> Document | None:
        doc = self._documents.get(doc_id)
        return doc.copy() if doc else None

    @staticmethod
    def _matches(doc: Document, doc_filter: DocumentFilter) -> bool:
        if doc_filter.has_embedding and not doc.has_embedding:
            return False
        if doc_filter.tag is not None and doc_filter.tag not in doc.tags:
            return False
        if doc_filter.text:
            needle = doc_filter.text.lower()
            for name in doc_filter.text_fields:
                if name == "tags":
                    if any(needle in tag.lower() for tag in doc.tags):
                        return True
                    continue
                value = getattr(doc, name, None)
                if isinstance(value, str) and needle in value.lower():
                    return True
            return False
        return True

    async def find(
        self,
        doc_filter: DocumentFilter | None = None,
        skip: int = 0,
        limit: int | None = None,
        sort_by_updated: bool = True,
    ) -> list[Document]:
        doc_filter = doc_filter or DocumentFilter()
        matched = [d for d in self._documents.values() if self._matches(d, doc_filter)]

        if sort_by_updated:
            # Stable sort: equal timestamps keep insertion order
            matched.sort(key=lambda d: d.updated_at, reverse=True)

        end = None if limit is None else skip + limit
        return [d.copy() for d in matched[skip:end]]

    async def count(self, doc_filter: DocumentFilter | None = None) -> int:
        doc_filter = doc_filter or DocumentFilter()
        return sum(1 for d in self._documents.values() if self._matches(d, doc_filter))

    async def update_fields(self, doc_id: str, fields: dict[str, Any]) -> Document | None:
        doc = self._documents.get(doc_id)
        if doc is None:
            return None
        for name, value in _clean_fields(fields).items():
            setattr(doc, name, value)
        return doc.copy()

    async def delete(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so the query is matched literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PgDocumentStore:
    """
    PostgreSQL document store using pgvector.

    The embedding column is an unsized `vector` so that embeddings from
    different providers can coexist; similarity ranking happens in the
    application (see knowledge_hub.embeddings.similarity).
    """

    _COLUMNS = (
        "id", "title", "content", "tags", "summary",
        "embedding", "owner_id", "created_at", "updated_at",
    )

    def __init__(self, config: DocumentStoreConfig):
        self.config = config
        self._conn: psycopg.AsyncConnection | None = None

    async def connect(self) -> None:
        """Establish database connection and make sure the schema exists."""
        if self._conn is not None:
            return
        self._conn = await psycopg.AsyncConnection.connect(
            self.config.connection_string, autocommit=True, row_factory=dict_row
        )
        await self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        await register_vector_async(self._conn)
        await self.create_schema()
        logger.info(f"Connected to document store table {self.config.table_name}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def _connection(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            await self.connect()
        return self._conn

    async def create_schema(self) -> None:
        """Create the documents table and indexes."""
        table = self.config.table_name
        await self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                tags TEXT[] NOT NULL DEFAULT '{{}}',
                summary TEXT,
                embedding vector,
                owner_id TEXT,
                created_at TIMESTAMPTZ NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL
            )
            """
        )
        # GIN index for tag equality filtering
        await self._conn.execute(
            f"CREATE INDEX IF NOT EXISTS {table}_tags_idx ON {table} USING GIN (tags)"
        )
        await self._conn.execute(
            f"CREATE INDEX IF NOT EXISTS {table}_updated_idx ON {table} (updated_at DESC)"
        )

    @staticmethod
    def _to_db(name: str, value: Any) -> Any:
        if name == "embedding" and value is not None:
            return np.asarray(value, dtype=np.float32)
        return value

    @staticmethod
    def _row_to_document(row: dict) -> Document:
        embedding = row.get("embedding")
        if embedding is not None:
            embedding = [float(x) for x in np.asarray(embedding).tolist()]
        return Document(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            tags=list(row.get("tags") or []),
            summary=row.get("summary"),
            embedding=embedding,
            owner_id=row.get("owner_id"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _where(self, doc_filter: DocumentFilter) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []

        if doc_filter.text:
            pattern = f"%{_escape_like(doc_filter.text)}%"
            ors = []
            for name in doc_filter.text_fields:
                if name == "tags":
                    ors.append(
                        "EXISTS (SELECT 1 FROM unnest(tags) AS t WHERE t ILIKE %s ESCAPE '\\')"
                    )
                elif name in ("title", "content", "summary"):
                    ors.append(f"{name} ILIKE %s ESCAPE '\\'")
                else:
                    raise ValueError(f"Unsupported text field: {name}")
                params.append(pattern)
            clauses.append("(" + " OR ".join(ors) + ")")

        if doc_filter.tag is not None:
            clauses.append("%s = ANY(tags)")
            params.append(doc_filter.tag)

        if doc_filter.has_embedding:
            clauses.append("embedding IS NOT NULL")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    async def insert(self, doc: Document) -> Document:
        conn = await self._connection()
        columns = ", ".join(self._COLUMNS)
        placeholders = ", ".join(["%s"] * len(self._COLUMNS))
        values = [self._to_db(name, getattr(doc, name)) for name in self._COLUMNS]
        await conn.execute(
            f"INSERT INTO {self.config.table_name} ({columns}) VALUES ({placeholders})",
            values,
        )
        return doc.copy()

    async def get(self, doc_id: str) -> Document | None:
        conn = await self._connection()
        cur = await conn.execute(
            f"SELECT * FROM {self.config.table_name} WHERE id = %s", (doc_id,)
        )
        row = await cur.fetchone()
        return self._row_to_document(row) if row else None

    async def find(
        self,
        doc_filter: DocumentFilter | None = None,
        skip: int = 0,
        limit: int | None = None,
        sort_by_updated: bool = True,
    ) -> list[Document]:
        conn = await self._connection()
        where, params = self._where(doc_filter or DocumentFilter())

        query = f"SELECT * FROM {self.config.table_name} {where}"
        if sort_by_updated:
            query += " ORDER BY updated_at DESC"
        if skip:
            query += " OFFSET %s"
            params.append(skip)
        if limit is not None:
            query += " LIMIT %s"
            params.append(limit)

        cur = await conn.execute(query, params)
        rows = await cur.fetchall()
        return [self._row_to_document(row) for row in rows]

    async def count(self, doc_filter: DocumentFilter | None = None) -> int:
        conn = await self._connection()
        where, params = self._where(doc_filter or DocumentFilter())
        cur = await conn.execute(
            f"SELECT COUNT(*) AS n FROM {self.config.table_name} {where}", params
        )
        row = await cur.fetchone()
        return int(row["n"])

    async def update_fields(self, doc_id: str, fields: dict[str, Any]) -> Document | None:
        cleaned = _clean_fields(fields)
        if not cleaned:
            return await self.get(doc_id)

        conn = await self._connection()
        assignments = ", ".join(f"{name} = %s" for name in cleaned)
        params = [self._to_db(name, value) for name, value in cleaned.items()]
        params.append(doc_id)
        cur = await conn.execute(
            f"UPDATE {self.config.table_name} SET {assignments} WHERE id = %s RETURNING *",
            params,
        )
        row = await cur.fetchone()
        return self._row_to_document(row) if row else None

    async def delete(self, doc_id: str) -> bool:
        conn = await self._connection()
        cur = await conn.execute(
            f"DELETE FROM {self.config.table_name} WHERE id = %s", (doc_id,)
        )
        return cur.rowcount > 0


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(
    use_postgres: bool | None = None,
    config: DocumentStoreConfig | None = None,
) -> PgDocumentStore | InMemoryDocumentStore:
    """
    Factory function to get the appropriate document store.

    Args:
        use_postgres: Use PostgreSQL store. Defaults to True when DATABASE_URL is set.
        config: Store configuration (read from the environment if not provided)

    Returns:
        DocumentStore implementation
    """
    if use_postgres is None:
        use_postgres = bool(os.environ.get("DATABASE_URL"))

    if use_postgres:
        return PgDocumentStore(config or DocumentStoreConfig.from_env())
    return InMemoryDocumentStore()
