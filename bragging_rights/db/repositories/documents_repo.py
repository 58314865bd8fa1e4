"""
Documents Repository
====================

Data access layer for the vector store table.
Raw SQL with ``CAST(:x AS vector)`` so embeddings cross the driver as text.
"""

import json
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from bragging_rights.db.schema import DistanceMetric, get_distance_metric
from bragging_rights.schemas.domain import Document, SimilarityResult
from bragging_rights.utils.errors import DatabaseError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)


def to_vector_literal(embedding: list[float]) -> str:
    """Convert an embedding to pgvector's text format, e.g. ``[0.1,0.2]``."""
    return f"[{','.join(str(x) for x in embedding)}]"


class DocumentsRepository:
    """
    Repository for the documents table.

    Table Schema:
        id: UUID (PK)
        content: text
        metadata: jsonb
        embedding: vector(N)
        created_at: timestamptz
    """

    def __init__(
        self,
        session: AsyncSession,
        table_name: str = "vector_store",
        dimensions: int = 768,
        distance_type: str = "COSINE_DISTANCE",
    ) -> None:
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
            table_name: Documents table (validated by Settings)
            dimensions: Expected embedding width
            distance_type: Name of the configured distance metric
        """
        self._session = session
        self._table = table_name
        self._dimensions = dimensions
        self._metric: DistanceMetric = get_distance_metric(distance_type)

    def _check_dimensions(self, embedding: list[float]) -> None:
        if len(embedding) != self._dimensions:
            raise ValueError(
                f"Embedding must be {self._dimensions} dimensions, got {len(embedding)}"
            )

    async def insert(self, document: Document, embedding: list[float]) -> UUID:
        """
        Insert a document with its embedding.

        Args:
            document: Document to persist
            embedding: Embedding of ``document.content``

        Returns:
            The stored document's UUID

        Raises:
            DatabaseError: If the insert fails
        """
        try:
            self._check_dimensions(embedding)

            query = text(f"""
                INSERT INTO {self._table} (id, content, metadata, embedding)
                VALUES (
                    :id, :content, CAST(:metadata AS jsonb), CAST(:embedding AS vector)
                )
                RETURNING id
            """)

            result = await self._session.execute(
                query,
                {
                    "id": document.id,
                    "content": document.content,
                    "metadata": json.dumps(document.metadata),
                    "embedding": to_vector_literal(embedding),
                },
            )

            document_id = result.scalar_one()
            logger.debug("Document inserted", document_id=str(document_id))
            return document_id

        except Exception as e:
            logger.error(
                "Failed to insert document",
                document_id=str(document.id),
                error=str(e),
            )
            raise DatabaseError(
                message="Failed to insert document",
                details={"document_id": str(document.id), "error": str(e)},
            ) from e

    async def insert_batch(
        self,
        rows: list[tuple[Document, list[float]]],
    ) -> list[UUID]:
        """
        Insert several documents in one transaction.

        Args:
            rows: List of (document, embedding) tuples

        Returns:
            UUIDs in input order
        """
        if not rows:
            return []

        ids = []
        for document, embedding in rows:
            ids.append(await self.insert(document, embedding))

        logger.info("Documents inserted", count=len(ids), table=self._table)
        return ids

    async def search_similar(
        self,
        query_embedding: list[float],
        top_k: int = 4,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        """
        Nearest documents under the configured distance operator.

        Args:
            query_embedding: Query vector
            top_k: Number of results to return
            metadata_filter: Only documents whose metadata contains these
                key/value pairs are considered

        Returns:
            Results ordered closest first

        Raises:
            DatabaseError: If the query fails
        """
        self._check_dimensions(query_embedding)

        params: dict[str, Any] = {
            "query_embedding": to_vector_literal(query_embedding),
            "top_k": top_k,
        }
        metadata_clause = ""
        if metadata_filter:
            metadata_clause = "AND metadata @> CAST(:metadata_filter AS jsonb)"
            params["metadata_filter"] = json.dumps(metadata_filter)

        query = text(f"""
            SELECT
                id,
                content,
                metadata,
                (embedding {self._metric.operator} CAST(:query_embedding AS vector)) AS distance
            FROM {self._table}
            WHERE embedding IS NOT NULL
            {metadata_clause}
            ORDER BY embedding {self._metric.operator} CAST(:query_embedding AS vector)
            LIMIT :top_k
        """)

        try:
            result = await self._session.execute(query, params)
            rows = result.mappings().fetchall()
        except Exception as e:
            logger.error("Similarity search failed", error=str(e))
            raise DatabaseError(
                message="Similarity search failed",
                details={"table": self._table, "error": str(e)},
            ) from e

        results = []
        for row in rows:
            distance = float(row["distance"])
            results.append(
                SimilarityResult(
                    document=Document(
                        id=row["id"],
                        content=row["content"],
                        metadata=self._parse_metadata(row["metadata"]),
                    ),
                    distance=distance,
                    similarity=self._metric.to_similarity(distance),
                )
            )

        logger.debug(
            "Similarity search completed",
            results_count=len(results),
            top_k=top_k,
        )
        return results

    async def count(self) -> int:
        """Number of stored documents."""
        result = await self._session.execute(
            text(f"SELECT COUNT(*) AS count FROM {self._table}")
        )
        return result.scalar_one()

    async def delete_all(self) -> int:
        """
        Remove every stored document.

        Returns:
            Number of deleted rows
        """
        result = await self._session.execute(text(f"DELETE FROM {self._table}"))
        deleted = result.rowcount
        logger.info("Documents deleted", table=self._table, deleted_count=deleted)
        return deleted

    @staticmethod
    def _parse_metadata(value: Any) -> dict[str, Any]:
        """asyncpg hands JSONB back as a string unless a codec is set."""
        if not value:
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return dict(value)
