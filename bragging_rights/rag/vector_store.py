"""
Vector Store
============

Embeds essay documents with Ollama and stores/searches them in pgvector.

Architecture:
    PgVectorStore → OllamaEmbeddings (LangChain) → Ollama API
                  → DocumentsRepository → PostgreSQL + pgvector
"""

from typing import Any, Sequence

from langchain_ollama import OllamaEmbeddings
from sqlalchemy.ext.asyncio import AsyncSession

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.db.repositories.documents_repo import DocumentsRepository
from bragging_rights.schemas.domain import Document, SimilarityResult
from bragging_rights.utils.errors import EmbeddingError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)


class PgVectorStore:
    """
    pgvector-backed document store.

    Usage:
        async with DatabaseManager.get_session() as session:
            store = PgVectorStore(session)
            await store.add([Document(content="...")])
            matches = await store.similarity_search("query")
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize PgVectorStore.

        Args:
            session: SQLAlchemy async session
            settings: Application settings (uses default if not provided)
        """
        self._session = session
        self._settings = settings or get_settings()
        self._repo = DocumentsRepository(
            session,
            table_name=self._settings.vector_table_name,
            dimensions=self._settings.embedding_dimensions,
            distance_type=self._settings.vector_distance_type,
        )

        self._embeddings = OllamaEmbeddings(
            model=self._settings.ollama_embedding_model,
            base_url=self._settings.ollama_base_url,
        )

        self._embedding_dimensions = self._settings.embedding_dimensions
        self._model_name = self._settings.ollama_embedding_model

        logger.debug(
            "PgVectorStore initialized",
            model=self._model_name,
            dimensions=self._embedding_dimensions,
            table=self._settings.vector_table_name,
        )

    def _validate(self, embedding: list[float]) -> list[float]:
        if len(embedding) != self._embedding_dimensions:
            raise EmbeddingError(
                message=f"Unexpected embedding dimensions: {len(embedding)}",
                details={
                    "expected": self._embedding_dimensions,
                    "actual": len(embedding),
                },
            )
        return embedding

    async def embed_query(self, text: str) -> list[float]:
        """
        Generate the embedding for a search query.

        Raises:
            EmbeddingError: On empty text, wrong dimensions or Ollama failure
        """
        if not text or not text.strip():
            raise EmbeddingError(
                message="Cannot embed empty text",
                details={"text": text},
            )

        try:
            embedding = await self._embeddings.aembed_query(text)
        except Exception as e:
            logger.error(
                "Embedding generation failed",
                error=str(e),
                text_preview=text[:50],
            )
            raise EmbeddingError(
                message="Failed to generate embedding",
                details={"error": str(e), "text_preview": text[:50]},
            ) from e

        return self._validate(embedding)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for document texts in one call.

        Raises:
            EmbeddingError: On empty text, wrong dimensions or Ollama failure
        """
        if not texts:
            return []

        if any(not t or not t.strip() for t in texts):
            raise EmbeddingError(
                message="Cannot embed empty text",
                details={"batch_size": len(texts)},
            )

        try:
            logger.info("Generating batch embeddings", count=len(texts))
            embeddings = await self._embeddings.aembed_documents(texts)
        except Exception as e:
            logger.error("Batch embedding failed", error=str(e))
            raise EmbeddingError(
                message="Failed to generate batch embeddings",
                details={"error": str(e), "batch_size": len(texts)},
            ) from e

        if len(embeddings) != len(texts):
            raise EmbeddingError(
                message="Embedding count does not match document count",
                details={"expected": len(texts), "actual": len(embeddings)},
            )

        return [self._validate(e) for e in embeddings]

    async def add(self, documents: Sequence[Document]) -> None:
        """
        Embed and persist a batch of documents.

        Args:
            documents: Documents to store; an empty batch is a no-op

        Raises:
            EmbeddingError: If embedding fails
            DatabaseError: If persisting fails
        """
        if not documents:
            logger.debug("No documents to add")
            return

        embeddings = await self.embed_documents([d.content for d in documents])
        await self._repo.insert_batch(list(zip(documents, embeddings)))
        await self._session.flush()

        logger.info("Documents added", count=len(documents))

    async def similarity_search(
        self,
        query_text: str,
        top_k: int | None = None,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        """
        Nearest documents to a text query, closest first.

        Args:
            query_text: Text to search for
            top_k: Number of results (settings.similarity_top_k by default)
            metadata_filter: Restrict matches to documents carrying this metadata

        Returns:
            List of SimilarityResult, possibly empty
        """
        if top_k is None:
            top_k = self._settings.similarity_top_k
        embedding = await self.embed_query(query_text)
        return await self._repo.search_similar(
            embedding, top_k=top_k, metadata_filter=metadata_filter
        )

    async def count(self) -> int:
        """Number of stored documents."""
        return await self._repo.count()

    async def clear(self) -> int:
        """Delete every stored document, returning how many were removed."""
        return await self._repo.delete_all()
