"""
Service Bootstrap
=================

Explicit setup and teardown of the handles a workflow run needs.
Ollama and PostgreSQL (pgvector/pgvector:pg16) are provided by the
environment; their endpoints come from Settings.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.db.connection import DatabaseManager
from bragging_rights.db.schema import ensure_schema
from bragging_rights.rag.model_client import OllamaModelClient
from bragging_rights.rag.vector_store import PgVectorStore
from bragging_rights.utils.errors import ModelUnavailableError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceHandles:
    """Scoped handles passed into the workflow."""

    model_client: OllamaModelClient
    vector_store: PgVectorStore


@asynccontextmanager
async def open_services(
    settings: Settings | None = None,
    fresh: bool = False,
) -> AsyncGenerator[ServiceHandles, None]:
    """
    Open the model client and vector store for one run.

    Args:
        settings: Application settings (uses default if not provided)
        fresh: Delete previously stored documents before yielding

    Yields:
        ServiceHandles; the session commits when the block exits cleanly
    """
    settings = settings or get_settings()

    await DatabaseManager.initialize(settings)
    model_client = OllamaModelClient(settings)

    try:
        if not await model_client.is_available():
            raise ModelUnavailableError(
                message="Ollama runtime not reachable",
                details={"ollama_url": settings.ollama_base_url},
            )
        latency_ms = await DatabaseManager.ping()
        await ensure_schema(DatabaseManager.get_engine(), settings)

        async with DatabaseManager.get_session() as session:
            vector_store = PgVectorStore(session, settings)
            if fresh:
                await vector_store.clear()

            logger.info(
                "Services ready",
                ollama_url=settings.ollama_base_url,
                db_latency_ms=round(latency_ms, 2),
                table=settings.vector_table_name,
            )
            yield ServiceHandles(model_client=model_client, vector_store=vector_store)

    finally:
        await model_client.close()
        await DatabaseManager.close()
        logger.info("Services closed")
