"""
Schema Bootstrap
================

Creates the pgvector extension, the documents table and its vector index.
All statements are idempotent so every run can call ``ensure_schema``.
"""

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.db.models import build_documents_table
from bragging_rights.utils.errors import ConfigurationError, DatabaseError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DistanceMetric:
    """pgvector operator and index operator class for one distance type."""

    name: str
    operator: str
    opclass: str

    def to_similarity(self, distance: float) -> float:
        """Map a raw operator value to a score where higher is closer."""
        if self.name == "COSINE_DISTANCE":
            return 1.0 - distance
        if self.name == "NEGATIVE_INNER_PRODUCT":
            return -distance
        return 1.0 / (1.0 + distance)


DISTANCE_METRICS: dict[str, DistanceMetric] = {
    "COSINE_DISTANCE": DistanceMetric("COSINE_DISTANCE", "<=>", "vector_cosine_ops"),
    "EUCLIDEAN_DISTANCE": DistanceMetric("EUCLIDEAN_DISTANCE", "<->", "vector_l2_ops"),
    "NEGATIVE_INNER_PRODUCT": DistanceMetric("NEGATIVE_INNER_PRODUCT", "<#>", "vector_ip_ops"),
}


def get_distance_metric(distance_type: str) -> DistanceMetric:
    """
    Look up a distance metric by its configured name.

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        return DISTANCE_METRICS[distance_type]
    except KeyError:
        raise ConfigurationError(
            message=f"Unsupported distance type: {distance_type}",
            details={"supported": sorted(DISTANCE_METRICS)},
        ) from None


def build_index_ddl(settings: Settings) -> str | None:
    """
    Build the CREATE INDEX statement for the configured index type.

    Returns:
        DDL string, or None when ``vector_index_type`` is NONE
    """
    index_type = settings.vector_index_type
    if index_type == "NONE":
        return None

    metric = get_distance_metric(settings.vector_distance_type)
    table = settings.vector_table_name
    index_name = f"{table}_embedding_{index_type.lower()}_idx"

    if index_type == "HNSW":
        return (
            f"CREATE INDEX IF NOT EXISTS {index_name} "
            f"ON {table} USING hnsw (embedding {metric.opclass})"
        )
    if index_type == "IVFFLAT":
        return (
            f"CREATE INDEX IF NOT EXISTS {index_name} "
            f"ON {table} USING ivfflat (embedding {metric.opclass}) "
            f"WITH (lists = {settings.vector_index_lists})"
        )

    raise ConfigurationError(
        message=f"Unsupported index type: {index_type}",
        details={"supported": ["HNSW", "IVFFLAT", "NONE"]},
    )


async def ensure_schema(engine: AsyncEngine, settings: Settings | None = None) -> None:
    """
    Create extension, table and index if missing.

    Args:
        engine: Async engine from DatabaseManager
        settings: Application settings (uses default if not provided)

    Raises:
        DatabaseError: If any DDL statement fails
    """
    settings = settings or get_settings()
    table = build_documents_table(
        settings.vector_table_name, settings.embedding_dimensions
    )
    index_ddl = build_index_ddl(settings)

    try:
        async with engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(table.create, checkfirst=True)
            if index_ddl:
                await conn.execute(text(index_ddl))

        logger.info(
            "Vector store schema ready",
            table=settings.vector_table_name,
            dimensions=settings.embedding_dimensions,
            index_type=settings.vector_index_type,
            distance_type=settings.vector_distance_type,
        )

    except Exception as e:
        logger.error("Schema bootstrap failed", error=str(e))
        raise DatabaseError(
            message="Failed to create vector store schema",
            details={"table": settings.vector_table_name, "error": str(e)},
        ) from e
