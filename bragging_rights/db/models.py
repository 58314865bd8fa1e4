"""
Vector Store Table Definition
=============================

SQLAlchemy Core table for essay documents and their embeddings.

The table name and vector width are settings, so the table is built per
configuration instead of being declared once at import time.
"""

from functools import lru_cache

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, DateTime, MetaData, Table, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID


@lru_cache
def build_documents_table(table_name: str, dimensions: int) -> Table:
    """
    Build the documents table.

    Columns:
        id: UUID (PK)
        content: essay text
        metadata: JSONB, defaults to ``{}``
        embedding: vector(<dimensions>)
        created_at: insertion timestamp

    Args:
        table_name: Table name (already validated by Settings)
        dimensions: Embedding width, 768 for nomic-embed-text

    Returns:
        Table bound to its own MetaData
    """
    return Table(
        table_name,
        MetaData(),
        Column(
            "id",
            PG_UUID(as_uuid=True),
            primary_key=True,
            server_default=func.gen_random_uuid(),
        ),
        Column("content", Text, nullable=False),
        Column(
            "metadata",
            JSONB,
            nullable=False,
            server_default=text("'{}'::jsonb"),
        ),
        Column("embedding", Vector(dimensions), nullable=True),
        Column(
            "created_at",
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
        ),
    )
