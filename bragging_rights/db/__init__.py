"""
Database Package
================

Table definition, schema bootstrap, connection management and repositories.
"""

from bragging_rights.db.connection import DatabaseManager
from bragging_rights.db.models import build_documents_table
from bragging_rights.db.schema import DISTANCE_METRICS, DistanceMetric, ensure_schema

__all__ = [
    # Tables
    "build_documents_table",
    # Schema
    "DISTANCE_METRICS",
    "DistanceMetric",
    "ensure_schema",
    # Connection
    "DatabaseManager",
]
