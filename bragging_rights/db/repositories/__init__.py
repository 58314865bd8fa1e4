"""
Database Repositories
=====================

Data access layer following repository pattern.

Components:
    - DocumentsRepository: insert and similarity search for essay documents
"""

from bragging_rights.db.repositories.documents_repo import DocumentsRepository

__all__ = ["DocumentsRepository"]
