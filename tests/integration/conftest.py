"""
Integration Test Services
=========================

Session-scoped PostgreSQL (pgvector/pgvector:pg16) and Ollama containers
started with testcontainers. Setting DATABASE_URL or OLLAMA_BASE_URL points
the suite at an already running service instead. Tests that need a service
are skipped when neither the variable nor Docker is available.
"""

import os

import pytest
from testcontainers.ollama import OllamaContainer
from testcontainers.postgres import PostgresContainer

PGVECTOR_IMAGE = "pgvector/pgvector:pg16"
OLLAMA_IMAGE = "ollama/ollama:latest"
POSTGRES = "postgres"


@pytest.fixture(scope="session")
def database_url():
    """Async database URL of a throwaway pgvector database."""
    url = os.environ.get("DATABASE_URL")
    if url:
        yield url
        return

    try:
        container = PostgresContainer(
            PGVECTOR_IMAGE,
            username=POSTGRES,
            password=POSTGRES,
            dbname=POSTGRES,
            driver="asyncpg",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"Cannot start {PGVECTOR_IMAGE} container: {e}")

    try:
        yield container.get_connection_url()
    finally:
        container.stop()


@pytest.fixture(scope="session")
def ollama_base_url():
    """Base URL of a throwaway Ollama runtime."""
    url = os.environ.get("OLLAMA_BASE_URL")
    if url:
        yield url
        return

    try:
        container = OllamaContainer(OLLAMA_IMAGE)
        container.start()
    except Exception as e:
        pytest.skip(f"Cannot start {OLLAMA_IMAGE} container: {e}")

    try:
        yield container.get_endpoint()
    finally:
        container.stop()
