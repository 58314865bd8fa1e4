"""
Unit Tests for DatabaseManager
==============================
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bragging_rights.db.connection import DatabaseManager
from bragging_rights.utils.errors import DatabaseError


@pytest.fixture(autouse=True)
def reset_manager():
    DatabaseManager._engine = None
    DatabaseManager._session_factory = None
    yield
    DatabaseManager._engine = None
    DatabaseManager._session_factory = None


def make_session_factory(session):
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context)


class TestLifecycle:
    def test_get_engine_before_initialize(self):
        with pytest.raises(DatabaseError):
            DatabaseManager.get_engine()

    @pytest.mark.asyncio
    async def test_get_session_before_initialize(self):
        with pytest.raises(DatabaseError):
            async with DatabaseManager.get_session():
                pass

    @pytest.mark.asyncio
    async def test_initialize_reuses_engine(self, settings):
        engine = MagicMock()
        with patch(
            "bragging_rights.db.connection.create_async_engine", return_value=engine
        ) as mock_create:
            first = await DatabaseManager.initialize(settings)
            second = await DatabaseManager.initialize(settings)

        assert first is second is engine
        mock_create.assert_called_once()
        assert mock_create.call_args.args[0] == settings.database_url

    @pytest.mark.asyncio
    async def test_initialize_failure_wrapped(self, settings):
        with patch(
            "bragging_rights.db.connection.create_async_engine",
            side_effect=ValueError("bad url"),
        ):
            with pytest.raises(DatabaseError) as exc_info:
                await DatabaseManager.initialize(settings)

        assert exc_info.value.details["error"] == "bad url"

    @pytest.mark.asyncio
    async def test_close_disposes_and_resets(self):
        engine = MagicMock()
        engine.dispose = AsyncMock()
        DatabaseManager._engine = engine

        await DatabaseManager.close()
        await DatabaseManager.close()

        engine.dispose.assert_awaited_once()
        assert DatabaseManager._engine is None


class TestSession:
    @pytest.mark.asyncio
    async def test_commits_on_clean_exit(self, mock_session):
        DatabaseManager._session_factory = make_session_factory(mock_session)

        async with DatabaseManager.get_session() as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, mock_session):
        DatabaseManager._session_factory = make_session_factory(mock_session)

        with pytest.raises(RuntimeError):
            async with DatabaseManager.get_session():
                raise RuntimeError("insert failed")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_called()


class TestPing:
    @pytest.mark.asyncio
    async def test_unreachable_database(self):
        engine = MagicMock()
        engine.connect.return_value.__aenter__.side_effect = OSError("connection refused")
        DatabaseManager._engine = engine

        with pytest.raises(DatabaseError) as exc_info:
            await DatabaseManager.ping()

        assert "connection refused" in exc_info.value.details["error"]

    @pytest.mark.asyncio
    async def test_latency_returned(self):
        conn = AsyncMock()
        engine = MagicMock()
        engine.connect.return_value.__aenter__.return_value = conn
        DatabaseManager._engine = engine

        latency = await DatabaseManager.ping()

        assert latency >= 0
        conn.execute.assert_awaited_once()
