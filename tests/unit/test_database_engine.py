"""Unit tests for database engine module."""

import os
import tempfile

import pytest
from sqlalchemy import func, select, text

from iclock_api.database import engine
from iclock_api.database.models import AttendanceLog, DeviceUser


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "test.db")


def _count(session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


class TestDatabaseEngine:
    """Test DatabaseEngine class."""

    def test_init_stores_path(self, temp_db_path):
        db = engine.DatabaseEngine(temp_db_path)
        assert db.db_path == temp_db_path
        assert db.engine is None
        assert db.session_factory is None

    def test_initialize_creates_parent_directory(self):
        """Test initialize creates parent directories if needed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            nested_path = os.path.join(tmpdir, "nested", "dir", "test.db")
            db = engine.DatabaseEngine(nested_path)
            db.initialize()
            assert os.path.exists(nested_path)
            db.close()

    def test_initialize_creates_tables(self, temp_db_path):
        db = engine.DatabaseEngine(temp_db_path)
        db.initialize()
        with db.session_scope() as session:
            assert _count(session, AttendanceLog) == 0
            assert _count(session, DeviceUser) == 0
        db.close()

    def test_wal_journal_mode(self, temp_db_path):
        db = engine.DatabaseEngine(temp_db_path)
        db.initialize()
        with db.session_scope() as session:
            assert session.execute(text("PRAGMA journal_mode")).scalar() == "wal"
        db.close()

    def test_get_session_raises_if_not_initialized(self, temp_db_path):
        db = engine.DatabaseEngine(temp_db_path)
        with pytest.raises(RuntimeError) as exc_info:
            db.get_session()
        assert "not initialized" in str(exc_info.value).lower()

    def test_session_scope_commits_on_success(self, db_engine):
        with db_engine.session_scope() as session:
            session.add(AttendanceLog(pin="1", timestamp="2024-01-01 08:00:00", sn="A1"))

        with db_engine.session_scope() as session:
            found = session.scalars(select(AttendanceLog).where(AttendanceLog.pin == "1")).first()
            assert found is not None
            assert found.sn == "A1"

    def test_session_scope_rollbacks_on_exception(self, db_engine):
        with pytest.raises(ValueError):
            with db_engine.session_scope() as session:
                session.add(AttendanceLog(pin="2", timestamp="2024-01-01 08:00:00"))
                session.flush()
                raise ValueError("Test error")

        with db_engine.session_scope() as session:
            assert _count(session, AttendanceLog) == 0

    def test_close_handles_none_engine(self, temp_db_path):
        db = engine.DatabaseEngine(temp_db_path)
        db.close()  # Should not raise


class TestInitDatabase:
    """Test the init_database helper."""

    def test_returns_initialized_engine(self, temp_db_path):
        db = engine.init_database(temp_db_path)
        assert isinstance(db, engine.DatabaseEngine)
        assert db.session_factory is not None
        with db.session_scope() as session:
            assert _count(session, AttendanceLog) == 0
        db.close()

    def test_each_call_creates_a_new_engine(self, temp_db_path):
        first = engine.init_database(temp_db_path)
        second = engine.init_database(temp_db_path)
        assert first is not second
        first.close()
        second.close()
