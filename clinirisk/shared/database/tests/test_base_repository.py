"""Tests for base repository pattern."""
import pytest
from unittest.mock import MagicMock
from dataclasses import dataclass
from typing import Any, Dict

import psycopg2

from clinirisk.shared.database.repository import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    DuplicateError,
)


@dataclass
class SampleEntity:
    id: str
    name: str
    value: int


class SampleRepository(BaseRepository[SampleEntity]):
    """Concrete repository for testing."""

    def _row_to_entity(self, row: tuple) -> SampleEntity:
        return SampleEntity(id=row[0], name=row[1], value=row[2])

    def _entity_to_params(self, entity: SampleEntity) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "value": entity.value,
        }


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def connection_manager(connection):
    manager = MagicMock()
    manager.get_connection.return_value.__enter__.return_value = connection
    return manager


@pytest.fixture
def repository(connection_manager):
    return SampleRepository(connection_manager, "sample_table")


class TestRepositoryExceptions:
    """Tests for repository exception classes."""

    def test_repository_error(self):
        error = RepositoryError("Test error")
        assert str(error) == "Test error"

    def test_not_found_error(self):
        assert isinstance(NotFoundError("missing"), RepositoryError)

    def test_duplicate_error(self):
        assert isinstance(DuplicateError("duplicate"), RepositoryError)


class TestBaseRepository:
    """Tests for BaseRepository class."""

    def test_initialization(self, repository):
        assert repository.table_name == "sample_table"
        assert repository.key_column == "id"

    def test_find_by_id(self, repository, cursor):
        cursor.fetchall.return_value = [("id_1", "name", 42)]

        entity = repository.find_by_id("id_1")

        assert entity == SampleEntity(id="id_1", name="name", value=42)
        query, params = cursor.execute.call_args.args
        assert "WHERE id = %s" in query
        assert params == ("id_1",)

    def test_find_by_id_missing_returns_none(self, repository, cursor):
        cursor.fetchall.return_value = []

        assert repository.find_by_id("missing") is None

    def test_get_missing_raises(self, repository, cursor):
        cursor.fetchall.return_value = []

        with pytest.raises(NotFoundError):
            repository.get("missing")

    def test_query_error_translated(self, repository, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("timeout")

        with pytest.raises(RepositoryError):
            repository.find_by_id("id_1")

    def test_save_upserts_on_key(self, repository, cursor, connection):
        cursor.fetchone.return_value = ("id_1", "name", 42)

        saved = repository.save(SampleEntity(id="id_1", name="name", value=42))

        query, values = cursor.execute.call_args.args
        assert "ON CONFLICT (id) DO UPDATE SET" in query
        assert "name = EXCLUDED.name" in query
        assert "id = EXCLUDED.id" not in query
        assert values == ["id_1", "name", 42]
        connection.commit.assert_called_once()
        assert saved.value == 42

    def test_save_without_returned_row_returns_entity(self, repository, cursor):
        cursor.fetchone.return_value = None
        entity = SampleEntity(id="id_1", name="name", value=1)

        assert repository.save(entity) is entity

    def test_save_integrity_error_is_duplicate(self, repository, cursor, connection):
        cursor.execute.side_effect = psycopg2.IntegrityError("unique violation")

        with pytest.raises(DuplicateError):
            repository.save(SampleEntity(id="id_1", name="name", value=1))

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()

    def test_save_other_error_rolls_back(self, repository, cursor, connection):
        cursor.execute.side_effect = psycopg2.OperationalError("connection lost")

        with pytest.raises(RepositoryError):
            repository.save(SampleEntity(id="id_1", name="name", value=1))

        connection.rollback.assert_called_once()

    def test_count(self, repository, cursor):
        cursor.fetchone.return_value = (7,)

        assert repository.count() == 7

    def test_count_empty(self, repository, cursor):
        cursor.fetchone.return_value = None

        assert repository.count() == 0
