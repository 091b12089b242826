"""Base repository pattern for database operations.

Provides common read/upsert operations over a single table. Driver errors
are translated into the repository error hierarchy so callers never need
to import psycopg2.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

import psycopg2

from .connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class NotFoundError(RepositoryError):
    """Entity not found in database."""
    pass


class DuplicateError(RepositoryError):
    """A unique constraint other than the key rejected the write."""
    pass


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository with common operations.

    Subclasses implement entity-specific row mapping while inheriting:
    - Connection management
    - Idempotent upsert on the key column
    - Error translation and logging
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        table_name: str,
        key_column: str = "id",
    ):
        """Initialize repository.

        Args:
            connection_manager: Database connection manager
            table_name: Name of the database table
            key_column: Primary key column used for lookups and upserts
        """
        self.connection_manager = connection_manager
        self.table_name = table_name
        self.key_column = key_column

        logger.info(
            "REPOSITORY_INITIALIZED",
            extra={"table_name": table_name, "key_column": key_column}
        )

    @abstractmethod
    def _row_to_entity(self, row: tuple) -> T:
        """Convert database row to entity."""
        pass

    @abstractmethod
    def _entity_to_params(self, entity: T) -> Dict[str, Any]:
        """Convert entity to a column name -> value mapping."""
        pass

    def _fetch_all(self, query: str, params: tuple) -> List[T]:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(query, params)
                    rows = cur.fetchall()
                except psycopg2.Error as e:
                    logger.error(
                        "REPOSITORY_QUERY_FAILED",
                        extra={"table_name": self.table_name, "error": str(e)}
                    )
                    raise RepositoryError(str(e)) from e

                return [self._row_to_entity(row) for row in rows]

    def find_by_id(self, entity_id: str) -> Optional[T]:
        """Find entity by key.

        Returns:
            Entity if found, None otherwise
        """
        results = self._fetch_all(
            f"SELECT * FROM {self.table_name} WHERE {self.key_column} = %s",
            (entity_id,)
        )
        return results[0] if results else None

    def get(self, entity_id: str) -> T:
        """Find entity by key.

        Raises:
            NotFoundError: If no row has this key
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.table_name}: {entity_id} not found")
        return entity

    def save(self, entity: T) -> T:
        """Insert or update the entity keyed on the key column.

        Saving the same entity twice leaves a single row.

        Raises:
            DuplicateError: If another unique constraint rejects the row
            RepositoryError: On any other database error
        """
        params = self._entity_to_params(entity)
        columns = list(params.keys())
        values = list(params.values())
        placeholders = ["%s"] * len(values)

        update_clause = ", ".join(
            f"{col} = EXCLUDED.{col}" for col in columns if col != self.key_column
        )

        query = f"""
            INSERT INTO {self.table_name} ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            ON CONFLICT ({self.key_column}) DO UPDATE SET {update_clause}
            RETURNING *
        """

        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(query, values)
                    row = cur.fetchone()
                    conn.commit()
                except psycopg2.IntegrityError as e:
                    conn.rollback()
                    logger.error(
                        "REPOSITORY_DUPLICATE",
                        extra={"table_name": self.table_name, "error": str(e)}
                    )
                    raise DuplicateError(str(e)) from e
                except psycopg2.Error as e:
                    conn.rollback()
                    logger.error(
                        "REPOSITORY_SAVE_FAILED",
                        extra={"table_name": self.table_name, "error": str(e)}
                    )
                    raise RepositoryError(str(e)) from e

                if row:
                    return self._row_to_entity(row)
                return entity

    def count(self) -> int:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT COUNT(*) FROM {self.table_name}")
                row = cur.fetchone()

                return row[0] if row else 0
