"""Repository layer for subway_lines.

Implements the Generic Repository pattern for CRUD operations with
SQLAlchemy. Writes that hit a constraint are reported as
DataIntegrityError subclasses instead of raw driver errors, whether the
write is flushed by save/update/delete or by the autoflush of a query.
"""

import logging
import re
from typing import Any, Generic, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Executable

from subway_lines.exceptions import DataIntegrityError, DuplicateNameError, EntityInUseError

T = TypeVar("T")

logger = logging.getLogger("subway-lines")

# SQLite names the table in "UNIQUE constraint failed: line.name"
_SQLITE_TABLE_PATTERN = re.compile(r"constraint failed: (\w+)\.\w+")


class GenericRepository(Generic[T]):
    """Generic repository implementing common CRUD operations.

    This base class provides reusable database operations that can be
    extended by specific repositories for custom business logic.
    """

    def __init__(self, session: Session, model_cls: type[T]):
        """Initialize repository with a session and model class.

        Args:
            session: SQLAlchemy session for database operations.
            model_cls: The SQLAlchemy model class this repository manages.
        """
        self.session = session
        self.model_cls = model_cls

    def add(self, entity: T) -> T:
        """Add a new entity to the session without flushing.

        Args:
            entity: The entity instance to add.

        Returns:
            The added entity.
        """
        self.session.add(entity)
        return entity

    def add_all(self, entities: list[T]) -> list[T]:
        """Add multiple entities to the session without flushing.

        Args:
            entities: List of entity instances to add.

        Returns:
            The added entities.
        """
        self.session.add_all(entities)
        return entities

    def save(self, entity: T) -> T:
        """Add an entity and flush it so its generated identity is populated.

        Args:
            entity: The entity instance to persist.

        Returns:
            The persisted entity.

        Raises:
            DataIntegrityError: If the insert violates a constraint.
        """
        self.session.add(entity)
        self._flush()
        logger.debug(f"Saved {self.model_cls.__name__} {entity_label(entity)!r}")
        return entity

    def get_by_id(self, _id: Any) -> T | None:
        """Retrieve an entity by its primary key.

        Args:
            _id: The primary key value.

        Returns:
            The entity if found, None otherwise.
        """
        self._autoflush()
        return self.session.get(self.model_cls, _id)

    def get_all(self, limit: int | None = None, offset: int | None = None) -> list[T]:
        """Retrieve all entities of this type ordered by primary key.

        Args:
            limit: Maximum number of results to return.
            offset: Number of results to skip.

        Returns:
            List of all entities.
        """
        stmt = select(self.model_cls).order_by(self.model_cls.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        return list(self._execute(stmt).scalars().all())

    def update(self, entity: T) -> T:
        """Flush pending changes of an entity.

        Detached entities are merged into the session first.

        Args:
            entity: The entity instance to update.

        Returns:
            The updated entity attached to this session.

        Raises:
            DataIntegrityError: If the change violates a constraint.
        """
        if entity not in self.session:
            with self.session.no_autoflush:
                entity = self.session.merge(entity)
        self._flush()
        return entity

    def delete(self, entity: T) -> None:
        """Delete an entity from the database.

        Args:
            entity: The entity instance to delete.

        Raises:
            DataIntegrityError: If other rows still reference the entity.
        """
        label = entity_label(entity)
        self.session.delete(entity)
        self._flush()
        logger.debug(f"Deleted {self.model_cls.__name__} {label!r}")

    def delete_by_id(self, _id: Any) -> bool:
        """Delete an entity by its primary key.

        Args:
            _id: The primary key value.

        Returns:
            True if entity was deleted, False if not found.
        """
        entity = self.get_by_id(_id)
        if entity:
            self.delete(entity)
            return True
        return False

    def count(self) -> int:
        """Count total number of entities.

        Returns:
            Total count of entities.
        """
        stmt = select(func.count()).select_from(self.model_cls)
        return self._execute(stmt).scalar_one()

    def exists(self, _id: Any) -> bool:
        """Check if an entity exists by its primary key.

        Args:
            _id: The primary key value.

        Returns:
            True if entity exists, False otherwise.
        """
        return self.get_by_id(_id) is not None

    def _execute(self, stmt: Executable) -> Result:
        """Execute a query after flushing pending changes through the error translation."""
        self._autoflush()
        return self.session.execute(stmt)

    def _autoflush(self) -> None:
        session = self.session
        if session.autoflush and (session.new or session.dirty or session.deleted):
            self._flush()

    def _flush(self) -> None:
        # Attributes may be unloadable once a flush has failed, so labels are taken up front.
        pending = self._labels_by_model((*self.session.new, *self.session.dirty))
        deleted = self._labels_by_model(self.session.deleted)
        try:
            self.session.flush()
        except IntegrityError as e:
            if is_foreign_key_violation(e) and len(deleted) == 1:
                # A delete blocked by rows still pointing at it
                model_cls = next(iter(deleted))
            else:
                model_cls = self._model_for_error(e) or self.model_cls
            labels = pending.get(model_cls, []) + deleted.get(model_cls, [])
            label = labels[0] if len(labels) == 1 else None
            logger.warning(f"Integrity error while flushing {model_cls.__name__} {label!r}: {e.orig}")
            raise self._translate_integrity_error(model_cls, label, e) from e

    def _labels_by_model(self, entities) -> dict[type, list[Any]]:
        labels: dict[type, list[Any]] = {}
        with self.session.no_autoflush:
            for entity in entities:
                labels.setdefault(type(entity), []).append(entity_label(entity))
        return labels

    def _model_for_error(self, error: IntegrityError) -> type | None:
        """Find the mapped class whose table raised the error, None if the driver does not say."""
        table_name = violated_table(error)
        if table_name is None:
            return None
        for mapper in inspect(self.model_cls).registry.mappers:
            if mapper.local_table.name == table_name:
                return mapper.class_
        return None

    def _translate_integrity_error(self, model_cls: type, label: Any, error: IntegrityError) -> DataIntegrityError:
        """Map a driver integrity error to a domain error.

        Subclasses override this to report constraint-specific errors.
        """
        return DataIntegrityError(str(error.orig))


def entity_label(entity: Any) -> Any:
    """Identify an entity in log lines and error messages by name, or by id when it has none."""
    name = getattr(entity, "name", None)
    return name if name is not None else getattr(entity, "id", None)


def violated_table(error: IntegrityError) -> str | None:
    """Name of the table an integrity error was raised on.

    psycopg reports it in the error diagnostics. SQLite only names it for
    unique and not-null failures.
    """
    table_name = getattr(getattr(error.orig, "diag", None), "table_name", None)
    if table_name:
        return table_name
    match = _SQLITE_TABLE_PATTERN.search(str(error.orig))
    return match.group(1) if match else None


def is_unique_violation(error: IntegrityError) -> bool:
    """Check whether an integrity error comes from a unique constraint.

    Works on both the PostgreSQL ("duplicate key value violates unique constraint")
    and the SQLite ("UNIQUE constraint failed") messages.
    """
    return "unique" in str(error.orig).lower()


def is_foreign_key_violation(error: IntegrityError) -> bool:
    """Check whether an integrity error comes from a foreign key constraint."""
    return "foreign key" in str(error.orig).lower()


class NamedEntityRepository(GenericRepository[T]):
    """Repository for entities identified by a unique ``name`` column."""

    def find_by_name(self, name: str) -> T | None:
        """Retrieve an entity by its name.

        Args:
            name: The name to search for.

        Returns:
            The entity if found, None otherwise.
        """
        stmt = select(self.model_cls).where(self.model_cls.name == name)
        return self._execute(stmt).scalar_one_or_none()

    def exists_by_name(self, name: str) -> bool:
        """Check if an entity with the given name exists.

        Args:
            name: The name to look up.

        Returns:
            True if such an entity exists, False otherwise.
        """
        stmt = select(func.count()).select_from(self.model_cls).where(self.model_cls.name == name)
        return self._execute(stmt).scalar_one() > 0

    def _translate_integrity_error(self, model_cls: type, label: Any, error: IntegrityError) -> DataIntegrityError:
        if hasattr(model_cls, "name"):
            if is_unique_violation(error):
                return DuplicateNameError(model_cls.__name__, label)
            if is_foreign_key_violation(error):
                return EntityInUseError(model_cls.__name__, label)
        return super()._translate_integrity_error(model_cls, label, error)
