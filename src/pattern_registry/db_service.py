"""Database service for registry patterns."""

from contextlib import contextmanager
from typing import Any, Iterable, List, Mapping, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config.database import placeholder_for
from .db_models import PatternRecord
from .exceptions import NotFoundError, PersistenceError
from .filters import Filter, FilterTranslator, REGISTRY_PATTERN_FILTERS
from .models import RegistryPattern, compile_expression

COLUMNS = ("id", "pattern", "component", "owner", "version")

class RegistryPatternDBService:
    """Service class for registry pattern database operations."""

    def __init__(self, session: Session, translator: Optional[FilterTranslator] = None):
        """
        Initialize database service.

        Args:
            session: SQLAlchemy session to operate on
            translator: Filter translator; defaults to the registry pattern
                attributes with the driver's parameter marker
        """
        self.db = session
        if translator is None:
            translator = FilterTranslator(REGISTRY_PATTERN_FILTERS, placeholder_for(session.get_bind()))
        self.translator = translator

    def close(self):
        """Close database connection."""
        if self.db:
            self.db.close()

    @contextmanager
    def _storage_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Error {action}: {str(e)}") from e

    def _convert_to_registry_pattern(self, record: Any) -> RegistryPattern:
        """Convert a database row to a RegistryPattern, recompiling its expression."""
        if not isinstance(record, Mapping):
            record = {column: getattr(record, column) for column in COLUMNS}
        return RegistryPattern.from_record(record)

    def _get_record(self, pattern_id: int) -> PatternRecord:
        record = self.db.get(PatternRecord, pattern_id)
        if record is None:
            raise NotFoundError(f"Pattern {pattern_id} not found")
        return record

    def insert(self, pattern: RegistryPattern, owner: int) -> RegistryPattern:
        """Insert a new pattern owned by ``owner`` at version 1."""
        with self._storage_errors("inserting pattern"):
            record = PatternRecord(
                pattern=pattern.expression,
                component=pattern.component,
                owner=owner,
                version=1
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return self._convert_to_registry_pattern(record)

    def read(self, pattern_id: int) -> RegistryPattern:
        """
        Get a pattern by ID.

        Raises:
            NotFoundError: If no pattern has this ID
        """
        with self._storage_errors("reading pattern"):
            return self._convert_to_registry_pattern(self._get_record(pattern_id))

    def read_all(self, filters: Iterable[Filter] = ()) -> List[RegistryPattern]:
        """Get all patterns satisfying every filter."""
        predicate, args = self.translator.translate(filters)
        query = f"SELECT * FROM {PatternRecord.__tablename__}"
        if predicate:
            query += f" WHERE {predicate}"
        query += " ORDER BY id"

        with self._storage_errors("reading patterns"):
            connection = self.db.connection()
            if args:
                result = connection.exec_driver_sql(query, tuple(args))
            else:
                result = connection.exec_driver_sql(query)
            rows = result.mappings().all()
        return [self._convert_to_registry_pattern(row) for row in rows]

    def update(self, pattern_id: int, expression: str) -> RegistryPattern:
        """
        Replace a pattern's expression and bump its version.

        Raises:
            CompileError: If the expression does not compile
            NotFoundError: If no pattern has this ID
        """
        compile_expression(expression)
        with self._storage_errors("updating pattern"):
            record = self._get_record(pattern_id)
            record.pattern = expression
            record.version = (record.version or 0) + 1
            self.db.commit()
            self.db.refresh(record)
            return self._convert_to_registry_pattern(record)

    def delete(self, pattern_id: int) -> bool:
        """Delete a pattern by ID, returning False if it did not exist."""
        with self._storage_errors("deleting pattern"):
            record = self.db.get(PatternRecord, pattern_id)
            if record is None:
                return False
            self.db.delete(record)
            self.db.commit()
            return True
