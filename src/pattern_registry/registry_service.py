"""Registry pattern lifecycle: create, read, update and delete with ownership."""

from typing import Any, Dict, Iterable, List
import logging

from .auth import Principal
from .db_service import RegistryPatternDBService
from .exceptions import AuthorizationError, ImmutableFieldError, NotFoundError, ValidationError
from .filters import Filter
from .models import RegistryPattern, compile_expression

logger = logging.getLogger(__name__)

class RegistryService:
    """
    Manages registry patterns on behalf of authenticated principals.

    Features:
    - Ownership injected from the principal on create
    - Write-once components
    - Owner-only update and delete
    - Filtered listing
    """

    def __init__(self, db_service: RegistryPatternDBService):
        """
        Initialize registry service.

        Args:
            db_service: Storage for registry patterns
        """
        self._db = db_service

    def create_pattern(self, payload: Dict[str, Any], principal: Principal) -> RegistryPattern:
        """
        Register a new pattern owned by the principal's organization.

        Args:
            payload: Client JSON with ``pattern`` and ``component``

        Raises:
            ValidationError: If the payload is malformed
            CompileError: If the expression does not compile
        """
        draft = RegistryPattern.from_dict(payload)
        created = self._db.insert(draft, principal.organization_id)
        logger.info(f"Added pattern {created.id} for {created.component} (owner {created.owner})")
        return created

    def get_pattern(self, pattern_id: int) -> RegistryPattern:
        """Get a pattern by ID, raising NotFoundError if absent."""
        return self._db.read(pattern_id)

    def list_patterns(self, filters: Iterable[Filter] = ()) -> List[RegistryPattern]:
        """List patterns satisfying every filter."""
        return self._db.read_all(filters)

    def update_pattern(self, pattern_id: int, payload: Dict[str, Any], principal: Principal) -> RegistryPattern:
        """
        Replace the expression of a pattern owned by the principal.

        Args:
            pattern_id: ID of pattern to update
            payload: Client JSON with the new ``pattern``; ``component`` must be unset

        Raises:
            ValidationError: If the payload is malformed
            ImmutableFieldError: If the payload sets a component
            CompileError: If the new expression does not compile
            NotFoundError: If the pattern does not exist
            AuthorizationError: If the principal's organization is not the owner
        """
        if not isinstance(payload, dict):
            raise ValidationError("Pattern must be a JSON object")
        if payload.get("component"):
            raise ImmutableFieldError("component may not be updated post-create")
        if "pattern" not in payload:
            raise ValidationError("Missing required field: pattern")
        expression = payload["pattern"]
        compile_expression(expression)

        existing = self._db.read(pattern_id)
        self._check_owner(existing, principal, "update")

        updated = self._db.update(pattern_id, expression)
        logger.info(f"Updated pattern {pattern_id} to version {updated.version}")
        return updated

    def delete_pattern(self, pattern_id: int, principal: Principal) -> None:
        """
        Delete a pattern owned by the principal.

        Raises:
            NotFoundError: If the pattern does not exist
            AuthorizationError: If the principal's organization is not the owner
        """
        existing = self._db.read(pattern_id)
        self._check_owner(existing, principal, "delete")

        if not self._db.delete(pattern_id):
            raise NotFoundError(f"Pattern {pattern_id} not found")
        logger.info(f"Deleted pattern {pattern_id}")

    def _check_owner(self, pattern: RegistryPattern, principal: Principal, action: str) -> None:
        if pattern.owner != principal.organization_id:
            logger.warning(
                f"Organization {principal.organization_id} denied {action} of pattern {pattern.id} "
                f"owned by {pattern.owner}"
            )
            raise AuthorizationError(
                f"unauthorized. May only {action} patterns owned by your organization"
            )
