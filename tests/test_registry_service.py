"""Tests for the registry pattern lifecycle."""

import pytest
from unittest.mock import Mock

from src.pattern_registry.exceptions import (
    AuthorizationError,
    CompileError,
    ImmutableFieldError,
    NotFoundError,
    ValidationError
)
from src.pattern_registry.filters import EQ, Filter
from src.pattern_registry.models import RegistryPattern
from src.pattern_registry.registry_service import RegistryService

@pytest.fixture
def mock_db_service():
    """Create a mock database service holding one pattern owned by organization 7."""
    db_service = Mock()
    db_service.read.return_value = RegistryPattern(
        id=1, expression=r"^a", component="a", owner=7, version=1
    )
    db_service.update.return_value = RegistryPattern(
        id=1, expression=r"^b", component="a", owner=7, version=2
    )
    db_service.delete.return_value = True
    return db_service

@pytest.fixture
def mocked_registry(mock_db_service):
    return RegistryService(mock_db_service)

class TestCreate:
    """Draft to persisted."""

    def test_owner_comes_from_principal(self, registry_service, principal):
        created = registry_service.create_pattern(
            {"pattern": r"v(?P<version>\d+)", "component": "tool", "owner": 99, "version": 5},
            principal
        )
        assert created.owner == principal.organization_id
        assert created.version == 1
        assert registry_service.get_pattern(created.id) == created

    def test_invalid_expression_never_persisted(self, mocked_registry, mock_db_service, principal):
        with pytest.raises(CompileError):
            mocked_registry.create_pattern({"pattern": "(", "component": "x"}, principal)
        mock_db_service.insert.assert_not_called()

    def test_malformed_payload(self, mocked_registry, principal):
        with pytest.raises(ValidationError):
            mocked_registry.create_pattern({"component": "x"}, principal)

class TestUpdate:
    """Persisted to updated."""

    def test_owner_updates(self, registry_service, principal):
        created = registry_service.create_pattern({"pattern": "^a", "component": "a"}, principal)

        updated = registry_service.update_pattern(created.id, {"pattern": "^b"}, principal)

        assert updated.expression == "^b"
        assert updated.component == "a"
        assert updated.version >= created.version

    def test_component_rejected_before_persistence(self, mocked_registry, mock_db_service, principal):
        with pytest.raises(ImmutableFieldError):
            mocked_registry.update_pattern(1, {"pattern": "^b", "component": "other"}, principal)
        mock_db_service.read.assert_not_called()
        mock_db_service.update.assert_not_called()

    def test_empty_component_allowed(self, mocked_registry, mock_db_service, principal):
        mocked_registry.update_pattern(1, {"pattern": "^b", "component": ""}, principal)
        mock_db_service.update.assert_called_once_with(1, "^b")

    def test_other_organization_denied(self, mocked_registry, mock_db_service, other_principal):
        with pytest.raises(AuthorizationError):
            mocked_registry.update_pattern(1, {"pattern": "^b"}, other_principal)
        mock_db_service.update.assert_not_called()

    def test_invalid_expression_rejected(self, mocked_registry, mock_db_service, principal):
        with pytest.raises(CompileError):
            mocked_registry.update_pattern(1, {"pattern": "[a-"}, principal)
        mock_db_service.update.assert_not_called()

    def test_missing_expression(self, mocked_registry, principal):
        with pytest.raises(ValidationError):
            mocked_registry.update_pattern(1, {}, principal)

    def test_missing_pattern(self, mocked_registry, mock_db_service, principal):
        mock_db_service.read.side_effect = NotFoundError("Pattern 1 not found")
        with pytest.raises(NotFoundError):
            mocked_registry.update_pattern(1, {"pattern": "^b"}, principal)

    def test_version_never_decreases(self, registry_service, principal):
        created = registry_service.create_pattern({"pattern": "^a", "component": "a"}, principal)
        versions = [created.version]
        for expression in ("^b", "^c", "^d"):
            versions.append(registry_service.update_pattern(created.id, {"pattern": expression}, principal).version)
        assert versions == sorted(versions)
        assert versions[0] == 1

class TestDelete:
    """Persisted to deleted."""

    def test_owner_deletes(self, registry_service, principal):
        created = registry_service.create_pattern({"pattern": "^a", "component": "a"}, principal)

        registry_service.delete_pattern(created.id, principal)

        with pytest.raises(NotFoundError):
            registry_service.get_pattern(created.id)
        assert registry_service.list_patterns() == []

    def test_other_organization_denied(self, mocked_registry, mock_db_service, other_principal):
        with pytest.raises(AuthorizationError):
            mocked_registry.delete_pattern(1, other_principal)
        mock_db_service.delete.assert_not_called()

    def test_missing_pattern(self, registry_service, principal):
        with pytest.raises(NotFoundError):
            registry_service.delete_pattern(404, principal)

def test_list_patterns_with_filters(registry_service, principal, other_principal):
    registry_service.create_pattern({"pattern": "^a", "component": "a"}, principal)
    registry_service.create_pattern({"pattern": "^b", "component": "b"}, other_principal)

    patterns = registry_service.list_patterns([Filter("owner", EQ, str(other_principal.organization_id))])

    assert [p.component for p in patterns] == ["b"]
