class RegistryError(Exception):
    """Base exception for pattern registry errors."""
    pass

class CompileError(RegistryError):
    """Raised when a pattern expression is not a valid regular expression."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid pattern {expression!r}: {reason}")

class FilterError(RegistryError):
    """Base exception for filters that cannot be translated."""
    pass

class FilterAttributeError(FilterError):
    """Raised when an attribute may not be filtered on."""
    pass

class FilterOperatorError(FilterError):
    """Raised when an operator is not supported for an attribute."""
    pass

class FilterValueError(FilterError):
    """Raised when a filter value does not fit the attribute's shape."""
    pass

class ValidationError(RegistryError):
    """Raised when a request payload is malformed."""
    pass

class ImmutableFieldError(ValidationError):
    """Raised when an update tries to change a write-once field."""
    pass

class NotFoundError(RegistryError):
    """Raised when a referenced pattern does not exist."""
    pass

class AuthenticationError(RegistryError):
    """Raised when a request carries no valid bearer token."""
    pass

class AuthorizationError(RegistryError):
    """Raised when the principal does not own the targeted pattern."""
    pass

class PersistenceError(RegistryError):
    """Raised when the storage layer fails."""
    pass

class ConfigurationError(RegistryError):
    """Raised when required settings are missing or invalid."""
    pass
