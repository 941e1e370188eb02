"""Environment-driven settings for the registry and matcher services."""

from dataclasses import dataclass
from typing import Optional
import logging
import os
from dotenv import load_dotenv

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = 'sqlite:///pattern_registry.db'


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        database_url: SQLAlchemy URL of the pattern store
        jwt_secret: HMAC secret for bearer tokens; required by the registry
        listen_host: Interface both services bind to
        listen_port: Registry service port
        matcher_port: Matcher service port
        pattern_file: JSON file the matcher loads its patterns from
    """
    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: Optional[str] = None
    listen_host: str = '0.0.0.0'
    listen_port: int = 8080
    matcher_port: int = 8081
    pattern_file: str = 'patterns.json'

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'Settings':
        """
        Load settings from the environment, reading ``.env`` first.

        Raises:
            ConfigurationError: If a port is not an integer
        """
        if load_env_file:
            load_dotenv()

        settings = cls(
            database_url=os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL),
            jwt_secret=os.getenv('JWT_SECRET') or None,
            listen_host=os.getenv('LISTEN_HOST', '0.0.0.0'),
            listen_port=_int_env('LISTEN_PORT', 8080),
            matcher_port=_int_env('MATCHER_PORT', 8081),
            pattern_file=os.getenv('PATTERN_FILE', 'patterns.json'),
        )
        logger.debug(f"Loaded settings for database {settings.database_url.split('@')[-1]}")
        return settings

    def require_jwt_secret(self) -> str:
        """Return the JWT secret, failing when it is not configured."""
        if not self.jwt_secret:
            raise ConfigurationError("JWT secret key not set (JWT_SECRET)")
        return self.jwt_secret


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None
