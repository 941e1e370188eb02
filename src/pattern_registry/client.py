"""HTTP client for a running registry service."""

from typing import Iterable, List, Optional
import logging
import httpx

from .exceptions import RegistryError
from .filters import Filter
from .models import RegistryPattern

logger = logging.getLogger(__name__)

class RegistryClientError(RegistryError):
    """Raised when the registry service answers with an error."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"Error from server: {status_code} {message}")

class RegistryClient:
    """Reads patterns from the registry service."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[httpx.Client] = None):
        """
        Initialize the client.

        Args:
            base_url: Service root, e.g. ``http://localhost:8080/pattern-registry``
            timeout: Request timeout in seconds
            session: Optional httpx client to reuse connections
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        # Only a client created here is closed here
        self._owns_session = session is None
        self.session = session or httpx.Client()

    def close(self):
        """Release connections held by the client."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_patterns(self, filters: Optional[Iterable[Filter]] = None) -> List[RegistryPattern]:
        """
        List registered patterns.

        Args:
            filters: Optional filters, sent as ``attribute[operator]=value``

        Returns:
            Compiled registry patterns

        Raises:
            RegistryClientError: If the service does not answer 200
        """
        params = [
            (f"{f.attribute}[{f.operator}]", f.value)
            for f in (filters or [])
        ]
        response = self.session.get(self.base_url + "patterns", params=params, timeout=self.timeout)
        if response.status_code != 200:
            logger.error(f"Registry answered {response.status_code} listing patterns")
            raise RegistryClientError(response.status_code, response.reason_phrase or "")

        return [RegistryPattern.from_record(item) for item in response.json()]
