"""Manages authenticated HTTP request sessions."""
import logging
import requests
from requests.adapters import HTTPAdapter

from src.const import AUTHORIZATION_HEADER, BEARER_PREFIX


# Configure logging
logger = logging.getLogger(__name__)


class RequestSessionManager:
    """Manages authenticated HTTP request sessions."""

    @staticmethod
    def create_session(api_key: str, pool_size: int = 10) -> requests.Session:
        """
        Create a requests session carrying the bearer token.

        Retries are left to the resilience pipeline, so the adapter never retries.

        Args:
            api_key: Bearer token sent on every request.
            pool_size: Connections kept per host; should match the run's parallelism.

        Returns:
            Configured requests session.
        """
        session = requests.Session()
        session.headers[AUTHORIZATION_HEADER] = f"{BEARER_PREFIX}{api_key}"
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size, max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        logger.debug(f"Created session with connection pool size {pool_size}")
        return session
