"""Single tracked event against the live endpoint, for checking credentials and connectivity."""
import logging
from typing import Callable, Optional

import requests

from src.const import SMOKE_REQUEST_TIMEOUT, HTTP_SUCCESS_MIN, HTTP_SUCCESS_MAX
from src.shared.config import LoadTestConfig
from .request_session_manager import RequestSessionManager


# Configure logging
logger = logging.getLogger(__name__)


class EventSmokeTest:
    """Sends one event and prints the full response."""

    def __init__(self, config: LoadTestConfig, session: Optional[requests.Session] = None,
                 output: Callable[[str], None] = print):
        self.config = config
        self._session = session
        self._output = output

    def run(self) -> bool:
        """
        Send the smoke event.

        Returns:
            True if the server answered with a 2xx status.

        Raises:
            ConfigurationError: If the API key is missing.
        """
        api_key = self.config.require_api_key()
        session = self._session or RequestSessionManager.create_session(api_key, pool_size=1)
        out = self._output

        out("Sending Refiner event:")
        out(f"  User ID: {self.config.smoke_user_id}")
        out(f"  Event: {self.config.smoke_event_name}")
        out(f"  URL: {self.config.endpoint_url}")
        out("")

        try:
            response = session.post(
                self.config.endpoint_url,
                data={"id": self.config.smoke_user_id, "event": self.config.smoke_event_name},
                timeout=SMOKE_REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"Smoke request failed: {e}")
            out(f"✗ HTTP Error: {e}")
            return False
        finally:
            if self._session is None:
                session.close()

        out(f"Status Code: {response.status_code}")
        out(f"Response: {response.text}")

        if HTTP_SUCCESS_MIN <= response.status_code <= HTTP_SUCCESS_MAX:
            out("✓ Event tracked successfully!")
            return True

        out(f"✗ Failed to track event. Status: {response.status_code}")
        return False
