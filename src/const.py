"""Constants for the Refiner load-test harness."""

# Default target
DEFAULT_BASE_URL = "https://api.refiner.io"
DEFAULT_ENDPOINT_PATH = "/v1/track-event"
DEFAULT_EVENT_NAME = "LoadTest Event"
DEFAULT_USER_ID_PREFIX = "test-user-"

# Default load profile
DEFAULT_TOTAL_REQUESTS = 2000
DEFAULT_PARALLELISM = 50
DEFAULT_COOLDOWN_SECONDS = 3.0

# Smoke test
DEFAULT_SMOKE_USER_ID = "test-user-id"
DEFAULT_SMOKE_EVENT_NAME = "Card ordering: New card created"
SMOKE_REQUEST_TIMEOUT = 30.0

# Run labels
BASELINE_LABEL = "OLD"
RESILIENT_LABEL = "NEW"

# Logging configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library log levels
LIBRARY_LOG_LEVELS = {
    "urllib3": "WARNING",
    "urllib3.connectionpool": "WARNING",
    "requests": "WARNING",
}

# HTTP status codes
HTTP_SUCCESS_MIN = 200
HTTP_SUCCESS_MAX = 299
HTTP_ACCEPTED = 202
HTTP_REQUEST_TIMEOUT = 408
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR_MIN = 500

# Headers
AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "
