import json
from pathlib import Path
from typing import Dict, Any, Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.const import (
    BASELINE_LABEL, RESILIENT_LABEL, DEFAULT_BASE_URL, DEFAULT_ENDPOINT_PATH,
    DEFAULT_EVENT_NAME, DEFAULT_USER_ID_PREFIX, DEFAULT_TOTAL_REQUESTS,
    DEFAULT_PARALLELISM, DEFAULT_COOLDOWN_SECONDS, DEFAULT_SMOKE_USER_ID,
    DEFAULT_SMOKE_EVENT_NAME, DEFAULT_LOG_LEVEL, LIBRARY_LOG_LEVELS,
)


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class ClientProfileConfig(BaseModel):
    """Resilience settings for one HTTP client under test."""

    label: str
    # Retry
    max_retry_attempts: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=2.0, ge=0)
    retry_backoff: Literal["constant", "exponential"] = "constant"
    retry_use_jitter: bool = False
    retry_on_rate_limit: bool = False
    retry_max_delay: float = Field(default=30.0, gt=0)
    # Timeouts (seconds)
    attempt_timeout: float = Field(default=10.0, gt=0)
    total_timeout: float = Field(default=30.0, gt=0)
    # Client-side rate limiter
    rate_limiter_enabled: bool = False
    rate_limiter_permit_limit: int = Field(default=5, ge=1)
    rate_limiter_queue_limit: int = Field(default=150, ge=0)
    # Circuit breaker
    circuit_breaker_enabled: bool = False
    circuit_breaker_failure_ratio: float = Field(default=0.7, gt=0, le=1)
    circuit_breaker_minimum_throughput: int = Field(default=20, ge=1)
    circuit_breaker_sampling_duration: float = Field(default=30.0, gt=0)
    circuit_breaker_break_duration: float = Field(default=15.0, gt=0)
    circuit_breaker_ignore_rate_limit: bool = True


class BaselineClientConfig(ClientProfileConfig):
    """The "old" client: fixed retry count and fixed delay, no throttling."""

    label: str = BASELINE_LABEL


class ResilientClientConfig(ClientProfileConfig):
    """The "new" client: throttled, jittered exponential retries, circuit breaker."""

    label: str = RESILIENT_LABEL
    retry_delay: float = Field(default=3.0, ge=0)
    retry_backoff: Literal["constant", "exponential"] = "exponential"
    retry_use_jitter: bool = True
    retry_on_rate_limit: bool = True
    attempt_timeout: float = Field(default=15.0, gt=0)
    total_timeout: float = Field(default=120.0, gt=0)
    rate_limiter_enabled: bool = True
    circuit_breaker_enabled: bool = True


class LoadTestConfig(BaseSettings):
    """Global configuration settings for the load-test harness."""

    base_url: str = DEFAULT_BASE_URL
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("REFINER_LOADTEST_API_KEY", "REFINER_API_KEY"),
    )
    endpoint_path: str = DEFAULT_ENDPOINT_PATH
    event_name: str = DEFAULT_EVENT_NAME
    user_id_prefix: str = DEFAULT_USER_ID_PREFIX
    total_requests: int = Field(default=DEFAULT_TOTAL_REQUESTS, ge=0)
    parallelism: int = Field(default=DEFAULT_PARALLELISM, ge=1)
    cooldown_seconds: float = Field(default=DEFAULT_COOLDOWN_SECONDS, ge=0)
    smoke_user_id: str = DEFAULT_SMOKE_USER_ID
    smoke_event_name: str = DEFAULT_SMOKE_EVENT_NAME
    log_level: str = DEFAULT_LOG_LEVEL
    library_log_levels: Dict[str, str] = dict(LIBRARY_LOG_LEVELS)
    baseline: BaselineClientConfig = BaselineClientConfig()
    resilient: ResilientClientConfig = ResilientClientConfig()

    model_config = SettingsConfigDict(
        env_prefix='REFINER_LOADTEST_',
        env_nested_delimiter='__',
        env_file='.env',
        extra='ignore',
        populate_by_name=True,
    )

    def require_api_key(self) -> str:
        """Return the API key or fail before anything is sent."""
        if not self.api_key:
            raise ConfigurationError(
                "Refiner API key is not set (REFINER_API_KEY or REFINER_LOADTEST_API_KEY)"
            )
        return self.api_key

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.endpoint_path.lstrip('/')}"

    @classmethod
    def load_config_from_json(cls) -> Dict[str, Any]:
        """Load configuration from loadtest.json file."""
        config_path = Path("loadtest.json")
        if config_path.exists():
            with open(config_path, 'r') as f:
                return json.load(f)
        return {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        Customise the sources for settings.

        Order of precedence (highest to lowest):
        1. Environment variables
        2. .env file
        3. Init settings (kwargs passed to constructor)
        4. JSON config file
        5. Default values
        """
        def json_source():
            return cls.load_config_from_json()

        return (
            env_settings,
            dotenv_settings,
            init_settings,
            json_source,
        )
