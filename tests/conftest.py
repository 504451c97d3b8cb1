"""Shared test configuration and fixtures for all tests."""

import pytest

from src.loadtest.models import LoadTestRun
from tests.fakes import FakeClock, FakeLoadClient
from tests.test_const import TEST_API_KEY, TEST_BASE_URL


@pytest.fixture
def fake_clock():
    """Manually advanced clock fixture."""
    return FakeClock()


@pytest.fixture
def fake_client():
    """Fake client that answers 200 to everything."""
    return FakeLoadClient()


@pytest.fixture
def payload_factory():
    """Payload factory matching the harness's form body."""
    def factory(index: int) -> dict:
        return {"id": f"test-user-{index}", "event": "LoadTest Event"}
    return factory


@pytest.fixture
def make_run():
    """Build a LoadTestRun with the given size."""
    def _make(total_requests: int, parallelism: int, label: str = "OLD") -> LoadTestRun:
        return LoadTestRun(label=label, total_requests=total_requests, parallelism=parallelism)
    return _make


@pytest.fixture
def load_test_config():
    """Configuration with a key set and a small load profile."""
    from src.shared.config import LoadTestConfig
    return LoadTestConfig(
        base_url=TEST_BASE_URL,
        api_key=TEST_API_KEY,
        total_requests=20,
        parallelism=4,
        cooldown_seconds=0.5,
    )
