"""Shared fixtures for exercise-manifest tests."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config
from fetcher import create_client
from logging_setup import get_logger


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers added by setup_logging() so they don't outlive the test."""
    yield
    get_logger().handlers.clear()


@pytest.fixture
def clock():
    return FakeClock(now=1_000.0)


@pytest.fixture
def public_dir(tmp_path):
    """Empty public directory."""
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture
def sample_config(public_dir):
    """Config with no remote sources and an empty public directory."""
    return Config(
        host="127.0.0.1",
        port=3000,
        public_dir=public_dir,
        cache_ttl_ms=60000,
        fetch_timeout=10.0,
    )


@pytest.fixture
def bulk_config(sample_config):
    """Config with a bulk data source URL."""
    sample_config.data_source_url = "https://data.example.com/exercises.csv"
    return sample_config


@pytest.fixture
def folder_config(sample_config):
    """Config with a Drive folder and API key."""
    sample_config.gdrive_folder_id = "folder123"
    sample_config.gdrive_api_key = "test-key"
    return sample_config


@pytest.fixture
def bulk_csv():
    """Bulk CSV with two exercises."""
    return (
        "exercise,date,value,label,units\n"
        "squat,2024-01-01,100,Back Squat,kg\n"
        "squat,2024-01-02,105,,\n"
        "bench,2024-01-01,80,Bench,kg\n"
    )


@pytest_asyncio.fixture
async def client():
    """Upstream HTTP client, closed after the test."""
    async with create_client() as client:
        yield client


@pytest.fixture
def config_toml_content():
    """Sample config.toml content."""
    return """
port = 8080
public_dir = "/tmp/custom-public"
cache_ttl_ms = 5000
data_source_url = "https://toml.example.com/data.csv"
"""
