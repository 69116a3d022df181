"""Pytest configuration and shared fixtures"""
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

from contactme.api.app import create_app
from contactme.api.storage import InMemoryStorageBackend
from contactme.config.settings import LoggingConfig, RateLimitConfig, Settings, StorageConfig


@pytest.fixture
def temp_project_dir() -> Generator[Path, None, None]:
    """Create a temporary project directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def contactme_project_dir(temp_project_dir: Path) -> Path:
    """Create a temporary project with a .contactme/config.yaml"""
    config_dir = temp_project_dir / ".contactme"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("""server:
  host: 127.0.0.1
  port: 8080
  environment: production

storage:
  backend: sqlite
  path: .contactme/contacts.db

logging:
  level: DEBUG
  directory: null

rate_limit:
  enabled: true
  max_requests: 3
  window_seconds: 60
""")
    return temp_project_dir


@pytest.fixture
def valid_form() -> Dict[str, Any]:
    """A submission that passes every check"""
    return {
        "firstName": "jane",
        "lastName": "doe",
        "email": "JANE@EXAMPLE.COM",
        "subject": "Hello there",
        "message": "This is a test message.",
        "phone": "555-123-4567",
    }


@pytest.fixture
def test_settings() -> Settings:
    """Settings without log files and with rate limiting off"""
    return Settings(
        storage=StorageConfig(backend="memory"),
        logging=LoggingConfig(level="WARNING", directory=None),
        rate_limit=RateLimitConfig(enabled=False),
    )


@pytest.fixture
def storage() -> InMemoryStorageBackend:
    return InMemoryStorageBackend()


@pytest.fixture
def client(test_settings: Settings, storage: InMemoryStorageBackend) -> Generator[TestClient, None, None]:
    """TestClient over an app backed by in-memory storage"""
    app = create_app(test_settings, storage)
    with TestClient(app) as test_client:
        yield test_client
