from datetime import datetime, UTC

import pytest
from fastapi.testclient import TestClient

from retro.main import app

# Fixed instant every time-sensitive test evaluates against.
FIXED_NOW = datetime(2017, 2, 1, 0, 0, 0, tzinfo=UTC)


class RecordingChannel:
    """Stands in for the retro channel and remembers every push."""

    def __init__(self):
        self.pushes = []

    def push(self, event, payload):
        self.pushes.append((event, payload))

    def called_with(self, event, payload) -> bool:
        return (event, payload) in self.pushes


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def idea():
    return {"id": 666, "category": "sad", "body": "redundant tests", "user_id": 1}


@pytest.fixture
def facilitator():
    return {"id": 2, "is_facilitator": True}


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Provides a TestClient instance for making requests to the FastAPI app."""
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    with TestClient(app) as c:
        yield c
