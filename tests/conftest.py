"""Pytest configuration and fixtures for StreamScribe tests."""

import json
import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

import pytest
import yaml

from streamscribe.transport.base import AbstractTransport


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")
    config.addinivalue_line("markers", "integration: tests against a local WebSocket server")


class FakeTransport(AbstractTransport):
    """In-memory transport that records outbound frames."""

    def __init__(self, connect_ok: bool = True):
        super().__init__()
        self.connect_ok = connect_ok
        self.sent = []
        self.pings = []
        self.close_calls = []

    async def connect(self) -> bool:
        if not self.connect_ok:
            self.listener.on_error(ConnectionRefusedError("connection refused"))
            return False
        self.listener.on_open()
        return True

    def send(self, data: Union[bytes, str]) -> None:
        self.sent.append(data)

    def send_ping(self, data: bytes = b"") -> None:
        self.pings.append(data)

    async def close(self, timeout: Optional[float] = None) -> None:
        self.close_calls.append(timeout)
        self.listener.on_close(None)


@pytest.fixture
def fake_transport():
    """Provides an in-memory transport."""
    return FakeTransport()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def result_frame():
    """Build a result-batch text frame in the flat wire form."""
    def build(result_index: int, *texts: str, final: bool = False, confidence: float = 0.9) -> str:
        return json.dumps({
            "result_index": result_index,
            "results": [{"text": text, "confidence": confidence, "final": final} for text in texts],
        })
    return build


@pytest.fixture
def write_config(temp_data_dir):
    """Write a YAML config file into the temp directory and return its path."""
    def write(config: dict, name: str = "streamscribe.yaml") -> str:
        path = Path(temp_data_dir) / name
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config, f)
        return str(path)
    return write
