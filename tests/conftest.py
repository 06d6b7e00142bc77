"""
Shared pytest configuration.

Puts the project root on sys.path so that `import chatrelay` works in every
test module, and provides a deterministic relay (no simulated loss, manual
clock, throwaway SQLite file) plus an app / TestClient around it.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is importable for test modules.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from chatrelay.routes import create_app  # noqa: E402
from tests.utils import ManualClock, build_relay  # noqa: E402


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_000.0)


@pytest.fixture
def relay(tmp_path, clock):
    service = build_relay(tmp_path, clock=clock)
    yield service
    service.stop()


@pytest.fixture
def app(relay):
    application = create_app()
    application.state.relay = relay
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
