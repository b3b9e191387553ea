import os
import sys
import pytest

# Ensure the project root (containing app.py and the routers package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Never reach for a real Redis from the test suite
os.environ.pop('REDIS_HOST', None)

from fastapi.testclient import TestClient

from app import create_app
from backend import MemoryRoomStore


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return MemoryRoomStore(ttl_seconds=7200, clock=clock)


@pytest.fixture()
def api_app(store):
    return create_app(room_store=store)


@pytest.fixture()
def make_client(api_app):
    """Each client has its own cookie jar, i.e. its own browser session."""
    clients = []

    def _make():
        c = TestClient(api_app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def ticking_clock(monkeypatch):
    """Deterministic, strictly increasing millisecond timestamps for room_logic."""
    import room_logic

    state = {'now': 1_700_000_000_000}

    def _now_ms():
        state['now'] += 1
        return state['now']

    monkeypatch.setattr(room_logic, 'now_ms', _now_ms)
    return state
