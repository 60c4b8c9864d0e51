import os
import random
import sys

import pytest

# Ensure the backend root (containing the `impostor` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from impostor.game.phases import GamePhaseMachine  # noqa: E402
from impostor.game.store import RoomStore  # noqa: E402
from impostor.realtime.session import SessionClient  # noqa: E402
from impostor.server import create_app  # noqa: E402


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    LOG_LEVEL = 'DEBUG'
    SYNC_INTERVAL_SEC = 0.5
    COMMAND_LATENCY_SEC = 0
    ROOM_IDLE_TTL_SEC = 0
    HINT_MAX_LENGTH = 50


class FakeClock:
    def __init__(self, start_ms=1_000_000):
        self.now = start_ms

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return RoomStore(rng=random.Random(1234), clock=clock)


@pytest.fixture()
def machine(store):
    return GamePhaseMachine(store, rng=random.Random(42))


@pytest.fixture()
def make_client(store, machine):
    """Factory for in-process sessions with inline commands and manual ticks."""
    created = []

    def _make(player_id=None):
        client = SessionClient(store, machine, player_id=player_id)
        client.received = []
        for event in ('roomCreated', 'roomJoined', 'joinError', 'commandError',
                      'playersUpdate', 'gameStateUpdate', 'roomClosed'):
            client.on(event, lambda payload, ev=event, c=client: c.received.append((ev, payload)))
        created.append(client)
        return client

    yield _make
    for c in created:
        c.disconnect()


@pytest.fixture()
def flask_app():
    app, socketio = create_app(TestConfig)
    app.socketio = socketio
    yield app
    app.extensions['impostor.store'].clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = flask_app.socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
