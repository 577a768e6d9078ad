import asyncio
import json
import os
import random
import sys
import pytest

# Ensure the project root (containing app.py, backend.py, ...) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from backend import RoomRegistry

WORLD_BOUND = 140
RESPAWN_MS = 10


class FakeConnection:
    """Stands in for broadcast.Connection: records every frame it is given."""

    _counter = 0

    def __init__(self, connection_id=None):
        FakeConnection._counter += 1
        self.connection_id = connection_id or f"conn-{FakeConnection._counter}"
        self.is_open = True
        self.frames = []

    def send(self, text):
        if not self.is_open:
            return False
        self.frames.append(text)
        return True

    @property
    def messages(self):
        return [json.loads(f) for f in self.frames]

    def of_type(self, msg_type):
        return [m for m in self.messages if m.get("type") == msg_type]

    def clear(self):
        self.frames.clear()


@pytest.fixture()
def loop():
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture()
def run_for(loop):
    def _run(seconds):
        loop.run_until_complete(asyncio.sleep(seconds))
    return _run


@pytest.fixture()
def make_connection():
    return FakeConnection


@pytest.fixture()
def registry(loop):
    return RoomRegistry(
        coin_count=32,
        respawn_delay_ms=RESPAWN_MS,
        world_bound=WORLD_BOUND,
        loop=loop,
        rng=random.Random(1234),
    )
