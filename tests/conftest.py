import random
from urllib.parse import urlsplit

import pytest
import requests

from memory_game.config import SHUFFLE_DELAY
from memory_game.engine import GameEngine
from memory_game.scheduler import ManualClock, TimerQueue


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def timers(clock):
    return TimerQueue(clock)


@pytest.fixture
def advance(clock, timers):
    """Move virtual time forward and fire whatever became due."""
    def _advance(seconds):
        clock.advance(seconds)
        return timers.run_due()
    return _advance


@pytest.fixture
def engine(timers, advance):
    e = GameEngine(timers, rng=random.Random(7))
    advance(SHUFFLE_DELAY)
    return e


class FlaskSession:
    """requests.Session stand-in that routes calls into a Flask test client."""

    def __init__(self, app):
        self.client = app.test_client()
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path, timeout))
        flask_response = self.client.open(path, method=method, json=json)

        response = requests.Response()
        response.status_code = flask_response.status_code
        response._content = flask_response.get_data()
        response.headers["Content-Type"] = flask_response.content_type
        response.reason = flask_response.status.split(" ", 1)[-1]
        response.url = url
        return response


@pytest.fixture
def flask_session():
    return FlaskSession
