import pytest

from memory_game.client import GameClient, GameClientError
from memory_game.config import GameConfig
from memory_game.scheduler import ManualClock
from memory_game.server import create_app


@pytest.fixture
def setup(flask_session):
    clock = ManualClock()
    app = create_app(GameConfig(seed=9), clock=clock)
    session = flask_session(app)
    clock.advance(0.2)
    return GameClient("http://game.test:5000/", timeout=3, session=session), session, clock


def test_state_and_commands(setup):
    client, session, clock = setup
    assert client.health() is True

    snapshot = client.state()
    assert len(snapshot.cards) == 12
    assert snapshot.dealing is False

    a, b = [i for i, c in enumerate(snapshot.cards) if c.content == "🍒"]
    client.select(a)
    snapshot = client.select(b)
    assert snapshot.matches == 1
    assert snapshot.cards[a].is_matched

    snapshot = client.reset()
    assert snapshot.dealing is True
    assert snapshot.score == 0

    assert session.calls[0] == ("GET", "/health", 3)
    assert ("POST", "/reset", 3) in session.calls


def test_server_errors_raise(setup):
    client, _, _ = setup
    with pytest.raises(GameClientError) as info:
        client.select(40)
    assert info.value.status_code == 400
    assert info.value.message == "invalid card index"


def test_non_json_error_uses_reason(setup):
    client, _, _ = setup
    with pytest.raises(GameClientError) as info:
        client._call("GET", "/nowhere")
    assert info.value.status_code == 404
