import pytest
from memory_game.card import DEFAULT_SYMBOLS
from memory_game.config import MISMATCH_DELAY, SHUFFLE_DELAY, GameConfig

def test_defaults():
    config = GameConfig.from_env({})
    assert config.symbols == DEFAULT_SYMBOLS
    assert config.pairs == 6
    assert config.mismatch_delay == MISMATCH_DELAY == 1.0
    assert config.shuffle_delay == SHUFFLE_DELAY == 0.2
    assert config.seed is None
    assert (config.host, config.port) == ("127.0.0.1", 5000)

def test_reads_environment():
    config = GameConfig.from_env({
        "MEMORY_GAME_SYMBOLS": "A, B ,C",
        "MEMORY_GAME_MISMATCH_DELAY": "0.5",
        "MEMORY_GAME_SHUFFLE_DELAY": "0",
        "MEMORY_GAME_SEED": "42",
        "MEMORY_GAME_HOST": "0.0.0.0",
        "MEMORY_GAME_PORT": "8080",
    })
    assert config.symbols == ("A", "B", "C")
    assert config.mismatch_delay == 0.5
    assert config.shuffle_delay == 0.0
    assert config.seed == 42
    assert (config.host, config.port) == ("0.0.0.0", 8080)

@pytest.mark.parametrize("env", [
    {"MEMORY_GAME_SEED": "abc"},
    {"MEMORY_GAME_MISMATCH_DELAY": "-1"},
    {"MEMORY_GAME_PORT": "70000"},
    {"MEMORY_GAME_SYMBOLS": "A,A"},
])
def test_rejects_bad_values(env):
    with pytest.raises(ValueError):
        GameConfig.from_env(env)
