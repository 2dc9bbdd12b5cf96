# memory_game/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .card import DEFAULT_SYMBOLS, validate_symbols

MISMATCH_DELAY = 1.0  # seconds a mismatched pair stays face-up
SHUFFLE_DELAY = 0.2   # gap between flip-down and the new deal


@dataclass(frozen=True)
class GameConfig:
    symbols: Tuple[str, ...] = DEFAULT_SYMBOLS
    mismatch_delay: float = MISMATCH_DELAY
    shuffle_delay: float = SHUFFLE_DELAY
    seed: Optional[int] = None
    host: str = "127.0.0.1"
    port: int = 5000

    def __post_init__(self):
        object.__setattr__(self, "symbols", tuple(validate_symbols(self.symbols)))
        if self.mismatch_delay < 0 or self.shuffle_delay < 0:
            raise ValueError("delays must be >= 0")
        if not (0 < self.port < 65536):
            raise ValueError("port out of range")

    @property
    def pairs(self) -> int:
        return len(self.symbols)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> GameConfig:
        env = os.environ if environ is None else environ
        kwargs = {}

        symbols = env.get("MEMORY_GAME_SYMBOLS")
        if symbols:
            kwargs["symbols"] = tuple(s.strip() for s in symbols.split(",") if s.strip())
        try:
            if env.get("MEMORY_GAME_MISMATCH_DELAY"):
                kwargs["mismatch_delay"] = float(env["MEMORY_GAME_MISMATCH_DELAY"])
            if env.get("MEMORY_GAME_SHUFFLE_DELAY"):
                kwargs["shuffle_delay"] = float(env["MEMORY_GAME_SHUFFLE_DELAY"])
            if env.get("MEMORY_GAME_SEED"):
                kwargs["seed"] = int(env["MEMORY_GAME_SEED"])
            if env.get("MEMORY_GAME_PORT"):
                kwargs["port"] = int(env["MEMORY_GAME_PORT"])
        except ValueError as e:
            raise ValueError(f"bad MEMORY_GAME_* setting: {e}") from e
        if env.get("MEMORY_GAME_HOST"):
            kwargs["host"] = env["MEMORY_GAME_HOST"]

        return cls(**kwargs)
