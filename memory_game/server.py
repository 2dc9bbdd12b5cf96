# memory_game/server.py
from __future__ import annotations
import argparse
import logging
import time
from dataclasses import replace
from threading import RLock
from typing import Callable, Optional

from flask import Flask, current_app, jsonify, request

from .config import GameConfig
from .engine import GameEngine, GameSnapshot
from .scheduler import TimerQueue

logger = logging.getLogger(__name__)


class GameSession:
    """
    One engine plus the timer queue that drives its deferred actions.

    Flask may serve requests on several threads; every command runs under the
    lock, and due timers are fired first so the engine only ever sees one
    writer and its deferred actions apply in schedule order.
    """

    def __init__(self, engine: GameEngine, timers: TimerQueue):
        self.engine = engine
        self.timers = timers
        self._lock = RLock()

    def run(self, command: Optional[Callable[[GameEngine], object]] = None) -> GameSnapshot:
        with self._lock:
            self.timers.run_due()
            if command is not None:
                command(self.engine)
            return self.engine.snapshot()


def create_app(config: Optional[GameConfig] = None, clock: Callable[[], float] = time.monotonic) -> Flask:
    config = config or GameConfig.from_env()
    timers = TimerQueue(clock)
    engine = GameEngine.from_config(config, timers)

    app = Flask(__name__)
    app.extensions["memory_game"] = GameSession(engine, timers)

    @app.get("/health")
    def api_health():
        return jsonify({"status": "ok"})

    @app.get("/state")
    def api_state():
        return jsonify({"status": "ok", "state": _session().run().to_dict()})

    @app.post("/reset")
    def api_reset():
        snapshot = _session().run(lambda e: e.reset())
        logger.info("new round, generation %d", snapshot.generation)
        return jsonify({"status": "ok", "state": snapshot.to_dict()})

    @app.post("/select")
    def api_select():
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict) or "index" not in data:
            return jsonify({"status": "error", "message": "missing field: index"}), 400
        index = data["index"]

        try:
            snapshot = _session().run(lambda e: e.select(index))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400
        return jsonify({"status": "ok", "state": snapshot.to_dict()})

    return app


def _session() -> GameSession:
    return current_app.extensions["memory_game"]


def main(argv=None) -> None:
    config = GameConfig.from_env()
    ap = argparse.ArgumentParser(description="Serve a memory match game over HTTP")
    ap.add_argument("--host", default=config.host)
    ap.add_argument("--port", type=int, default=config.port)
    ap.add_argument("--seed", type=int, default=config.seed)
    ap.add_argument("--debug", action="store_true")
    a = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if a.debug else logging.INFO)
    config = replace(config, seed=a.seed, host=a.host, port=a.port)
    app = create_app(config)
    # debug=True only for development
    app.run(host=config.host, port=config.port, debug=a.debug)


if __name__ == "__main__":
    main()
