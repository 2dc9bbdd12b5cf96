# memory_game/client.py
from __future__ import annotations
from typing import Dict, Optional

import requests

from .engine import GameSnapshot


class GameClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GameClient:
    """Blocking client for the JSON surface served by memory_game.server."""

    def __init__(self, base_url: str = "http://127.0.0.1:5000", timeout: float = 2.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests.Session()

    def health(self) -> bool:
        return self._call("GET", "/health")["status"] == "ok"

    def state(self) -> GameSnapshot:
        return GameSnapshot.from_dict(self._call("GET", "/state")["state"])

    def reset(self) -> GameSnapshot:
        return GameSnapshot.from_dict(self._call("POST", "/reset")["state"])

    def select(self, index: int) -> GameSnapshot:
        return GameSnapshot.from_dict(self._call("POST", "/select", {"index": index})["state"])

    def _call(self, method: str, path: str, payload: Optional[Dict] = None) -> Dict:
        r = self._http.request(method, f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        try:
            data = r.json()
        except ValueError:
            data = {}
        if not r.ok or data.get("status") != "ok":
            raise GameClientError(r.status_code, data.get("message") or r.reason or "unexpected response")
        return data
