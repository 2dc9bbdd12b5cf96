# memory_game/simulation.py
# Auto-player for the memory match engine, local or over HTTP.

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .client import GameClient
from .config import GameConfig
from .engine import GameEngine, GameSnapshot
from .scheduler import AsyncioScheduler


@dataclass
class Stats:
    turns: int = 0
    ignored_taps: int = 0
    waits: int = 0
    elapsed_ms: float = 0.0


# ----- tiny helpers -----

async def timeout_ms(milliseconds: float) -> None:
    await asyncio.sleep(milliseconds / 1000.0)

def now_ms() -> float:
    return time.time() * 1000.0

def board_to_string(snapshot: GameSnapshot, columns: int = 4) -> str:
    cells = [c.content if c.face_up else "?" for c in snapshot.cards]
    rows = [" ".join(cells[i:i + columns]) for i in range(0, len(cells), columns)]
    rows.append(f"score {snapshot.score}  moves {snapshot.attempts}  pairs {snapshot.matches}")
    return "\n".join(rows)


# ---- adapter: run blocking client calls safely in threads ----

async def call_blocking(func, *args, **kwargs):
    return await asyncio.to_thread(func, *args, **kwargs)


# ----- tables: where the player sends its taps -----

class LocalTable:
    """An engine living on the running event loop."""

    def __init__(self, config: GameConfig):
        self.engine = GameEngine.from_config(config, AsyncioScheduler())

    async def observe(self) -> GameSnapshot:
        return self.engine.snapshot()

    async def select(self, index: int) -> GameSnapshot:
        self.engine.select(index)
        return self.engine.snapshot()

    async def reset(self) -> GameSnapshot:
        self.engine.reset()
        return self.engine.snapshot()


class RemoteTable:
    def __init__(self, client: GameClient):
        self.client = client

    async def observe(self) -> GameSnapshot:
        return await call_blocking(self.client.state)

    async def select(self, index: int) -> GameSnapshot:
        return await call_blocking(self.client.select, index)

    async def reset(self) -> GameSnapshot:
        return await call_blocking(self.client.reset)


# ----- player -----

class MemoryPlayer:
    """Never forgets a revealed card; plays a known pair as soon as it has one."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.seen: Dict[int, str] = {}

    def remember(self, snapshot: GameSnapshot) -> None:
        for i, card in enumerate(snapshot.cards):
            if card.face_up:
                self.seen[i] = card.content

    def forget(self) -> None:
        self.seen.clear()

    def choose(self, snapshot: GameSnapshot, first: Optional[int] = None) -> Optional[int]:
        open_cards = [i for i, c in enumerate(snapshot.cards) if not c.face_up and i != first]
        if not open_cards:
            return None

        if first is not None:
            wanted = self.seen.get(first)
            for i, content in self.seen.items():
                if content != wanted or i == first:
                    continue
                if i in open_cards:
                    return i
                if not snapshot.cards[i].is_matched:
                    # partner is still face-up from an earlier miss
                    return None
        else:
            by_content: Dict[str, List[int]] = {}
            for i in open_cards:
                if i in self.seen:
                    by_content.setdefault(self.seen[i], []).append(i)
            for indices in by_content.values():
                if len(indices) == 2:
                    return indices[0]

        unseen = [i for i in open_cards if i not in self.seen]
        return self.rng.choice(unseen or open_cards)


async def play(table, player: MemoryPlayer, max_turns: int = 200,
               think_ms: float = 0.0, poll_ms: float = 5.0) -> Stats:
    stats = Stats()
    start = now_ms()

    snapshot = await table.observe()
    while snapshot.dealing:
        await timeout_ms(poll_ms)
        snapshot = await table.observe()

    generation = snapshot.generation
    while not snapshot.is_gameover and stats.turns < max_turns:
        if snapshot.generation != generation:
            generation = snapshot.generation
            player.forget()
        picks: List[int] = []
        while len(picks) < 2:
            pick = player.choose(snapshot, picks[0] if picks else None)
            if pick is None:
                # every face-down candidate is waiting on a flip-back
                stats.waits += 1
                await timeout_ms(poll_ms)
                snapshot = await table.observe()
                continue
            before = snapshot
            snapshot = await table.select(pick)
            if snapshot.cards[pick] == before.cards[pick]:
                stats.ignored_taps += 1
                await timeout_ms(poll_ms)
                continue
            player.remember(snapshot)
            picks.append(pick)

        stats.turns += 1
        await timeout_ms(think_ms)
        snapshot = await table.observe()

    stats.elapsed_ms = now_ms() - start
    return stats


async def simulate_local(config: GameConfig, max_turns: int = 200, think_ms: float = 0.0):
    table = LocalTable(config)
    player = MemoryPlayer(random.Random(config.seed))
    stats = await play(table, player, max_turns=max_turns, think_ms=think_ms)
    return stats, table.engine.snapshot()


async def simulate_remote(client: GameClient, seed: Optional[int] = None,
                          max_turns: int = 200, think_ms: float = 0.0):
    table = RemoteTable(client)
    await table.reset()
    player = MemoryPlayer(random.Random(seed))
    stats = await play(table, player, max_turns=max_turns, think_ms=think_ms)
    return stats, await table.observe()


def report(stats: Stats, snapshot: GameSnapshot) -> None:
    print("SIMULATION COMPLETE" if snapshot.is_gameover else "SIMULATION STOPPED")
    print(f"Turns played: {stats.turns}")
    print(f"Ignored taps: {stats.ignored_taps}")
    print(f"Times waited for a flip-back: {stats.waits}")
    print(f"Elapsed: {int(stats.elapsed_ms)}ms")
    print("\nFinal board state:")
    print(board_to_string(snapshot))


def main(argv=None) -> None:
    ap = argparse.ArgumentParser(description="Let a memory-perfect player finish a game")
    ap.add_argument("--url", help="play against a running server instead of a local engine")
    ap.add_argument("--seed", type=int)
    ap.add_argument("--max-turns", type=int, default=200)
    ap.add_argument("--think-ms", type=float, default=50.0)
    a = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    print("MEMORY MATCH - SIMULATION")
    if a.url:
        coro = simulate_remote(GameClient(a.url), seed=a.seed, max_turns=a.max_turns, think_ms=a.think_ms)
    else:
        config = GameConfig.from_env()
        if a.seed is not None:
            config = replace(config, seed=a.seed)
        coro = simulate_local(config, max_turns=a.max_turns, think_ms=a.think_ms)
    stats, snapshot = asyncio.run(coro)
    report(stats, snapshot)


if __name__ == "__main__":
    main()
