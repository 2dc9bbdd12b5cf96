# memory_game/engine.py
from __future__ import annotations
import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .card import DEFAULT_SYMBOLS, Card, CardView, build_deck, validate_symbols
from .config import MISMATCH_DELAY, SHUFFLE_DELAY, GameConfig
from .scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Animation:
    """How a renderer should animate a state replacement. The engine never waits on it."""
    name: str
    duration: Optional[float] = None
    response: Optional[float] = None
    damping: Optional[float] = None
    blend: Optional[float] = None


FLIP_ANIMATION = Animation("ease_in_out", duration=0.5)
FLIP_DOWN_ANIMATION = Animation("ease_in_out", duration=0.1)
DEAL_ANIMATION = Animation("spring", response=0.8, damping=0.7, blend=0.5)


@dataclass(frozen=True)
class GameSnapshot:
    cards: Tuple[CardView, ...]
    score: int
    attempts: int
    matches: int
    selected: Tuple[int, ...]
    is_gameover: bool
    generation: int
    dealing: bool

    def to_dict(self) -> Dict:
        return {
            "cards": [c.to_dict() for c in self.cards],
            "score": self.score,
            "attempts": self.attempts,
            "matches": self.matches,
            "selected": list(self.selected),
            "is_gameover": self.is_gameover,
            "generation": self.generation,
            "dealing": self.dealing,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> GameSnapshot:
        return cls(
            cards=tuple(CardView.from_dict(c) for c in data["cards"]),
            score=int(data["score"]),
            attempts=int(data["attempts"]),
            matches=int(data["matches"]),
            selected=tuple(int(i) for i in data["selected"]),
            is_gameover=bool(data["is_gameover"]),
            generation=int(data["generation"]),
            dealing=bool(data["dealing"]),
        )


@dataclass(frozen=True)
class GameEvent:
    kind: str  # flip_down | deal | flip | match | mismatch | flip_back
    indices: Tuple[int, ...]
    animation: Optional[Animation]
    snapshot: GameSnapshot


Listener = Callable[[GameEvent], None]


class GameEngine:
    """
    Turn state machine for a matching-pairs game.

    Rep:
      - cards holds two cards per symbol once a deck has been dealt
      - selected holds at most two distinct indices of face-up, unmatched cards
      - matched => flipped, and matched cards == 2 * matches (outside the deal gap)
      - score, attempts, matches >= 0; matches <= len(cards) / 2
    Deferred work:
      - every reset bumps `generation`; deferred actions carry the generation
        they were scheduled under and are dropped when it is no longer current
    Threading:
      - not thread-safe; callers serialise access and run the scheduler on the
        same thread
    """

    def __init__(self, scheduler: Scheduler, symbols: Sequence[str] = DEFAULT_SYMBOLS,
                 rng: Optional[random.Random] = None,
                 mismatch_delay: float = MISMATCH_DELAY,
                 shuffle_delay: float = SHUFFLE_DELAY):
        if mismatch_delay < 0 or shuffle_delay < 0:
            raise ValueError("delays must be >= 0")
        self._symbols = validate_symbols(symbols)
        self._scheduler = scheduler
        self._rng = rng or random.Random()
        self._mismatch_delay = mismatch_delay
        self._shuffle_delay = shuffle_delay

        self._cards: List[Card] = []
        self._selected: List[int] = []
        self._score = 0
        self._attempts = 0
        self._matches = 0
        self._generation = 0
        self._dealing = False
        self._pending: List[ScheduledTask] = []
        self._listeners: List[Listener] = []
        self._outbox: List[GameEvent] = []

        self.reset()

    @classmethod
    def from_config(cls, config: GameConfig, scheduler: Scheduler) -> GameEngine:
        return cls(scheduler, symbols=config.symbols, rng=random.Random(config.seed),
                   mismatch_delay=config.mismatch_delay, shuffle_delay=config.shuffle_delay)

    # ---- observation ----

    @property
    def cards(self) -> Tuple[CardView, ...]:
        return tuple(c.view() for c in self._cards)

    @property
    def score(self) -> int:
        return self._score

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def matches(self) -> int:
        return self._matches

    @property
    def selected(self) -> Tuple[int, ...]:
        return tuple(self._selected)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def dealing(self) -> bool:
        return self._dealing

    @property
    def is_gameover(self) -> bool:
        return self._matches == len(self._cards) // 2

    @property
    def pending_actions(self) -> int:
        return sum(1 for t in self._pending if t.active)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            cards=self.cards,
            score=self._score,
            attempts=self._attempts,
            matches=self._matches,
            selected=self.selected,
            is_gameover=self.is_gameover,
            generation=self._generation,
            dealing=self._dealing,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- commands ----

    def reset(self) -> None:
        """
        Start a new round.

        Counters and selection are cleared now and the displayed cards are
        flipped face-down; the freshly shuffled deck replaces them only after
        `shuffle_delay`, re-shuffled once more at that point.
        """
        self._generation += 1
        self._cancel_pending()
        new_cards = build_deck(self._symbols, self._rng)

        for card in self._cards:
            card.is_flipped = False
        self._selected.clear()
        self._score = 0
        self._attempts = 0
        self._matches = 0
        self._dealing = True
        self._check_rep()
        logger.debug("reset: generation %d, dealing %d cards", self._generation, len(new_cards))
        self._emit("flip_down", tuple(range(len(self._cards))), FLIP_DOWN_ANIMATION)
        self._defer(self._shuffle_delay, lambda: self._deal(new_cards))
        self._flush()

    def select(self, index: int) -> bool:
        """
        Flip card `index` face-up. Returns False when the tap is ignored
        (card already face-up or matched, or a deal is still in progress).
        """
        if isinstance(index, bool) or not isinstance(index, int) or not (0 <= index < len(self._cards)):
            raise ValueError("invalid card index")
        if self._dealing:
            return False
        card = self._cards[index]
        if card.is_matched or card.is_flipped:
            return False

        card.is_flipped = True
        self._selected.append(index)
        if len(self._selected) == 2:
            self._attempts += 1
        self._check_rep()
        self._emit("flip", (index,), FLIP_ANIMATION)

        if len(self._selected) == 2:
            self._check_for_match()
        self._flush()
        return True

    # ---- transitions ----

    def _check_for_match(self) -> None:
        first, second = self._selected
        a, b = self._cards[first], self._cards[second]
        self._selected.clear()

        if a.content == b.content:
            a.is_matched = True
            b.is_matched = True
            self._score += 2
            self._matches += 1
            self._check_rep()
            logger.debug("match %s at %d/%d", a.content, first, second)
            self._emit("match", (first, second), None)
            if self.is_gameover:
                logger.info("all %d pairs matched in %d attempts", self._matches, self._attempts)
            return

        self._check_rep()
        logger.debug("mismatch %s/%s at %d/%d", a.content, b.content, first, second)
        self._defer(self._mismatch_delay, lambda: self._flip_back(first, second))
        self._emit("mismatch", (first, second), None)

    def _flip_back(self, first: int, second: int) -> None:
        self._cards[first].is_flipped = False
        self._cards[second].is_flipped = False
        self._score = max(0, self._score - 1)
        self._check_rep()
        self._emit("flip_back", (first, second), FLIP_ANIMATION)
        self._flush()

    def _deal(self, new_cards: List[Card]) -> None:
        self._cards = self._rng.sample(new_cards, len(new_cards))
        self._dealing = False
        self._check_rep()
        self._emit("deal", tuple(range(len(self._cards))), DEAL_ANIMATION)
        self._flush()

    def _defer(self, delay: float, action: Callable[[], None]) -> None:
        generation = self._generation

        def run() -> None:
            if generation != self._generation:
                logger.debug("dropping deferred action from generation %d", generation)
                return
            action()

        self._pending = [t for t in self._pending if t.active]
        self._pending.append(self._scheduler.call_later(delay, run))

    def _cancel_pending(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending.clear()

    def _emit(self, kind: str, indices: Tuple[int, ...], animation: Optional[Animation]) -> None:
        if self._listeners:
            self._outbox.append(GameEvent(kind=kind, indices=indices, animation=animation,
                                          snapshot=self.snapshot()))

    def _flush(self) -> None:
        # only called once a command or deferred step has fully applied
        events, self._outbox = self._outbox, []
        for event in events:
            for listener in list(self._listeners):
                listener(event)

    def _check_rep(self) -> None:
        assert self._score >= 0
        assert self._attempts >= 0
        assert 0 <= self._matches <= len(self._cards) // 2 or self._dealing
        assert len(self._selected) <= 2
        assert len(set(self._selected)) == len(self._selected)
        for i in self._selected:
            assert self._cards[i].is_flipped and not self._cards[i].is_matched
        if self._dealing:
            return

        assert len(self._cards) % 2 == 0
        assert all(n == 2 for n in Counter(c.content for c in self._cards).values())
        assert len({c.id for c in self._cards}) == len(self._cards)
        matched = 0
        for card in self._cards:
            if card.is_matched:
                assert card.is_flipped
                matched += 1
        assert matched == 2 * self._matches
