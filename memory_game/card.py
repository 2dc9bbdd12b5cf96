# memory_game/card.py
from __future__ import annotations
from dataclasses import dataclass, field
import random
from typing import Dict, List, Optional, Sequence
from uuid import UUID, uuid4

DEFAULT_SYMBOLS = ("🍎", "🍌", "🍒", "🍇", "🥝", "🍉")


@dataclass(eq=False)
class Card:
    """
    One deck entry.

    `id` and `content` never change after construction. The two flags are
    owned by the GameEngine; nothing else should write them.
    """
    content: str
    is_flipped: bool = False
    is_matched: bool = False
    id: UUID = field(default_factory=uuid4)

    def view(self) -> CardView:
        return CardView(id=str(self.id), content=self.content,
                        is_flipped=self.is_flipped, is_matched=self.is_matched)


@dataclass(frozen=True)
class CardView:
    id: str
    content: str
    is_flipped: bool
    is_matched: bool

    @property
    def face_up(self) -> bool:
        return self.is_flipped or self.is_matched

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "content": self.content,
            "is_flipped": self.is_flipped,
            "is_matched": self.is_matched,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> CardView:
        return cls(id=str(data["id"]), content=str(data["content"]),
                   is_flipped=bool(data["is_flipped"]), is_matched=bool(data["is_matched"]))


def validate_symbols(symbols: Sequence[str]) -> List[str]:
    values = list(symbols)
    if not values:
        raise ValueError("symbol alphabet must not be empty")
    for s in values:
        if not isinstance(s, str) or not s:
            raise ValueError(f"invalid symbol: {s!r}")
    if len(set(values)) != len(values):
        raise ValueError("symbols must be distinct")
    return values


def build_deck(symbols: Sequence[str] = DEFAULT_SYMBOLS, rng: Optional[random.Random] = None) -> List[Card]:
    """Two fresh face-down cards per symbol, shuffled."""
    values = validate_symbols(symbols)
    rng = rng or random.Random()
    pairs = values + values
    rng.shuffle(pairs)
    return [Card(content=v) for v in pairs]
