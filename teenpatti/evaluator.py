from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Sequence

from .cards import Card

ACE = 14
LOW_ACE_RUN = [2, 3, ACE]


class HandCategory(IntEnum):
    HIGH_CARD = 1
    PAIR = 2
    COLOR = 3
    SEQUENCE = 4
    PURE_SEQUENCE = 5
    TRAIL = 6


CATEGORY_NAMES = {
    HandCategory.TRAIL: "Trail",
    HandCategory.PURE_SEQUENCE: "Pure Sequence",
    HandCategory.SEQUENCE: "Sequence",
    HandCategory.COLOR: "Color",
    HandCategory.PAIR: "Pair",
    HandCategory.HIGH_CARD: "High Card",
}


@dataclass(frozen=True, order=True)
class HandRank:
    category: HandCategory
    value: int

    @property
    def name(self) -> str:
        return CATEGORY_NAMES[self.category]

    def to_dict(self) -> Dict[str, object]:
        return {"rank": int(self.category), "value": self.value, "name": self.name}


def evaluate(cards: Sequence[Card]) -> HandRank:
    """Rank a three-card hand. Higher compares greater; equal ranks tie."""
    if len(cards) != 3:
        raise ValueError(f"Expected 3 cards, got {len(cards)}")

    ranks = sorted(card.value for card in cards)
    is_color = len({card.suit for card in cards}) == 1

    if ranks[0] == ranks[2]:
        return HandRank(HandCategory.TRAIL, ranks[0])

    run_high = _sequence_high(ranks)
    if run_high is not None:
        if is_color:
            return HandRank(HandCategory.PURE_SEQUENCE, run_high)
        return HandRank(HandCategory.SEQUENCE, run_high)
    if is_color:
        return HandRank(HandCategory.COLOR, ranks[2])
    if ranks[0] == ranks[1] or ranks[1] == ranks[2]:
        # Sorted, so the middle card always belongs to the pair.
        return HandRank(HandCategory.PAIR, ranks[1])
    return HandRank(HandCategory.HIGH_CARD, ranks[2])


def _sequence_high(ranks: List[int]):
    if ranks == LOW_ACE_RUN:
        # Ace plays low: A-2-3 is the lowest run.
        return 3
    if ranks[1] == ranks[0] + 1 and ranks[2] == ranks[1] + 1:
        return ranks[2]
    return None


def compare(a: HandRank, b: HandRank) -> int:
    if a == b:
        return 0
    return 1 if a > b else -1
