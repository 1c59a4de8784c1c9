from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import DeckExhausted

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("hearts", "diamonds", "clubs", "spades")
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}


@dataclass(frozen=True)
class Card:
    suit: str
    rank: str
    value: int = field(init=False)

    def __post_init__(self) -> None:
        if self.rank not in RANK_VALUE:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")
        object.__setattr__(self, "value", RANK_VALUE[self.rank])

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit[0]}"

    def to_dict(self) -> Dict[str, object]:
        return {"suit": self.suit, "rank": self.rank, "value": self.value}


def build_deck(seed: Optional[int] = None) -> List[Card]:
    rng = random.Random(seed)
    deck = [Card(suit, rank) for suit in SUITS for rank in RANKS]
    rng.shuffle(deck)
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise DeckExhausted("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def deal_one(deck: List[Card]) -> Card:
    return deal(deck, 1)[0]


def cards_to_dicts(cards: List[Card]) -> List[Dict[str, object]]:
    return [card.to_dict() for card in cards]


def parse_label(label: str) -> Card:
    rank, suit_code = label[:-1], label[-1:]
    for suit in SUITS:
        if suit[0] == suit_code:
            return Card(suit, rank)
    raise ValueError(f"Invalid card label: {label}")


def parse_cards(labels: List[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
