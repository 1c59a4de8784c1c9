from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from .cards import Card, cards_to_dicts
from .errors import InvalidAction
from .evaluator import HandRank


class Phase(str, Enum):
    BETTING = "betting"
    SHOWDOWN = "showdown"
    FINISHED = "finished"


class ActionType(str, Enum):
    PACK = "pack"
    CALL = "call"
    RAISE = "raise"


@dataclass(frozen=True)
class Pack:
    kind = ActionType.PACK


@dataclass(frozen=True)
class Call:
    kind = ActionType.CALL


@dataclass(frozen=True)
class Raise:
    amount: int = 0
    kind = ActionType.RAISE


Action = Union[Pack, Call, Raise]


def parse_action(name: object, amount: object = None) -> Action:
    """Turn a wire token into an action; anything else is rejected here."""
    try:
        kind = ActionType(name)
    except ValueError:
        raise InvalidAction("Invalid action") from None
    if kind == ActionType.PACK:
        return Pack()
    if kind == ActionType.CALL:
        return Call()
    if amount is None:
        return Raise()
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAction("Raise amount must be a non-negative integer")
    return Raise(amount)


@dataclass
class TableConfig:
    capacity: int = 6
    min_players: int = 3
    ante: int = 1
    min_bet: int = 2
    max_rounds: int = 5
    reset_delay_s: float = 10.0


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_committed: int = 0
    folded: bool = False
    active: bool = True

    @property
    def in_hand(self) -> bool:
        return self.active and not self.folded

    def public_view(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "bet": self.current_bet,
            "total_bet": self.total_committed,
            "folded": self.folded,
            "active": self.active,
            "card_count": len(self.hand),
        }


@dataclass
class ActionResult:
    player_id: str
    player_name: str
    action: str
    amount: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "action": self.action,
            "amount": self.amount,
        }


@dataclass
class Winner:
    player_id: str
    name: str
    winnings: int
    hand: Optional[HandRank] = None
    cards: List[Card] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "player_id": self.player_id,
            "name": self.name,
            "winnings": self.winnings,
        }
        if self.hand is not None:
            payload["hand"] = self.hand.to_dict()
            payload["cards"] = cards_to_dicts(self.cards)
        return payload
