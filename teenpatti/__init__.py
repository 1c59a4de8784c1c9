"""Teen Patti engine primitives reused by the room server."""

from .cards import Card, RANKS, SUITS, build_deck, deal, deal_one
from .errors import DeckExhausted, GameError, InvalidAction, InvalidPlayer, OutOfTurn
from .evaluator import HandCategory, HandRank, evaluate
from .game import GameEngine
from .models import ActionType, Call, Pack, Phase, Player, Raise, TableConfig, parse_action

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "deal_one",
    "DeckExhausted",
    "GameError",
    "InvalidAction",
    "InvalidPlayer",
    "OutOfTurn",
    "HandCategory",
    "HandRank",
    "evaluate",
    "GameEngine",
    "ActionType",
    "Call",
    "Pack",
    "Phase",
    "Player",
    "Raise",
    "TableConfig",
    "parse_action",
]
