from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from gameroom.registry import Outbound, OutboundBuffer, SessionRegistry
from teenpatti.cards import Card, RANKS, SUITS, parse_cards
from teenpatti.game import GameEngine
from teenpatti.models import Action, TableConfig

PLAYERS = (("p-a", "A"), ("p-b", "B"), ("p-c", "C"))


def rigged_deck(hands: Sequence[Sequence[str]]) -> List[Card]:
    """Deck that deals the given hands (card labels) in seat order; the rest follows."""
    dealt = [parse_cards(list(hand)) for hand in hands]
    order = [dealt[seat][idx] for idx in range(3) for seat in range(len(dealt))]
    rest = [Card(suit, rank) for suit in SUITS for rank in RANKS if Card(suit, rank) not in order]
    return order + rest


def create_engine(
    roster: Sequence[Tuple[str, str]] = PLAYERS,
    *,
    seed: int = 42,
    hands: Optional[Sequence[Sequence[str]]] = None,
    config: Optional[TableConfig] = None,
) -> GameEngine:
    """Instantiate an engine and deal the opening hand."""
    engine = GameEngine(roster, config or TableConfig(), seed=seed, hand_id="T-0001")
    if hands is not None:
        engine.deck = rigged_deck(hands)
    engine.deal_hand()
    return engine


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[str, Action]]) -> None:
    """Apply a scripted sequence of actions (player id, action)."""
    for player_id, action in actions:
        engine.apply_action(player_id, action)


def committed_total(engine: GameEngine) -> int:
    return sum(player.total_committed for player in engine.players)


class FakeHandle:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records delayed callbacks instead of arming real timers."""

    def __init__(self) -> None:
        self.handles: List[FakeHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def fire_all(self) -> None:
        for handle in list(self.handles):
            if not handle.cancelled:
                handle.callback()
        self.handles.clear()


def create_registry(codes: Sequence[str] = ("ROOM01", "ROOM02", "ROOM03")) -> Tuple[SessionRegistry, OutboundBuffer, FakeScheduler]:
    sink = OutboundBuffer()
    scheduler = FakeScheduler()
    code_iter = iter(codes)
    registry = SessionRegistry(sink, scheduler, TableConfig(), code_factory=lambda: next(code_iter))
    return registry, sink, scheduler


def seat_room(registry: SessionRegistry, names: Sequence[str] = ("A", "B", "C")) -> str:
    """Create a room and fill it; participant ids are 'p-' + lower-cased name."""
    room = registry.create_room(f"p-{names[0].lower()}", names[0])
    for name in names[1:]:
        registry.join_room(room.code, f"p-{name.lower()}", name)
    return room.code


def ready_all(registry: SessionRegistry, code: str) -> None:
    for member in list(registry.rooms[code].members):
        registry.toggle_ready(code, member.participant_id)


def messages_for(messages: Iterable[Outbound], participant: str, event: Optional[str] = None) -> List[Outbound]:
    return [
        message
        for message in messages
        if participant in message.recipients and (event is None or message.event == event)
    ]
