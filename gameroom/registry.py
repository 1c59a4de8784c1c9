from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from teenpatti.errors import (
    AlreadyInRoom,
    BadRequest,
    GameError,
    GameInProgress,
    NameRequired,
    NameTaken,
    NoActiveHand,
    RoomError,
    RoomFull,
    RoomNotFound,
)
from teenpatti.game import GameEngine
from teenpatti.models import ActionResult, TableConfig, parse_action

LOGGER = logging.getLogger("teenpatti_registry")

# SessionRegistry owns every room and the hand each room is running. It
# never touches sockets: results go into an outbound sink and the gateway
# decides how to deliver them.

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6
NOT_ENOUGH_PLAYERS = "Not enough players"

Scheduler = Callable[[float, Callable[[], None]], Any]


@dataclass
class Outbound:
    event: str
    payload: Dict[str, object]
    recipients: Tuple[str, ...]


class OutboundBuffer:
    """Collects outbound messages until the gateway flushes them."""

    def __init__(self) -> None:
        self.messages: List[Outbound] = []

    def emit(self, message: Outbound) -> None:
        self.messages.append(message)

    def drain(self) -> List[Outbound]:
        messages, self.messages = self.messages, []
        return messages


@dataclass
class RoomMember:
    participant_id: str
    name: str
    ready: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.participant_id, "name": self.name, "ready": self.ready}


@dataclass
class Room:
    code: str
    capacity: int
    members: List[RoomMember] = field(default_factory=list)
    started: bool = False
    game: Optional[GameEngine] = None
    hand_counter: int = 0
    reset_handle: Any = None

    def member(self, participant_id: str) -> Optional[RoomMember]:
        for member in self.members:
            if member.participant_id == participant_id:
                return member
        return None

    def participant_ids(self) -> Tuple[str, ...]:
        return tuple(member.participant_id for member in self.members)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.code,
            "players": [member.to_dict() for member in self.members],
            "max_players": self.capacity,
            "game_started": self.started,
        }


def generate_room_code() -> str:
    return "".join(random.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def _payload_str(payload: Dict[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise BadRequest(f"{key} required")
    return value


class SessionRegistry:
    def __init__(
        self,
        sink: OutboundBuffer,
        scheduler: Scheduler,
        config: Optional[TableConfig] = None,
        code_factory: Callable[[], str] = generate_room_code,
    ) -> None:
        self.sink = sink
        self.scheduler = scheduler
        self.config = config or TableConfig()
        self.code_factory = code_factory
        self.rooms: Dict[str, Room] = {}
        self.participant_rooms: Dict[str, str] = {}
        self.handlers: Dict[str, Callable[[str, Dict[str, object]], None]] = {
            "create-room": self._on_create_room,
            "join-room": self._on_join_room,
            "toggle-ready": self._on_toggle_ready,
            "game-action": self._on_game_action,
            "disconnect": self._on_disconnect,
        }

    # Inbound dispatch ------------------------------------------------

    def dispatch(self, participant: str, event: str, payload: Optional[Dict[str, object]] = None) -> None:
        handler = self.handlers.get(event)
        if handler is None:
            self._send(participant, "error", {"code": "UNKNOWN_EVENT", "msg": f"Unsupported event {event}"})
            return
        try:
            handler(participant, payload or {})
        except BadRequest as exc:
            self._send(participant, "error", {"code": exc.code, "msg": exc.msg})

    def _on_create_room(self, participant: str, payload: Dict[str, object]) -> None:
        name = _payload_str(payload, "player_name")
        try:
            self.create_room(participant, name)
        except RoomError as exc:
            self._send_error(participant, "room-error", exc)

    def _on_join_room(self, participant: str, payload: Dict[str, object]) -> None:
        code = _payload_str(payload, "room_code")
        name = _payload_str(payload, "player_name")
        try:
            self.join_room(code, participant, name)
        except RoomError as exc:
            self._send_error(participant, "room-error", exc)

    def _on_toggle_ready(self, participant: str, payload: Dict[str, object]) -> None:
        self.toggle_ready(_payload_str(payload, "room_code"), participant)

    def _on_game_action(self, participant: str, payload: Dict[str, object]) -> None:
        code = _payload_str(payload, "room_code")
        try:
            self.apply_game_action(code, participant, payload.get("action"), payload.get("amount"))
        except GameError as exc:
            LOGGER.warning(
                "Rejected action room=%s participant=%s action=%s reason=%s",
                code,
                participant,
                payload.get("action"),
                exc.code,
            )
            self._send_error(participant, "game-error", exc)

    def _on_disconnect(self, participant: str, payload: Dict[str, object]) -> None:
        self.disconnect(participant)

    # Room lifecycle --------------------------------------------------

    def create_room(self, participant: str, name: str) -> Room:
        name = self._validate_newcomer(participant, name)
        code = self.code_factory()
        while code in self.rooms:
            code = self.code_factory()

        room = Room(code=code, capacity=self.config.capacity)
        room.members.append(RoomMember(participant_id=participant, name=name))
        self.rooms[code] = room
        self.participant_rooms[participant] = code
        LOGGER.info("Room %s created by %s", code, name)
        self._send(participant, "room-created", {"room_code": code, "room": room.to_dict()})
        return room

    def join_room(self, code: str, participant: str, name: str) -> Room:
        name = self._validate_newcomer(participant, name)
        room = self.rooms.get(code)
        if room is None:
            raise RoomNotFound("Room not found")
        if len(room.members) >= room.capacity:
            raise RoomFull("Room is full")
        if room.started:
            raise GameInProgress("Game already in progress")
        if any(member.name == name for member in room.members):
            raise NameTaken("Player name already taken")

        room.members.append(RoomMember(participant_id=participant, name=name))
        self.participant_rooms[participant] = code
        LOGGER.info("%s joined room %s", name, code)
        self._broadcast_room(room)
        return room

    def _validate_newcomer(self, participant: str, name: str) -> str:
        name = name.strip()
        if not name:
            raise NameRequired("Player name required")
        if participant in self.participant_rooms:
            raise AlreadyInRoom("Already seated in a room")
        return name

    def toggle_ready(self, code: str, participant: str) -> bool:
        room = self.rooms.get(code)
        if room is None or room.started:
            return False
        member = room.member(participant)
        if member is None:
            return False

        member.ready = not member.ready
        self._broadcast_room(room)
        if len(room.members) >= self.config.min_players and all(m.ready for m in room.members):
            self._start_hand(room)
        return True

    def _start_hand(self, room: Room) -> None:
        room.started = True
        room.hand_counter += 1
        engine = GameEngine(
            [(member.participant_id, member.name) for member in room.members],
            self.config,
            hand_id=f"{room.code}-{room.hand_counter:04d}",
        )
        engine.deal_hand()
        room.game = engine
        LOGGER.info("Hand %s started with %s players", engine.hand_id, len(engine.players))
        self._send_game_state(room, "game-started")

    def reset_room(self, code: str) -> None:
        room = self.rooms.get(code)
        if room is None:
            return
        room.reset_handle = None
        room.game = None
        room.started = False
        for member in room.members:
            member.ready = False
        LOGGER.info("Room %s back in lobby", code)
        self._broadcast_room(room)

    def _discard_room(self, room: Room) -> None:
        if room.reset_handle is not None:
            room.reset_handle.cancel()
            room.reset_handle = None
        room.game = None
        self.rooms.pop(room.code, None)
        LOGGER.info("Room %s closed", room.code)

    # Game flow -------------------------------------------------------

    def apply_game_action(self, code: str, participant: str, action_name: object, amount: object = None) -> ActionResult:
        room = self.rooms.get(code)
        if room is None:
            raise RoomNotFound("Room not found")
        engine = room.game
        if engine is None or engine.settled:
            raise NoActiveHand("No hand in progress")

        action = parse_action(action_name, amount)
        result = engine.apply_action(participant, action)
        LOGGER.debug(
            "Applied action hand=%s player=%s action=%s amount=%s",
            engine.hand_id,
            result.player_name,
            result.action,
            result.amount,
        )

        self._send_game_state(room, "game-updated", result)
        if engine.is_over():
            self._finish_hand(room)
        return result

    def _finish_hand(self, room: Room, reason: Optional[str] = None) -> None:
        engine = room.game
        assert engine is not None
        winners = engine.settle()
        payload: Dict[str, object] = {
            "winners": [winner.to_dict() for winner in winners],
            "final_cards": engine.all_cards(),
        }
        if reason:
            payload["reason"] = reason
        self._broadcast(room, "game-over", payload)
        LOGGER.info(
            "Hand %s finished; pot=%s winners=%s",
            engine.hand_id,
            engine.pot,
            [winner.name for winner in winners],
        )

        code = room.code
        room.reset_handle = self.scheduler(self.config.reset_delay_s, lambda: self.reset_room(code))

    def disconnect(self, participant: str) -> None:
        code = self.participant_rooms.pop(participant, None)
        room = self.rooms.get(code) if code else None
        if room is None:
            return

        room.members = [member for member in room.members if member.participant_id != participant]
        LOGGER.info("Participant %s left room %s", participant, code)
        if not room.members:
            self._discard_room(room)
            return
        self._broadcast_room(room)

        engine = room.game
        if engine is None or engine.settled:
            return
        engine.remove_player(participant)
        engine.resync_turn()
        if engine.is_over():
            reason = NOT_ENOUGH_PLAYERS if len(engine.active_players()) < 2 else None
            self._finish_hand(room, reason)
        else:
            self._send_game_state(room, "game-updated")

    # Outbound --------------------------------------------------------

    def _send(self, participant: str, event: str, payload: Dict[str, object]) -> None:
        self.sink.emit(Outbound(event, payload, (participant,)))

    def _send_error(self, participant: str, event: str, exc: GameError) -> None:
        self._send(participant, event, {"code": exc.code, "msg": exc.msg})

    def _broadcast(self, room: Room, event: str, payload: Dict[str, object]) -> None:
        self.sink.emit(Outbound(event, payload, room.participant_ids()))

    def _broadcast_room(self, room: Room) -> None:
        self._broadcast(room, "room-updated", {"room": room.to_dict()})

    def _send_game_state(self, room: Room, event: str, last_action: Optional[ActionResult] = None) -> None:
        # Public state is shared; each member only ever sees their own cards.
        engine = room.game
        assert engine is not None
        public_state = engine.public_state()
        for member in room.members:
            payload: Dict[str, object] = {
                "game_state": public_state,
                "your_cards": engine.private_hand(member.participant_id),
            }
            if last_action is not None:
                payload["last_action"] = last_action.to_dict()
            self._send(member.participant_id, event, payload)
