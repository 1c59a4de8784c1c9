from __future__ import annotations


class GameError(ValueError):
    """Rejected request. Reported to the participant that sent it; state is untouched."""

    code = "GAME_ERROR"

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class InvalidPlayer(GameError):
    code = "INVALID_PLAYER"


class OutOfTurn(GameError):
    code = "OUT_OF_TURN"


class InvalidAction(GameError):
    code = "INVALID_ACTION"


class RoomError(GameError):
    code = "ROOM_ERROR"


class RoomNotFound(RoomError):
    code = "ROOM_NOT_FOUND"


class RoomFull(RoomError):
    code = "ROOM_FULL"


class GameInProgress(RoomError):
    code = "GAME_IN_PROGRESS"


class NameTaken(RoomError):
    code = "NAME_TAKEN"


class NameRequired(RoomError):
    code = "NAME_REQUIRED"


class AlreadyInRoom(RoomError):
    code = "ALREADY_IN_ROOM"


class NoActiveHand(GameError):
    code = "NO_ACTIVE_HAND"


class BadRequest(GameError):
    code = "BAD_SCHEMA"


class DeckExhausted(RuntimeError):
    # Only reachable if the seat cap is bypassed; never reported as a user error.
    pass
