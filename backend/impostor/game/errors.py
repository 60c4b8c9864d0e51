from __future__ import annotations


class GameError(Exception):
    """Base class for rejected commands.

    ``code`` is the stable snake_case identifier sent to clients in
    ``{"error": code}`` payloads; ``message`` is human readable.
    """

    code = "game_error"
    default_message = "Command rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(GameError):
    code = "invalid_payload"
    default_message = "Invalid payload"


class RoomNotFound(GameError):
    code = "room_not_found"
    default_message = "Room does not exist"


class RoomFull(GameError):
    code = "room_full"
    default_message = "Room is full"


class NicknameTaken(GameError):
    code = "nickname_taken"
    default_message = "Nickname is already taken in this room"


class NotInRoom(GameError):
    code = "not_in_room"
    default_message = "Player is not in this room"


class NotHost(GameError):
    code = "only_host"
    default_message = "Only the host can do that"


class InvalidPhase(GameError):
    code = "invalid_phase"
    default_message = "Not allowed in the current phase"


class NotYourTurn(GameError):
    code = "not_your_turn"
    default_message = "It is not your turn"


class AlreadyVoted(GameError):
    code = "already_voted"
    default_message = "You have already voted"


class InsufficientPlayers(GameError):
    code = "not_enough_players"
    default_message = "Not enough players to start"


class EmptyWordPool(GameError):
    code = "empty_word_pool"
    default_message = "Add at least one word to the pool"
