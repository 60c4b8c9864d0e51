from __future__ import annotations

# Commands (client -> server)
CREATE_ROOM = "createRoom"
JOIN_ROOM = "joinRoom"
UPDATE_SETTINGS = "updateSettings"
START_GAME = "startGame"
ACKNOWLEDGE_ROLE = "acknowledgeRole"
SUBMIT_HINT = "submitHint"
ROUND_ACTION = "roundAction"
NEXT_ROUND = "nextRound"
SUBMIT_VOTE = "submitVote"
LEAVE_ROOM = "leaveRoom"

COMMANDS: tuple[str, ...] = (
    CREATE_ROOM,
    JOIN_ROOM,
    UPDATE_SETTINGS,
    START_GAME,
    ACKNOWLEDGE_ROLE,
    SUBMIT_HINT,
    ROUND_ACTION,
    NEXT_ROUND,
    SUBMIT_VOTE,
    LEAVE_ROOM,
)

# Events (server -> client)
ROOM_CREATED = "roomCreated"
ROOM_JOINED = "roomJoined"
JOIN_ERROR = "joinError"
COMMAND_ERROR = "commandError"
PLAYERS_UPDATE = "playersUpdate"
GAME_STATE_UPDATE = "gameStateUpdate"
ROOM_CLOSED = "roomClosed"

EVENTS: tuple[str, ...] = (
    ROOM_CREATED,
    ROOM_JOINED,
    JOIN_ERROR,
    COMMAND_ERROR,
    PLAYERS_UPDATE,
    GAME_STATE_UPDATE,
    ROOM_CLOSED,
)
