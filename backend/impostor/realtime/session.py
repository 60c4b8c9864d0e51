from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Callable

from ..game.errors import GameError, NotInRoom, ValidationError
from ..game.phases import GamePhaseMachine
from ..game.store import RoomStore, normalize_code
from ..game.validation import parse_settings, validate_nickname
from ..utils.nickname import MemoryNicknameCache
from . import events
from .sync import SyncChannel

if TYPE_CHECKING:
    from flask_socketio import SocketIO

    from ..utils.nickname import FileNicknameCache

logger = logging.getLogger(__name__)

Handler = Callable[[dict], Any]

ROOM_CODE_MIN_INPUT = 4


def generate_player_id() -> str:
    return uuid.uuid4().hex


class SessionClient:
    """Per-connection façade over the room store.

    Commands are applied after ``latency`` seconds; their results and all sync
    updates reach the caller through handlers registered with ``on``.
    """

    def __init__(
        self,
        store: RoomStore,
        machine: GamePhaseMachine,
        socketio: SocketIO | None = None,
        latency: float = 0.0,
        interval: float = 0.5,
        nickname_cache: MemoryNicknameCache | FileNicknameCache | None = None,
        player_id: str | None = None,
    ) -> None:
        self.store = store
        self.machine = machine
        self.socketio = socketio
        self.latency = latency
        self.player_id = player_id or generate_player_id()
        self.room_code: str | None = None
        self.connected = True
        self._handlers: dict[str, list[Handler]] = {}
        self._nickname_cache = nickname_cache or MemoryNicknameCache()
        self._nickname = self._nickname_cache.load()
        self.channel = SyncChannel(store, self.player_id, self._fire, interval=interval, socketio=socketio)

        self._commands: dict[str, Callable[[dict], dict]] = {
            events.CREATE_ROOM: self._create_room,
            events.JOIN_ROOM: self._join_room,
            events.UPDATE_SETTINGS: self._update_settings,
            events.START_GAME: self._start_game,
            events.ACKNOWLEDGE_ROLE: self._acknowledge_role,
            events.SUBMIT_HINT: self._submit_hint,
            events.ROUND_ACTION: self._round_action,
            events.NEXT_ROUND: self._next_round,
            events.SUBMIT_VOTE: self._submit_vote,
            events.LEAVE_ROOM: self._leave_room,
        }

    @property
    def nickname(self) -> str:
        return self._nickname

    @nickname.setter
    def nickname(self, value: str) -> None:
        if value and value != self._nickname:
            self._nickname = value
            self._nickname_cache.save(value)

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def _fire(self, event: str, payload: dict) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(payload)

    # Commands with synchronous validation at the call site.

    def create_room(self, nickname: str, settings: Any = None) -> dict:
        name = validate_nickname(nickname)
        parse_settings(settings)
        self.nickname = name
        return self.emit(events.CREATE_ROOM, {"nickname": name, "settings": settings})

    def join_room(self, room_code: str, nickname: str) -> dict:
        name = validate_nickname(nickname)
        code = normalize_code(room_code)
        if len(code) < ROOM_CODE_MIN_INPUT:
            raise ValidationError(f"Room code must be at least {ROOM_CODE_MIN_INPUT} characters")
        self.nickname = name
        return self.emit(events.JOIN_ROOM, {"roomCode": code, "nickname": name})

    def leave_room(self) -> dict:
        return self.emit(events.LEAVE_ROOM, {})

    def acknowledge_role(self) -> dict:
        return self.emit(events.ACKNOWLEDGE_ROLE, {})

    def emit(self, command: str, data: dict | None = None) -> dict:
        if not self.connected:
            return {"ok": False, "error": "disconnected"}
        if command not in self._commands:
            return {"ok": False, "error": "unknown_command"}

        payload = data if isinstance(data, dict) else {}
        if self.latency <= 0 or self.socketio is None:
            return self._apply(command, payload)

        self.socketio.start_background_task(self._apply_later, command, payload)
        return {"ok": True, "queued": True}

    def _apply_later(self, command: str, payload: dict) -> None:
        self.socketio.sleep(self.latency)
        if self.connected:
            self._apply(command, payload)

    def _apply(self, command: str, payload: dict) -> dict:
        try:
            return self._commands[command](payload)
        except GameError as exc:
            logger.info("%s rejected for %s: %s", command, self.player_id, exc.code)
            event = events.JOIN_ERROR if command == events.JOIN_ROOM else events.COMMAND_ERROR
            body = exc.to_dict()
            if event == events.COMMAND_ERROR:
                body["command"] = command
            self._fire(event, body)
            return {"ok": False, "error": exc.code}

    def _require_room(self) -> str:
        if not self.room_code:
            raise NotInRoom()
        return self.room_code

    def _leave_previous(self, new_code: str) -> None:
        # Runs only after the new room accepted us.
        if self.room_code and self.room_code != new_code:
            self._leave_room({})

    def _create_room(self, payload: dict) -> dict:
        code = self.store.create_room(self.player_id, payload.get("nickname"), payload.get("settings"))
        self._leave_previous(code)
        room = self.store.get_room(code)
        self.room_code = code
        self.nickname = room.players[0].nickname
        self.channel.subscribe(code)
        self._fire(events.ROOM_CREATED, {
            "roomCode": code,
            "players": [p.to_dict() for p in room.players],
            "settings": room.settings.to_dict(),
        })
        return {"ok": True, "roomCode": code}

    def _join_room(self, payload: dict) -> dict:
        code = normalize_code(payload.get("roomCode"))
        players = self.store.join_room(code, self.player_id, payload.get("nickname"))
        self._leave_previous(code)
        self.room_code = code
        self.nickname = next(p.nickname for p in players if p.id == self.player_id)
        self.channel.subscribe(code)
        self._fire(events.ROOM_JOINED, {
            "success": True,
            "roomCode": code,
            "players": [p.to_dict() for p in players],
        })
        return {"ok": True, "roomCode": code}

    def _update_settings(self, payload: dict) -> dict:
        code = self._require_room()
        room = self.store.get_room(code)
        if room is None:
            return {"ok": True}
        settings = parse_settings(payload.get("settings"), base=room.settings)
        self.machine.update_settings(code, self.player_id, settings)
        return {"ok": True}

    def _start_game(self, payload: dict) -> dict:
        self.machine.start(self._require_room(), self.player_id)
        return {"ok": True}

    def _acknowledge_role(self, payload: dict) -> dict:
        self._require_room()
        self.channel.acknowledge_role()
        return {"ok": True}

    def _submit_hint(self, payload: dict) -> dict:
        self.machine.submit_hint(self._require_room(), self.player_id, payload.get("text"))
        return {"ok": True}

    def _round_action(self, payload: dict) -> dict:
        self.machine.round_action(self._require_room(), self.player_id, payload.get("phase"))
        return {"ok": True}

    def _next_round(self, payload: dict) -> dict:
        self.machine.next_round(self._require_room(), self.player_id)
        return {"ok": True}

    def _submit_vote(self, payload: dict) -> dict:
        self.machine.submit_vote(self._require_room(), self.player_id, payload.get("nickname"))
        return {"ok": True}

    def _leave_room(self, payload: dict) -> dict:
        code = self.room_code
        self.channel.stop()
        self.room_code = None
        if code:
            self.store.leave_room(code, self.player_id)
        return {"ok": True}

    def disconnect(self) -> None:
        if not self.connected:
            return
        if self.room_code:
            self._leave_room({})
        self.connected = False
        self.channel.stop()
