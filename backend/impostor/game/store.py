from __future__ import annotations

import copy
import logging
import random
import string
import time
from threading import RLock
from typing import Any, Callable, Mapping

from .errors import NicknameTaken, RoomFull, RoomNotFound
from .models import GameSettings, GameState, Player, Room
from .phases import blank_lobby_state, hints_complete, votes_complete
from .validation import parse_settings, validate_nickname

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_code(code: Any) -> str:
    return str(code or "").strip().upper()


class RoomStore:
    """Process-wide keyed collection of rooms.

    Every mutation and snapshot read runs under ``lock`` so that command
    handlers and sync ticks running on separate green threads see each
    mutation atomically.
    """

    def __init__(self, rng: random.Random | None = None, clock: Callable[[], int] = now_ms) -> None:
        self.lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._rng = rng or random.Random()
        self._clock = clock

    def _generate_code(self) -> str:
        while True:
            code = "".join(self._rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    def create_room(self, player_id: str, nickname: str, settings: Any = None) -> str:
        name = validate_nickname(nickname)
        if not isinstance(settings, GameSettings):
            settings = parse_settings(settings)

        with self.lock:
            code = self._generate_code()
            ts = self._clock()
            room = Room(
                code=code,
                host=player_id,
                settings=settings,
                players=[Player(id=player_id, nickname=name, is_host=True)],
                created_at_ms=ts,
                touched_at_ms=ts,
            )
            self._rooms[code] = room

        logger.info("room %s created by %s", code, name)
        return code

    def get_room(self, code: str) -> Room | None:
        with self.lock:
            return self._rooms.get(normalize_code(code))

    def snapshot(self, code: str) -> Room | None:
        """Deep copy of a room, safe to read outside the lock."""
        with self.lock:
            room = self._rooms.get(normalize_code(code))
            return copy.deepcopy(room) if room else None

    def clear(self) -> None:
        with self.lock:
            self._rooms.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        with self.lock:
            return normalize_code(code) in self._rooms

    def join_room(self, code: str, player_id: str, nickname: str) -> list[Player]:
        name = validate_nickname(nickname)

        with self.lock:
            room = self._rooms.get(normalize_code(code))
            if room is None:
                raise RoomNotFound()
            if room.get_player(player_id) is not None:
                return [copy.copy(p) for p in room.players]
            if len(room.players) >= room.settings.max_players:
                raise RoomFull()
            if any(p.nickname == name for p in room.players):
                raise NicknameTaken()

            room.players.append(Player(id=player_id, nickname=name, is_host=False))
            room.touched_at_ms = self._clock()
            players = [copy.copy(p) for p in room.players]

        logger.info("%s joined room %s (%d players)", name, room.code, len(players))
        return players

    def leave_room(self, code: str, player_id: str) -> Room | None:
        """Remove a player; returns the room or ``None`` if it no longer exists."""
        with self.lock:
            room = self._rooms.get(normalize_code(code))
            if room is None:
                return None

            removed_idx = room.index_of(player_id)
            if removed_idx < 0:
                return room

            room.players = [p for p in room.players if p.id != player_id]
            room.touched_at_ms = self._clock()

            if not room.players:
                del self._rooms[room.code]
                logger.info("room %s deleted (last player left)", room.code)
                return None

            if room.host == player_id:
                for p in room.players:
                    p.is_host = False
                room.players[0].is_host = True
                room.host = room.players[0].id
                logger.info("room %s host transferred to %s", room.code, room.players[0].nickname)

            if room.in_game:
                self._repair_game_state(room, removed_idx, player_id)

            return room

    def _repair_game_state(self, room: Room, removed_idx: int, player_id: str) -> None:
        state = room.game_state
        n = len(room.players)

        if n < 2:
            room.game_state = blank_lobby_state()
            logger.info("room %s back to lobby: not enough players left", room.code)
            return

        state.impostor_indices = {
            i if i < removed_idx else i - 1 for i in state.impostor_indices if i != removed_idx
        }
        if removed_idx < state.current_turn:
            state.current_turn -= 1
        state.current_turn %= n
        state.votes.pop(player_id, None)

        if state.phase == "hints" and hints_complete(state, room.players):
            state.phase = "roundEnd"
        elif state.phase == "voting" and votes_complete(state, room.players):
            state.phase = "results"

    def update_settings(self, code: str, settings: GameSettings) -> GameSettings | None:
        with self.lock:
            room = self._rooms.get(normalize_code(code))
            if room is None:
                return None
            room.settings = settings
            room.touched_at_ms = self._clock()
            return room.settings

    def mutate_game_state(
        self,
        code: str,
        patch: Mapping[str, Any] | None = None,
        *,
        replace: GameState | None = None,
    ) -> GameState | None:
        """Install ``replace`` wholesale or merge ``patch`` fields into the state.

        Returns ``None`` when the room is gone; callers treat that as a
        tolerated race.
        """
        with self.lock:
            room = self._rooms.get(normalize_code(code))
            if room is None:
                return None

            if replace is not None:
                room.game_state = replace
            else:
                if room.game_state is None:
                    room.game_state = GameState()
                for key, value in (patch or {}).items():
                    if not hasattr(room.game_state, key):
                        raise AttributeError(f"GameState has no field {key!r}")
                    setattr(room.game_state, key, value)

            room.touched_at_ms = self._clock()
            return room.game_state

    def touch(self, code: str) -> None:
        """Mark a room as in use without changing it."""
        with self.lock:
            room = self._rooms.get(normalize_code(code))
            if room is not None:
                room.touched_at_ms = self._clock()

    def purge_idle(self, ttl_sec: int) -> list[str]:
        if ttl_sec <= 0:
            return []
        cutoff = self._clock() - ttl_sec * 1000
        with self.lock:
            stale = [code for code, r in self._rooms.items() if r.touched_at_ms <= cutoff]
            for code in stale:
                del self._rooms[code]
        for code in stale:
            logger.info("room %s purged after %ss idle", code, ttl_sec)
        return stale
