from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from ..game.phases import project_game_state
from ..game.store import RoomStore, normalize_code
from . import events

if TYPE_CHECKING:
    from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

Deliver = Callable[[str, dict], Any]


class SyncChannel:
    """Per-client polling loop.

    Each tick snapshots the subscribed room and delivers ``playersUpdate`` and,
    when a game state exists, ``gameStateUpdate`` with the viewer's projection.
    Once the room is gone it delivers ``roomClosed`` a single time and stops.

    Without a SocketIO instance no loop is started and ``tick()`` is driven by
    the caller.
    """

    def __init__(
        self,
        store: RoomStore,
        viewer_id: str,
        deliver: Deliver,
        interval: float = 0.5,
        socketio: SocketIO | None = None,
    ) -> None:
        self.store = store
        self.viewer_id = viewer_id
        self.deliver = deliver
        self.interval = interval
        self.socketio = socketio
        self.room_code: str | None = None
        self._active = False
        self._running = False
        self._acknowledged: tuple[str, int] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def subscribe(self, room_code: str) -> None:
        self.room_code = normalize_code(room_code)
        self._acknowledged = None
        self._active = True
        if self.socketio is not None and not self._running:
            self._running = True
            self.socketio.start_background_task(self._run)

    def stop(self) -> None:
        self._active = False
        self.room_code = None

    def acknowledge_role(self) -> None:
        with self.store.lock:
            room = self.store.get_room(self.room_code) if self.room_code else None
            if room and room.game_state:
                self._acknowledged = (room.game_state.game_id, room.game_state.round)

    def tick(self) -> bool:
        """Deliver the current room state; returns False once polling stopped."""
        if not self._active or not self.room_code:
            return False

        code = self.room_code
        game_state = None
        with self.store.lock:
            room = self.store.get_room(code)
            if room is not None:
                players = [p.to_dict() for p in room.players]
                state = room.game_state
                acknowledged = state is not None and (state.game_id, state.round) == self._acknowledged
                self.store.touch(code)
                game_state = project_game_state(room, self.viewer_id, role_acknowledged=acknowledged)

        if room is None:
            self._active = False
            logger.debug("sync %s: room %s closed", self.viewer_id, code)
            self.deliver(events.ROOM_CLOSED, {"roomCode": code})
            return False

        self.deliver(events.PLAYERS_UPDATE, {"players": players})
        if game_state is not None:
            self.deliver(events.GAME_STATE_UPDATE, {"gameState": game_state})
        return True

    def _run(self) -> None:
        try:
            while self._active:
                try:
                    if not self.tick():
                        break
                except Exception:
                    logger.exception("sync %s: tick failed", self.viewer_id)
                self.socketio.sleep(self.interval)
        finally:
            self._running = False
