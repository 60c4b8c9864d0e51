from __future__ import annotations

import logging

from flask import request
from flask_socketio import SocketIO, emit

from ..game.phases import GamePhaseMachine
from ..game.store import RoomStore
from . import events
from .session import SessionClient

logger = logging.getLogger(__name__)


def sweep_idle_rooms(socketio: SocketIO, store: RoomStore, idle_ttl_sec: int) -> None:
    """Purge idle rooms periodically; returns once the store is empty."""
    while True:
        socketio.sleep(max(1.0, idle_ttl_sec / 4))
        if not len(store):
            logger.debug("idle sweeper stopped: no rooms left")
            return
        try:
            store.purge_idle(idle_ttl_sec)
        except Exception:
            logger.exception("idle purge failed")


def register_socketio_handlers(
    socketio: SocketIO,
    store: RoomStore,
    machine: GamePhaseMachine,
    *,
    latency: float = 0.1,
    interval: float = 0.5,
    idle_ttl_sec: int = 0,
    background: bool = True,
) -> dict[str, SessionClient]:
    """Bind the command surface to Socket.IO events.

    Returns the sid -> SessionClient registry. With ``background=False`` no
    sync loops, delayed commands or sweeper are started; callers tick the
    sessions' channels themselves.
    """
    sessions: dict[str, SessionClient] = {}
    sweeper = {"running": False}

    def _forwarder(sid: str, event: str):
        def _send(payload: dict) -> None:
            socketio.emit(event, payload, to=sid)

        return _send

    def _ensure_sweeper() -> None:
        if not background or idle_ttl_sec <= 0 or sweeper["running"]:
            return
        sweeper["running"] = True

        def _runner() -> None:
            try:
                sweep_idle_rooms(socketio, store, idle_ttl_sec)
            finally:
                sweeper["running"] = False

        socketio.start_background_task(_runner)

    def _session() -> SessionClient | None:
        return sessions.get(request.sid)

    def _dispatch(command: str, data) -> dict:
        session = _session()
        if session is None:
            emit(events.COMMAND_ERROR, {"command": command, "error": "not_connected", "message": "Unknown connection"})
            return {"ok": False, "error": "not_connected"}
        ack = session.emit(command, data if isinstance(data, dict) else {})
        if command in (events.CREATE_ROOM, events.JOIN_ROOM):
            _ensure_sweeper()
        return ack

    @socketio.on("connect")
    def on_connect():
        sid = request.sid
        session = SessionClient(
            store,
            machine,
            socketio=socketio if background else None,
            latency=latency,
            interval=interval,
        )
        for event in events.EVENTS:
            session.on(event, _forwarder(sid, event))
        sessions[sid] = session
        logger.debug("connect sid=%s player=%s", sid, session.player_id)
        emit("connected", {"playerId": session.player_id})

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        session = sessions.pop(request.sid, None)
        if session is not None:
            session.disconnect()
            logger.debug("disconnect sid=%s player=%s", request.sid, session.player_id)

    def _bind(command: str) -> None:
        def _handler(data=None):
            return _dispatch(command, data)

        _handler.__name__ = f"on_{command}"
        socketio.on_event(command, _handler)

    for command in events.COMMANDS:
        _bind(command)

    return sessions
