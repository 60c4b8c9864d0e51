from __future__ import annotations

import logging
import random
import uuid
from typing import TYPE_CHECKING, Any, Sequence

from .assignment import assign_round
from .errors import (
    AlreadyVoted,
    InsufficientPlayers,
    InvalidPhase,
    NotHost,
    NotInRoom,
    NotYourTurn,
    ValidationError,
)
from .models import GameSettings, GameState, Hint, Player, Room
from .votes import tally

if TYPE_CHECKING:
    from .store import RoomStore

logger = logging.getLogger(__name__)

DEFAULT_HINT_MAX_LENGTH = 50


def blank_lobby_state() -> GameState:
    return GameState(phase="lobby", round=0)


def hints_complete(state: GameState, players: Sequence[Player]) -> bool:
    # Hints left by players who have since gone do not count.
    present = {p.id for p in players}
    return bool(players) and len({h.player_id for h in state.hints if h.player_id in present}) >= len(players)


def votes_complete(state: GameState, players: Sequence[Player]) -> bool:
    return bool(players) and all(p.id in state.votes for p in players)


class GamePhaseMachine:
    """Validates and applies phase transitions on a room's game state.

    Every method returns the resulting GameState, or ``None`` when the room
    disappeared in the meantime. Rejected commands raise a GameError before
    anything is mutated.
    """

    def __init__(
        self,
        store: RoomStore,
        rng: random.Random | None = None,
        hint_max_length: int = DEFAULT_HINT_MAX_LENGTH,
        builtin_words: Sequence[str] | None = None,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.hint_max_length = hint_max_length
        self.builtin_words = builtin_words

    def _require_member(self, room: Room, player_id: str) -> int:
        idx = room.index_of(player_id)
        if idx < 0:
            raise NotInRoom()
        return idx

    def _require_host(self, room: Room, player_id: str) -> None:
        self._require_member(room, player_id)
        if room.host != player_id:
            raise NotHost()

    def _require_phase(self, room: Room, *phases: str) -> GameState:
        state = room.game_state
        current = state.phase if state else "lobby"
        if current not in phases:
            raise InvalidPhase(f"Not allowed during {current}")
        return state

    def _new_round(self, room: Room, round_no: int, game_id: str) -> GameState:
        assignment = assign_round(room.players, room.settings, self.rng, builtin=self.builtin_words)
        return GameState(
            phase="reveal",
            word=assignment.word,
            current_turn=assignment.starting_turn,
            hints=[],
            votes={},
            round=round_no,
            impostor_indices=set(assignment.impostor_indices),
            game_id=game_id,
        )

    def update_settings(self, code: str, player_id: str, settings: GameSettings) -> GameSettings | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_host(room, player_id)
            self._require_phase(room, "lobby")
            if settings.max_players < len(room.players):
                raise ValidationError("maxPlayers is below the current player count")
            return self.store.update_settings(code, settings)

    def start(self, code: str, player_id: str) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_host(room, player_id)
            self._require_phase(room, "lobby")
            if len(room.players) < room.settings.min_players:
                raise InsufficientPlayers(
                    f"At least {room.settings.min_players} players are needed to start"
                )

            state = self._new_round(room, round_no=1, game_id=uuid.uuid4().hex)
            logger.info("room %s: game started with %d players", room.code, len(room.players))
            return self.store.mutate_game_state(code, replace=state)

    def submit_hint(self, code: str, player_id: str, text: Any) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            idx = self._require_member(room, player_id)
            state = self._require_phase(room, "reveal", "hints")
            if idx != state.current_turn:
                raise NotYourTurn()

            hint_text = (text if isinstance(text, str) else "").strip()
            if not hint_text:
                raise ValidationError("Hint cannot be empty")
            if len(hint_text) > self.hint_max_length:
                raise ValidationError(f"Hint must be at most {self.hint_max_length} characters")

            n = len(room.players)
            hints = state.hints + [Hint(player_id=player_id, nickname=room.players[idx].nickname, text=hint_text)]
            done = hints_complete(GameState(hints=hints), room.players)
            patch = {
                "hints": hints,
                "current_turn": (state.current_turn + 1) % n,
                "phase": "roundEnd" if done else "hints",
            }
            if patch["phase"] == "roundEnd":
                logger.info("room %s: round %d hints complete", room.code, state.round)
            return self.store.mutate_game_state(code, patch)

    def begin_voting(self, code: str, player_id: str) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_host(room, player_id)
            self._require_phase(room, "roundEnd")
            return self.store.mutate_game_state(code, {"phase": "voting", "votes": {}})

    def next_round(self, code: str, player_id: str) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_host(room, player_id)
            state = self._require_phase(room, "roundEnd")

            new_state = self._new_round(room, round_no=state.round + 1, game_id=state.game_id)
            logger.info("room %s: round %d", room.code, new_state.round)
            return self.store.mutate_game_state(code, replace=new_state)

    def submit_vote(self, code: str, player_id: str, nickname: Any) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_member(room, player_id)
            state = self._require_phase(room, "voting")
            if player_id in state.votes:
                raise AlreadyVoted()
            if not any(p.nickname == nickname for p in room.players):
                raise ValidationError("Vote for a player in this room")

            votes = dict(state.votes)
            votes[player_id] = nickname
            patch: dict[str, Any] = {"votes": votes}
            if all(p.id in votes for p in room.players):
                patch["phase"] = "results"
                logger.info("room %s: voting complete", room.code)
            return self.store.mutate_game_state(code, patch)

    def return_to_lobby(self, code: str, player_id: str) -> GameState | None:
        with self.store.lock:
            room = self.store.get_room(code)
            if room is None:
                return None
            self._require_host(room, player_id)
            self._require_phase(room, "results")
            return self.store.mutate_game_state(code, replace=blank_lobby_state())

    def round_action(self, code: str, player_id: str, phase: Any) -> GameState | None:
        if phase == "voting":
            return self.begin_voting(code, player_id)
        if phase == "lobby":
            return self.return_to_lobby(code, player_id)
        if phase == "reveal":
            return self.next_round(code, player_id)
        raise ValidationError(f"Unknown round action {phase!r}")


def project_game_state(room: Room, viewer_id: str, role_acknowledged: bool = False) -> dict | None:
    """Per-viewer view of the room's game state.

    Impostors see an empty word until the results phase; impostor indices are
    withheld until then as well.
    """
    state = room.game_state
    if state is None:
        return None

    idx = room.index_of(viewer_id)
    playing = state.phase != "lobby"
    is_impostor = playing and idx >= 0 and idx in state.impostor_indices

    phase = state.phase
    if phase == "reveal" and role_acknowledged:
        phase = "hints"

    if state.phase == "results":
        word = state.word
    elif not playing or idx < 0 or is_impostor:
        word = ""
    else:
        word = state.word

    current_player = None
    if playing and 0 <= state.current_turn < len(room.players):
        current_player = room.players[state.current_turn].id

    payload: dict[str, Any] = {
        "phase": phase,
        "word": word,
        "isImpostor": is_impostor,
        "currentTurn": state.current_turn,
        "currentTurnPlayerId": current_player,
        "hints": [h.to_dict() for h in state.hints],
        "votes": dict(state.votes),
        "round": state.round,
        "impostorIndices": [],
    }

    if state.phase == "results":
        indices = sorted(i for i in state.impostor_indices if i < len(room.players))
        results = tally(state.votes, room.players).to_dict()
        results["impostors"] = [room.players[i].nickname for i in indices]
        payload["impostorIndices"] = indices
        payload["results"] = results

    return payload


def room_public_state(room: Room) -> dict:
    state = room.game_state
    return {
        "code": room.code,
        "host": room.host,
        "players": [p.to_dict() for p in room.players],
        "settings": room.settings.to_dict(),
        "phase": state.phase if state else "lobby",
        "round": state.round if state else 0,
    }
