from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


Phase = Literal["lobby", "reveal", "hints", "roundEnd", "voting", "results"]


@dataclass
class Player:
    id: str
    nickname: str
    is_host: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "nickname": self.nickname, "isHost": self.is_host}


@dataclass
class GameSettings:
    min_players: int = 3
    max_players: int = 10
    impostor_count: int = 1
    custom_words: list[str] = field(default_factory=list)

    def effective_impostor_count(self, player_count: int) -> int:
        return max(0, min(self.impostor_count, player_count - 1))

    def to_dict(self) -> dict:
        return {
            "minPlayers": self.min_players,
            "maxPlayers": self.max_players,
            "impostorCount": self.impostor_count,
            "customWords": list(self.custom_words),
        }


@dataclass
class Hint:
    player_id: str
    nickname: str
    text: str

    def to_dict(self) -> dict:
        return {"playerId": self.player_id, "nickname": self.nickname, "text": self.text}


@dataclass
class GameState:
    phase: Phase = "lobby"
    word: str = ""
    current_turn: int = 0
    hints: list[Hint] = field(default_factory=list)
    # playerId -> voted nickname, kept in submission order
    votes: dict[str, str] = field(default_factory=dict)
    round: int = 0
    impostor_indices: set[int] = field(default_factory=set)
    # Fresh per started game; survives next_round.
    game_id: str = ""


@dataclass
class Room:
    code: str
    host: str
    settings: GameSettings = field(default_factory=GameSettings)
    players: list[Player] = field(default_factory=list)
    game_state: GameState | None = None
    created_at_ms: int = 0
    touched_at_ms: int = 0

    def index_of(self, player_id: str) -> int:
        for idx, p in enumerate(self.players):
            if p.id == player_id:
                return idx
        return -1

    def get_player(self, player_id: str) -> Player | None:
        idx = self.index_of(player_id)
        return self.players[idx] if idx >= 0 else None

    @property
    def in_game(self) -> bool:
        return self.game_state is not None and self.game_state.phase != "lobby"
