from __future__ import annotations

from typing import Any

from ..config import Config
from .errors import ValidationError
from .models import GameSettings
from .words import (
    CUSTOM_WORD_MAX_LENGTH,
    CUSTOM_WORD_MIN_LENGTH,
    is_valid_custom_word,
    normalize_custom_words,
)

NICKNAME_MIN_LENGTH = 2
NICKNAME_MAX_LENGTH = 15
PLAYERS_FLOOR = 2
PLAYERS_CEILING = 20
IMPOSTORS_CEILING = 3


def validate_nickname(raw: Any) -> str:
    name = (raw if isinstance(raw, str) else "").strip()
    if not NICKNAME_MIN_LENGTH <= len(name) <= NICKNAME_MAX_LENGTH:
        raise ValidationError(
            f"Nickname must be {NICKNAME_MIN_LENGTH}-{NICKNAME_MAX_LENGTH} characters"
        )
    # No control characters or markup.
    if "<" in name or ">" in name or any(ord(ch) < 32 for ch in name):
        raise ValidationError("Nickname contains forbidden characters")
    return name


def _as_int(value: Any, default: int, label: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be an integer") from None


def parse_settings(raw: Any, base: GameSettings | None = None) -> GameSettings:
    """Build GameSettings from a camelCase payload.

    Missing keys fall back to ``base`` (or the configured defaults).
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError("settings must be an object")

    if base is None:
        base = GameSettings(
            min_players=Config.DEFAULT_MIN_PLAYERS,
            max_players=Config.DEFAULT_MAX_PLAYERS,
            impostor_count=Config.DEFAULT_IMPOSTOR_COUNT,
        )

    min_players = _as_int(raw.get("minPlayers"), base.min_players, "minPlayers")
    max_players = _as_int(raw.get("maxPlayers"), base.max_players, "maxPlayers")
    impostor_count = _as_int(raw.get("impostorCount"), base.impostor_count, "impostorCount")

    if not PLAYERS_FLOOR <= min_players <= max_players <= PLAYERS_CEILING:
        raise ValidationError(
            f"Player bounds must satisfy {PLAYERS_FLOOR} <= min <= max <= {PLAYERS_CEILING}"
        )
    if not 1 <= impostor_count <= IMPOSTORS_CEILING:
        raise ValidationError(f"impostorCount must be 1-{IMPOSTORS_CEILING}")

    custom_raw = raw.get("customWords", base.custom_words)
    if not isinstance(custom_raw, list):
        raise ValidationError("customWords must be a list")
    custom_words = normalize_custom_words(custom_raw)
    for w in custom_words:
        if not is_valid_custom_word(w):
            raise ValidationError(
                f"Word must be {CUSTOM_WORD_MIN_LENGTH}-{CUSTOM_WORD_MAX_LENGTH} characters"
            )

    return GameSettings(
        min_players=min_players,
        max_players=max_players,
        impostor_count=impostor_count,
        custom_words=custom_words,
    )
