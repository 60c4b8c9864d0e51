from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .errors import EmptyWordPool
from .models import GameSettings, Player
from .words import DEFAULT_WORDS, normalize_custom_words, pick_word


@dataclass(frozen=True)
class Assignment:
    word: str
    impostor_indices: frozenset[int]
    starting_turn: int


def build_word_pool(custom_words: Sequence[str] | None = None, builtin: Sequence[str] | None = None) -> list[str]:
    base = DEFAULT_WORDS if builtin is None else builtin
    pool = list(base)
    for w in normalize_custom_words(list(custom_words or [])):
        if w not in pool:
            pool.append(w)
    return pool


def assign_round(
    players: Sequence[Player],
    settings: GameSettings,
    rng: random.Random | None = None,
    builtin: Sequence[str] | None = None,
) -> Assignment:
    """Draw the secret word, the impostor set and the starting turn.

    ``k = min(impostor_count, n - 1)`` indices are sampled uniformly without
    replacement, so at least one player always gets the word. The starting
    turn is drawn independently of the impostors.
    """
    rng = rng or random.Random()

    pool = build_word_pool(settings.custom_words, builtin=builtin)
    if not pool:
        raise EmptyWordPool()

    n = len(players)
    if n == 0:
        raise ValueError("cannot assign roles without players")

    word = pick_word(pool, rng)
    k = settings.effective_impostor_count(n)
    impostors = frozenset(rng.sample(range(n), k))
    starting_turn = rng.randrange(n)

    return Assignment(word=word, impostor_indices=impostors, starting_turn=starting_turn)
