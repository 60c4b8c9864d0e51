from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .models import Player


@dataclass
class VoteOutcome:
    counts: dict[str, int] = field(default_factory=dict)
    most_voted: str | None = None
    most_voted_count: int = 0
    leaders: list[str] = field(default_factory=list)

    @property
    def tie(self) -> bool:
        return len(self.leaders) > 1

    def to_dict(self) -> dict:
        return {
            "counts": dict(self.counts),
            "mostVoted": self.most_voted,
            "mostVotedCount": self.most_voted_count,
            "leaders": list(self.leaders),
            "tie": self.tie,
        }


def tally(votes: Mapping[str, str], players: Sequence[Player] = ()) -> VoteOutcome:
    """Count votes per nickname.

    Every player appears in ``counts`` (zero by default). On equal counts the
    nickname first encountered in submission order wins; ``leaders`` lists all
    tied nicknames in that same order.
    """
    counts: dict[str, int] = {p.nickname: 0 for p in players}
    first_seen: list[str] = []
    for nickname in votes.values():
        if nickname not in first_seen:
            first_seen.append(nickname)
        counts[nickname] = counts.get(nickname, 0) + 1

    if not first_seen:
        return VoteOutcome(counts=counts)

    best = max(counts[n] for n in first_seen)
    leaders = [n for n in first_seen if counts[n] == best]
    return VoteOutcome(counts=counts, most_voted=leaders[0], most_voted_count=best, leaders=leaders)
