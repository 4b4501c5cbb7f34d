"""Leaderboard ordering and rank labels

Everything here is a pure function of its inputs.
"""

from dataclasses import dataclass
from typing import Iterable

from .config import LEADERBOARD_SIZE, PODIUM_SIZE, PROFILE_HISTORY_SIZE, RANK_THRESHOLDS
from .types import Debate, Profile


@dataclass
class Standing:
    """A profile at a leaderboard position (1-based)"""
    position: int
    profile: Profile

    def to_dict(self) -> dict:
        return {"position": self.position, **self.profile.to_dict()}


@dataclass
class ProfileSummary:
    """Statistics shown on a profile page"""
    profile: Profile
    win_rate: int
    average_score: int
    recent_debates: list[Debate]

    def to_dict(self) -> dict:
        return {
            "profile": self.profile.to_dict(),
            "win_rate": self.win_rate,
            "average_score": self.average_score,
            "recent_debates": [d.to_dict() for d in self.recent_debates],
        }


def rank_label(total_score: int) -> str:
    """Rank title for a cumulative score

    >>> rank_label(74), rank_label(75), rank_label(500)
    ('Novice', 'Apprentice', 'Grandmaster')
    """
    for minimum, label in RANK_THRESHOLDS:
        if total_score >= minimum:
            return label
    return RANK_THRESHOLDS[-1][1]


def _order_key(profile: Profile) -> tuple:
    # Creation time then id: a total order, so input order never matters
    return (-profile.total_score, profile.created_at, profile.id)


def rank(profiles: Iterable[Profile]) -> list[Standing]:
    """Order profiles by total score, highest first

    Ties go to the profile created first.
    """
    ordered = sorted(profiles, key=_order_key)
    return [Standing(position=i + 1, profile=p) for i, p in enumerate(ordered)]


def podium(profiles: Iterable[Profile]) -> list[Standing]:
    return rank(profiles)[:PODIUM_SIZE]


def leaderboard(profiles: Iterable[Profile], limit: int = LEADERBOARD_SIZE) -> list[Standing]:
    return rank(profiles)[:limit]


def summarize(profile: Profile, debates: Iterable[Debate]) -> ProfileSummary:
    """Win rate, average score and most recent debates for a profile"""
    if profile.total_debates > 0:
        win_rate = round(profile.wins / profile.total_debates * 100)
        average_score = round(profile.total_score / profile.total_debates)
    else:
        win_rate = 0
        average_score = 0

    recent = sorted(
        (d for d in debates if d.user_id == profile.id),
        key=lambda d: d.created_at,
        reverse=True,
    )[:PROFILE_HISTORY_SIZE]

    return ProfileSummary(
        profile=profile,
        win_rate=win_rate,
        average_score=average_score,
        recent_debates=recent,
    )
