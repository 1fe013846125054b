"""
User profile aggregate: XP, level, achievements and running question stats.

`apply_stats_delta` is a pure reducer. Persisting the returned profile is the
caller's job (see ProfileService).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol

from src.notebook.commands import StatsDelta

if TYPE_CHECKING:
    from src.gamification.achievements import InteractionCounts

XP_PER_LEVEL = 100


@dataclass(frozen=True)
class TopicPerformance:
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class UserStats:
    questions_answered: int = 0
    correct_answers: int = 0
    streak: int = 0
    topic_performance: dict[str, TopicPerformance] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Shape stored in the profile's stats column."""
        return {
            "questionsAnswered": self.questions_answered,
            "correctAnswers": self.correct_answers,
            "streak": self.streak,
            "topicPerformance": {
                topic: {"correct": perf.correct, "total": perf.total}
                for topic, perf in self.topic_performance.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> UserStats:
        data = data or {}
        topics = data.get("topicPerformance") or {}
        return cls(
            questions_answered=int(data.get("questionsAnswered") or 0),
            correct_answers=int(data.get("correctAnswers") or 0),
            streak=int(data.get("streak") or 0),
            topic_performance={
                topic: TopicPerformance(
                    correct=int(perf.get("correct") or 0),
                    total=int(perf.get("total") or 0),
                )
                for topic, perf in topics.items()
            },
        )


@dataclass(frozen=True)
class UserProfile:
    id: str
    pseudonym: str = ""
    level: int = 1
    xp: int = 0
    achievements: tuple[str, ...] = ()
    stats: UserStats = field(default_factory=UserStats)

    @property
    def xp_into_level(self) -> int:
        """XP earned inside the current level (0-99)."""
        return self.xp % XP_PER_LEVEL


def level_for_xp(xp: int) -> int:
    return max(xp, 0) // XP_PER_LEVEL + 1


def apply_stats_delta(profile: UserProfile, delta: StatsDelta) -> UserProfile:
    """
    Fold one resolved question into the profile.

    A first-try correct answer extends the streak; anything else resets it.
    """
    stats = profile.stats
    topic = stats.topic_performance.get(delta.topic, TopicPerformance())
    topics = dict(stats.topic_performance)
    topics[delta.topic] = TopicPerformance(
        correct=topic.correct + (1 if delta.correct_first_try else 0),
        total=topic.total + 1,
    )

    new_stats = UserStats(
        questions_answered=stats.questions_answered + 1,
        correct_answers=stats.correct_answers + (1 if delta.correct_first_try else 0),
        streak=stats.streak + 1 if delta.correct_first_try else 0,
        topic_performance=topics,
    )
    xp = profile.xp + delta.xp
    return replace(profile, stats=new_stats, xp=xp, level=level_for_xp(xp))


class ProfileService(Protocol):
    """Owns user profiles and the interaction counts achievements depend on."""

    def get_profile(self, user_id: str) -> UserProfile:
        """Load a profile; a user with no row gets a fresh profile."""
        ...

    def save_profile(self, profile: UserProfile) -> UserProfile:
        ...

    def interaction_counts(self, user_id: str) -> InteractionCounts:
        ...

    def pseudonyms(self, user_ids: Iterable[str]) -> dict[str, str]:
        """Display names of the users that have one; others are left out."""
        ...
