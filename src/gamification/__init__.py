"""
Gamification: XP, levels, running stats and achievements.

Components:
- profile: UserProfile aggregate and the pure stats reducer
- achievements: tier catalog and the pure achievement evaluator
"""

from .achievements import (
    ACHIEVEMENTS,
    AchievementFamily,
    AchievementTier,
    InteractionCounts,
    evaluate_achievements,
    newly_unlocked,
)
from .profile import (
    ProfileService,
    TopicPerformance,
    UserProfile,
    UserStats,
    apply_stats_delta,
    level_for_xp,
)

__all__ = [
    "ACHIEVEMENTS",
    "AchievementFamily",
    "AchievementTier",
    "InteractionCounts",
    "ProfileService",
    "TopicPerformance",
    "UserProfile",
    "UserStats",
    "apply_stats_delta",
    "evaluate_achievements",
    "level_for_xp",
    "newly_unlocked",
]
