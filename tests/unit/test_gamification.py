"""
Unit tests for the profile reducer and achievement evaluation.
"""

import pytest

from src.gamification.achievements import (
    ACHIEVEMENTS,
    AchievementFamily,
    AchievementTier,
    InteractionCounts,
    evaluate_achievements,
    newly_unlocked,
)
from src.gamification.profile import (
    TopicPerformance,
    UserProfile,
    UserStats,
    apply_stats_delta,
    level_for_xp,
)
from src.notebook.commands import StatsDelta


# ============================================================================
# Profile
# ============================================================================


class TestApplyStatsDelta:
    def test_first_try_correct(self):
        profile = apply_stats_delta(UserProfile(id="ana"), StatsDelta(True, "Redes", 10))

        assert profile.xp == 10
        assert profile.stats.questions_answered == 1
        assert profile.stats.correct_answers == 1
        assert profile.stats.streak == 1
        assert profile.stats.topic_performance == {"Redes": TopicPerformance(correct=1, total=1)}

    def test_miss_resets_streak_and_counts_topic_total(self):
        start = UserProfile(
            id="ana",
            stats=UserStats(questions_answered=4, correct_answers=4, streak=4),
        )
        profile = apply_stats_delta(start, StatsDelta(False, "Redes", 5))

        assert profile.stats.streak == 0
        assert profile.stats.correct_answers == 4
        assert profile.stats.questions_answered == 5
        assert profile.stats.topic_performance["Redes"] == TopicPerformance(correct=0, total=1)
        assert profile.xp == 5

    def test_does_not_mutate_input(self):
        start = UserProfile(id="ana")
        apply_stats_delta(start, StatsDelta(True, "Geral", 10))

        assert start.xp == 0
        assert start.stats.topic_performance == {}

    def test_level_follows_xp(self):
        start = UserProfile(id="ana", xp=95)
        profile = apply_stats_delta(start, StatsDelta(True, "Geral", 10))

        assert profile.xp == 105
        assert profile.level == 2
        assert profile.xp_into_level == 5

    @pytest.mark.parametrize("xp,level", [(0, 1), (99, 1), (100, 2), (250, 3)])
    def test_level_for_xp(self, xp, level):
        assert level_for_xp(xp) == level


class TestUserStatsSerialization:
    def test_to_dict_uses_stored_keys(self):
        stats = UserStats(
            questions_answered=3,
            correct_answers=2,
            streak=1,
            topic_performance={"Direito": TopicPerformance(2, 3)},
        )

        assert stats.to_dict() == {
            "questionsAnswered": 3,
            "correctAnswers": 2,
            "streak": 1,
            "topicPerformance": {"Direito": {"correct": 2, "total": 3}},
        }

    def test_from_dict_tolerates_missing_keys(self):
        assert UserStats.from_dict(None) == UserStats()
        assert UserStats.from_dict({"streak": 2}).streak == 2


# ============================================================================
# Achievements
# ============================================================================


class TestEvaluateAchievements:
    def test_first_correct_answer_unlocks_first_tier(self):
        profile = UserProfile(id="ana", stats=UserStats(correct_answers=1, streak=1))

        updated = evaluate_achievements(profile, InteractionCounts())

        assert updated.achievements == ("Primeiro Acerto",)

    def test_unlocks_every_crossed_tier(self):
        profile = UserProfile(id="ana", stats=UserStats(correct_answers=12, streak=5))

        updated = evaluate_achievements(profile, InteractionCounts(summaries_read=5))

        assert set(updated.achievements) == {
            "Primeiro Acerto",
            "Acertador Iniciante",
            "Aquecendo",
            "Em Chamas",
            "Leitor Curioso",
        }

    def test_held_titles_are_never_revoked(self):
        profile = UserProfile(id="ana", achievements=("Em Chamas",), stats=UserStats(streak=0))

        assert "Em Chamas" in evaluate_achievements(profile, InteractionCounts()).achievements

    def test_result_is_sorted_and_unique(self):
        profile = UserProfile(id="ana", achievements=("Primeiro Acerto",), stats=UserStats(correct_answers=1))

        updated = evaluate_achievements(profile, InteractionCounts(flashcards_flipped=10))

        assert updated.achievements == tuple(sorted(set(updated.achievements)))
        assert updated.achievements.count("Primeiro Acerto") == 1

    def test_custom_catalog(self):
        catalog = {AchievementFamily.MIND_MAPS_READ: (AchievementTier(1, "Cartógrafo"),)}
        profile = UserProfile(id="ana", stats=UserStats(correct_answers=100))

        updated = evaluate_achievements(profile, InteractionCounts(mind_maps_read=1), catalog=catalog)

        assert updated.achievements == ("Cartógrafo",)

    def test_catalog_tiers_are_ascending(self):
        for tiers in ACHIEVEMENTS.values():
            counts = [tier.count for tier in tiers]
            assert counts == sorted(counts)


class TestNewlyUnlocked:
    def test_difference_in_order(self):
        before = UserProfile(id="ana", achievements=("Aquecendo",))
        after = UserProfile(id="ana", achievements=("Aquecendo", "Em Chamas", "Primeiro Acerto"))

        assert newly_unlocked(before, after) == ["Em Chamas", "Primeiro Acerto"]

    def test_nothing_new(self):
        profile = UserProfile(id="ana", achievements=("Aquecendo",))

        assert newly_unlocked(profile, profile) == []
