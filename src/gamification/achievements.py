"""
Achievement tiers and their evaluation.

Each family maps a metric to ordered (count, title) tiers. Question and
streak metrics come from the profile stats; the reading metrics come from
interaction records the notebook core does not own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from src.gamification.profile import UserProfile


class AchievementFamily(str, Enum):
    FLASHCARDS_FLIPPED = "flashcards_flipped"
    QUESTIONS_CORRECT = "questions_correct"
    STREAK = "streak"
    SUMMARIES_READ = "summaries_read"
    MIND_MAPS_READ = "mind_maps_read"


@dataclass(frozen=True)
class AchievementTier:
    count: int
    title: str


ACHIEVEMENTS: dict[AchievementFamily, tuple[AchievementTier, ...]] = {
    AchievementFamily.FLASHCARDS_FLIPPED: (
        AchievementTier(10, "Virador de Cartas"),
        AchievementTier(50, "Memória de Elefante"),
        AchievementTier(100, "Mestre dos Flashcards"),
    ),
    AchievementFamily.QUESTIONS_CORRECT: (
        AchievementTier(1, "Primeiro Acerto"),
        AchievementTier(10, "Acertador Iniciante"),
        AchievementTier(50, "Acertador Experiente"),
        AchievementTier(100, "Mestre das Questões"),
    ),
    AchievementFamily.STREAK: (
        AchievementTier(3, "Aquecendo"),
        AchievementTier(5, "Em Chamas"),
        AchievementTier(10, "Imparável"),
        AchievementTier(25, "Lendário"),
    ),
    AchievementFamily.SUMMARIES_READ: (
        AchievementTier(5, "Leitor Curioso"),
        AchievementTier(20, "Leitor Voraz"),
        AchievementTier(50, "Biblioteca Ambulante"),
    ),
    AchievementFamily.MIND_MAPS_READ: (
        AchievementTier(5, "Explorador de Mapas"),
        AchievementTier(20, "Cartógrafo do Conhecimento"),
    ),
}


@dataclass(frozen=True)
class InteractionCounts:
    """Read/flip counts owned by the content interaction records."""

    flashcards_flipped: int = 0
    summaries_read: int = 0
    mind_maps_read: int = 0


def family_metrics(profile: UserProfile, counts: InteractionCounts) -> dict[AchievementFamily, int]:
    return {
        AchievementFamily.FLASHCARDS_FLIPPED: counts.flashcards_flipped,
        AchievementFamily.QUESTIONS_CORRECT: profile.stats.correct_answers,
        AchievementFamily.STREAK: profile.stats.streak,
        AchievementFamily.SUMMARIES_READ: counts.summaries_read,
        AchievementFamily.MIND_MAPS_READ: counts.mind_maps_read,
    }


def evaluate_achievements(
    profile: UserProfile,
    counts: InteractionCounts,
    catalog: dict[AchievementFamily, tuple[AchievementTier, ...]] = ACHIEVEMENTS,
) -> UserProfile:
    """
    Return the profile with every tier it now qualifies for.

    Titles already held are kept even if the metric dropped (a streak reset
    does not revoke anything). The result is sorted for deterministic storage.
    """
    earned = set(profile.achievements)
    for family, metric in family_metrics(profile, counts).items():
        for tier in catalog.get(family, ()):
            if tier.count <= metric:
                earned.add(tier.title)
    return replace(profile, achievements=tuple(sorted(earned)))


def newly_unlocked(before: UserProfile, after: UserProfile) -> list[str]:
    held = set(before.achievements)
    return [title for title in after.achievements if title not in held]
