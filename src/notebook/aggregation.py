"""
Read-only projections over UserQuestionAnswer rows.

Leaderboards, notebook progress and first-try distribution for a question.
Nothing here writes; callers pass in the rows they fetched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from src.notebook.models import Question, UserQuestionAnswer

UNKNOWN_PSEUDONYM = "Desconhecido"


@dataclass
class ScoreTally:
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    pseudonym: str
    correct: int
    total: int

    @property
    def score(self) -> int:
        return self.correct


@dataclass(frozen=True)
class NotebookProgress:
    """A user's progress inside one notebook."""

    answered: int
    total_questions: int
    correct_first_try: int
    accuracy: float  # percent of answered questions right on the first try
    progress: float  # percent of the notebook answered


@dataclass(frozen=True)
class OptionShare:
    option: str
    count: int
    percentage: float
    is_correct: bool


@dataclass(frozen=True)
class QuestionStats:
    """First-try results of every user for one question, across notebooks."""

    question_id: str
    total: int
    correct: int
    incorrect: int
    distribution: tuple[OptionShare, ...]


def percent(part: int, whole: int) -> float:
    """`part / whole * 100`, 0.0 when `whole` is 0."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def progress_percent(answered: int, total_questions: int) -> float:
    return percent(answered, total_questions)


def tally_by_user(
    answers: Iterable[UserQuestionAnswer],
    notebook_id: str | None = None,
) -> dict[str, ScoreTally]:
    """
    Fold answers into per-user {correct, total}.

    Dict order follows each user's first appearance. When `notebook_id` is
    given, rows from other notebooks are ignored.
    """
    tallies: dict[str, ScoreTally] = {}
    for answer in answers:
        if notebook_id is not None and answer.notebook_id != notebook_id:
            continue
        tally = tallies.setdefault(answer.user_id, ScoreTally())
        tally.total += 1
        if answer.is_correct_first_try:
            tally.correct += 1
    return tallies


def leaderboard(
    answers: Iterable[UserQuestionAnswer],
    notebook_id: str | None = None,
    pseudonyms: Mapping[str, str] | None = None,
) -> list[LeaderboardEntry]:
    """Entries sorted by first-try correct answers, best first; ties keep first appearance."""
    pseudonyms = pseudonyms or {}
    entries = [
        LeaderboardEntry(
            user_id=user_id,
            pseudonym=pseudonyms.get(user_id, UNKNOWN_PSEUDONYM),
            correct=tally.correct,
            total=tally.total,
        )
        for user_id, tally in tally_by_user(answers, notebook_id).items()
    ]
    # sorted() is stable, so equal scores stay in insertion order
    return sorted(entries, key=lambda e: e.correct, reverse=True)


def notebook_progress(
    answers: Iterable[UserQuestionAnswer],
    user_id: str,
    notebook_id: str,
    total_questions: int,
) -> NotebookProgress:
    mine = [a for a in answers if a.user_id == user_id and a.notebook_id == notebook_id]
    answered = len(mine)
    correct = sum(1 for a in mine if a.is_correct_first_try)
    return NotebookProgress(
        answered=answered,
        total_questions=total_questions,
        correct_first_try=correct,
        accuracy=percent(correct, answered),
        progress=progress_percent(answered, total_questions),
    )


def question_stats(question: Question, answers: Iterable[UserQuestionAnswer]) -> QuestionStats:
    """
    Distribution of first attempts over the question's options.

    Every answer row for the question counts, whatever notebook it came from.
    """
    rows = [a for a in answers if a.question_id == question.id and a.attempts]
    total = len(rows)
    correct = sum(1 for a in rows if a.is_correct_first_try)

    first_tries = [a.attempts[0] for a in rows]
    shares = [
        OptionShare(
            option=option,
            count=first_tries.count(option),
            percentage=percent(first_tries.count(option), total),
            is_correct=option == question.correct_answer,
        )
        for option in question.options
    ]
    shares.sort(key=lambda s: s.count, reverse=True)

    return QuestionStats(
        question_id=question.id,
        total=total,
        correct=correct,
        incorrect=total - correct,
        distribution=tuple(shares),
    )
