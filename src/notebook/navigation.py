"""
Navigation over the questions of an open notebook.

The cursor is an immutable value; moving returns a new cursor. Moving never
touches persisted answers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from src.notebook.models import Question


@dataclass(frozen=True)
class NotebookCursor:
    """Position of a user inside a notebook plus which questions are resolved."""

    user_id: str
    notebook_id: str
    questions: tuple[Question, ...]
    current_index: int = 0
    answered_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index >= len(self.questions) - 1

    @property
    def answered_count(self) -> int:
        return sum(1 for q in self.questions if q.id in self.answered_ids)

    @property
    def all_answered(self) -> bool:
        return all(q.id in self.answered_ids for q in self.questions)


def step(cursor: NotebookCursor, direction: int) -> NotebookCursor:
    """Move by `direction`, clamped to the first and last question."""
    if not cursor.questions:
        return cursor
    index = max(0, min(cursor.current_index + direction, len(cursor.questions) - 1))
    if index == cursor.current_index:
        return cursor
    return replace(cursor, current_index=index)


def next_question(cursor: NotebookCursor) -> NotebookCursor:
    return step(cursor, 1)


def previous_question(cursor: NotebookCursor) -> NotebookCursor:
    return step(cursor, -1)


def go_to(cursor: NotebookCursor, index: int) -> NotebookCursor:
    """Jump to `index` (clamped)."""
    if not cursor.questions:
        return cursor
    return replace(cursor, current_index=max(0, min(index, len(cursor.questions) - 1)))


def next_unanswered(cursor: NotebookCursor) -> int | None:
    """
    Index of the next question without an answer.

    Scans forward from the question after the current one and wraps around,
    so the current question is checked last. Returns None when every question
    is answered.
    """
    total = len(cursor.questions)
    for offset in range(1, total + 1):
        index = (cursor.current_index + offset) % total
        if cursor.questions[index].id not in cursor.answered_ids:
            return index
    return None


def mark_answered(cursor: NotebookCursor, question_id: str) -> NotebookCursor:
    if question_id in cursor.answered_ids:
        return cursor
    return replace(cursor, answered_ids=cursor.answered_ids | {question_id})


def reset(cursor: NotebookCursor) -> NotebookCursor:
    """Back to the first question with nothing answered."""
    return replace(cursor, current_index=0, answered_ids=frozenset())
