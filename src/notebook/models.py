"""
Domain models for question notebooks.

- Question: immutable multiple-choice content derived from a source
- QuestionNotebook: user-curated ordered list of question ids
- UserQuestionAnswer: one user's resolution of one question in one notebook

Two notebooks never exist as rows: "all_questions" (every question) and
"favorites_notebook" (built from the user's favorited questions at view time).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger

ALL_QUESTIONS_ID = "all_questions"
FAVORITES_NOTEBOOK_ID = "favorites_notebook"
PSEUDO_NOTEBOOK_IDS = frozenset({ALL_QUESTIONS_ID, FAVORITES_NOTEBOOK_ID})

FAVORITES_NOTEBOOK_NAME = "⭐ Questões Favoritas"
ALL_QUESTIONS_NAME = "Todas as Questões"


@dataclass(frozen=True)
class Question:
    """A multiple-choice question. Never mutated by a notebook session."""

    id: str
    question_text: str
    options: tuple[str, ...]
    correct_answer: str
    explanation: str = ""
    hints: tuple[str, ...] = ()
    difficulty: str = "Médio"
    source_id: str | None = None
    topic: str | None = None  # Topic of the owning source

    @classmethod
    def from_dict(cls, data: dict) -> Question:
        """Build from a store row (snake_case or the original camelCase keys)."""
        return cls(
            id=str(data["id"]),
            question_text=data.get("question_text") or data.get("questionText") or "",
            options=tuple(data.get("options") or ()),
            correct_answer=data.get("correct_answer") or data.get("correctAnswer") or "",
            explanation=data.get("explanation") or "",
            hints=tuple(data.get("hints") or ()),
            difficulty=data.get("difficulty") or "Médio",
            source_id=data.get("source_id"),
            topic=data.get("topic"),
        )


@dataclass
class QuestionNotebook:
    """A named, user-created curation of question ids."""

    id: str
    user_id: str
    name: str
    question_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_pseudo(self) -> bool:
        return is_pseudo_notebook(self.id)


@dataclass(frozen=True)
class UserQuestionAnswer:
    """Terminal record of a question for (user_id, notebook_id, question_id)."""

    id: str
    user_id: str
    notebook_id: str
    question_id: str
    attempts: tuple[str, ...]
    is_correct_first_try: bool
    xp_awarded: int
    timestamp: datetime | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user_id, self.notebook_id, self.question_id)

    @classmethod
    def from_dict(cls, data: dict) -> UserQuestionAnswer:
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            notebook_id=str(data["notebook_id"]),
            question_id=str(data["question_id"]),
            attempts=tuple(data.get("attempts") or ()),
            is_correct_first_try=bool(data.get("is_correct_first_try")),
            xp_awarded=int(data.get("xp_awarded") or 0),
            timestamp=timestamp,
        )


def is_pseudo_notebook(notebook_id: str) -> bool:
    """True for notebook ids that are never persisted as rows."""
    return notebook_id in PSEUDO_NOTEBOOK_IDS


def favorites_notebook(user_id: str, favorite_question_ids: Iterable[str]) -> QuestionNotebook:
    """Build the transient favorites notebook for a user."""
    return QuestionNotebook(
        id=FAVORITES_NOTEBOOK_ID,
        user_id=user_id,
        name=FAVORITES_NOTEBOOK_NAME,
        question_ids=list(favorite_question_ids),
    )


def materialize_questions(
    notebook: QuestionNotebook | str,
    all_questions: Sequence[Question],
) -> list[Question]:
    """
    Resolve a notebook to its ordered questions.

    "all_questions" (as an id or a notebook) yields every question. Ids that
    no longer match a question are skipped; repeated ids keep their first
    position.
    """
    notebook_id = notebook if isinstance(notebook, str) else notebook.id
    if notebook_id == ALL_QUESTIONS_ID:
        return list(all_questions)
    if isinstance(notebook, str):
        raise TypeError("Stored notebooks must be passed as QuestionNotebook instances")

    by_id = {q.id: q for q in all_questions}
    questions: list[Question] = []
    seen: set[str] = set()
    for question_id in notebook.question_ids:
        if question_id in seen:
            continue
        seen.add(question_id)
        question = by_id.get(question_id)
        if question is None:
            logger.debug(f"Notebook {notebook.id} references missing question {question_id}; skipping")
            continue
        questions.append(question)
    return questions
