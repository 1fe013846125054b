"""
Store interfaces consumed by the notebook driver.

Two backends implement them: SQLAlchemy (src.store.sql_store) and the hosted
Supabase tables (src.store.supabase_store). Every backend error surfaces as
PersistenceFailure.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from src.notebook.commands import PersistAnswerCommand
from src.notebook.models import Question, QuestionNotebook, UserQuestionAnswer


class ContentStore(Protocol):
    """Questions, notebooks and the answers users gave inside them."""

    def list_questions(self) -> list[Question]:
        ...

    def get_notebook(self, notebook_id: str) -> QuestionNotebook | None:
        ...

    def list_notebooks(self, user_id: str | None = None) -> list[QuestionNotebook]:
        ...

    def create_notebook(
        self,
        user_id: str,
        name: str,
        question_ids: Iterable[str],
        notebook_id: str | None = None,
    ) -> QuestionNotebook:
        """Create a notebook; repeated ids keep their first position."""
        ...

    def favorite_question_ids(self, user_id: str) -> list[str]:
        ...

    def get_answer(self, user_id: str, notebook_id: str, question_id: str) -> UserQuestionAnswer | None:
        ...

    def list_answers(self, notebook_id: str | None = None, user_id: str | None = None) -> list[UserQuestionAnswer]:
        ...

    def answers_for_question(self, question_id: str) -> list[UserQuestionAnswer]:
        ...

    def save_answer(self, command: PersistAnswerCommand) -> tuple[UserQuestionAnswer, bool]:
        """
        Create the answer row for command.key.

        Returns (answer, created). If a row already exists for the triple it is
        returned unchanged with created=False; a duplicate is never written.
        """
        ...

    def clear_notebook_answers(self, user_id: str, notebook_id: str) -> int:
        """Delete every answer of the user in the notebook; returns the row count."""
        ...
