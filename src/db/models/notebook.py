"""
Question notebook models.

Implements:
- QuestionRow: generated multiple-choice question, with its source topic
- QuestionNotebookRow: user-curated ordered list of question ids
- UserQuestionAnswerRow: terminal answer, unique per (user, notebook, question)
- UserProfileRow: xp, level, achievements and running stats
- UserContentInteractionRow: read/favorite flags per content item

Columns use portable JSON/Text types so the same schema runs on PostgreSQL
and SQLite.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, new_id


class QuestionRow(Base):
    """
    Multiple-choice question derived from a source document.

    options/hints are JSON arrays; correct_answer must equal one option.
    """

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    source_id: Mapped[str | None] = mapped_column(Text, index=True)
    topic: Mapped[str | None] = mapped_column(Text)
    difficulty: Mapped[str] = mapped_column(Text, default="Médio")
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, default="")
    hints: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(default=func.now())

    def __repr__(self) -> str:
        return f"<QuestionRow(id={self.id}, topic={self.topic})>"


class QuestionNotebookRow(Base):
    __tablename__ = "question_notebooks"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    question_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    def __repr__(self) -> str:
        return f"<QuestionNotebookRow(id={self.id}, name={self.name!r})>"


class UserQuestionAnswerRow(Base):
    """
    One user's resolution of one question in one notebook.

    notebook_id is free text: it also holds the pseudo ids "all_questions"
    and "favorites_notebook", so there is no foreign key.
    """

    __tablename__ = "user_question_answers"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "notebook_id", "question_id", name="user_question_answers_unique"
        ),
        Index("ix_user_question_answers_notebook", "notebook_id"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    notebook_id: Mapped[str] = mapped_column(Text, nullable=False)
    question_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    attempts: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_correct_first_try: Mapped[bool] = mapped_column(Boolean, nullable=False)
    xp_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    timestamp: Mapped[datetime] = mapped_column(default=func.now())

    def __repr__(self) -> str:
        return (
            f"<UserQuestionAnswerRow(user={self.user_id}, notebook={self.notebook_id}, "
            f"question={self.question_id}, first_try={self.is_correct_first_try})>"
        )


class UserProfileRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    pseudonym: Mapped[str] = mapped_column(Text, default="")
    level: Mapped[int] = mapped_column(Integer, default=1)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    achievements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # {"questionsAnswered", "correctAnswers", "streak", "topicPerformance"}
    stats: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())


class UserContentInteractionRow(Base):
    """Read/favorite state of a content item (summary, flashcard, question, mind_map...)."""

    __tablename__ = "user_content_interactions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "content_id", "content_type", name="user_content_interactions_unique"
        ),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    content_id: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)
