"""
SQLAlchemy-backed content and profile stores.

Each public method runs in its own transactional scope and returns plain
domain objects, so nothing handed out is bound to a session.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.db.database import get_session_factory, session_scope
from src.db.models import (
    QuestionNotebookRow,
    QuestionRow,
    UserContentInteractionRow,
    UserProfileRow,
    UserQuestionAnswerRow,
)
from src.db.models.base import new_id
from src.gamification.achievements import InteractionCounts
from src.gamification.profile import UserProfile, UserStats
from src.notebook.commands import PersistAnswerCommand
from src.notebook.errors import PersistenceFailure
from src.notebook.models import Question, QuestionNotebook, UserQuestionAnswer


def _to_question(row: QuestionRow) -> Question:
    return Question(
        id=row.id,
        question_text=row.question_text,
        options=tuple(row.options or ()),
        correct_answer=row.correct_answer,
        explanation=row.explanation or "",
        hints=tuple(row.hints or ()),
        difficulty=row.difficulty or "Médio",
        source_id=row.source_id,
        topic=row.topic,
    )


def _to_notebook(row: QuestionNotebookRow) -> QuestionNotebook:
    return QuestionNotebook(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        question_ids=list(row.question_ids or []),
        created_at=row.created_at,
    )


def _to_answer(row: UserQuestionAnswerRow) -> UserQuestionAnswer:
    return UserQuestionAnswer(
        id=row.id,
        user_id=row.user_id,
        notebook_id=row.notebook_id,
        question_id=row.question_id,
        attempts=tuple(row.attempts or ()),
        is_correct_first_try=row.is_correct_first_try,
        xp_awarded=row.xp_awarded,
        timestamp=row.timestamp,
    )


class _SqlStore:
    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory or get_session_factory()

    @contextmanager
    def _scope(self, action: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.warning(f"Database error while trying to {action}: {e}")
            raise PersistenceFailure(f"Could not {action}", cause=e) from e


class SqlContentStore(_SqlStore):
    """Questions, notebooks, answers and favorites in SQL tables."""

    # ------------------------------------------------------------------
    # Questions and notebooks
    # ------------------------------------------------------------------

    def list_questions(self) -> list[Question]:
        with self._scope("list questions") as session:
            rows = session.scalars(select(QuestionRow).order_by(QuestionRow.created_at, QuestionRow.id))
            return [_to_question(row) for row in rows]

    def add_questions(self, questions: Iterable[Question]) -> int:
        """Insert or replace questions by id. Returns how many were written."""
        count = 0
        with self._scope("add questions") as session:
            for question in questions:
                session.merge(
                    QuestionRow(
                        id=question.id,
                        source_id=question.source_id,
                        topic=question.topic,
                        difficulty=question.difficulty,
                        question_text=question.question_text,
                        options=list(question.options),
                        correct_answer=question.correct_answer,
                        explanation=question.explanation,
                        hints=list(question.hints),
                        created_at=datetime.now(UTC),
                    )
                )
                count += 1
        logger.info(f"Stored {count} questions")
        return count

    def get_notebook(self, notebook_id: str) -> QuestionNotebook | None:
        with self._scope("load notebook") as session:
            row = session.get(QuestionNotebookRow, notebook_id)
            return _to_notebook(row) if row else None

    def list_notebooks(self, user_id: str | None = None) -> list[QuestionNotebook]:
        with self._scope("list notebooks") as session:
            query = select(QuestionNotebookRow).order_by(QuestionNotebookRow.created_at)
            if user_id is not None:
                query = query.where(QuestionNotebookRow.user_id == user_id)
            return [_to_notebook(row) for row in session.scalars(query)]

    def create_notebook(
        self,
        user_id: str,
        name: str,
        question_ids: Iterable[str],
        notebook_id: str | None = None,
    ) -> QuestionNotebook:
        with self._scope("create notebook") as session:
            row = QuestionNotebookRow(
                id=notebook_id or new_id(),
                user_id=user_id,
                name=name,
                question_ids=list(dict.fromkeys(question_ids)),
                created_at=datetime.now(UTC),
            )
            session.add(row)
            session.flush()
            logger.info(f"Created notebook {row.id} ({name!r}) with {len(row.question_ids)} questions")
            return _to_notebook(row)

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def set_interaction(
        self,
        user_id: str,
        content_id: str,
        content_type: str,
        *,
        is_read: bool | None = None,
        is_favorite: bool | None = None,
    ) -> None:
        """Upsert read/favorite flags for one content item."""
        with self._scope("save interaction") as session:
            row = session.scalars(
                select(UserContentInteractionRow).where(
                    UserContentInteractionRow.user_id == user_id,
                    UserContentInteractionRow.content_id == content_id,
                    UserContentInteractionRow.content_type == content_type,
                )
            ).first()
            if row is None:
                row = UserContentInteractionRow(
                    user_id=user_id, content_id=content_id, content_type=content_type
                )
                session.add(row)
            if is_read is not None:
                row.is_read = is_read
            if is_favorite is not None:
                row.is_favorite = is_favorite

    def favorite_question_ids(self, user_id: str) -> list[str]:
        with self._scope("list favorite questions") as session:
            rows = session.scalars(
                select(UserContentInteractionRow.content_id)
                .where(
                    UserContentInteractionRow.user_id == user_id,
                    UserContentInteractionRow.content_type == "question",
                    UserContentInteractionRow.is_favorite.is_(True),
                )
                .order_by(UserContentInteractionRow.content_id)
            )
            return list(rows)

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    @staticmethod
    def _find_answer(session: Session, user_id: str, notebook_id: str, question_id: str):
        return session.scalars(
            select(UserQuestionAnswerRow).where(
                UserQuestionAnswerRow.user_id == user_id,
                UserQuestionAnswerRow.notebook_id == notebook_id,
                UserQuestionAnswerRow.question_id == question_id,
            )
        ).first()

    def get_answer(self, user_id: str, notebook_id: str, question_id: str) -> UserQuestionAnswer | None:
        with self._scope("load answer") as session:
            row = self._find_answer(session, user_id, notebook_id, question_id)
            return _to_answer(row) if row else None

    def list_answers(self, notebook_id: str | None = None, user_id: str | None = None) -> list[UserQuestionAnswer]:
        with self._scope("list answers") as session:
            query = select(UserQuestionAnswerRow).order_by(UserQuestionAnswerRow.timestamp)
            if notebook_id is not None:
                query = query.where(UserQuestionAnswerRow.notebook_id == notebook_id)
            if user_id is not None:
                query = query.where(UserQuestionAnswerRow.user_id == user_id)
            return [_to_answer(row) for row in session.scalars(query)]

    def answers_for_question(self, question_id: str) -> list[UserQuestionAnswer]:
        with self._scope("list answers for question") as session:
            rows = session.scalars(
                select(UserQuestionAnswerRow)
                .where(UserQuestionAnswerRow.question_id == question_id)
                .order_by(UserQuestionAnswerRow.timestamp)
            )
            return [_to_answer(row) for row in rows]

    def save_answer(self, command: PersistAnswerCommand) -> tuple[UserQuestionAnswer, bool]:
        with self._scope("save answer") as session:
            existing = self._find_answer(session, *command.key)
            if existing is not None:
                logger.debug(f"Answer already recorded for {command.key}; not writing again")
                return _to_answer(existing), False

            row = UserQuestionAnswerRow(**command.to_record(), timestamp=datetime.now(UTC))
            session.add(row)
            try:
                session.flush()
            except IntegrityError:
                # Lost a race against another writer for the same triple
                session.rollback()
                existing = self._find_answer(session, *command.key)
                if existing is None:
                    raise
                return _to_answer(existing), False
            return _to_answer(row), True

    def clear_notebook_answers(self, user_id: str, notebook_id: str) -> int:
        with self._scope("clear notebook answers") as session:
            result = session.execute(
                delete(UserQuestionAnswerRow).where(
                    UserQuestionAnswerRow.user_id == user_id,
                    UserQuestionAnswerRow.notebook_id == notebook_id,
                )
            )
            removed = result.rowcount or 0
        logger.info(f"Cleared {removed} answers of user {user_id} in notebook {notebook_id}")
        return removed


class SqlProfileStore(_SqlStore):
    """User profiles and the interaction counts used for achievements."""

    def get_profile(self, user_id: str) -> UserProfile:
        with self._scope("load profile") as session:
            row = session.get(UserProfileRow, user_id)
            if row is None:
                return UserProfile(id=user_id)
            return UserProfile(
                id=row.id,
                pseudonym=row.pseudonym or "",
                level=row.level or 1,
                xp=row.xp or 0,
                achievements=tuple(row.achievements or ()),
                stats=UserStats.from_dict(row.stats),
            )

    def save_profile(self, profile: UserProfile) -> UserProfile:
        with self._scope("save profile") as session:
            session.merge(
                UserProfileRow(
                    id=profile.id,
                    pseudonym=profile.pseudonym,
                    level=profile.level,
                    xp=profile.xp,
                    achievements=list(profile.achievements),
                    stats=profile.stats.to_dict(),
                )
            )
        return profile

    def pseudonyms(self, user_ids: Iterable[str]) -> dict[str, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        with self._scope("load pseudonyms") as session:
            rows = session.execute(
                select(UserProfileRow.id, UserProfileRow.pseudonym).where(UserProfileRow.id.in_(ids))
            )
            return {row.id: row.pseudonym for row in rows if row.pseudonym}

    def interaction_counts(self, user_id: str) -> InteractionCounts:
        with self._scope("count interactions") as session:
            rows = session.execute(
                select(UserContentInteractionRow.content_type, func.count())
                .where(
                    UserContentInteractionRow.user_id == user_id,
                    UserContentInteractionRow.is_read.is_(True),
                )
                .group_by(UserContentInteractionRow.content_type)
            )
            counts = {content_type: count for content_type, count in rows}
        return InteractionCounts(
            flashcards_flipped=counts.get("flashcard", 0),
            summaries_read=counts.get("summary", 0),
            mind_maps_read=counts.get("mind_map", 0),
        )
