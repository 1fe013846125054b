"""
Notebook driver: runs the pure state machine against the stores.

Flow for one option click:
1. session.submit() -> next state (+ PersistAnswerCommand on completion)
2. content_store.save_answer(command) -> (answer, created)
3. only if created: apply_stats_delta -> evaluate_achievements -> save_profile

A failed save keeps the completed state on screen but grants nothing; the
command stays pending until retry_pending() or the question is reloaded.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from src.gamification.achievements import evaluate_achievements, newly_unlocked
from src.gamification.profile import ProfileService, UserProfile, apply_stats_delta
from src.notebook import navigation
from src.notebook.aggregation import LeaderboardEntry, NotebookProgress, leaderboard, notebook_progress
from src.notebook.commands import PersistAnswerCommand
from src.notebook.errors import NotebookNotFound, PersistenceFailure
from src.notebook.models import (
    ALL_QUESTIONS_ID,
    ALL_QUESTIONS_NAME,
    FAVORITES_NOTEBOOK_ID,
    QuestionNotebook,
    UserQuestionAnswer,
    favorites_notebook,
    materialize_questions,
)
from src.notebook.navigation import NotebookCursor
from src.notebook.session import DEFAULT_TOPIC, SessionState, load_question, submit
from src.store.base import ContentStore

SAVE_FAILED_NOTICE = "Your answer could not be saved. No XP was awarded; try again."
PROFILE_FAILED_NOTICE = "Your answer was saved, but your profile could not be updated."


@dataclass
class SubmitOutcome:
    """What the UI needs after a click."""

    state: SessionState
    answer: UserQuestionAnswer | None = None
    xp_gained: int = 0
    new_achievements: list[str] = field(default_factory=list)
    profile: UserProfile | None = None
    notice: str | None = None

    @property
    def persisted(self) -> bool:
        return self.answer is not None


class NotebookDriver:
    """One user working through one notebook."""

    def __init__(
        self,
        content_store: ContentStore,
        profile_store: ProfileService,
        default_topic: str = DEFAULT_TOPIC,
    ):
        self.content_store = content_store
        self.profile_store = profile_store
        self.default_topic = default_topic

        self.notebook: QuestionNotebook | None = None
        self._cursor: NotebookCursor | None = None
        self._state: SessionState | None = None
        self._pending: PersistAnswerCommand | None = None

    # =========================================================================
    # Opening and navigation
    # =========================================================================

    def open(self, user_id: str, notebook_id: str) -> SessionState | None:
        """Open a notebook at its first question. Returns None for an empty notebook."""
        all_questions = self.content_store.list_questions()

        if notebook_id == ALL_QUESTIONS_ID:
            notebook = QuestionNotebook(
                id=ALL_QUESTIONS_ID,
                user_id=user_id,
                name=ALL_QUESTIONS_NAME,
                question_ids=[q.id for q in all_questions],
            )
        elif notebook_id == FAVORITES_NOTEBOOK_ID:
            notebook = favorites_notebook(user_id, self.content_store.favorite_question_ids(user_id))
        else:
            notebook = self.content_store.get_notebook(notebook_id)
            if notebook is None:
                raise NotebookNotFound(notebook_id)

        questions = materialize_questions(notebook, all_questions)
        answered = {
            a.question_id for a in self.content_store.list_answers(notebook_id=notebook.id, user_id=user_id)
        }
        cursor = NotebookCursor(
            user_id=user_id,
            notebook_id=notebook.id,
            questions=tuple(questions),
            answered_ids=frozenset(answered),
        )
        state = self._move(cursor)
        self.notebook = notebook
        logger.info(
            f"Opened notebook {notebook.id} for {user_id}: {len(questions)} questions, {len(answered)} answered"
        )
        return state

    @property
    def cursor(self) -> NotebookCursor:
        if self._cursor is None:
            raise RuntimeError("No notebook is open")
        return self._cursor

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def pending(self) -> PersistAnswerCommand | None:
        return self._pending

    def _state_for(self, cursor: NotebookCursor) -> SessionState | None:
        """Derive the state of the question under `cursor` from the store."""
        question = cursor.current_question
        if question is None:
            return None
        existing = self.content_store.get_answer(cursor.user_id, cursor.notebook_id, question.id)
        return load_question(cursor.user_id, cursor.notebook_id, question, existing)

    def _move(self, cursor: NotebookCursor) -> SessionState | None:
        """
        Point the driver at `cursor`.

        The new state is read before anything is assigned; if the read fails
        the cursor, state and pending command stay as they were.
        """
        state = self._state_for(cursor)
        self._cursor = cursor
        self._state = state
        self._pending = None
        return state

    def _load_current(self) -> SessionState | None:
        return self._move(self.cursor)

    def go_next(self) -> SessionState | None:
        return self._move(navigation.next_question(self.cursor))

    def go_previous(self) -> SessionState | None:
        return self._move(navigation.previous_question(self.cursor))

    def go_to(self, index: int) -> SessionState | None:
        return self._move(navigation.go_to(self.cursor, index))

    def reload(self) -> SessionState | None:
        return self._load_current()

    def go_next_unanswered(self) -> SessionState | None:
        """Jump to the next unanswered question; None (and no move) when all are answered."""
        index = navigation.next_unanswered(self.cursor)
        if index is None:
            logger.debug(f"All questions answered in notebook {self.cursor.notebook_id}")
            return None
        return self.go_to(index)

    # =========================================================================
    # Answering
    # =========================================================================

    def submit(self, option: str) -> SubmitOutcome:
        """
        Submit an option for the current question.

        AnswerValidationError from the state machine propagates unchanged and
        leaves everything as it was.
        """
        if self._state is None:
            raise RuntimeError("No question is loaded")

        result = submit(self._state, option, default_topic=self.default_topic)
        self._state = result.state
        if result.command is None:
            return SubmitOutcome(state=result.state)

        logger.info(
            f"Question {result.command.question_id} completed ({result.state.outcome.value}) "
            f"by {result.command.user_id} after {len(result.command.attempts)} attempts"
        )
        return self._execute(result.command)

    def retry_pending(self) -> SubmitOutcome | None:
        """Send the last unsaved answer again. None when nothing is pending."""
        if self._pending is None or self._state is None:
            return None
        return self._execute(self._pending)

    def _execute(self, command: PersistAnswerCommand) -> SubmitOutcome:
        state = self._state
        try:
            answer, created = self.content_store.save_answer(command)
        except PersistenceFailure as e:
            self._pending = command
            logger.warning(f"Answer for {command.key} not saved, rewards withheld: {e}")
            return SubmitOutcome(state=state, notice=SAVE_FAILED_NOTICE)

        self._pending = None
        self._cursor = navigation.mark_answered(self.cursor, command.question_id)
        if not created:
            return SubmitOutcome(state=state, answer=answer)

        try:
            before = self.profile_store.get_profile(command.user_id)
            updated = apply_stats_delta(before, command.stats_delta)
            counts = self.profile_store.interaction_counts(command.user_id)
            updated = evaluate_achievements(updated, counts)
            self.profile_store.save_profile(updated)
        except PersistenceFailure as e:
            logger.warning(f"Profile of {command.user_id} not updated after answer {answer.id}: {e}")
            return SubmitOutcome(state=state, answer=answer, notice=PROFILE_FAILED_NOTICE)

        unlocked = newly_unlocked(before, updated)
        if unlocked:
            logger.info(f"{command.user_id} unlocked achievements: {', '.join(unlocked)}")
        logger.debug(f"{command.user_id} gained {command.xp_awarded} XP (total {updated.xp})")
        return SubmitOutcome(
            state=state,
            answer=answer,
            xp_gained=command.xp_awarded,
            new_achievements=unlocked,
            profile=updated,
        )

    # =========================================================================
    # Progress and reset
    # =========================================================================

    def reset_progress(self) -> int:
        """Delete the user's answers in this notebook and start over at question 1."""
        cursor = self.cursor
        removed = self.content_store.clear_notebook_answers(cursor.user_id, cursor.notebook_id)
        self._move(navigation.reset(cursor))
        return removed

    def progress(self) -> NotebookProgress:
        cursor = self.cursor
        answers = self.content_store.list_answers(notebook_id=cursor.notebook_id, user_id=cursor.user_id)
        return notebook_progress(answers, cursor.user_id, cursor.notebook_id, len(cursor.questions))

    def leaderboard(self) -> list[LeaderboardEntry]:
        answers = self.content_store.list_answers(notebook_id=self.cursor.notebook_id)
        pseudonyms = self.profile_store.pseudonyms({a.user_id for a in answers})
        return leaderboard(answers, notebook_id=self.cursor.notebook_id, pseudonyms=pseudonyms)
