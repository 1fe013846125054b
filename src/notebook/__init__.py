"""
Question notebooks: answering, scoring and progress.

Components:
- models: Question, QuestionNotebook, UserQuestionAnswer, pseudo notebooks
- session: pure per-question state machine (three strikes, hints, XP)
- navigation: immutable cursor over a notebook's questions
- aggregation: leaderboards, progress and per-question statistics
- driver: executes state machine commands against the stores

The driver is imported from src.notebook.driver directly; it pulls in the
store and gamification layers.
"""

from .errors import AnswerValidationError, NotebookError, NotebookNotFound, PersistenceFailure
from .models import (
    ALL_QUESTIONS_ID,
    FAVORITES_NOTEBOOK_ID,
    Question,
    QuestionNotebook,
    UserQuestionAnswer,
    materialize_questions,
)
from .session import (
    XP_TABLE,
    Outcome,
    QuestionPhase,
    SessionState,
    SubmitResult,
    load_question,
    revealed_hint_count,
    submit,
)

__all__ = [
    "ALL_QUESTIONS_ID",
    "FAVORITES_NOTEBOOK_ID",
    "XP_TABLE",
    "AnswerValidationError",
    "NotebookError",
    "NotebookNotFound",
    "Outcome",
    "PersistenceFailure",
    "Question",
    "QuestionNotebook",
    "QuestionPhase",
    "SessionState",
    "SubmitResult",
    "UserQuestionAnswer",
    "load_question",
    "materialize_questions",
    "revealed_hint_count",
    "submit",
]
