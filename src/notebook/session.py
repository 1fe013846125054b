"""
Question state machine for notebook sessions.

Per (user, notebook, question):

    UNANSWERED -> ATTEMPTING -> COMPLETED

COMPLETED is terminal and ends either CORRECT (right answer on attempt 1-3)
or EXHAUSTED (three wrong answers). Only a notebook reset brings a question
back to UNANSWERED.

All functions here are pure. `submit` returns the next state plus, on the
transition into COMPLETED, a PersistAnswerCommand for the driver to execute.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from src.notebook.commands import PersistAnswerCommand, StatsDelta
from src.notebook.errors import AnswerValidationError
from src.notebook.models import Question, UserQuestionAnswer

MAX_WRONG_ANSWERS = 3
XP_TABLE = (10, 5, 2, 0)  # XP for 0, 1, 2, 3+ wrong answers before the correct one
DEFAULT_TOPIC = "Geral"


class QuestionPhase(str, Enum):
    """Lifecycle of one question for one user in one notebook."""

    UNANSWERED = "unanswered"
    ATTEMPTING = "attempting"
    COMPLETED = "completed"


class Outcome(str, Enum):
    """How a completed question ended."""

    CORRECT = "correct"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class SessionState:
    """Runtime state of the question currently on screen."""

    user_id: str
    notebook_id: str
    question: Question
    selected_option: str | None = None
    wrong_answers: tuple[str, ...] = ()  # in the order they were rejected
    phase: QuestionPhase = QuestionPhase.UNANSWERED
    outcome: Outcome | None = None
    was_recorded: bool = False  # an answer row already existed when loaded

    @property
    def is_completed(self) -> bool:
        return self.phase is QuestionPhase.COMPLETED

    @property
    def revealed_hint_count(self) -> int:
        return revealed_hint_count(self)

    @property
    def revealed_hints(self) -> tuple[str, ...]:
        return self.question.hints[: revealed_hint_count(self)]

    @property
    def disabled_options(self) -> frozenset[str]:
        if self.is_completed:
            return frozenset(self.question.options)
        return frozenset(self.wrong_answers)


@dataclass(frozen=True)
class SubmitResult:
    """Next state and the command to run, if the question just completed."""

    state: SessionState
    command: PersistAnswerCommand | None = None


def xp_for_correct(wrong_count: int) -> int:
    """XP for a correct answer reached after `wrong_count` rejected options."""
    if wrong_count < 0:
        raise ValueError("wrong_count must be >= 0")
    return XP_TABLE[min(wrong_count, len(XP_TABLE) - 1)]


def load_question(
    user_id: str,
    notebook_id: str,
    question: Question,
    existing_answer: UserQuestionAnswer | None = None,
) -> SessionState:
    """
    Derive the state of a question from its persisted answer, if any.

    A persisted answer means the question is COMPLETED: the wrong answers are
    the attempts that are not the correct answer, and the selection is the
    correct answer when it was ever chosen, else the last attempt.
    """
    if existing_answer is None:
        return SessionState(user_id=user_id, notebook_id=notebook_id, question=question)

    attempts = existing_answer.attempts
    got_it = question.correct_answer in attempts
    wrong = tuple(dict.fromkeys(a for a in attempts if a != question.correct_answer))
    if got_it:
        selected = question.correct_answer
    else:
        selected = attempts[-1] if attempts else None

    return SessionState(
        user_id=user_id,
        notebook_id=notebook_id,
        question=question,
        selected_option=selected,
        wrong_answers=wrong,
        phase=QuestionPhase.COMPLETED,
        outcome=Outcome.CORRECT if got_it else Outcome.EXHAUSTED,
        was_recorded=True,
    )


def submit(state: SessionState, option: str, default_topic: str = DEFAULT_TOPIC) -> SubmitResult:
    """
    Apply one option click.

    Raises:
        AnswerValidationError: the question is completed, the option was
            already rejected, or it is not one of the question's options.
    """
    question = state.question
    if state.is_completed:
        raise AnswerValidationError(f"Question {question.id} is already completed", option)
    if option in state.wrong_answers:
        raise AnswerValidationError(f"Option already rejected: {option!r}", option)
    if option not in question.options:
        raise AnswerValidationError(f"Not an option of question {question.id}: {option!r}", option)

    wrong_before = len(state.wrong_answers)

    if option == question.correct_answer:
        next_state = replace(
            state,
            selected_option=option,
            phase=QuestionPhase.COMPLETED,
            outcome=Outcome.CORRECT,
        )
        xp = xp_for_correct(wrong_before)
    else:
        wrong = state.wrong_answers + (option,)
        exhausted = len(wrong) >= MAX_WRONG_ANSWERS
        next_state = replace(
            state,
            selected_option=option,
            wrong_answers=wrong,
            phase=QuestionPhase.COMPLETED if exhausted else QuestionPhase.ATTEMPTING,
            outcome=Outcome.EXHAUSTED if exhausted else None,
        )
        xp = 0

    if not next_state.is_completed or state.was_recorded:
        return SubmitResult(state=next_state)

    attempts = state.wrong_answers + (option,)
    first_try = len(attempts) == 1 and attempts[0] == question.correct_answer
    command = PersistAnswerCommand(
        user_id=state.user_id,
        notebook_id=state.notebook_id,
        question_id=question.id,
        attempts=attempts,
        is_correct_first_try=first_try,
        xp_awarded=xp,
        stats_delta=StatsDelta(
            correct_first_try=first_try,
            topic=question.topic or default_topic,
            xp=xp,
        ),
    )
    return SubmitResult(state=next_state, command=command)


def revealed_hint_count(state: SessionState) -> int:
    """
    Number of hints visible for the question.

    One hint per rejected option, capped at the number of hints. A CORRECT
    outcome reveals every hint; EXHAUSTED keeps the proportional count.
    """
    total = len(state.question.hints)
    if state.outcome is Outcome.CORRECT:
        return total
    return min(len(state.wrong_answers), total)
