"""
Unit tests for progressive hints and notebook navigation.
"""

import pytest

from src.notebook import navigation
from src.notebook.models import Question
from src.notebook.navigation import NotebookCursor
from src.notebook.session import load_question, revealed_hint_count, submit


def cursor_over(questions, index=0, answered=()):
    return NotebookCursor(
        user_id="ana",
        notebook_id="nb-1",
        questions=tuple(questions),
        current_index=index,
        answered_ids=frozenset(answered),
    )


# ============================================================================
# Hints
# ============================================================================


class TestRevealedHints:
    def test_no_hints_before_any_answer(self, osi_question):
        state = load_question("ana", "nb-1", osi_question)

        assert revealed_hint_count(state) == 0
        assert state.revealed_hints == ()

    def test_one_hint_per_wrong_answer(self, osi_question):
        state = load_question("ana", "nb-1", osi_question)
        state = submit(state, "Physical").state

        assert state.revealed_hints == ("It sits above the data link layer.",)

        state = submit(state, "Transport").state
        assert revealed_hint_count(state) == 2

    def test_hint_count_capped_by_available_hints(self, osi_question):
        state = load_question("ana", "nb-1", osi_question)
        for option in ("Physical", "Data Link", "Transport"):
            state = submit(state, option).state

        assert state.outcome.value == "exhausted"
        assert revealed_hint_count(state) == len(osi_question.hints)

    def test_correct_answer_reveals_every_hint(self, osi_question):
        state = load_question("ana", "nb-1", osi_question)
        state = submit(state, "Network").state

        assert revealed_hint_count(state) == 2

    def test_exhausted_question_with_many_hints_stays_proportional(self):
        question = Question(
            id="q-many",
            question_text="?",
            options=("a", "b", "c", "d"),
            correct_answer="d",
            hints=("h1", "h2", "h3", "h4", "h5"),
        )
        state = load_question("ana", "nb-1", question)
        for option in ("a", "b", "c"):
            state = submit(state, option).state

        assert revealed_hint_count(state) == 3

    def test_question_without_hints(self):
        question = Question(id="q0", question_text="?", options=("a", "b"), correct_answer="a")
        state = submit(load_question("ana", "nb-1", question), "b").state

        assert revealed_hint_count(state) == 0


# ============================================================================
# Navigation
# ============================================================================


class TestStep:
    def test_next_and_previous(self, sample_questions):
        cursor = navigation.next_question(cursor_over(sample_questions))
        assert cursor.current_index == 1

        cursor = navigation.previous_question(cursor)
        assert cursor.current_index == 0
        assert cursor.is_first

    def test_previous_on_first_question_is_noop(self, sample_questions):
        cursor = cursor_over(sample_questions)

        assert navigation.previous_question(cursor) is cursor

    def test_next_on_last_question_is_noop(self, sample_questions):
        cursor = cursor_over(sample_questions, index=2)

        assert cursor.is_last
        assert navigation.next_question(cursor) is cursor

    @pytest.mark.parametrize("target,expected", [(1, 1), (-4, 0), (99, 2)])
    def test_go_to_clamps(self, sample_questions, target, expected):
        assert navigation.go_to(cursor_over(sample_questions), target).current_index == expected

    def test_empty_notebook(self):
        cursor = cursor_over([])

        assert cursor.current_question is None
        assert navigation.next_question(cursor) is cursor
        assert navigation.next_unanswered(cursor) is None


class TestNextUnanswered:
    def test_scans_forward_from_current(self, sample_questions):
        cursor = cursor_over(sample_questions, index=0, answered={"q2"})

        assert navigation.next_unanswered(cursor) == 2

    def test_wraps_around(self, sample_questions):
        cursor = cursor_over(sample_questions, index=2, answered={"q2"})

        assert navigation.next_unanswered(cursor) == 0

    def test_current_question_is_checked_last(self, sample_questions):
        cursor = cursor_over(sample_questions, index=1, answered={"q1", "q3"})

        assert navigation.next_unanswered(cursor) == 1

    def test_none_when_all_answered(self, sample_questions):
        cursor = cursor_over(sample_questions, index=1, answered={"q1", "q2", "q3"})

        assert cursor.all_answered
        assert navigation.next_unanswered(cursor) is None


class TestAnsweredTracking:
    def test_mark_answered(self, sample_questions):
        cursor = navigation.mark_answered(cursor_over(sample_questions), "q1")

        assert cursor.answered_count == 1
        assert navigation.mark_answered(cursor, "q1") is cursor

    def test_answered_ids_outside_notebook_do_not_count(self, sample_questions):
        cursor = cursor_over(sample_questions, answered={"q1", "elsewhere"})

        assert cursor.answered_count == 1
        assert not cursor.all_answered

    def test_reset(self, sample_questions):
        cursor = cursor_over(sample_questions, index=2, answered={"q1", "q3"})
        cursor = navigation.reset(cursor)

        assert cursor.current_index == 0
        assert cursor.answered_ids == frozenset()
