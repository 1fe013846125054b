"""
Unit tests for notebook domain models and question materialization.
"""

import pytest

from src.notebook.models import (
    ALL_QUESTIONS_ID,
    FAVORITES_NOTEBOOK_ID,
    FAVORITES_NOTEBOOK_NAME,
    Question,
    QuestionNotebook,
    UserQuestionAnswer,
    favorites_notebook,
    is_pseudo_notebook,
    materialize_questions,
)


class TestMaterializeQuestions:
    def test_all_questions_by_id(self, sample_questions):
        assert materialize_questions(ALL_QUESTIONS_ID, sample_questions) == sample_questions

    def test_keeps_notebook_order(self, sample_questions):
        notebook = QuestionNotebook(id="nb", user_id="ana", name="N", question_ids=["q3", "q1"])

        assert [q.id for q in materialize_questions(notebook, sample_questions)] == ["q3", "q1"]

    def test_missing_ids_are_skipped(self, sample_questions):
        notebook = QuestionNotebook(id="nb", user_id="ana", name="N", question_ids=["q1", "gone", "q2"])

        assert [q.id for q in materialize_questions(notebook, sample_questions)] == ["q1", "q2"]

    def test_duplicate_ids_keep_first_position(self, sample_questions):
        notebook = QuestionNotebook(id="nb", user_id="ana", name="N", question_ids=["q2", "q1", "q2"])

        assert [q.id for q in materialize_questions(notebook, sample_questions)] == ["q2", "q1"]

    def test_plain_id_of_stored_notebook_rejected(self, sample_questions):
        with pytest.raises(TypeError):
            materialize_questions("nb-1", sample_questions)


class TestPseudoNotebooks:
    def test_favorites_notebook(self):
        notebook = favorites_notebook("ana", ["q2", "q1"])

        assert notebook.id == FAVORITES_NOTEBOOK_ID
        assert notebook.name == FAVORITES_NOTEBOOK_NAME
        assert notebook.question_ids == ["q2", "q1"]
        assert notebook.is_pseudo

    @pytest.mark.parametrize(
        "notebook_id,expected",
        [(ALL_QUESTIONS_ID, True), (FAVORITES_NOTEBOOK_ID, True), ("nb-1", False)],
    )
    def test_is_pseudo_notebook(self, notebook_id, expected):
        assert is_pseudo_notebook(notebook_id) is expected


class TestFromDict:
    def test_question_accepts_camel_case(self):
        question = Question.from_dict(
            {
                "id": 7,
                "questionText": "Capital?",
                "options": ["Brasília", "Rio"],
                "correctAnswer": "Brasília",
                "hints": ["Planned city"],
            }
        )

        assert question.id == "7"
        assert question.question_text == "Capital?"
        assert question.options == ("Brasília", "Rio")
        assert question.correct_answer == "Brasília"
        assert question.difficulty == "Médio"

    def test_answer_parses_iso_timestamp(self):
        answer = UserQuestionAnswer.from_dict(
            {
                "id": "a1",
                "user_id": "ana",
                "notebook_id": "nb-1",
                "question_id": "q1",
                "attempts": ["x", "y"],
                "is_correct_first_try": False,
                "xp_awarded": 5,
                "timestamp": "2024-05-01T12:00:00Z",
            }
        )

        assert answer.attempts == ("x", "y")
        assert answer.key == ("ana", "nb-1", "q1")
        assert answer.timestamp.year == 2024
        assert answer.timestamp.tzinfo is not None
