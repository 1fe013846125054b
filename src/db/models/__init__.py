# SQLAlchemy models
from .base import Base
from .notebook import (
    QuestionNotebookRow,
    QuestionRow,
    UserContentInteractionRow,
    UserProfileRow,
    UserQuestionAnswerRow,
)

__all__ = [
    "Base",
    "QuestionRow",
    "QuestionNotebookRow",
    "UserQuestionAnswerRow",
    "UserProfileRow",
    "UserContentInteractionRow",
]
