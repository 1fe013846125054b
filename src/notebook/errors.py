"""
Errors raised by the question-notebook core.

None of these are fatal: validation errors are rejected locally, persistence
failures become a notice on the submit outcome.
"""

from __future__ import annotations


class NotebookError(Exception):
    """Base class for question-notebook errors."""


class AnswerValidationError(NotebookError):
    """A submission that the state machine refuses without changing state."""

    def __init__(self, message: str, option: str | None = None):
        super().__init__(message)
        self.option = option


class PersistenceFailure(NotebookError):
    """The backing store could not complete a read or write."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class NotebookNotFound(NotebookError):
    """Notebook id is neither a pseudo notebook nor a stored one."""

    def __init__(self, notebook_id: str):
        super().__init__(f"Notebook not found: {notebook_id}")
        self.notebook_id = notebook_id
