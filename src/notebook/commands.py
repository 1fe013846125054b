"""
Side-effect commands emitted by the question state machine.

The state machine never performs I/O; it hands these to the driver, which
runs them against the content store and the profile service.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StatsDelta:
    """Change to a user's running statistics for one resolved question."""

    correct_first_try: bool
    topic: str
    xp: int


@dataclass(frozen=True)
class PersistAnswerCommand:
    """Create the UserQuestionAnswer row for a question that just completed."""

    user_id: str
    notebook_id: str
    question_id: str
    attempts: tuple[str, ...]
    is_correct_first_try: bool
    xp_awarded: int
    stats_delta: StatsDelta

    @property
    def key(self) -> tuple[str, str, str]:
        """Unique triple the store must enforce."""
        return (self.user_id, self.notebook_id, self.question_id)

    def to_record(self) -> dict:
        """Row payload for the answers table."""
        return {
            "user_id": self.user_id,
            "notebook_id": self.notebook_id,
            "question_id": self.question_id,
            "attempts": list(self.attempts),
            "is_correct_first_try": self.is_correct_first_try,
            "xp_awarded": self.xp_awarded,
        }
