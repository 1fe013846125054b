"""
Supabase-backed content and profile stores.

Talks to the hosted tables through the supabase client. Answers are written
with an upsert on the (user_id, notebook_id, question_id) unique constraint
that ignores duplicates, so a second write for a triple is a no-op.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, create_client

from config import Settings, get_settings
from src.gamification.achievements import InteractionCounts
from src.gamification.profile import UserProfile, UserStats
from src.notebook.commands import PersistAnswerCommand
from src.notebook.errors import PersistenceFailure
from src.notebook.models import Question, QuestionNotebook, UserQuestionAnswer

ANSWER_CONFLICT_COLUMNS = "user_id,notebook_id,question_id"


def create_supabase_client(settings: Settings | None = None) -> Client:
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in .env")
    return create_client(settings.supabase_url, settings.supabase_key)


class _SupabaseStore:
    def __init__(self, client: Client | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client = client or create_supabase_client(self.settings)

    def _table(self, name: str):
        return self._client.table(name)

    @contextmanager
    def _guard(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except (APIError, httpx.HTTPError) as e:
            logger.warning(f"Supabase error while trying to {action}: {e}")
            raise PersistenceFailure(f"Could not {action}", cause=e) from e


class SupabaseContentStore(_SupabaseStore):
    def list_questions(self) -> list[Question]:
        with self._guard("list questions"):
            response = self._table(self.settings.questions_table).select("*").order("created_at").execute()
        return [Question.from_dict(row) for row in response.data or []]

    def get_notebook(self, notebook_id: str) -> QuestionNotebook | None:
        with self._guard("load notebook"):
            response = self._table(self.settings.notebooks_table).select("*").eq("id", notebook_id).execute()
        rows = response.data or []
        return _to_notebook(rows[0]) if rows else None

    def list_notebooks(self, user_id: str | None = None) -> list[QuestionNotebook]:
        with self._guard("list notebooks"):
            query = self._table(self.settings.notebooks_table).select("*")
            if user_id is not None:
                query = query.eq("user_id", user_id)
            response = query.order("created_at").execute()
        return [_to_notebook(row) for row in response.data or []]

    def create_notebook(
        self,
        user_id: str,
        name: str,
        question_ids: Iterable[str],
        notebook_id: str | None = None,
    ) -> QuestionNotebook:
        payload = {"user_id": user_id, "name": name, "question_ids": list(dict.fromkeys(question_ids))}
        if notebook_id is not None:
            payload["id"] = notebook_id
        with self._guard("create notebook"):
            response = self._table(self.settings.notebooks_table).insert(payload).execute()
        return _to_notebook(response.data[0])

    def favorite_question_ids(self, user_id: str) -> list[str]:
        with self._guard("list favorite questions"):
            response = (
                self._table(self.settings.interactions_table)
                .select("content_id")
                .eq("user_id", user_id)
                .eq("content_type", "question")
                .eq("is_favorite", True)
                .execute()
            )
        return [str(row["content_id"]) for row in response.data or []]

    def get_answer(self, user_id: str, notebook_id: str, question_id: str) -> UserQuestionAnswer | None:
        with self._guard("load answer"):
            response = (
                self._table(self.settings.answers_table)
                .select("*")
                .match({"user_id": user_id, "notebook_id": notebook_id, "question_id": question_id})
                .execute()
            )
        rows = response.data or []
        return UserQuestionAnswer.from_dict(rows[0]) if rows else None

    def list_answers(self, notebook_id: str | None = None, user_id: str | None = None) -> list[UserQuestionAnswer]:
        filters = {}
        if notebook_id is not None:
            filters["notebook_id"] = notebook_id
        if user_id is not None:
            filters["user_id"] = user_id
        with self._guard("list answers"):
            query = self._table(self.settings.answers_table).select("*")
            if filters:
                query = query.match(filters)
            response = query.order("timestamp").execute()
        return [UserQuestionAnswer.from_dict(row) for row in response.data or []]

    def answers_for_question(self, question_id: str) -> list[UserQuestionAnswer]:
        with self._guard("list answers for question"):
            response = (
                self._table(self.settings.answers_table).select("*").eq("question_id", question_id).execute()
            )
        return [UserQuestionAnswer.from_dict(row) for row in response.data or []]

    def save_answer(self, command: PersistAnswerCommand) -> tuple[UserQuestionAnswer, bool]:
        payload = {**command.to_record(), "timestamp": datetime.now(UTC).isoformat()}
        with self._guard("save answer"):
            response = (
                self._table(self.settings.answers_table)
                .upsert(payload, on_conflict=ANSWER_CONFLICT_COLUMNS, ignore_duplicates=True)
                .execute()
            )
        rows = response.data or []
        if rows:
            return UserQuestionAnswer.from_dict(rows[0]), True

        # Ignored duplicate: the row was already there
        existing = self.get_answer(*command.key)
        if existing is None:
            raise PersistenceFailure(f"Answer for {command.key} was neither written nor found")
        logger.debug(f"Answer already recorded for {command.key}; not writing again")
        return existing, False

    def clear_notebook_answers(self, user_id: str, notebook_id: str) -> int:
        with self._guard("clear notebook answers"):
            response = (
                self._table(self.settings.answers_table)
                .delete()
                .match({"user_id": user_id, "notebook_id": notebook_id})
                .execute()
            )
        removed = len(response.data or [])
        logger.info(f"Cleared {removed} answers of user {user_id} in notebook {notebook_id}")
        return removed


class SupabaseProfileStore(_SupabaseStore):
    def get_profile(self, user_id: str) -> UserProfile:
        with self._guard("load profile"):
            response = self._table(self.settings.profiles_table).select("*").eq("id", user_id).execute()
        rows = response.data or []
        if not rows:
            return UserProfile(id=user_id)
        row = rows[0]
        return UserProfile(
            id=str(row["id"]),
            pseudonym=row.get("pseudonym") or "",
            level=int(row.get("level") or 1),
            xp=int(row.get("xp") or 0),
            achievements=tuple(row.get("achievements") or ()),
            stats=UserStats.from_dict(row.get("stats")),
        )

    def save_profile(self, profile: UserProfile) -> UserProfile:
        payload: dict[str, Any] = {
            "id": profile.id,
            "level": profile.level,
            "xp": profile.xp,
            "achievements": list(profile.achievements),
            "stats": profile.stats.to_dict(),
        }
        if profile.pseudonym:
            payload["pseudonym"] = profile.pseudonym
        with self._guard("save profile"):
            self._table(self.settings.profiles_table).upsert(payload).execute()
        return profile

    def pseudonyms(self, user_ids: Iterable[str]) -> dict[str, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        with self._guard("load pseudonyms"):
            response = self._table(self.settings.profiles_table).select("id,pseudonym").in_("id", ids).execute()
        return {str(row["id"]): row["pseudonym"] for row in response.data or [] if row.get("pseudonym")}

    def interaction_counts(self, user_id: str) -> InteractionCounts:
        with self._guard("count interactions"):
            response = (
                self._table(self.settings.interactions_table)
                .select("content_type")
                .eq("user_id", user_id)
                .eq("is_read", True)
                .execute()
            )
        types = [row.get("content_type") for row in response.data or []]
        return InteractionCounts(
            flashcards_flipped=types.count("flashcard"),
            summaries_read=types.count("summary"),
            mind_maps_read=types.count("mind_map"),
        )


def _to_notebook(row: dict) -> QuestionNotebook:
    created_at = row.get("created_at")
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    return QuestionNotebook(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=row.get("name") or "",
        question_ids=[str(q) for q in row.get("question_ids") or []],
        created_at=created_at or datetime.now(UTC),
    )
