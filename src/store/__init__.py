"""
Stores behind the notebook driver.

- base: ContentStore protocol (ProfileService lives in src.gamification.profile)
- sql_store: SQLAlchemy implementation
- supabase_store: hosted Supabase tables
"""

from __future__ import annotations

from config import Settings, get_settings

from .base import ContentStore


def build_stores(settings: Settings | None = None):
    """Return (content_store, profile_store) for settings.content_backend."""
    settings = settings or get_settings()
    if settings.content_backend == "supabase":
        from .supabase_store import SupabaseContentStore, SupabaseProfileStore, create_supabase_client

        client = create_supabase_client(settings)
        return (
            SupabaseContentStore(client=client, settings=settings),
            SupabaseProfileStore(client=client, settings=settings),
        )

    from .sql_store import SqlContentStore, SqlProfileStore

    return SqlContentStore(), SqlProfileStore()


__all__ = ["ContentStore", "build_stores"]
