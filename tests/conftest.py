"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.db.database import create_db_engine, init_db, make_session_factory  # noqa: E402
from src.notebook.models import Question  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite-backed driver flows)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def osi_question():
    """Question with two hints whose correct answer is the third option."""
    return Question(
        id="q-osi",
        question_text="Which layer of the OSI model handles routing?",
        options=("Physical", "Data Link", "Network", "Transport"),
        correct_answer="Network",
        explanation="Routers operate at layer 3.",
        hints=("It sits above the data link layer.", "IP lives there."),
        difficulty="Fácil",
        source_id="src-redes",
        topic="Redes",
    )


@pytest.fixture
def sample_questions():
    """Three questions; the correct answer is always option A."""
    return [
        Question(
            id=f"q{i}",
            question_text=f"Question {i}?",
            options=(f"right {i}", f"wrong {i}a", f"wrong {i}b", f"wrong {i}c"),
            correct_answer=f"right {i}",
            explanation=f"Because {i}.",
            hints=(f"hint {i}.1", f"hint {i}.2"),
            topic="Direito" if i == 2 else None,
        )
        for i in (1, 2, 3)
    ]


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def content_store(session_factory, sample_questions):
    from src.store.sql_store import SqlContentStore

    store = SqlContentStore(session_factory)
    store.add_questions(sample_questions)
    return store


@pytest.fixture
def profile_store(session_factory):
    from src.store.sql_store import SqlProfileStore

    return SqlProfileStore(session_factory)


@pytest.fixture
def notebook(content_store, sample_questions):
    return content_store.create_notebook(
        "ana", "Revisão", [q.id for q in sample_questions], notebook_id="nb-1"
    )


@pytest.fixture
def driver(content_store, profile_store):
    from src.notebook.driver import NotebookDriver

    return NotebookDriver(content_store, profile_store)
