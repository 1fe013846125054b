"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.
Each test gets its own SQLite database file through DATABASE_URL.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

SEED = {
    "questions": [
        {
            "id": "q1",
            "question_text": "Which layer of the OSI model handles routing?",
            "options": ["Network", "Physical", "Transport", "Session"],
            "correct_answer": "Network",
            "explanation": "Routers operate at layer 3.",
            "hints": ["Above data link.", "IP lives there."],
            "topic": "Redes",
        },
        {
            "id": "q2",
            "questionText": "Capital of Brazil?",
            "options": ["Rio", "Brasília", "Salvador", "Recife"],
            "correctAnswer": "Brasília",
        },
    ],
    "notebooks": [{"id": "nb-1", "user_id": "ana", "name": "Revisão", "question_ids": ["q1", "q2"]}],
    "favorites": [{"user_id": "ana", "question_id": "q2"}],
}


def run_cli_command(command: list[str], env: dict, input_text: str | None = None, timeout: int = 60):
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        command: Arguments after 'python -m src.cli.main'
        env: Environment for the child process
        input_text: Text piped to stdin (for interactive prompts)
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "src.cli.main", *command],
        cwd=PROJECT_ROOT,
        env=env,
        input=input_text,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout,
    )
    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def cli_env(tmp_path):
    env = dict(os.environ)
    env.update(
        {
            "DATABASE_URL": f"sqlite:///{tmp_path / 'procap.db'}",
            "CONTENT_BACKEND": "sql",
            "LOG_LEVEL": "WARNING",
            "PYTHONIOENCODING": "utf-8",
        }
    )
    env.pop("LOG_FILE", None)
    return env


@pytest.fixture
def seeded_env(cli_env, tmp_path):
    seed_file = tmp_path / "seed.json"
    seed_file.write_text(json.dumps(SEED, ensure_ascii=False), encoding="utf-8")

    code, _, stderr = run_cli_command(["db", "init"], cli_env)
    assert code == 0, f"db init failed: {stderr}"
    code, stdout, stderr = run_cli_command(["db", "seed", str(seed_file)], cli_env)
    assert code == 0, f"db seed failed: {stderr}"
    assert "2 questions" in stdout
    return cli_env


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, cli_env):
        code, stdout, stderr = run_cli_command(["--help"], cli_env)

        assert code == 0, f"Help failed: {stderr}"
        assert "notebook" in stdout
        assert "profile" in stdout

    @pytest.mark.parametrize("group", ["db", "notebook", "question", "profile"])
    def test_group_help(self, cli_env, group):
        code, stdout, stderr = run_cli_command([group, "--help"], cli_env)

        assert code == 0, f"{group} help failed: {stderr}"
        assert "Usage" in stdout


class TestNotebookCommands:
    def test_list(self, seeded_env):
        code, stdout, stderr = run_cli_command(["notebook", "list", "--user", "ana"], seeded_env)

        assert code == 0, stderr
        assert "all_questions" in stdout
        assert "nb-1" in stdout
        assert "favorites_notebook" in stdout

    def test_create(self, seeded_env):
        code, stdout, stderr = run_cli_command(
            ["notebook", "create", "Mix", "--user", "ana", "-q", "q2", "-q", "nope"], seeded_env
        )

        assert code == 0, stderr
        assert "Skipping unknown questions" in stdout
        assert "with 1 questions" in stdout

    def test_play_answers_and_awards_xp(self, seeded_env):
        code, stdout, stderr = run_cli_command(
            ["notebook", "play", "nb-1", "--user", "ana"], seeded_env, input_text="a\nq\n"
        )

        assert code == 0, stderr
        assert "CORRECT" in stdout
        assert "+10 XP" in stdout

        code, stdout, stderr = run_cli_command(["profile", "show", "ana"], seeded_env)
        assert code == 0, stderr
        assert "10 XP" in stdout
        assert "Primeiro Acerto" in stdout

    def test_play_wrong_answer_shows_attempts_left(self, seeded_env):
        code, stdout, stderr = run_cli_command(
            ["notebook", "play", "nb-1", "--user", "ana"], seeded_env, input_text="b\nq\n"
        )

        assert code == 0, stderr
        assert "2 attempts left" in stdout

    def test_play_unknown_notebook(self, seeded_env):
        code, stdout, _ = run_cli_command(["notebook", "play", "missing", "--user", "ana"], seeded_env)

        assert code == 1
        assert "Notebook not found" in stdout

    def test_stats_and_reset(self, seeded_env):
        run_cli_command(["notebook", "play", "nb-1", "--user", "ana"], seeded_env, input_text="a\nq\n")

        code, stdout, stderr = run_cli_command(["notebook", "stats", "nb-1", "--user", "ana"], seeded_env)
        assert code == 0, stderr
        assert "leaderboard" in stdout

        code, stdout, stderr = run_cli_command(["notebook", "reset", "nb-1", "--user", "ana", "--yes"], seeded_env)
        assert code == 0, stderr
        assert "Cleared 1 answers" in stdout


class TestQuestionCommands:
    def test_stats_without_answers(self, seeded_env):
        code, stdout, stderr = run_cli_command(["question", "stats", "q1"], seeded_env)

        assert code == 0, stderr
        assert "Nobody has answered" in stdout

    def test_stats_unknown_question(self, seeded_env):
        code, stdout, _ = run_cli_command(["question", "stats", "nope"], seeded_env)

        assert code == 1
        assert "Question not found" in stdout
