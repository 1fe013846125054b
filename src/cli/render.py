"""
Rich rendering for notebook sessions: question panels, hints, results,
progress, leaderboards and profiles.
"""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from src.gamification.profile import XP_PER_LEVEL, UserProfile
from src.notebook.aggregation import LeaderboardEntry, NotebookProgress, QuestionStats
from src.notebook.navigation import NotebookCursor
from src.notebook.session import Outcome, SessionState

THEME = {
    "primary": "#6366F1",  # Indigo - main accent
    "secondary": "#10B981",  # Emerald - confirm actions
    "success": "#22C55E",
    "warning": "#EAB308",  # hints
    "error": "#EF4444",
    "dim": "#6B7280",
    "white": "#F3F4F6",
}

STYLES = {
    "primary": Style(color=THEME["primary"], bold=True),
    "success": Style(color=THEME["success"], bold=True),
    "warning": Style(color=THEME["warning"], bold=True),
    "error": Style(color=THEME["error"], bold=True),
    "dim": Style(color=THEME["dim"]),
}


def progress_bar(percent: float, width: int = 20) -> str:
    filled = int(round(max(0.0, min(percent, 100.0)) / 100 * width))
    return "█" * filled + "░" * (width - filled)


def question_panel(state: SessionState, cursor: NotebookCursor) -> Panel:
    """Question text plus lettered options, marking rejected and selected ones."""
    question = state.question
    header = Text()
    header.append(f"[{cursor.current_index + 1}/{len(cursor.questions)}]", style=STYLES["primary"])
    header.append(f" {question.difficulty}", style=STYLES["dim"])
    if question.topic:
        header.append(f" · {question.topic}", style=STYLES["dim"])

    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Key", justify="right", width=4)
    table.add_column("Option")
    for i, option in enumerate(question.options):
        key = chr(ord("A") + i)
        if option in state.wrong_answers:
            table.add_row(f"[{key}]", Text(option, style=Style(color=THEME["error"], strike=True)))
        elif state.is_completed and option == question.correct_answer:
            table.add_row(f"[{key}]", Text(option, style=STYLES["success"]))
        else:
            table.add_row(f"[{key}]", Text(option, style=Style(color=THEME["white"])))

    return Panel(
        Group(Text(question.question_text, style=Style(color=THEME["white"])), Text(""), table),
        title=header,
        title_align="left",
        border_style=Style(color=THEME["primary"]),
        box=box.HEAVY,
        padding=(1, 2),
    )


def hints_panel(state: SessionState) -> Panel | None:
    hints = state.revealed_hints
    if not hints:
        return None
    content = Text()
    for hint in hints:
        content.append(f"• {hint}\n", style=Style(color=THEME["warning"]))
    return Panel(
        content,
        title=f"Hints ({len(hints)}/{len(state.question.hints)})",
        title_align="left",
        border_style=Style(color=THEME["warning"]),
        box=box.ROUNDED,
    )


def result_panel(state: SessionState, xp_gained: int = 0, achievements: list[str] | None = None) -> Panel:
    question = state.question
    passed = state.outcome is Outcome.CORRECT
    color = THEME["success"] if passed else THEME["error"]

    content = Text()
    content.append("◉ CORRECT\n\n" if passed else "✗ OUT OF ATTEMPTS\n\n", style=Style(color=color, bold=True))
    content.append("Answer: ", style=STYLES["dim"])
    content.append(question.correct_answer, style=Style(color=THEME["white"], bold=True))
    if question.explanation:
        content.append("\n\nExplanation: ", style=STYLES["warning"])
        content.append(question.explanation, style=STYLES["dim"])
    if xp_gained:
        content.append(f"\n\n+{xp_gained} XP", style=STYLES["primary"])
    for title in achievements or []:
        content.append(f"\n★ Achievement unlocked: {title}", style=STYLES["warning"])

    return Panel(content, border_style=Style(color=color), box=box.HEAVY, padding=(1, 2))


def progress_panel(name: str, progress: NotebookProgress) -> Panel:
    content = Text()
    content.append(f"{progress_bar(progress.progress)} {progress.progress:.0f}%\n", style=STYLES["primary"])
    content.append(
        f"{progress.answered} of {progress.total_questions} questions answered\n\n", style=STYLES["dim"]
    )
    content.append("First-try correct: ", style=STYLES["dim"])
    content.append(f"{progress.correct_first_try}\n", style=STYLES["success"])
    content.append("Accuracy: ", style=STYLES["dim"])
    content.append(f"{progress.accuracy:.1f}%", style=STYLES["primary"])
    return Panel(content, title=f"Stats: {name}", title_align="left", box=box.ROUNDED)


def leaderboard_table(entries: list[LeaderboardEntry], current_user_id: str | None = None) -> Table:
    table = Table(title="Notebook leaderboard", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("User")
    table.add_column("First-try correct", justify="right")
    table.add_column("Answered", justify="right", style="dim")
    for rank, entry in enumerate(entries, start=1):
        style = "bold" if entry.user_id == current_user_id else None
        table.add_row(str(rank), entry.pseudonym, str(entry.correct), str(entry.total), style=style)
    return table


def question_stats_table(stats: QuestionStats) -> Table:
    table = Table(
        title=f"First attempts: {stats.total} answers, {stats.correct} correct, {stats.incorrect} wrong",
        box=box.SIMPLE,
    )
    table.add_column("Option")
    table.add_column("Count", justify="right")
    table.add_column("Share")
    for share in stats.distribution:
        label = Text(share.option, style=STYLES["success"] if share.is_correct else "")
        table.add_row(label, str(share.count), f"{progress_bar(share.percentage, 10)} {share.percentage:.0f}%")
    return table


def profile_panel(profile: UserProfile) -> Panel:
    stats = profile.stats
    content = Text()
    content.append(f"{profile.pseudonym or profile.id}\n\n", style=STYLES["primary"])
    content.append(f"Level {profile.level} · {profile.xp} XP\n")
    content.append(
        f"{progress_bar(profile.xp_into_level / XP_PER_LEVEL * 100)} {profile.xp_into_level}/{XP_PER_LEVEL} XP\n\n",
        style=STYLES["dim"],
    )
    content.append(f"Questions answered: {stats.questions_answered}\n")
    content.append(f"First-try correct: {stats.correct_answers}\n")
    content.append(f"Current streak: {stats.streak}\n")
    for topic, perf in sorted(stats.topic_performance.items()):
        content.append(f"  {topic}: {perf.correct}/{perf.total}\n", style=STYLES["dim"])
    if profile.achievements:
        content.append("\nAchievements:\n", style=STYLES["warning"])
        for title in profile.achievements:
            content.append(f"  ★ {title}\n")
    return Panel(content, title="Profile", title_align="left", box=box.ROUNDED)
