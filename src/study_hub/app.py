"""Interactive CLI application."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from study_hub.dashboard import get_level_color, get_streak_color, get_study_stats, get_subject_stats
from study_hub.db import DEFAULT_DB_PATH, init_db
from study_hub.importer import export_file, import_file
from study_hub.models import GOAL_STATUSES, RESOURCE_TYPES
from study_hub.review import format_review_date, get_next_review_text, get_review_progress, get_status_color
from study_hub.seed import get_sample_subjects, seed_sample_resources, seed_template_subjects
from study_hub.subjects import (
    add_subject, create_subject_from_template, delete_subject, list_subjects, update_subject_stats,
)
from study_hub.tracker import (
    add_goal, add_resource, get_due_resources, list_goals, list_resources,
    log_session, refresh_streak, review_resource, snooze_resource, update_goal, update_goal_status,
)
from study_hub.xp import calculate_level, get_level_message

console = Console()


class SessionExitRequested(Exception):
    """Raised when the user types q or menu at a prompt to leave a command."""


EXIT_WORDS = ("q", "menu")


def session_prompt(prompt: str, choices: list[str] | None = None, default: str | None = None) -> str:
    """Prompt.ask that raises SessionExitRequested on q/menu and checks choices itself."""
    kwargs = {"default": default} if default is not None else {}
    if choices:
        prompt = f"{prompt} [magenta]\\[{'/'.join(choices)}][/magenta]"
    while True:
        answer = Prompt.ask(prompt, **kwargs).strip()
        if answer.lower() in EXIT_WORDS:
            raise SessionExitRequested()
        if not choices or answer in choices:
            return answer
        console.print("[red]Please select one of the available options.[/red]")


def session_int_prompt(prompt: str, choices: list[str] | None = None, default: int | None = None) -> int:
    while True:
        answer = session_prompt(prompt, choices=choices, default=None if default is None else str(default))
        if answer.isdigit():
            return int(answer)
        console.print("[red]Please enter a valid number.[/red]")


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Study Hub[/bold]\n[dim]Track sessions, level up, review on schedule[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("log", "Log a study session"),
        ("resource", "Add a learning resource"),
        ("goal", "Add or update a goal"),
        ("due", "Resources due for review"),
        ("review", "Mark a resource as reviewed"),
        ("snooze", "Snooze a resource by one day"),
        ("resources", "List resources"),
        ("subject", "List, add or delete subjects"),
        ("dashboard", "Level, streak + stats"),
        ("export", "Back up data to a file"),
        ("import", "Restore data from a file"),
        ("seed", "Add sample resources"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def pick_resource(resources: list):
    if not resources:
        console.print("[yellow]No resources to choose from.[/yellow]")
        return None
    for i, r in enumerate(resources, 1):
        console.print(f"  [cyan]{i}[/cyan]) {r.title} [dim]({r.subject or 'no subject'}, {format_review_date(r) or r.review_status})[/dim]")
    index = session_int_prompt("Select resource", choices=[str(i) for i in range(1, len(resources) + 1)])
    return resources[index - 1]


def cmd_log(db_path: str):
    minutes = session_int_prompt("Minutes studied", default=25)
    subject = session_prompt("Subject", default="") or None
    session, gain, progress = log_session(db_path, minutes, subject=subject)
    if gain.amount:
        console.print(f"[green]+{gain.amount} XP[/green] [dim]{gain.reason}[/dim]")
    else:
        console.print("[yellow]No XP for sessions under 5 minutes.[/yellow]")
    console.print(f"Level [bold]{progress.level}[/bold]  |  Streak [bold]{progress.current_streak_days}[/bold] days")


def cmd_resource(db_path: str):
    title = session_prompt("Title")
    url = session_prompt("URL", default="")
    subject = session_prompt("Subject", default="")
    type_ = session_prompt("Type", choices=list(RESOURCE_TYPES), default="article")
    priority = session_int_prompt("Priority (1=highest, 5=lowest)", choices=["1", "2", "3", "4", "5"], default=3)
    resource, gain = add_resource(db_path, title, url=url, subject=subject, type=type_, priority=priority)
    console.print(f"[green]Added '{resource.title}'.[/green]")
    if gain:
        console.print(f"[green]+{gain.amount} XP[/green] [dim]{gain.reason}[/dim]")


def cmd_goal(db_path: str):
    mode = session_prompt("Goal action", choices=["add", "update", "progress"], default="add")
    if mode == "add":
        name = session_prompt("Goal")
        subject = session_prompt("Subject", default="")
        goal = add_goal(db_path, name, subject=subject)
        console.print(f"[green]Added goal '{goal.name}'.[/green]")
        return
    goals = list_goals(db_path)
    if not goals:
        console.print("[yellow]No goals yet.[/yellow]")
        return
    for i, g in enumerate(goals, 1):
        console.print(f"  [cyan]{i}[/cyan]) {g.name} [dim]({g.status}, {g.progress_pct}%)[/dim]")
    index = session_int_prompt("Select goal", choices=[str(i) for i in range(1, len(goals) + 1)])
    if mode == "progress":
        pct = session_int_prompt("Progress %", default=goals[index - 1].progress_pct)
        goal, gain = update_goal(db_path, goals[index - 1].id, progress_pct=min(100, pct))
        console.print(f"Goal '{goal.name}' is {goal.progress_pct}% done.")
        return
    status = session_prompt("New status", choices=list(GOAL_STATUSES), default="completed")
    goal, gain = update_goal_status(db_path, goals[index - 1].id, status)
    console.print(f"Goal '{goal.name}' is now [bold]{goal.status}[/bold].")
    if gain:
        console.print(f"[green]+{gain.amount} XP[/green] [dim]{gain.reason}[/dim]")


def show_resources(resources: list, title: str):
    table = Table(title=title)
    table.add_column("Title", style="cyan")
    table.add_column("Subject")
    table.add_column("P", justify="right")
    table.add_column("Status")
    table.add_column("Review")
    table.add_column("Progress", justify="right")
    for r in resources:
        color = get_status_color(r.review_status)
        table.add_row(
            r.title, r.subject, str(r.priority),
            f"[{color}]{r.review_status}[/{color}]",
            format_review_date(r) or get_next_review_text(r),
            f"{get_review_progress(r):.0f}%",
        )
    console.print(table)


def cmd_due(db_path: str):
    due = get_due_resources(db_path)
    if not due:
        console.print("[green]Nothing due for review today![/green]")
        return
    show_resources(due, f"Due for Review ({len(due)})")


def cmd_review(db_path: str):
    due = get_due_resources(db_path)
    pending = due or [r for r in list_resources(db_path) if r.review_status != "done"]
    resource = pick_resource(pending)
    if resource is None:
        return
    updated = review_resource(db_path, resource.id)
    if updated.review_status == "done":
        console.print(f"[green]'{updated.title}' is done - all reviews complete![/green]")
    else:
        console.print(f"[green]Reviewed.[/green] Next review {updated.next_review_date.isoformat()} "
                      f"[dim]({updated.last_review_interval_days}-day interval)[/dim]")


def cmd_snooze(db_path: str):
    resource = pick_resource(get_due_resources(db_path))
    if resource is None:
        return
    updated = snooze_resource(db_path, resource.id)
    console.print(f"[yellow]Snoozed until {updated.next_review_date.isoformat()}.[/yellow]")


def cmd_resources(db_path: str):
    subject = session_prompt("Subject filter", default="") or None
    resources = list_resources(db_path, subject=subject)
    if not resources:
        console.print("[yellow]No resources yet. Try 'seed' for some examples.[/yellow]")
        return
    show_resources(resources, "Resources")


def show_subjects(subjects: list):
    table = Table(title="Subjects")
    table.add_column("Name")
    table.add_column("Description", style="dim")
    table.add_column("Minutes", justify="right")
    table.add_column("Resources", justify="right")
    table.add_column("Goals", justify="right")
    for s in subjects:
        table.add_row(
            f"[{s.color}]●[/] {s.name}" + (" [dim](template)[/dim]" if s.is_template else ""),
            s.description,
            "" if s.is_template else str(s.total_study_minutes),
            "" if s.is_template else f"{s.completed_resources}/{s.total_resources}",
            "" if s.is_template else f"{s.completed_goals}/{s.total_goals}",
        )
    console.print(table)


def cmd_subject(db_path: str):
    update_subject_stats(db_path)
    show_subjects(list_subjects(db_path))
    mode = session_prompt("Subject action", choices=["add", "template", "delete", "done"], default="done")
    if mode == "add":
        name = session_prompt("Name")
        description = session_prompt("Description", default="")
        subject = add_subject(db_path, name, description=description)
        console.print(f"[green]Added subject '{subject.name}'.[/green]")
    elif mode == "template":
        templates = list_subjects(db_path, templates=True)
        if not templates:
            console.print("[yellow]No subject templates available.[/yellow]")
            return
        for i, t in enumerate(templates, 1):
            console.print(f"  [cyan]{i}[/cyan]) {t.name} [dim]({t.description})[/dim]")
        index = session_int_prompt("Select template", choices=[str(i) for i in range(1, len(templates) + 1)])
        template = templates[index - 1]
        name = session_prompt("Name", default=template.name)
        subject = create_subject_from_template(db_path, template.id, name)
        console.print(f"[green]Added subject '{subject.name}'.[/green]")
    elif mode == "delete":
        custom = list_subjects(db_path, templates=False)
        if not custom:
            console.print("[yellow]No custom subjects to delete. Templates can't be deleted.[/yellow]")
            return
        for i, s in enumerate(custom, 1):
            console.print(f"  [cyan]{i}[/cyan]) {s.name}")
        index = session_int_prompt("Select subject", choices=[str(i) for i in range(1, len(custom) + 1)])
        if delete_subject(db_path, custom[index - 1].id):
            console.print(f"[yellow]Deleted '{custom[index - 1].name}'.[/yellow]")


def cmd_dashboard(db_path: str):
    progress = refresh_streak(db_path)
    info = calculate_level(progress.xp)
    stats = get_study_stats(db_path)
    color = get_level_color(info.level)
    streak_color = get_streak_color(progress.current_streak_days)

    console.print(Panel(
        f"[bold {color}]Level {info.level}[/bold {color}]  {get_level_message(info.level)}",
        title="Study Hub Dashboard", border_style="blue",
    ))

    bar_filled = int(info.progress_to_next * 20)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  XP: [bold]{info.current_xp}[/bold] {bar} next level at {info.xp_for_next_level}")
    console.print(f"  Streak: [{streak_color}]{progress.current_streak_days} days[/{streak_color}]"
                  f"  (longest {progress.longest_streak_days})\n")

    subjects = get_subject_stats(db_path)
    if subjects:
        table = Table(title="Subjects")
        table.add_column("Subject", style="cyan")
        table.add_column("Minutes", justify="right")
        table.add_column("Resources", justify="right")
        table.add_column("Goals", justify="right")
        table.add_column("Last studied")
        for s in subjects:
            table.add_row(
                s.name,
                str(s.total_study_minutes),
                f"{s.completed_resources}/{s.total_resources}",
                f"{s.completed_goals}/{s.total_goals}",
                s.last_studied.date().isoformat() if s.last_studied else "",
            )
        console.print(table)

    console.print(f"\n  Sessions: [bold]{stats['sessions_logged']}[/bold]  |  "
                  f"Minutes: [bold]{stats['minutes_studied']}[/bold]  |  "
                  f"Resources done: [bold]{stats['resources_done']}/{stats['resources']}[/bold]  |  "
                  f"Goals completed: [bold]{stats['goals_completed']}[/bold]")
    if stats["resources_due"]:
        console.print(f"\n  [yellow]{stats['resources_due']} resource(s) due for review.[/yellow]")


def cmd_export(db_path: str):
    file_path = session_prompt("Export to", default="study_hub_backup.json")
    console.print(f"[green]Exported to {export_file(db_path, file_path)}[/green]")


def cmd_import(db_path: str):
    file_path = session_prompt("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    if not Confirm.ask("[yellow]This replaces all current data. Continue?[/yellow]", default=False):
        return
    counts = import_file(db_path, file_path)
    console.print(f"[green]Imported {counts['resources']} resources, {counts['sessions']} sessions, "
                  f"{counts['goals']} goals, {counts['subjects']} subjects.[/green]")


def cmd_seed(db_path: str):
    subjects = get_sample_subjects()
    subject = session_prompt("Subject", choices=["all"] + subjects, default="all")
    added = seed_sample_resources(db_path, None if subject == "all" else subject)
    console.print(f"[green]Added {added} sample resources.[/green]")


COMMANDS = {
    "log": cmd_log,
    "resource": cmd_resource,
    "goal": cmd_goal,
    "due": cmd_due,
    "review": cmd_review,
    "snooze": cmd_snooze,
    "resources": cmd_resources,
    "subject": cmd_subject,
    "dashboard": cmd_dashboard,
    "export": cmd_export,
    "import": cmd_import,
    "seed": cmd_seed,
}


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    seed_template_subjects(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Keep the streak going![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
