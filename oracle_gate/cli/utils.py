"""
CLI utility functions for the oracle gate.

Contains:
- Input handling (get_input, get_int_input, get_choice, is_exit_command)
- Display utilities (print_result, print_error_below_menu, build_steps_table)
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.tree import Tree

from ..tools import ToolResult


# Global Console
console = Console()


class BackCommand:
    """Sentinel class to represent 'back' command."""
    pass


BACK = BackCommand()


def is_exit_command(value: str) -> bool:
    """Check if input is an exit command."""
    if not isinstance(value, str):
        return False
    exit_commands = ["back", "b", "q", "quit", "exit", "x"]
    return value.lower().strip() in exit_commands


def print_error_below_menu(error_msg: Optional[str], context: Optional[str] = None):
    """Print an error message in a red panel."""
    body = f"[bold red]✗ {escape(error_msg or 'Unknown error')}[/]"
    if context:
        body += f"\n[dim]{escape(context)}[/]"
    console.print(Panel(body, border_style="red"))


def get_input(prompt: str, default: str = ""):
    """Get user input with optional default. Returns BACK sentinel if exit command detected."""
    hint = "[dim](or 'back'/'b' to cancel)[/]"
    try:
        user_input = Prompt.ask(f"[cyan]{prompt}[/] {hint}", default=default if default else None, show_default=bool(default))

        if is_exit_command(user_input):
            return BACK
        return user_input
    except (EOFError, KeyboardInterrupt):
        console.print("\n[yellow]Cancelled.[/]")
        return BACK


def get_int_input(prompt: str, default: str = ""):
    """Get an integer from the user. Returns BACK sentinel on cancel."""
    while True:
        value = get_input(prompt, default)
        if value is BACK:
            return BACK
        try:
            return int(str(value).strip())
        except ValueError:
            print_error_below_menu(f"'{value}' is not an integer.")


def get_choice(valid_range: range = None):
    """Get numeric choice from user. Returns BACK sentinel if exit command detected."""
    while True:
        try:
            choice_input = Prompt.ask("\n[bold cyan]Enter choice[/] [dim](or 'back'/'b' to go back)[/]")

            if is_exit_command(choice_input):
                return BACK

            choice = int(choice_input)

            if valid_range and choice not in valid_range:
                print_error_below_menu(f"Invalid choice. Please enter a number between {valid_range.start} and {valid_range.stop-1}.")
                continue
            return choice
        except (EOFError, KeyboardInterrupt):
            console.print("\n[yellow]Cancelled.[/]")
            return BACK
        except ValueError:
            print_error_below_menu("Invalid input. Please enter a number or 'back'/'b' to go back.")
            continue


def print_result(result: ToolResult):
    """Print a ToolResult in a formatted way."""
    if not result.success:
        kind = result.error_kind
        print_error_below_menu(result.error, f"Rejected: {kind}" if kind else None)
        return

    console.print(Panel(f"[bold green]✓ {escape(result.message)}[/]", border_style="green"))
    if not result.data:
        return

    tree = Tree("[bold cyan]Result Data[/]")

    def add_dict_to_tree(d, parent):
        for k, v in d.items():
            if isinstance(v, dict):
                branch = parent.add(f"[yellow]{k}[/]")
                add_dict_to_tree(v, branch)
            elif isinstance(v, list):
                branch = parent.add(f"[yellow]{k}[/]")
                for item in v[:10]:
                    branch.add(escape(str(item)))
                if len(v) > 10:
                    branch.add(f"[dim]... {len(v)-10} more[/]")
            else:
                parent.add(f"[cyan]{k}:[/] {escape(str(v))}")

    add_dict_to_tree(result.data, tree)
    console.print(tree)


def build_steps_table(title: str, rows: list[tuple]) -> Table:
    """
    Build a table of executed steps.

    Each row is (index, op, caller, result: ToolResult, note).
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Op")
    table.add_column("Caller")
    table.add_column("Result")
    table.add_column("State")
    table.add_column("Note", style="dim")

    for index, op, caller, result, note in rows:
        state = ((result.data or {}).get("state") or {}).get("state", "")
        if result.success:
            outcome = f"[green]✓ {escape(result.message)}[/]"
        else:
            outcome = f"[red]✗ {result.error_kind or 'error'}[/]"
        table.add_row(str(index), op, caller or "-", outcome, state, note)
    return table
