"""Rich UI components for the Greenfield SDK CLI."""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

# Create a global console instance
console = Console()


def log(message: str, style: Optional[str] = None) -> None:
    """Log a message to the console with optional styling.

    Args:
        message: The message to log
        style: Optional style to apply to the message
    """
    console.print(message, style=style)


def info(message: str) -> None:
    """Log an info message to the console."""
    console.print(f"[blue]INFO:[/blue] {message}")


def success(message: str) -> None:
    """Log a success message to the console."""
    console.print(f"[green]SUCCESS:[/green] {message}")


def warning(message: str) -> None:
    """Log a warning message to the console."""
    console.print(f"[yellow]WARNING:[/yellow] {message}")


def error(message: str) -> None:
    """Log an error message to the console."""
    console.print(f"[bold red]ERROR:[/bold red] {message}")


def print_table(
    title: str,
    data: List[Dict[str, Any]],
    columns: List[str],
    style: Optional[str] = None,
) -> None:
    """Print a table of data.

    Args:
        title: The title of the table
        data: List of dictionaries containing the data
        columns: List of column names to include
        style: Optional style to apply to the table
    """
    table = Table(title=title, style=style, expand=True, show_edge=True)

    for column in columns:
        table.add_column(column)

    for row in data:
        table.add_row(*[str(row.get(column, "")) for column in columns])

    console.print(table)


def print_panel(content: str, title: Optional[str] = None) -> None:
    """Print content in a panel.

    Args:
        content: The content to display in the panel
        title: Optional title for the panel
    """
    console.print(Panel(content, title=title))


def create_progress() -> Progress:
    """Create a Rich progress bar sized in bytes.

    Returns:
        A Rich Progress instance configured for the Greenfield CLI
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


class ProgressTracker:
    """Helper class for tracking hashing progress with Rich progress bars."""

    def __init__(self, description: str, total: int):
        """Initialize a progress tracker.

        Args:
            description: Description for the progress bar
            total: Total number of bytes to process
        """
        self.progress = create_progress()
        self.task_id = None
        self.description = description
        self.total = total

    def __enter__(self):
        self.progress.__enter__()
        self.task_id = self.progress.add_task(self.description, total=self.total)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.__exit__(exc_type, exc_val, exc_tb)

    def callback(self, stage: str, segments_done: int, bytes_done: int) -> None:
        """Progress callback compatible with compute_integrity_hash."""
        self.progress.update(
            self.task_id,
            completed=bytes_done,
            description=f"{stage} ({segments_done})",
        )

    def finish(self):
        """Mark the progress as complete."""
        self.progress.update(self.task_id, completed=self.total)
