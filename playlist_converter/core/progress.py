"""
Progress bar for the matching phase, built on Rich.

Usage:
    from playlist_converter.core.progress import MatchingProgressBar

    with MatchingProgressBar(total=len(tracks)) as progress:
        matcher.match_all(tracks, progress_bar=progress)

    # Manual control
    progress = MatchingProgressBar(total=50)
    progress.start()
    # ... progress.update(matched=True) ...
    progress.stop()
"""

from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(30,215,96)",  # Spotify green
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(30,215,96)",
    "progress.percentage": "white",
})


class FixedWidthTextColumn(ProgressColumn):
    """
    Text column truncated (or padded) to a fixed width.

    Keeps the bar from jumping around as the status counters grow.
    """

    def __init__(
        self,
        text_format: str,
        width: int,
        style: str = "none",
        justify: JustifyMethod = "left",
        overflow: Optional[OverflowMethod] = "ellipsis",
    ) -> None:
        self.text_format = text_format
        self.width = width
        self.style = style
        self.justify: JustifyMethod = justify
        self.overflow: Optional[OverflowMethod] = overflow
        super().__init__()

    def render(self, task: Task) -> Text:
        text = Text.from_markup(
            self.text_format.format(task=task),
            style=self.style,
            justify=self.justify,
        )
        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class MatchingProgressBar:
    """
    Progress bar for the track matching phase.

    Displays:
    - Description (e.g., "To Spotify")
    - Status: ✓ matched, ✗ unmatched, ↺ served from cache
    - Bar and percentage

    Example:
        To Spotify      ✓ 45  ✗ 2  ↺ 3          ━━━━━━━━━━━━━━━━━  47%

    Attributes:
        total: Number of tracks to match.
        completed: Tracks processed so far.
        matched: Tracks with a destination match.
        unmatched: Tracks without one.
        cached: Tracks answered from the match cache.
    """

    def __init__(self, total: int, description: str = "Matching", status_width: int = 30):
        self.total = total
        self.description = description
        self.completed = 0
        self.matched = 0
        self.unmatched = 0
        self.cached = 0

        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            FixedWidthTextColumn("[white]{task.description}", width=15),
            FixedWidthTextColumn("{task.fields[status]}", width=status_width, style="white"),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "MatchingProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if self._started:
            return
        self.progress.start()
        self.task_id = self.progress.add_task(
            description=self.description,
            total=self.total,
            status=self._status_text(),
        )
        self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self._started = False

    def log(self, message: str) -> None:
        """Print a message above the progress bar."""
        self.progress.console.print(message, highlight=False, markup=False)

    def update(self, matched: bool, cached: bool = False) -> None:
        """
        Record one processed track.

        Args:
            matched: Whether the track found a destination match.
            cached: Whether the answer came from the match cache.
        """
        self.completed += 1
        if matched:
            self.matched += 1
        else:
            self.unmatched += 1
        if cached:
            self.cached += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._status_text(),
            )

    def _status_text(self) -> str:
        parts = [
            f"[green]✓ {self.matched}[/green]",
            f"[red]✗ {self.unmatched}[/red]",
        ]
        if self.cached:
            parts.append(f"[cyan]↺ {self.cached}[/cyan]")
        return "  ".join(parts)
