"""User-facing progress reporting.

The builder and cleaner never print directly. They talk to a
:class:`Reporter`, so the CLI can render with rich while tests record plain
events.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .types import PDFSummary
from .utils import format_file_size


class Reporter(Protocol):
    """Protocol implemented by progress reporters."""

    def header(self, title: str, style: str = "blue") -> None:
        """Print a banner."""

    def step(self, number: int, total: int, message: str) -> None:
        """Announce the start of a numbered step."""

    def success(self, message: str) -> None:
        """Report a completed action."""

    def warning(self, message: str) -> None:
        """Report a recoverable problem."""

    def info(self, message: str) -> None:
        """Report a neutral fact."""

    def error(self, message: str) -> None:
        """Report a fatal problem."""

    def detail(self, text: str) -> None:
        """Print captured tool output verbatim."""

    def blank(self) -> None:
        """Print an empty line."""

    def file_list(self, title: str, paths: Iterable[Path]) -> None:
        """Print a titled list of file names."""

    def summary(self, pdf: PDFSummary) -> None:
        """Describe the produced PDF."""


class ConsoleReporter:
    """Render progress on a rich :class:`~rich.console.Console`."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)

    def header(self, title: str, style: str = "blue") -> None:
        bar = "=" * 40
        self.console.print(f"[{style}]{bar}[/{style}]")
        self.console.print(f"[{style}]   {escape(title)}[/{style}]")
        self.console.print(f"[{style}]{bar}[/{style}]")

    def step(self, number: int, total: int, message: str) -> None:
        self.console.print(f"[blue]\\[{number}/{total}][/blue] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow]  {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ[/blue]  {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]❌ {escape(message)}[/bold red]")

    def detail(self, text: str) -> None:
        self.console.print(escape(text.rstrip()), style="dim")

    def blank(self) -> None:
        self.console.print()

    def file_list(self, title: str, paths: Iterable[Path]) -> None:
        self.console.print(f"[blue]{escape(title)}[/blue]")
        for path in paths:
            self.console.print(f"  {escape(Path(path).name)}")

    def summary(self, pdf: PDFSummary) -> None:
        table = Table(title="Diff PDF", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("File", escape(str(pdf.path)))
        table.add_row("Size", format_file_size(pdf.file_size))
        if pdf.num_pages is not None:
            table.add_row("Pages", str(pdf.num_pages))
        if pdf.error:
            table.add_row("Read error", escape(pdf.error))

        self.console.print(table)


class RecordingReporter:
    """Collect ``(kind, text)`` events instead of printing them."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str]] = []

    def _record(self, kind: str, text: str) -> None:
        self.events.append((kind, text))

    def header(self, title: str, style: str = "blue") -> None:
        self._record("header", title)

    def step(self, number: int, total: int, message: str) -> None:
        self._record("step", f"[{number}/{total}] {message}")

    def success(self, message: str) -> None:
        self._record("success", message)

    def warning(self, message: str) -> None:
        self._record("warning", message)

    def info(self, message: str) -> None:
        self._record("info", message)

    def error(self, message: str) -> None:
        self._record("error", message)

    def detail(self, text: str) -> None:
        self._record("detail", text)

    def blank(self) -> None:
        pass

    def file_list(self, title: str, paths: Iterable[Path]) -> None:
        self._record("file_list", title)
        for path in paths:
            self._record("file", Path(path).name)

    def summary(self, pdf: PDFSummary) -> None:
        self._record("summary", str(pdf.path))

    def messages(self, kind: str) -> List[str]:
        return [text for event_kind, text in self.events if event_kind == kind]

    @property
    def text(self) -> str:
        return "\n".join(text for _, text in self.events)


__all__ = ["Reporter", "ConsoleReporter", "RecordingReporter"]
