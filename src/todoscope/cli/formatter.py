# src/todoscope/cli/formatter.py
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from todoscope.core.models import (
    AnalysisResult,
    DirectoryAnalysis,
    FileAnalysis,
    InvalidTodo,
    TodoResult,
    ValidTodo,
)


class TodoFormatter:
    """
    TodoFormatter: the human-readable side of a scan.
    Renders per-file tables, the summary panel and single-line verdicts.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _fields_cell(self, todo: ValidTodo) -> str:
        if not todo.delimiters:
            return "-"
        return ", ".join(f"{f.kind.display_name}={f.content}" for f in todo.delimiters)

    def _author_cell(self, todo: TodoResult) -> str:
        if todo.blame is None:
            return "-"
        return f"{todo.blame.email} ({todo.blame.timestamp:%Y-%m-%d})"

    def print_file(self, analysis: FileAnalysis, show_empty: bool = False):
        """One table per file, rows in line order regardless of status."""
        rows = sorted([*analysis.valids, *analysis.invalids], key=lambda t: t.line)
        if not rows and not show_empty:
            return

        self.console.print(f"\n[bold cyan]{escape(str(analysis.metadata.filepath))}[/bold cyan]")
        table = Table(show_lines=False, header_style="bold magenta")
        table.add_column("Line", justify="right", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Fields")
        table.add_column("Text")
        table.add_column("Author", style="dim")

        for todo in rows:
            if isinstance(todo, ValidTodo):
                table.add_row(str(todo.line), "[green]valid[/green]", self._fields_cell(todo),
                              Text(todo.comment), self._author_cell(todo))
            else:
                table.add_row(str(todo.line), "[red]invalid[/red]", "-",
                              Text(todo.full_text), self._author_cell(todo))

        self.console.print(table)

    def print_summary(self, result: AnalysisResult, summary: dict):
        scanned_on = ""
        if isinstance(result, DirectoryAnalysis):
            scanned_on = f"\nScanned On:      {result.last_scan_on:%Y-%m-%d %H:%M:%S} UTC"

        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Files Scanned:   {summary['total_files']}\n"
            f"Files w/ Todos:  {summary['files_with_todos']}\n"
            f"Valid Todos:     [green]{summary['valid']}[/green]\n"
            f"Invalid Todos:   [red]{summary['invalid']}[/red]"
            f"{scanned_on}",
            border_style="dim"
        ))

    def print_report(self, result: AnalysisResult, summary: dict):
        files = result.file_analyses if isinstance(result, DirectoryAnalysis) else [result]
        for analysis in files:
            self.print_file(analysis, show_empty=isinstance(result, FileAnalysis))
        self.print_summary(result, summary)

    def print_classification(self, line: str, result: Optional[TodoResult]):
        """Verdict for `todoscope classify`."""
        if result is None:
            self.console.print(f"[dim]Not a todo marker:[/dim] {escape(line)}")
            return

        if isinstance(result, InvalidTodo):
            self.console.print("[bold red]Invalid todo[/bold red]")
            self.console.print(f"  Full text: {escape(result.full_text)}")
            return

        self.console.print("[bold green]Valid todo[/bold green]")
        self.console.print(f"  Comment: {escape(result.comment)}")
        names = ", ".join(f.kind.display_name for f in result.delimiters) or "none"
        self.console.print(f"  Delimiters found: {names}")
        for field in result.delimiters:
            self.console.print(f"  Contents of {field.kind.display_name}: {escape(field.content)}")
